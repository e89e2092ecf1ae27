"""
Detects exercises that are new or changed on the server since the last sync.
"""

import logging

from tmc_core.exceptions import DataError
from tmc_core.models.domain import Course, Exercise
from tmc_core.storage.update_cache import UpdateCache

log = logging.getLogger(__name__)


class ExerciseUpdateDetector:
    """Compares server checksums against the cached ones and records the new state."""

    def __init__(self, cache: UpdateCache):
        self.cache = cache

    def detect(self, course: Course) -> list[Exercise]:
        """
        Returns the course's exercises that were never seen or whose checksum
        changed, in course order.

        The checksums of all evaluated exercises replace the course's cache
        entry before returning. If that write fails the error propagates and
        the same exercises are reported again next time.
        """
        if course is None or course.id is None:
            raise DataError("Course has no identifier, cannot detect updates.")

        course_id = str(course.id)
        previous = self.cache.checksums_for(course_id)

        changed: list[Exercise] = []
        current: dict[str, str] = {}
        for exercise in course.exercises:
            if exercise.name in current:
                continue
            current[exercise.name] = exercise.checksum
            if previous.get(exercise.name) != exercise.checksum:
                changed.append(exercise)

        self.cache.store(course_id, current)
        log.debug(
            f"Course {course_id}: {len(changed)} new or updated of "
            f"{len(current)} exercises."
        )
        return changed
