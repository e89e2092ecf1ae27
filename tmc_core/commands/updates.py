"""
Commands reporting what changed on the server: new or updated exercises and
unread code reviews.
"""

import logging
from dataclasses import dataclass

from tmc_core.core.context import CoreContext
from tmc_core.core.update_detector import ExerciseUpdateDetector
from tmc_core.exceptions import DataError
from tmc_core.models.domain import Course, Exercise, Review

from .base import Command

log = logging.getLogger(__name__)


def _require_course(course: Course) -> None:
    if course is None:
        raise DataError("A course is required.")
    if course.id is None:
        raise DataError(f"Course '{course.name}' has no identifier.")


@dataclass(frozen=True)
class GetExerciseUpdates(Command[list[Exercise]]):
    """Fetches the course's current exercises and reports the changed ones."""

    course: Course

    def check_data(self) -> None:
        _require_course(self.course)

    async def call(self, context: CoreContext) -> list[Exercise]:
        current = await context.service.get_course(str(self.course.id))
        if current.id is None:
            current = current.model_copy(update={"id": self.course.id})
        return ExerciseUpdateDetector(context.update_cache).detect(current)


@dataclass(frozen=True)
class GetUnreadReviews(Command[list[Review]]):
    course: Course

    def check_data(self) -> None:
        if self.course is None:
            raise DataError("A course is required.")
        if self.course.id is None and not self.course.reviews_url:
            raise DataError(f"Course '{self.course.name}' has no reviews location.")

    async def call(self, context: CoreContext) -> list[Review]:
        reviews = await context.service.get_reviews(self.course)
        unread = [r for r in reviews if not r.marked_as_read]
        log.debug(f"{len(unread)} of {len(reviews)} reviews are unread.")
        return unread
