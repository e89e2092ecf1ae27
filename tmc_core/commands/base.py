"""
Base class for every unit of work the core schedules, plus helpers shared by
commands that operate on a local exercise.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, Optional, TypeVar

from tmc_core.core.context import CoreContext
from tmc_core.exceptions import NotFoundError, ValidationError
from tmc_core.files.root_finder import find_course
from tmc_core.models.domain import Course, Exercise
from tmc_core.utils.path import exercise_dir_name

log = logging.getLogger(__name__)

R = TypeVar("R")


class Command(ABC, Generic[R]):
    """
    A self-validating operation producing a result of type ``R``.

    Subclasses are frozen dataclasses whose fields are the operation's
    arguments.
    """

    def check_data(self) -> None:
        """Validates the arguments. Runs synchronously before scheduling."""

    @abstractmethod
    async def call(self, context: CoreContext) -> R:
        """Executes the operation on a worker thread."""

    def __str__(self) -> str:
        return type(self).__name__


def require(**params: Optional[str]) -> None:
    """Raises ValidationError naming the first None or empty parameter."""
    for name, value in params.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"Parameter '{name}' is empty or missing.")


def locate_exercise_root(context: CoreContext, path: str) -> Path:
    root = context.root_finder.find_root(path)
    if root is None:
        raise NotFoundError(f"Not an exercise: '{path}'.")
    return root


async def resolve_exercise(
    context: CoreContext, root: Path
) -> tuple[Course, Exercise]:
    """Finds the course and server-side exercise a local exercise root belongs to."""
    course = find_course(root, await context.service.list_courses())
    if course is None:
        raise NotFoundError(f"No course found for path '{root}'.")
    if course.id is not None:
        course = await context.service.get_course(str(course.id))

    exercise = course.exercise_named(root.name) or next(
        (e for e in course.exercises if exercise_dir_name(e.name) == root.name), None
    )
    if exercise is None:
        raise NotFoundError(
            f"No exercise named '{root.name}' in course '{course.name}'."
        )
    return course, exercise
