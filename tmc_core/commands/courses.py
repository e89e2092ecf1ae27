"""
Commands that read course and exercise listings from the server.
"""

import logging
from dataclasses import dataclass

from tmc_core.core.context import CoreContext
from tmc_core.exceptions import NotFoundError
from tmc_core.files.root_finder import find_course
from tmc_core.models.domain import Course, Exercise

from .base import Command, require

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListCourses(Command[list[Course]]):
    async def call(self, context: CoreContext) -> list[Course]:
        courses = await context.service.list_courses()
        log.debug(f"Server listed {len(courses)} courses.")
        return courses


@dataclass(frozen=True)
class GetCourse(Command[Course]):
    """Fetches full course details from a course URL."""

    url: str

    def check_data(self) -> None:
        require(url=self.url)

    async def call(self, context: CoreContext) -> Course:
        return await context.service.get_course_by_url(self.url)


@dataclass(frozen=True)
class GetCourseByName(Command[Course]):
    name: str

    def check_data(self) -> None:
        require(name=self.name)

    async def call(self, context: CoreContext) -> Course:
        for course in await context.service.list_courses():
            if course.name == self.name:
                if course.id is None:
                    return course
                return await context.service.get_course(str(course.id))
        raise NotFoundError(f"No course named '{self.name}'.")


@dataclass(frozen=True)
class ListExercises(Command[list[Exercise]]):
    """Lists the exercises of the course a local path belongs to."""

    path: str

    def check_data(self) -> None:
        require(path=self.path)

    async def call(self, context: CoreContext) -> list[Exercise]:
        course = find_course(self.path, await context.service.list_courses())
        if course is None:
            raise NotFoundError(f"No course found for path '{self.path}'.")
        if course.id is not None:
            course = await context.service.get_course(str(course.id))
        return list(course.exercises)
