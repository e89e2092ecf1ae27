"""
The protocol every exercise-service backend must satisfy.
"""

from collections.abc import Mapping
from typing import Protocol

from tmc_core.models.domain import Course, Exercise, HttpResult, Review, SubmissionResult


class ServiceClient(Protocol):
    """Request/response operations offered by the remote exercise service."""

    async def authenticate(self, username: str, password: str) -> bool: ...

    async def list_courses(self) -> list[Course]: ...

    async def get_course(self, course_id: str) -> Course: ...

    async def get_course_by_url(self, url: str) -> Course: ...

    async def download_exercise(self, exercise: Exercise) -> bytes: ...

    async def submit(self, exercise: Exercise, payload: bytes) -> SubmissionResult: ...

    async def paste(self, exercise: Exercise, payload: bytes) -> str: ...

    async def send_feedback(
        self, answers: Mapping[str, str], url: str
    ) -> HttpResult: ...

    async def get_reviews(self, course: Course) -> list[Review]: ...
