"""
Domain models parsed from the exercise service, plus the opaque result types
the core passes through untouched.
"""

import platform
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Results of the test-execution sandbox and of server-side submission checks are
# owned by their collaborators. The core never inspects them.
RunResult = Any
SubmissionResult = Any


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Exercise(_Frozen):
    """One programming assignment within a course."""

    id: Optional[int] = None
    name: str
    checksum: str = ""
    locked: bool = False
    zip_url: Optional[str] = None
    return_url: Optional[str] = None
    deadline: Optional[str] = None
    completed: bool = False
    course_name: Optional[str] = None


class Course(_Frozen):
    """A named, ordered collection of exercises."""

    id: Optional[int] = None
    name: str
    exercises: list[Exercise] = Field(default_factory=list)
    details_url: Optional[str] = None
    reviews_url: Optional[str] = None
    unlock_url: Optional[str] = None

    def exercise_named(self, name: str) -> Optional[Exercise]:
        return next((e for e in self.exercises if e.name == name), None)


class Theme(_Frozen):
    """A group of exercises sharing a name prefix, e.g. ``week1-``."""

    name: str
    exercises: list[Exercise] = Field(default_factory=list)
    unlocked: bool = False

    def should_contain(self, exercise: Exercise) -> bool:
        return self.name == exercise.name.split("-")[0]


def group_into_themes(course: Course) -> list[Theme]:
    """Groups a course's exercises by name prefix, keeping course order."""
    grouped: dict[str, list[Exercise]] = {}
    for exercise in course.exercises:
        grouped.setdefault(exercise.name.split("-")[0], []).append(exercise)
    return [
        Theme(
            name=name,
            exercises=exercises,
            unlocked=any(not e.locked for e in exercises),
        )
        for name, exercises in grouped.items()
    ]


class Review(_Frozen):
    """A code review left on one of the user's submissions."""

    id: int
    exercise_name: str = ""
    submission_id: Optional[str] = None
    review_body: str = ""
    url: Optional[str] = None
    marked_as_read: bool = False


class HttpResult(_Frozen):
    """Status and body of a plain request to the service."""

    status_code: int
    data: Any = None


class Crash(_Frozen):
    """Diagnostics payload describing an uncaught failure."""

    exception_type: str
    message: str
    stack_trace: str
    created_at: datetime
    client_name: str = ""
    client_version: str = ""
    python_version: str = ""
    platform: str = ""

    @classmethod
    def from_exception(
        cls, exc: BaseException, client_name: str = "", client_version: str = ""
    ) -> "Crash":
        return cls(
            exception_type=type(exc).__name__,
            message=str(exc),
            stack_trace="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
            created_at=datetime.now(timezone.utc),
            client_name=client_name,
            client_version=client_version,
            python_version=sys.version.split()[0],
            platform=platform.platform(),
        )
