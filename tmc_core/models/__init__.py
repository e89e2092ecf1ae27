"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the core, such as configuration and course data.
"""

from .config import CoreSettings
from .domain import (
    Course,
    Crash,
    Exercise,
    HttpResult,
    Review,
    RunResult,
    SubmissionResult,
    Theme,
    group_into_themes,
)

__all__ = [
    "CoreSettings",
    "Course",
    "Crash",
    "Exercise",
    "HttpResult",
    "Review",
    "RunResult",
    "SubmissionResult",
    "Theme",
    "group_into_themes",
]
