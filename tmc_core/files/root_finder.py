"""
Locates the root directory of an exercise from any path inside it.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional, Protocol

from tmc_core.models.domain import Course

log = logging.getLogger(__name__)

DEFAULT_BUILD_FILES = (
    "build.xml",
    "pom.xml",
    "build.gradle",
    "Makefile",
    "setup.py",
    "pyproject.toml",
    ".tmcproject.yml",
)


class RootDetector(Protocol):
    """Decides whether a directory is the root of an exercise."""

    def recognizes(self, directory: Path) -> bool: ...


class BuildFileDetector:
    """Recognizes directories containing one of the given build descriptors."""

    def __init__(self, names: Iterable[str] = DEFAULT_BUILD_FILES):
        self.names = tuple(names)

    def recognizes(self, directory: Path) -> bool:
        return any((directory / name).is_file() for name in self.names)


class AnyOfDetector:
    """Recognizes a directory when any of the wrapped detectors does."""

    def __init__(self, *detectors: RootDetector):
        self.detectors = detectors

    def recognizes(self, directory: Path) -> bool:
        return any(d.recognizes(directory) for d in self.detectors)


class ProjectRootFinder:
    """Walks upwards from a path until the detector accepts a directory."""

    def __init__(self, detector: Optional[RootDetector] = None):
        self.detector = detector or BuildFileDetector()

    def find_root(self, path: Path | str) -> Optional[Path]:
        """
        Returns the nearest directory at or above ``path`` that the detector
        recognizes, or None when the filesystem root is reached first.
        """
        start = Path(path).expanduser().resolve()
        if start.is_file():
            start = start.parent

        for directory in (start, *start.parents):
            if directory.is_dir() and self.detector.recognizes(directory):
                log.debug(f"Found exercise root '{directory}' for '{path}'.")
                return directory
        log.debug(f"No exercise root found above '{path}'.")
        return None


def find_course(path: Path | str, courses: Sequence[Course]) -> Optional[Course]:
    """
    Returns the course whose name matches a component of ``path``. When
    several components match, the deepest one wins.
    """
    by_name = {course.name: course for course in courses}
    for part in reversed(Path(path).expanduser().resolve().parts):
        if part in by_name:
            return by_name[part]
    return None
