"""
Determines which paths of an exercise belong to the student and must survive
a merge-download unmodified.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Optional

import yaml

log = logging.getLogger(__name__)

STUDENT_SOURCE_DIR = "src"
PROJECT_FILE = ".tmcproject.yml"
EXTRA_STUDENT_FILES_KEY = "extra_student_files"


def read_extra_student_files(project_file: Path) -> list[str]:
    """
    Reads the ``extra_student_files`` list from a project declaration file.
    A missing or malformed file declares nothing.
    """
    if not project_file.is_file():
        return []
    try:
        with open(project_file, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        log.warning(f"[yellow]Ignoring unreadable '{project_file}': {e}[/yellow]")
        return []

    entries = content.get(EXTRA_STUDENT_FILES_KEY) if isinstance(content, dict) else None
    if entries is None:
        return []
    if isinstance(entries, str):
        entries = [entries]
    if not isinstance(entries, list):
        log.warning(
            f"[yellow]'{EXTRA_STUDENT_FILES_KEY}' in '{project_file}' is not a list, "
            "ignoring it.[/yellow]"
        )
        return []
    return [str(entry) for entry in entries if entry]


def _normalize(entry: str) -> Optional[PurePosixPath]:
    parts = [p for p in PurePosixPath(entry.replace("\\", "/")).parts if p not in ("/", ".")]
    if not parts or ".." in parts:
        return None
    return PurePosixPath(*parts)


class ProtectedPaths:
    """The protected region of one exercise: ``src/`` plus declared extras."""

    def __init__(self, extra_entries: list[str] | None = None):
        self.prefixes: list[PurePosixPath] = [PurePosixPath(STUDENT_SOURCE_DIR)]
        for entry in extra_entries or []:
            normalized = _normalize(entry)
            if normalized is None:
                log.debug(f"Skipping invalid protected path entry '{entry}'.")
                continue
            self.prefixes.append(normalized)

    @classmethod
    def for_exercise(cls, local_root: Path, incoming_root: Path) -> "ProtectedPaths":
        """
        Builds the protected region from the local declaration, falling back to
        the incoming one when no local copy exists.
        """
        local_file = local_root / PROJECT_FILE
        source = local_file if local_file.is_file() else incoming_root / PROJECT_FILE
        return cls(read_extra_student_files(source))

    def is_protected(self, relative_path: PurePosixPath | str) -> bool:
        path = PurePosixPath(relative_path)
        return any(
            path == prefix or prefix in path.parents for prefix in self.prefixes
        )
