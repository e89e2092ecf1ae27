"""
A single-file JSON cache of the last-seen checksum of every exercise, grouped
by course. Used to tell which exercises changed on the server since the last
sync.
"""

import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Optional

from tmc_core.exceptions import FilesystemError

log = logging.getLogger(__name__)

ChecksumMap = dict[str, str]


class UpdateCache:
    """
    Manages the per-course, per-exercise checksum mapping.

    The file is read lazily on first access and rewritten in full after every
    mutation. A ``path`` of ``None`` keeps the mapping in memory only.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._data: Optional[dict[str, ChecksumMap]] = None
        self._lock = threading.Lock()

    def _load(self) -> dict[str, ChecksumMap]:
        """Reads the cache file, treating unreadable content as empty."""
        if self._data is not None:
            return self._data

        self._data = {}
        if self.path is None or not self.path.is_file():
            return self._data

        try:
            with open(self.path, encoding="utf-8") as f:
                content = f.read()
            if not content.strip():
                return self._data
            raw = json.loads(content)
            if not isinstance(raw, dict):
                raise ValueError("top-level value is not an object")
            self._data = {
                str(course_id): {str(k): str(v) for k, v in exercises.items()}
                for course_id, exercises in raw.items()
                if isinstance(exercises, dict)
            }
        except (json.JSONDecodeError, ValueError, OSError) as e:
            log.warning(
                f"[yellow]Update cache '{self.path}' is unreadable, starting empty: "
                f"{e}[/yellow]"
            )
        return self._data

    def _write(self) -> None:
        """Atomically replaces the cache file with the current mapping."""
        if self.path is None:
            return
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise FilesystemError(
                f"Failed to write update cache '{self.path}': {e}"
            ) from e

    def checksums_for(self, course_id: str) -> ChecksumMap:
        """Returns a copy of the cached mapping for a course (empty if unknown)."""
        with self._lock:
            return dict(self._load().get(str(course_id), {}))

    def store(self, course_id: str, checksums: ChecksumMap) -> None:
        """Replaces the course entry with exactly the given mapping."""
        with self._lock:
            data = self._load()
            data[str(course_id)] = dict(checksums)
            self._write()
        log.debug(f"Stored {len(checksums)} checksums for course {course_id}.")

    def update(self, course_id: str, checksums: ChecksumMap) -> None:
        """Merges the given mapping into the course entry."""
        with self._lock:
            data = self._load()
            data.setdefault(str(course_id), {}).update(checksums)
            self._write()
        log.debug(f"Updated {len(checksums)} checksums for course {course_id}.")

    def copy_to(self, destination: Path) -> None:
        """Duplicates the backing file's content to ``destination``."""
        if self.path is None:
            return
        with self._lock:
            try:
                shutil.copyfile(self.path, destination)
            except OSError as e:
                raise FilesystemError(
                    f"Failed to copy update cache to '{destination}': {e}"
                ) from e
