"""
Merges freshly extracted exercise content into an existing local exercise
directory without destroying the student's work.
"""

import filecmp
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional

from tmc_core.exceptions import FilesystemError

from .protected import ProtectedPaths

log = logging.getLogger(__name__)


@dataclass
class MergeReport:
    """What a merge did to each incoming file, as POSIX relative paths."""

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    protected: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)


def _replace_file(source: Path, destination: Path) -> None:
    """Copies ``source`` over ``destination`` so readers never see a half file."""
    fd, tmp_name = tempfile.mkstemp(dir=destination.parent, prefix=".merge-")
    os.close(fd)
    try:
        shutil.copyfile(source, tmp_name)
        shutil.copymode(source, tmp_name)
        os.replace(tmp_name, destination)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _occupied_locally(target_root: Path, relative: PurePosixPath) -> bool:
    """True if ``relative`` exists locally or sits below a local non-directory."""
    if (target_root / relative).exists():
        return True
    return any(
        (target_root / parent).exists() and not (target_root / parent).is_dir()
        for parent in relative.parents
        if parent != PurePosixPath(".")
    )


def merge_tree(
    incoming_root: Path,
    target_root: Path,
    protected: Optional[ProtectedPaths] = None,
) -> MergeReport:
    """
    Merges ``incoming_root`` into ``target_root``.

    Incoming files overwrite their local counterparts, except under protected
    paths where whatever exists locally always wins. Local-only files are never
    deleted. Running the same merge twice leaves the same tree.

    Raises:
        FilesystemError: If a file cannot be written or an incoming file
        collides with an unprotected local directory.
    """
    if protected is None:
        protected = ProtectedPaths.for_exercise(target_root, incoming_root)

    report = MergeReport()
    target_root.mkdir(parents=True, exist_ok=True)

    for source in sorted(incoming_root.rglob("*")):
        relative = PurePosixPath(source.relative_to(incoming_root).as_posix())
        destination = target_root / relative

        if source.is_symlink():
            log.debug(f"Skipping symlink '{relative}' in incoming content.")
            continue

        is_protected = protected.is_protected(relative)
        if is_protected and _occupied_locally(target_root, relative):
            if not (source.is_dir() and destination.is_dir()):
                report.protected.append(str(relative))
                continue

        try:
            if source.is_dir():
                destination.mkdir(parents=True, exist_ok=True)
                continue

            if destination.is_dir():
                raise FilesystemError(
                    f"Cannot merge file '{relative}': a directory exists at "
                    f"'{destination}'."
                )

            if destination.exists():
                if filecmp.cmp(source, destination, shallow=False):
                    report.unchanged.append(str(relative))
                    continue
                _replace_file(source, destination)
                report.updated.append(str(relative))
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                _replace_file(source, destination)
                report.added.append(str(relative))
        except OSError as e:
            raise FilesystemError(f"Failed to merge '{relative}': {e}") from e

    log.debug(
        f"Merged into '{target_root}': {len(report.added)} added, "
        f"{len(report.updated)} updated, {len(report.protected)} protected."
    )
    return report
