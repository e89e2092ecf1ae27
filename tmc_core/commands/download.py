"""
Downloads every exercise of a course and merges it into the local tree.
"""

import asyncio
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tmc_core.core.context import CoreContext
from tmc_core.exceptions import FilesystemError, TmcCoreError
from tmc_core.files.archiver import Archiver
from tmc_core.files.merge import MergeReport, merge_tree
from tmc_core.models.domain import Exercise
from tmc_core.utils.path import create_dir, exercise_dir_name

from .base import Command, require

log = logging.getLogger(__name__)


def _locate_extracted_root(staging: Path, exercise: Exercise) -> Optional[Path]:
    """
    Finds the exercise's top directory among freshly extracted content. Only a
    directory named after the exercise is treated as a wrapper; anything else
    is the exercise content itself.
    """
    for name in (exercise.name, exercise_dir_name(exercise.name)):
        if (staging / name).is_dir():
            return staging / name
    return staging if any(staging.iterdir()) else None


def extract_and_merge(
    archiver: Archiver, payload: bytes, exercise: Exercise, target: Path
) -> MergeReport:
    """
    Extracts an exercise archive to a staging directory and merges it into
    ``target``. Safe to repeat after a partial run.

    Raises:
        FilesystemError: Naming the exercise, if extraction or merging fails.
    """
    with tempfile.TemporaryDirectory(prefix="tmc-extract-") as staging_name:
        staging = Path(staging_name)
        try:
            archiver.extract(payload, staging)
        except FilesystemError as e:
            raise FilesystemError(
                f"Extracting exercise '{exercise.name}' failed: {e}"
            ) from e

        incoming = _locate_extracted_root(staging, exercise)
        if incoming is None:
            raise FilesystemError(
                f"Archive of exercise '{exercise.name}' contained no files."
            )

        try:
            report = merge_tree(incoming, target)
        except FilesystemError as e:
            raise FilesystemError(f"Merging exercise '{exercise.name}' failed: {e}") from e

    if not target.is_dir():
        raise FilesystemError(
            f"Exercise '{exercise.name}' could not be located at '{target}' after "
            "extraction."
        )
    return report


@dataclass(frozen=True)
class DownloadExercises(Command[str]):
    """
    Downloads all unlocked exercises of a course into ``path``.

    Existing exercise directories are merged, not replaced: student files are
    kept and nothing local is deleted.
    """

    path: str
    course_id: str

    def check_data(self) -> None:
        require(path=self.path, course_id=self.course_id)

    async def call(self, context: CoreContext) -> str:
        course = await context.service.get_course(self.course_id)
        target_root = Path(self.path).expanduser()
        create_dir(target_root)

        exercises = [e for e in course.exercises if not e.locked]
        skipped_locked = len(course.exercises) - len(exercises)
        if skipped_locked:
            log.info(f"[yellow]Skipping {skipped_locked} locked exercises.[/yellow]")

        semaphore = asyncio.Semaphore(context.settings.max_workers)

        async def download_one(exercise: Exercise) -> MergeReport:
            async with semaphore:
                payload = await context.service.download_exercise(exercise)
                target = target_root / exercise_dir_name(exercise.name)
                report = await asyncio.to_thread(
                    extract_and_merge, context.archiver, payload, exercise, target
                )
                log.info(f"[green]✓[/green] {exercise.name}")
                return report

        results = await asyncio.gather(
            *(download_one(e) for e in exercises), return_exceptions=True
        )

        downloaded: list[Exercise] = []
        failures: list[tuple[Exercise, BaseException]] = []
        for exercise, result in zip(exercises, results):
            if isinstance(result, BaseException):
                if not isinstance(result, (TmcCoreError, OSError)):
                    raise result
                log.error(f"[red]✗ Failed to download '{exercise.name}': {result}[/red]")
                failures.append((exercise, result))
            else:
                downloaded.append(exercise)

        if failures and not downloaded:
            raise failures[0][1]

        if downloaded and course.id is not None:
            context.update_cache.update(
                str(course.id), {e.name: e.checksum for e in downloaded}
            )

        descriptor = f"Downloaded {len(downloaded)} exercises to {target_root}"
        if failures:
            names = ", ".join(e.name for e, _ in failures)
            descriptor += f" ({len(failures)} failed: {names})"
        return descriptor
