"""
Commands acting on the local exercise containing a given path.
"""

import asyncio
import logging
from dataclasses import dataclass

from tmc_core.core.context import CoreContext
from tmc_core.exceptions import NoExecutorError
from tmc_core.models.domain import RunResult, SubmissionResult

from .base import Command, locate_exercise_root, require, resolve_exercise

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunTests(Command[RunResult]):
    """Runs the local tests of the exercise containing ``path``."""

    path: str

    def check_data(self) -> None:
        require(path=self.path)

    async def call(self, context: CoreContext) -> RunResult:
        root = locate_exercise_root(context, self.path)
        runner = next((r for r in context.test_runners if r.recognizes(root)), None)
        if runner is None:
            raise NoExecutorError(f"No test runner recognizes '{root}'.")
        log.info(f"Running tests for [cyan]{root.name}[/cyan]...")
        return await asyncio.to_thread(runner.run_tests, root)


@dataclass(frozen=True)
class Submit(Command[SubmissionResult]):
    """Packs the exercise containing ``path`` and submits it for grading."""

    path: str

    def check_data(self) -> None:
        require(path=self.path)

    async def call(self, context: CoreContext) -> SubmissionResult:
        root = locate_exercise_root(context, self.path)
        _, exercise = await resolve_exercise(context, root)
        payload = await asyncio.to_thread(context.archiver.pack, root)
        log.info(f"Submitting [cyan]{exercise.name}[/cyan] ({len(payload)} bytes)...")
        return await context.service.submit(exercise, payload)


@dataclass(frozen=True)
class Paste(Command[str]):
    """Uploads the exercise containing ``path`` as a paste and returns its URL."""

    path: str

    def check_data(self) -> None:
        require(path=self.path)

    async def call(self, context: CoreContext) -> str:
        root = locate_exercise_root(context, self.path)
        _, exercise = await resolve_exercise(context, root)
        payload = await asyncio.to_thread(context.archiver.pack, root)
        paste_url = await context.service.paste(exercise, payload)
        log.info(f"Paste created: {paste_url}")
        return paste_url
