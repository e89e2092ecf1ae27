"""
The public facade of the core: validates requests, schedules one command per
call on a shared worker pool, and owns the update cache reference.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Optional, TypeVar

from tmc_core.api.auth import SessionState
from tmc_core.api.client import TmcApiClient
from tmc_core.api.service import ServiceClient
from tmc_core.commands import (
    Authenticate,
    ChooseServer,
    Command,
    DownloadExercises,
    GetCourse,
    GetCourseByName,
    GetExerciseUpdates,
    GetUnreadReviews,
    ListCourses,
    ListExercises,
    Logout,
    Paste,
    RunTests,
    SendFeedback,
    Submit,
)
from tmc_core.commands.base import require
from tmc_core.exceptions import FilesystemError, ValidationError
from tmc_core.files.archiver import Archiver, ZipArchiver
from tmc_core.files.root_finder import ProjectRootFinder, RootDetector
from tmc_core.models.config import CoreSettings
from tmc_core.models.domain import (
    Course,
    Exercise,
    HttpResult,
    Review,
    RunResult,
    SubmissionResult,
)
from tmc_core.storage.update_cache import UpdateCache

from .context import CoreContext, TestRunner
from .diagnostics import CrashReporter, HttpCrashReporter, instrument

log = logging.getLogger(__name__)

R = TypeVar("R")


class TmcCore:
    """
    Standalone business logic for exercise-service clients.

    Every operation returns a ``concurrent.futures.Future`` immediately. Bad
    arguments raise ``ValidationError`` (or ``DataError``) before anything is
    scheduled; every other failure is delivered through the future.
    """

    def __init__(
        self,
        settings: Optional[CoreSettings] = None,
        service: Optional[ServiceClient] = None,
        *,
        executor: Optional[Executor] = None,
        update_cache: Optional[Path | str] = None,
        archiver: Optional[Archiver] = None,
        test_runners: Iterable[TestRunner] = (),
        root_detector: Optional[RootDetector] = None,
        crash_reporter: Optional[CrashReporter] = None,
    ):
        """
        Args:
            settings: Validated settings. Defaults are used when omitted.
            service: Exercise service backend. Defaults to TmcApiClient.
            executor: Worker pool. When omitted the core creates and owns a
                ThreadPoolExecutor sized by ``settings.max_workers``.
            update_cache: Existing file holding exercise checksums.
            archiver: Packs and unpacks exercise archives.
            test_runners: Candidates for running local tests, first match wins.
            root_detector: Decides which directories are exercise roots.
            crash_reporter: Receives reports of uncaught failures when
                ``settings.send_diagnostics`` is on.

        Raises:
            FilesystemError: If ``update_cache`` does not exist.
        """
        self.settings = settings or CoreSettings()
        self.session = SessionState(self.settings)
        self.service: ServiceClient = service or TmcApiClient(self.settings, self.session)

        self._update_cache: Optional[UpdateCache] = None
        if update_cache is not None:
            path = Path(update_cache)
            self._ensure_cache_file_exists(path)
            self._update_cache = UpdateCache(path)
        self._memory_cache = UpdateCache()

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.max_workers, thread_name_prefix="tmc-core"
        )

        self.archiver = archiver or ZipArchiver()
        self.root_finder = ProjectRootFinder(root_detector)
        self.test_runners = tuple(test_runners)

        if (
            crash_reporter is None
            and self.settings.send_diagnostics
            and self.settings.diagnostics_url
        ):
            crash_reporter = HttpCrashReporter(self.settings.diagnostics_url)
        self.crash_reporter = crash_reporter

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def cache_file(self) -> Optional[Path]:
        """The active update cache file, if any."""
        return self._update_cache.path if self._update_cache else None

    @staticmethod
    def _ensure_cache_file_exists(cache_file: Path) -> None:
        if not cache_file.is_file():
            raise FilesystemError(f"Cache file '{cache_file}' does not exist.")

    def set_cache_file(self, new_cache: Path | str) -> None:
        """
        Switches the update cache to ``new_cache``, carrying the current content
        over and deleting the old file.

        The handoff is not atomic: an interruption may leave both files.
        Callers must not run update detection concurrently with a swap.

        Raises:
            FilesystemError: If ``new_cache`` does not exist. Nothing changes.
        """
        new_path = Path(new_cache)
        self._ensure_cache_file_exists(new_path)

        current = self._update_cache
        if current is not None and current.path.resolve() == new_path.resolve():
            return

        if current is None or not current.path.exists():
            self._update_cache = UpdateCache(new_path)
            log.debug(f"Update cache set to '{new_path}'.")
            return

        current.copy_to(new_path)
        old_path = current.path
        self._update_cache = UpdateCache(new_path)
        try:
            old_path.unlink()
        except OSError as e:
            log.warning(
                f"[yellow]Old update cache '{old_path}' could not be removed: {e}"
                "[/yellow]"
            )
        log.debug(f"Update cache moved from '{old_path}' to '{new_path}'.")

    def _context(self, cache: Optional[UpdateCache] = None) -> CoreContext:
        return CoreContext(
            settings=self.settings,
            session=self.session,
            service=self.service,
            archiver=self.archiver,
            root_finder=self.root_finder,
            test_runners=self.test_runners,
            update_cache=cache or self._update_cache or self._memory_cache,
        )

    def _instrument(self, operation: Callable[[], R]) -> Callable[[], R]:
        return instrument(
            operation,
            self.crash_reporter,
            enabled=self.settings.send_diagnostics,
            client_name=self.settings.client_name,
            client_version=self.settings.client_version,
        )

    def _schedule(
        self, command: Command[R], context: Optional[CoreContext] = None
    ) -> "Future[R]":
        command.check_data()
        context = context or self._context()

        def run() -> R:
            log.debug(f"Running {command}...")
            try:
                result = asyncio.run(command.call(context))
            except Exception as e:
                log.debug(f"{command} failed: {e!r}")
                raise
            log.debug(f"{command} finished.")
            return result

        return self._executor.submit(self._instrument(run))

    def login(self, username: str, password: str) -> "Future[bool]":
        """Authenticates the user and keeps the credentials in memory."""
        require(username=username, password=password)
        return self._schedule(Authenticate(username, password))

    def logout(self) -> "Future[bool]":
        """Forgets the credentials. Resolves to whether anyone was logged in."""
        return self._schedule(Logout())

    def select_server(self, server_address: str) -> "Future[bool]":
        require(server_address=server_address)
        return self._schedule(ChooseServer(server_address))

    def list_courses(self) -> "Future[list[Course]]":
        return self._schedule(ListCourses())

    def get_course(self, url: str) -> "Future[Course]":
        require(url=url)
        return self._schedule(GetCourse(url))

    def get_course_by_name(self, name: str) -> "Future[Course]":
        require(name=name)
        return self._schedule(GetCourseByName(name))

    def list_exercises(self, path: str) -> "Future[list[Exercise]]":
        """Lists the exercises of the course containing ``path``."""
        require(path=path)
        return self._schedule(ListExercises(path))

    def download_exercises(self, path: str, course_id: str) -> "Future[str]":
        """
        Downloads a course's exercises into ``path``. Existing files are
        overwritten except the student's source folder and the files listed in
        each exercise's ``.tmcproject.yml``; nothing local is deleted.
        """
        require(path=path, course_id=course_id)
        return self._schedule(DownloadExercises(path, course_id))

    def submit(self, path: str) -> "Future[SubmissionResult]":
        """Submits the exercise containing ``path`` to the server."""
        require(path=path)
        return self._schedule(Submit(path))

    def test(self, path: str) -> "Future[RunResult]":
        """Runs the local tests of the exercise containing ``path``."""
        require(path=path)
        return self._schedule(RunTests(path))

    def paste(self, path: str) -> "Future[str]":
        require(path=path)
        return self._schedule(Paste(path))

    def get_new_reviews(self, course: Course) -> "Future[list[Review]]":
        return self._schedule(GetUnreadReviews(course))

    def get_new_and_updated_exercises(
        self, course: Course, cache_override: Optional[Path | str] = None
    ) -> "Future[list[Exercise]]":
        """
        Reports exercises of ``course`` that are new or changed since the last
        check, recording the current checksums in the update cache (or in
        ``cache_override`` when given).
        """
        cache = None
        if cache_override is not None:
            require(cache_override=str(cache_override))
            override_path = Path(cache_override)
            active = self._update_cache
            if active is not None and active.path.resolve() == override_path.resolve():
                cache = active
            else:
                cache = UpdateCache(override_path)
        return self._schedule(GetExerciseUpdates(course), self._context(cache))

    def send_feedback(self, answers: Mapping[str, str], url: str) -> "Future[HttpResult]":
        require(url=url)
        return self._schedule(SendFeedback(answers, url))

    def submit_task(self, task: Callable[[], Any]) -> "Future[Any]":
        """
        Schedules an arbitrary unit of work on the core's pool. Coroutine
        functions are run on their own event loop.
        """
        if task is None or not callable(task):
            raise ValidationError("Task must be a callable.")

        if inspect.iscoroutinefunction(task):
            def operation() -> Any:
                return asyncio.run(task())
        else:
            operation = task

        return self._executor.submit(self._instrument(operation))

    def shutdown(self, wait: bool = True) -> None:
        """Shuts down the worker pool if the core created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "TmcCore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.shutdown()
        return False

