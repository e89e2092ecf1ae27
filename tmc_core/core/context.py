"""
The collaborators a command may use while it runs.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tmc_core.api.auth import SessionState
from tmc_core.api.service import ServiceClient
from tmc_core.files.archiver import Archiver
from tmc_core.files.root_finder import ProjectRootFinder
from tmc_core.models.config import CoreSettings
from tmc_core.models.domain import RunResult
from tmc_core.storage.update_cache import UpdateCache


class TestRunner(Protocol):
    """Compiles and runs the tests of an exercise it recognizes."""

    def recognizes(self, root: Path) -> bool: ...

    def run_tests(self, root: Path) -> RunResult: ...


@dataclass(frozen=True)
class CoreContext:
    """
    Snapshot of the core's collaborators taken when a command is scheduled.

    ``update_cache`` is the cache file active at scheduling time, or an
    in-memory cache when the core has none.
    """

    settings: CoreSettings
    session: SessionState
    service: ServiceClient
    archiver: Archiver
    root_finder: ProjectRootFinder
    test_runners: tuple[TestRunner, ...]
    update_cache: UpdateCache
