"""
Best-effort crash reporting around units of work.
"""

import asyncio
import functools
import logging
import threading
from collections.abc import Callable
from typing import Optional, Protocol, TypeVar

import aiohttp

from tmc_core.models.domain import Crash

log = logging.getLogger(__name__)

T = TypeVar("T")


class CrashReporter(Protocol):
    """Delivers crash reports somewhere outside the process."""

    def send_crash(self, crash: Crash) -> None: ...


class HttpCrashReporter:
    """Posts crash reports as JSON to a diagnostics endpoint."""

    def __init__(self, url: str, timeout: float = 15.0):
        self.url = url
        self.timeout = timeout

    async def _post(self, crash: Crash) -> None:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        ) as session:
            async with session.post(self.url, json=crash.model_dump(mode="json")) as r:
                r.raise_for_status()

    def send_crash(self, crash: Crash) -> None:
        asyncio.run(self._post(crash))


def _report(
    reporter: CrashReporter, exc: BaseException, client_name: str, client_version: str
) -> None:
    try:
        reporter.send_crash(Crash.from_exception(exc, client_name, client_version))
        log.debug(f"Sent crash report for {type(exc).__name__}.")
    except Exception as e:
        log.debug(f"Crash report could not be sent: {e}")


def instrument(
    operation: Callable[..., T],
    reporter: Optional[CrashReporter],
    enabled: bool = True,
    client_name: str = "",
    client_version: str = "",
) -> Callable[..., T]:
    """
    Wraps ``operation`` so uncaught exceptions are reported before being
    re-raised unchanged.

    Reporting runs on a separate daemon thread; its failures are logged and
    dropped.
    """
    if reporter is None or not enabled:
        return operation

    @functools.wraps(operation)
    def wrapper(*args, **kwargs) -> T:
        try:
            return operation(*args, **kwargs)
        except Exception as exc:
            threading.Thread(
                target=_report,
                args=(reporter, exc, client_name, client_version),
                name="tmc-crash-report",
                daemon=True,
            ).start()
            raise

    return wrapper
