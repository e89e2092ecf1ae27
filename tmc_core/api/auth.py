"""
Holds the logged-in user and the selected server, shared by every command
running on the core's worker pool.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from tmc_core.models.config import CoreSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str


class SessionState:
    """Thread-safe holder for the active server address and credentials."""

    def __init__(self, settings: CoreSettings):
        self._lock = threading.Lock()
        self._server_address = settings.server_address
        self._credentials: Optional[Credentials] = None
        if settings.username and settings.password:
            self._credentials = Credentials(settings.username, settings.password)

    @property
    def server_address(self) -> str:
        with self._lock:
            return self._server_address

    @server_address.setter
    def server_address(self, address: str) -> None:
        with self._lock:
            self._server_address = address.rstrip("/")
        log.info(f"Selected server: [cyan]{address}[/cyan]")

    @property
    def credentials(self) -> Optional[Credentials]:
        with self._lock:
            return self._credentials

    def log_in(self, username: str, password: str) -> None:
        with self._lock:
            self._credentials = Credentials(username, password)
        log.info(f"Logged in as: {username}")

    def log_out(self) -> bool:
        """Clears stored credentials. Returns whether anyone was logged in."""
        with self._lock:
            was_logged_in = self._credentials is not None
            self._credentials = None
        if was_logged_in:
            log.info("Logged out.")
        return was_logged_in
