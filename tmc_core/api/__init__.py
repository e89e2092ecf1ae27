"""
Exercise Service Layer.

This package defines what the core needs from the remote exercise service and
ships an aiohttp-based implementation of it.
"""

from .auth import Credentials, SessionState
from .client import TmcApiClient
from .service import ServiceClient

__all__ = ["Credentials", "ServiceClient", "SessionState", "TmcApiClient"]
