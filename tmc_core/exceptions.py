"""
Defines custom exceptions for the core to allow for more specific error handling.
"""


class TmcCoreError(Exception):
    """Base exception for all core-specific errors."""


class ValidationError(TmcCoreError):
    """Raised synchronously when a required parameter is missing or empty."""


class NotFoundError(TmcCoreError):
    """Raised when no exercise root or course can be found for a given path."""


class NoExecutorError(TmcCoreError):
    """Raised when no test runner recognizes an exercise."""


class DataError(TmcCoreError):
    """Raised when a required domain object lacks an identifier or is malformed."""


class TransportError(TmcCoreError):
    """Raised when the service collaborator fails to fulfil a request."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class FilesystemError(TmcCoreError):
    """Raised for cache file handoff problems and failed exercise extraction."""


class ConfigurationError(TmcCoreError):
    """Raised for issues related to configuration loading or validation."""
