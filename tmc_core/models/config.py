"""
Pydantic model for core configuration.
Provides validation for all settings consumed by the core.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_VERSION = "7"
DEFAULT_CLIENT_NAME = "tmc_core"


class CoreSettings(BaseModel):
    """A validated configuration model for the core."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Server & authentication
    server_address: str = ""
    username: str = ""
    password: str = Field("", repr=False)
    api_version: str = DEFAULT_API_VERSION

    # Client identification sent with every request
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = "0.1.0"

    # Execution
    max_workers: int = 4
    request_timeout: float = 60.0
    download_attempts: int = 3

    # Diagnostics
    send_diagnostics: bool = False
    diagnostics_url: str = ""

    @field_validator("server_address", "diagnostics_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensures configured addresses use an http(s) scheme."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"Address must start with http:// or https://, got: {v}")
        return v.rstrip("/")

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("download_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Download attempts must be at least 1.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
