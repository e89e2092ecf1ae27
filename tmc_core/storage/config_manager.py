"""
Manages loading, validation, and migration of the INI settings file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tmc_core.exceptions import ConfigurationError
from tmc_core.models.config import CoreSettings

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the core's INI settings file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = Path(config_file_path)
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_settings(self, overrides: dict[str, Any] | None = None) -> CoreSettings:
        """
        Loads settings from the INI file, applies overrides, and validates them.

        Args:
            overrides: Values taking precedence over the file's content.

        Returns:
            A validated CoreSettings object.

        Raises:
            ConfigurationError: If the file is missing, unparsable, or validation
            fails.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        values = self._get_settings_as_dict()
        if overrides:
            values.update(overrides)

        try:
            return CoreSettings(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_settings(self, settings: CoreSettings) -> None:
        """Writes all settings to the INI file, replacing its content."""
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {
            key: self._to_ini(value)
            for key, value in settings.model_dump().items()
            if value is not None
        }

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _get_settings_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        defaults = CoreSettings()
        return {
            "server_address": section.get("server_address", ""),
            "username": section.get("username", ""),
            "password": section.get("password", ""),
            "api_version": section.get("api_version", defaults.api_version),
            "client_name": section.get("client_name", defaults.client_name),
            "client_version": section.get("client_version", defaults.client_version),
            "max_workers": section.getint("max_workers", defaults.max_workers),
            "request_timeout": section.getfloat(
                "request_timeout", defaults.request_timeout
            ),
            "download_attempts": section.getint(
                "download_attempts", defaults.download_attempts
            ),
            "send_diagnostics": section.getboolean("send_diagnostics", False),
            "diagnostics_url": section.get("diagnostics_url", ""),
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing settings file."""
        defaults = CoreSettings()
        config_section = self._parser["DEFAULT"]
        needs_saving = False

        for key in sorted(CoreSettings.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{config_section[key]}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(f"Could not save migrated configuration file: {e}")
                return False

        return needs_saving
