"""
Storage Layer.

This package handles all data persistence: the settings file and the
exercise update cache.
"""

from .config_manager import ConfigManager
from .update_cache import UpdateCache

__all__ = ["ConfigManager", "UpdateCache"]
