"""
Config - Application configuration.

- settings.py: Dataclass settings from environment
"""

from .settings import (
    Settings,
    DEFAULT_MATCH_URL,
    get_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "DEFAULT_MATCH_URL",
    "get_settings",
    "reset_settings",
]
