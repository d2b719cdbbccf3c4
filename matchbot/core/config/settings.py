"""
Settings - Application configuration using dataclasses.

Environment variables:
- TELEGRAM_BOT_TOKEN: Bot token
- DATA_DIR: Base directory for the registry and its backups
- REGISTRY_PATH: Registry JSON file (default: DATA_DIR/registry.json)
- BACKUP_DIR: Backup tiers root (default: DATA_DIR/backups)
- MATCH_URL: Score service endpoint
- SCORE_TIMEOUT_SEC: Score service request timeout
- HISTORY_RETENTION / HOURLY_RETENTION / DAILY_RETENTION: Backup tier sizes
- LOG_FILE: Optional rotating log file

LOG_LEVEL[_BOT] and LOG_JSON[_BOT] are resolved by LoggingConfig.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field


DEFAULT_MATCH_URL = "https://bdsmtest.org/ajax/match"


def _data_dir() -> Path:
    return Path(os.getenv("DATA_DIR", "."))


@dataclass
class Settings:
    """Application settings from environment."""

    # Telegram
    telegram_bot_token: Optional[str] = field(
        default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN")
    )

    # Storage
    registry_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("REGISTRY_PATH", str(_data_dir() / "registry.json"))
        )
    )
    backup_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("BACKUP_DIR", str(_data_dir() / "backups"))
        )
    )
    history_retention: int = field(
        default_factory=lambda: int(os.getenv("HISTORY_RETENTION", "20"))
    )
    hourly_retention: int = field(
        default_factory=lambda: int(os.getenv("HOURLY_RETENTION", "24"))
    )
    daily_retention: int = field(
        default_factory=lambda: int(os.getenv("DAILY_RETENTION", "30"))
    )

    # Score service
    match_url: str = field(
        default_factory=lambda: os.getenv("MATCH_URL", DEFAULT_MATCH_URL)
    )
    score_timeout_sec: float = field(
        default_factory=lambda: float(os.getenv("SCORE_TIMEOUT_SEC", "10"))
    )

    # Logging
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("LOG_FILE")
    )


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached singleton so the environment is read again."""
    global _settings
    _settings = None
