"""
Custom error classes with structured logging and error propagation.

All errors include correlation context and structured data for observability.
Each class declares the level it is logged at: expected conditions such as
missing registry entries are debug noise, storage and startup failures are
errors.
"""

import logging
from typing import Optional, Dict, Any

from matchbot.common.logging import get_logger
from matchbot.common.logging.correlation import (
    get_correlation_id,
    get_user_id,
    get_guild_id,
)

logger = get_logger(__name__)


class MatchbotError(Exception):
    """
    Base error class for all application errors.

    Automatically logs errors with correlation context when raised.
    The message is user-facing: command handlers reply with it verbatim,
    so it is written as Telegram HTML (user-supplied parts escaped).
    """

    log_level = logging.ERROR

    def __init__(
        self,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize error with structured context.

        Args:
            message: Human-readable error message
            data: Structured data for observability
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.data = data or {}
        self.cause = cause

        self.correlation_id = get_correlation_id()
        self.user_id = get_user_id()
        self.guild_id = get_guild_id()

        self._log_error()

    def _log_error(self):
        """Log error with structured data."""
        log_data = {
            "error_type": self.__class__.__name__,
            "correlation_id": self.correlation_id,
            "user_id": self.user_id,
            "guild_id": self.guild_id,
            **self.data,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)

        logger.log(
            self.log_level,
            self.message,
            data=log_data,
            exc_info=self.cause is not None and self.log_level >= logging.ERROR,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "correlation_id": self.correlation_id,
            "user_id": self.user_id,
            "guild_id": self.guild_id,
            "cause": str(self.cause) if self.cause else None,
        }


# Expected, user-facing conditions
class NotFoundError(MatchbotError):
    """No guild data, user data, headmate or results for the request."""
    log_level = logging.DEBUG


class CommandUsageError(MatchbotError):
    """Command invoked in the wrong place or with malformed arguments."""
    log_level = logging.DEBUG


# External services
class ScoreServiceError(MatchbotError):
    """Score service unreachable or answered with a malformed response."""
    log_level = logging.WARNING


# Storage
class PersistenceError(MatchbotError):
    """Registry file or a backup file could not be written."""
    pass


class MigrationError(MatchbotError):
    """Registry document could not be loaded or upgraded."""
    pass
