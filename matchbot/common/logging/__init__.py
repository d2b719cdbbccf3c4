"""Logging utilities for matchbot."""

from .logger import setup_logging, get_logger
from .logging_config import LoggingConfig, get_logging_config
from .formatters import JSONFormatter, StructuredLogAdapter
from .correlation import (
    CorrelationMiddleware,
    CorrelationLogFilter,
    get_correlation_id,
    set_correlation_id,
    get_user_id,
    set_user_id,
    get_guild_id,
    set_guild_id,
)

__all__ = [
    # Logger
    'setup_logging',
    'get_logger',
    # Logging config
    'LoggingConfig',
    'get_logging_config',
    # Structured logging
    'JSONFormatter',
    'StructuredLogAdapter',
    # Correlation
    'CorrelationMiddleware',
    'CorrelationLogFilter',
    'get_correlation_id',
    'set_correlation_id',
    'get_user_id',
    'set_user_id',
    'get_guild_id',
    'set_guild_id',
]
