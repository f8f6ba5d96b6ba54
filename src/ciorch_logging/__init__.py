"""Logging configuration shared by the ciorch packages."""

from .config import (
    LOG_LEVEL_ENV_VAR,
    configure_logger,
    get_cli_logger,
    get_log_level,
    get_logger,
)
from .formatters import ColoredFormatter, SafeFormatter

__all__ = [
    "LOG_LEVEL_ENV_VAR",
    "ColoredFormatter",
    "SafeFormatter",
    "configure_logger",
    "get_cli_logger",
    "get_log_level",
    "get_logger",
]
