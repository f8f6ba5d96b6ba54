"""Logger configuration profiles for ciorch.

Two profiles exist:

- ``cli``: console output on stderr with optional colours, plus an optional log
  file. Used by the ``ciorch`` command line.
- ``test``: DEBUG level, no handlers of its own, records propagate so pytest's
  ``caplog`` can capture them.
"""

import logging
import os
import sys
from pathlib import Path

from .formatters import ColoredFormatter, SafeFormatter

LOG_LEVEL_ENV_VAR = "CIORCH_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
PROFILES = ("cli", "test")


def get_log_level(default: str = DEFAULT_LOG_LEVEL) -> str:
    """Return the log level requested through ``CIORCH_LOG_LEVEL``.

    Unknown values fall back to ``default``.
    """
    level = os.environ.get(LOG_LEVEL_ENV_VAR, default).strip().upper()
    if level == "WARN":
        level = "WARNING"
    return level if level in VALID_LOG_LEVELS else default


def _reset_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for log_filter in list(logger.filters):
        logger.removeFilter(log_filter)


def _configure_cli(
    logger: logging.Logger,
    level: str,
    to_console: bool,
    log_file: str | None,
) -> None:
    logger.setLevel(level)
    logger.propagate = False

    if to_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ColoredFormatter())
        logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(SafeFormatter())
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())


def _configure_test(logger: logging.Logger, level: str | None) -> None:
    logger.setLevel(level or "DEBUG")
    logger.propagate = True


def configure_logger(
    name: str,
    profile: str = "cli",
    level: str | None = None,
    to_console: bool = True,
    log_file: str | None = None,
) -> logging.Logger:
    """Configure the named logger according to ``profile``.

    Existing handlers and filters on the logger are removed first, so calling this
    repeatedly is safe.

    Parameters
    ----------
    name : str
        Logger name, usually a top-level package name
    profile : str
        ``"cli"`` or ``"test"``
    level : str | None
        Explicit level; falls back to :func:`get_log_level`
    to_console : bool
        Whether the ``cli`` profile writes to stderr
    log_file : str | None
        Optional log file for the ``cli`` profile

    Returns
    -------
    logging.Logger
        The configured logger

    Raises
    ------
    ValueError
        If ``profile`` is not a known profile
    """
    if profile not in PROFILES:
        msg = f"Unknown profile: {profile!r} (expected one of {', '.join(PROFILES)})"
        raise ValueError(msg)

    logger = logging.getLogger(name)
    _reset_logger(logger)

    if profile == "test":
        _configure_test(logger, level.upper() if level else None)
    else:
        _configure_cli(
            logger,
            (level or get_log_level()).upper(),
            to_console,
            log_file,
        )
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a library module."""
    return logging.getLogger(name)


def get_cli_logger(name: str) -> logging.Logger:
    """Return the logger for a CLI module."""
    return logging.getLogger(name)
