"""Log record formatters."""

import logging
import os
import sys
from typing import ClassVar

DEFAULT_FORMAT = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class SafeFormatter(logging.Formatter):
    """Formatter that tolerates records built outside the normal logging path.

    ``WARNING`` is shortened to ``WARN`` so columns line up with the other level
    names.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt or DEFAULT_FORMAT, datefmt or DEFAULT_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelname == "WARNING":
            record.levelname = "WARN"
        try:
            return super().format(record)
        except (TypeError, ValueError):
            # Mismatched %-args; keep the raw message rather than drop the record
            record.msg = f"{record.msg} {record.args}"
            record.args = ()
            return super().format(record)


class ColoredFormatter(SafeFormatter):
    """SafeFormatter that colours the level name when writing to a terminal."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARN": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        include_colors: bool = True,
    ) -> None:
        super().__init__(fmt, datefmt)
        self.include_colors = include_colors

    @staticmethod
    def _should_use_colors() -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not (self.include_colors and self._should_use_colors()):
            return message
        color = self.COLORS.get(record.levelname)
        if color is None:
            return message
        return message.replace(
            record.levelname,
            f"{color}{record.levelname}{self.RESET}",
            1,
        )
