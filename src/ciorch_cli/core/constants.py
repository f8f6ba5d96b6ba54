"""Constants and enums for the ciorch CLI."""

from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ExitCode:
    """Exit codes for CLI operations."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    NOT_FOUND = 2
    CONFIG_ERROR = 3
    PERMISSION_ERROR = 4


class Icons:
    """Unicode icons for CLI output."""

    ERROR = "❌"
    PACKAGE = "📦"
    LIST = "📋"
    REPORT = "📊"
    LOOP = "🔄"
    SKIPPED = "⏭️"


class EnvVars:
    """Environment variable names."""

    LOG_LEVEL = "CIORCH_LOG_LEVEL"
    CONFIG = "CIORCH_CONFIG"
    GITHUB_OUTPUT = "GITHUB_OUTPUT"
    GITHUB_TOKEN = "GITHUB_TOKEN"
    GITHUB_REPOSITORY = "GITHUB_REPOSITORY"
    CODECOV_TOKEN = "CODECOV_TOKEN"


class OutputFormat:
    """Values for the ``--format`` option."""

    TEXT = "text"
    JSON = "json"
    GITHUB = "github"

    ALL = (TEXT, JSON, GITHUB)
