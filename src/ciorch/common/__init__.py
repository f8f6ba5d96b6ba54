"""Shared building blocks for the ciorch core."""

from .errors import (
    CiorchError,
    ConfigurationError,
    CoverageUploadError,
    GateTimeoutError,
    PullRequestApiError,
    ReconciliationError,
    VcsError,
)

__all__ = [
    "CiorchError",
    "ConfigurationError",
    "CoverageUploadError",
    "GateTimeoutError",
    "PullRequestApiError",
    "ReconciliationError",
    "VcsError",
]
