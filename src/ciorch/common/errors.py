"""Exception hierarchy for ciorch.

Configuration problems fail the run immediately. Remote failures (git, pull request
API, coverage upload) surface to the caller unchanged in meaning and are never
retried here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ciorch.models.reconciliation import ReconciliationState


class CiorchError(Exception):
    """Base class for all ciorch errors."""


class ConfigurationError(CiorchError):
    """Static matrix data or invocation parameters are invalid."""


class VcsError(CiorchError):
    """A version-control command failed."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class PullRequestApiError(CiorchError):
    """The pull request host rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReconciliationError(CiorchError):
    """Artifact reconciliation aborted part way through."""

    def __init__(self, message: str, state: ReconciliationState | None = None) -> None:
        super().__init__(message)
        self.state = state


class CoverageUploadError(CiorchError):
    """The coverage backend did not accept the reports."""


class GateTimeoutError(CiorchError):
    """Upstream jobs did not reach a terminal state in time."""
