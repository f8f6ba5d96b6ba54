"""Data structures for artifact reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_BASE_BRANCH = "master"
DEFAULT_AUTHOR_NAME = "github-actions[bot]"
DEFAULT_AUTHOR_EMAIL = "41898282+github-actions[bot]@users.noreply.github.com"

COMMIT_MESSAGE_PREFIX = "Check in artifacts"
COMMIT_DESCRIPTION_SEPARATOR = "-> "


class ReconciliationState(str, Enum):
    """States derived from the working tree and the remote on every run."""

    CLEAN = "clean"
    DIRTY_NO_BRANCH = "dirty_no_branch"
    DIRTY_BRANCH_EXISTS = "dirty_branch_exists"
    COMMITTED = "committed"
    PR_ABSENT = "pr_absent"
    PR_OPEN = "pr_open"
    PR_CLOSED = "pr_closed"


class ReconciliationResult(str, Enum):
    """Terminal outcome of one reconciliation."""

    CLEAN = "clean"
    CREATED = "created"
    REOPENED = "reopened"
    ALREADY_OPEN = "already_open"


class PullRequestState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class PullRequest:
    """A pull request as reported by the host."""

    number: int
    url: str
    state: PullRequestState
    head: str
    base: str
    title: str = ""


@dataclass(frozen=True)
class ReconcileRequest:
    """Invocation parameters for a reconciliation, passed by value."""

    branch: str
    title: str
    body: str
    base: str = DEFAULT_BASE_BRANCH
    description: str = ""
    author_name: str = DEFAULT_AUTHOR_NAME
    author_email: str = DEFAULT_AUTHOR_EMAIL

    @property
    def commit_message(self) -> str:
        """Fixed prefix plus the optional caller-supplied description."""
        if not self.description:
            return COMMIT_MESSAGE_PREFIX
        return f"{COMMIT_MESSAGE_PREFIX}{COMMIT_DESCRIPTION_SEPARATOR}{self.description}"


@dataclass(frozen=True)
class ReconciliationOutcome:
    """What a reconciliation did, including the states it passed through."""

    result: ReconciliationResult
    states: tuple[ReconciliationState, ...]
    branch: str
    changed_paths: tuple[str, ...] = ()
    pull_request: PullRequest | None = None

    @property
    def is_noop(self) -> bool:
        """True for outcomes that left the remote pull request untouched."""
        return self.result in (
            ReconciliationResult.CLEAN,
            ReconciliationResult.ALREADY_OPEN,
        )
