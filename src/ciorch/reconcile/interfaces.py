"""Collaborator interfaces used by the artifact reconciler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ciorch.models.reconciliation import PullRequest, PullRequestState


class VersionControl(ABC):
    """Working tree and remote operations needed for reconciliation."""

    @abstractmethod
    def changed_paths(self, scope: Sequence[str]) -> list[str]:
        """Return modified or untracked paths under ``scope``."""

    @abstractmethod
    def remote_branch_exists(self, branch: str) -> bool:
        """Return whether ``branch`` exists on the remote."""

    @abstractmethod
    def checkout(self, branch: str) -> None:
        """Switch to an existing ``branch``, keeping working tree changes."""

    @abstractmethod
    def create_branch(self, branch: str) -> None:
        """Create ``branch`` from the current HEAD and switch to it."""

    @abstractmethod
    def configure_author(self, name: str, email: str) -> None:
        """Set the identity used for the commit."""

    @abstractmethod
    def stage(self, scope: Sequence[str]) -> None:
        """Stage changes under ``scope`` and nothing else."""

    @abstractmethod
    def commit(self, message: str) -> None:
        """Commit whatever is staged."""

    @abstractmethod
    def force_push(self, branch: str) -> None:
        """Overwrite the remote ``branch`` with the local one."""


class PullRequestHost(ABC):
    """Pull request operations on the code host."""

    @abstractmethod
    def list_pull_requests(
        self,
        state: PullRequestState,
        base: str,
        head: str,
    ) -> list[PullRequest]:
        """Return pull requests from ``head`` into ``base``, most recent first."""

    @abstractmethod
    def create_pull_request(
        self,
        title: str,
        body: str,
        base: str,
        head: str,
    ) -> PullRequest:
        """Open a new pull request."""

    @abstractmethod
    def reopen_pull_request(self, pr: PullRequest) -> PullRequest:
        """Reopen a closed pull request."""
