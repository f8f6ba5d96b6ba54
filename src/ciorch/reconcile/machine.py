"""Idempotent reconciliation of generated artifacts with a branch and pull request.

Nothing is persisted locally. Every run re-derives its state from the working tree,
the remote branch and the pull requests for that branch, so a run that fails part
way can simply be repeated.
"""

from __future__ import annotations

from collections.abc import Sequence

from ciorch.common.errors import (
    PullRequestApiError,
    ReconciliationError,
    VcsError,
)
from ciorch.models.reconciliation import (
    PullRequest,
    PullRequestState,
    ReconcileRequest,
    ReconciliationOutcome,
    ReconciliationResult,
    ReconciliationState,
)
from ciorch.reconcile.interfaces import PullRequestHost, VersionControl
from ciorch_logging import get_logger

logger = get_logger(__name__)


class ArtifactReconciler:
    """Drive one reconciliation through detect, branch, commit and PR lookup.

    Parameters
    ----------
    vcs : VersionControl
        Working tree and remote branch operations
    pull_requests : PullRequestHost
        Pull request queries and mutations
    request : ReconcileRequest
        Branch, base, PR text and commit identity for this run
    """

    def __init__(
        self,
        vcs: VersionControl,
        pull_requests: PullRequestHost,
        request: ReconcileRequest,
    ) -> None:
        self.vcs = vcs
        self.pull_requests = pull_requests
        self.request = request
        self._states: list[ReconciliationState] = []

    @property
    def last_state(self) -> ReconciliationState | None:
        return self._states[-1] if self._states else None

    def _enter(self, state: ReconciliationState) -> None:
        logger.debug("Reconciliation state: %s", state.value)
        self._states.append(state)

    def _outcome(
        self,
        result: ReconciliationResult,
        changed: Sequence[str] = (),
        pr: PullRequest | None = None,
    ) -> ReconciliationOutcome:
        logger.info("Reconciliation finished: %s", result.value)
        return ReconciliationOutcome(
            result=result,
            states=tuple(self._states),
            branch=self.request.branch,
            changed_paths=tuple(changed),
            pull_request=pr,
        )

    def reconcile(self, scope: Sequence[str]) -> ReconciliationOutcome:
        """Reconcile changes under ``scope`` with the target branch and its PR.

        Parameters
        ----------
        scope : Sequence[str]
            Paths whose changes are staged; nothing outside them is committed

        Returns
        -------
        ReconciliationOutcome
            Result and the states passed through

        Raises
        ------
        ReconciliationError
            If a git or pull request operation fails. Remaining steps are not
            attempted and ``state`` holds the last state reached.
        """
        self._states = []
        try:
            return self._run(scope)
        except (VcsError, PullRequestApiError) as e:
            state = self.last_state
            logger.error(
                "Reconciliation aborted after %s: %s",
                state.value if state else "start",
                e,
            )
            msg = f"Reconciliation of {self.request.branch} failed: {e}"
            raise ReconciliationError(msg, state=state) from e

    def _run(self, scope: Sequence[str]) -> ReconciliationOutcome:
        request = self.request

        changed = self.vcs.changed_paths(scope)
        if not changed:
            self._enter(ReconciliationState.CLEAN)
            return self._outcome(ReconciliationResult.CLEAN)
        logger.info("Found %d changed paths under %s", len(changed), ", ".join(scope))

        if self.vcs.remote_branch_exists(request.branch):
            self._enter(ReconciliationState.DIRTY_BRANCH_EXISTS)
            self.vcs.checkout(request.branch)
        else:
            self._enter(ReconciliationState.DIRTY_NO_BRANCH)
            self.vcs.create_branch(request.branch)

        self.vcs.configure_author(request.author_name, request.author_email)
        self.vcs.stage(scope)
        self.vcs.commit(request.commit_message)
        self.vcs.force_push(request.branch)
        self._enter(ReconciliationState.COMMITTED)

        closed = self.pull_requests.list_pull_requests(
            PullRequestState.CLOSED,
            base=request.base,
            head=request.branch,
        )
        if closed:
            self._enter(ReconciliationState.PR_CLOSED)
            pr = self.pull_requests.reopen_pull_request(closed[0])
            logger.info("Reopened pull request #%d", pr.number)
            return self._outcome(ReconciliationResult.REOPENED, changed, pr)

        opened = self.pull_requests.list_pull_requests(
            PullRequestState.OPEN,
            base=request.base,
            head=request.branch,
        )
        if opened:
            self._enter(ReconciliationState.PR_OPEN)
            return self._outcome(ReconciliationResult.ALREADY_OPEN, changed, opened[0])

        self._enter(ReconciliationState.PR_ABSENT)
        pr = self.pull_requests.create_pull_request(
            title=request.title,
            body=request.body,
            base=request.base,
            head=request.branch,
        )
        logger.info("Created pull request #%d", pr.number)
        return self._outcome(ReconciliationResult.CREATED, changed, pr)
