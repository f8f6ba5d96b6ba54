"""Pull requests through the GitHub REST API."""

from __future__ import annotations

from typing import Any

import requests

from ciorch.common.errors import PullRequestApiError
from ciorch.models.reconciliation import PullRequest, PullRequestState
from ciorch.reconcile.interfaces import PullRequestHost
from ciorch_logging import get_logger

logger = get_logger(__name__)

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_ACCEPT_HEADER = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"
REQUEST_TIMEOUT = 30


def parse_repository(repository: str) -> tuple[str, str]:
    """Split an ``owner/name`` string.

    Raises
    ------
    ValueError
        If ``repository`` is not of the form ``owner/name``
    """
    parts = repository.split("/")
    if len(parts) != 2 or not all(parts):  # noqa: PLR2004
        msg = f"Invalid repository format: {repository!r} (expected owner/name)"
        raise ValueError(msg)
    return parts[0], parts[1]


def _to_pull_request(data: dict[str, Any]) -> PullRequest:
    return PullRequest(
        number=int(data["number"]),
        url=data.get("html_url", ""),
        state=PullRequestState(data.get("state", "open")),
        head=data.get("head", {}).get("ref", ""),
        base=data.get("base", {}).get("ref", ""),
        title=data.get("title", ""),
    )


class GitHubPullRequests(PullRequestHost):
    """Pull request host backed by ``/repos/{owner}/{repo}/pulls``.

    Failures are reported as :class:`PullRequestApiError` and never retried.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        session: requests.Session | None = None,
        base_url: str = GITHUB_API_BASE_URL,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": GITHUB_API_ACCEPT_HEADER,
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )

    @property
    def pulls_url(self) -> str:
        return f"{self.base_url}/repos/{self.owner}/{self.repo}/pulls"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self.session.request(
                method,
                url,
                timeout=REQUEST_TIMEOUT,
                **kwargs,
            )
        except requests.RequestException as e:
            msg = f"{method} {url} failed: {e}"
            raise PullRequestApiError(msg) from e

        if not response.ok:
            msg = f"{method} {url} returned {response.status_code}: {response.text}"
            raise PullRequestApiError(msg, status_code=response.status_code)
        return response.json()

    def list_pull_requests(
        self,
        state: PullRequestState,
        base: str,
        head: str,
    ) -> list[PullRequest]:
        params = {
            "state": state.value,
            "base": base,
            "head": f"{self.owner}:{head}",
            "sort": "created",
            "direction": "desc",
        }
        data = self._request("GET", self.pulls_url, params=params)
        prs = [_to_pull_request(item) for item in data]
        logger.debug(
            "Found %d %s pull requests for %s -> %s",
            len(prs),
            state.value,
            head,
            base,
        )
        return prs

    def create_pull_request(
        self,
        title: str,
        body: str,
        base: str,
        head: str,
    ) -> PullRequest:
        payload = {"title": title, "body": body, "base": base, "head": head}
        return _to_pull_request(self._request("POST", self.pulls_url, json=payload))

    def reopen_pull_request(self, pr: PullRequest) -> PullRequest:
        url = f"{self.pulls_url}/{pr.number}"
        return _to_pull_request(self._request("PATCH", url, json={"state": "open"}))
