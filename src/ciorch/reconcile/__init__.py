"""Artifact reconciliation against a persistent branch and pull request."""

from .git import GitCli
from .github import GitHubPullRequests, parse_repository
from .interfaces import PullRequestHost, VersionControl
from .machine import ArtifactReconciler

__all__ = [
    "ArtifactReconciler",
    "GitCli",
    "GitHubPullRequests",
    "PullRequestHost",
    "VersionControl",
    "parse_repository",
]
