"""Artifact reconciliation command."""

import json
from pathlib import Path

import click

from ciorch.collaborators import LocalArtifactStore
from ciorch.common.errors import ConfigurationError
from ciorch.models.reconciliation import (
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_BASE_BRANCH,
    ReconcileRequest,
    ReconciliationResult,
)
from ciorch.reconcile import ArtifactReconciler, GitCli, GitHubPullRequests, parse_repository
from ciorch_cli.core.constants import EnvVars, Icons, OutputFormat
from ciorch_cli.core.decorators import handle_exceptions
from ciorch_cli.core.github_output import write_outputs
from ciorch_cli.core.options import format_option, github_output_option
from ciorch_cli.core.utils import CliOutput
from ciorch_logging import get_cli_logger

logger = get_cli_logger(__name__)


@click.command(name="reconcile")
@click.option(
    "--path",
    "paths",
    multiple=True,
    required=True,
    help="Path scope to check in (repeatable)",
)
@click.option("--branch", required=True, help="Bot branch that accumulates artifacts")
@click.option("--title", required=True, help="Pull request title")
@click.option("--body", default="", help="Pull request body")
@click.option("--base", default=DEFAULT_BASE_BRANCH, show_default=True, help="Base branch")
@click.option("--description", default="", help="Suffix for the commit message")
@click.option("--author-name", default=DEFAULT_AUTHOR_NAME, show_default=True)
@click.option("--author-email", default=DEFAULT_AUTHOR_EMAIL, show_default=True)
@click.option(
    "--repo",
    envvar=EnvVars.GITHUB_REPOSITORY,
    required=True,
    help="Repository in owner/repo format",
)
@click.option(
    "--token",
    envvar=EnvVars.GITHUB_TOKEN,
    required=True,
    help="GitHub token",
)
@click.option(
    "--workdir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Repository checkout to reconcile",
)
@click.option(
    "--artifacts-from",
    type=click.Path(file_okay=False, path_type=Path),
    help="Artifact store to download into the first --path before reconciling",
)
@click.option("--pattern", default="*", show_default=True, help="Artifact name pattern")
@format_option
@github_output_option
@click.pass_context
@handle_exceptions
def reconcile(
    ctx: click.Context,
    paths: tuple[str, ...],
    branch: str,
    title: str,
    body: str,
    base: str,
    description: str,
    author_name: str,
    author_email: str,
    repo: str,
    token: str,
    workdir: Path,
    artifacts_from: Path | None,
    pattern: str,
    fmt: str,
    github_output: str | None,
) -> None:
    """Check generated artifacts in on a bot branch and keep one PR open for it.

    \b
    Repeated runs converge on the same branch and pull request: a clean tree
    is a no-op, a closed PR is reopened rather than duplicated.
    """  # noqa: W605
    try:
        owner, name = parse_repository(repo)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if artifacts_from is not None:
        logger.info("Fetching artifacts matching %r from %s", pattern, artifacts_from)
        store = LocalArtifactStore(artifacts_from)
        store.download(pattern, workdir / paths[0])

    request = ReconcileRequest(
        branch=branch,
        title=title,
        body=body,
        base=base,
        description=description,
        author_name=author_name,
        author_email=author_email,
    )
    reconciler = ArtifactReconciler(
        GitCli(workdir),
        GitHubPullRequests(owner, name, token),
        request,
    )
    outcome = reconciler.reconcile(list(paths))

    pr = outcome.pull_request
    if fmt == OutputFormat.GITHUB:
        write_outputs(
            {
                "result": outcome.result.value,
                "pr-number": pr.number if pr else "",
                "pr-url": pr.url if pr else "",
            },
            github_output,
        )
    elif fmt == OutputFormat.JSON:
        data = {
            "result": outcome.result.value,
            "states": [s.value for s in outcome.states],
            "changed-paths": list(outcome.changed_paths),
            "pr-number": pr.number if pr else None,
            "pr-url": pr.url if pr else None,
        }
        click.echo(json.dumps(data, indent=2))
    elif outcome.result is ReconciliationResult.CLEAN:
        CliOutput.plain(f"{Icons.SKIPPED} No changes under {', '.join(paths)}")
    elif pr is not None:
        CliOutput.success(
            f"{Icons.LOOP} {outcome.result.value}: pull request #{pr.number} {pr.url}",
        )
    else:
        CliOutput.success(outcome.result.value)
