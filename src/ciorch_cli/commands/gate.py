"""Coverage aggregation gate command."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ciorch.collaborators import CodecovUploader, LocalArtifactStore
from ciorch.common.errors import ConfigurationError
from ciorch.gate import (
    DEFAULT_ARTIFACT_PATTERN,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
    AggregationGate,
    parse_needs,
)
from ciorch.models import JobResult
from ciorch_cli.core.constants import EnvVars, Icons, OutputFormat
from ciorch_cli.core.decorators import handle_exceptions
from ciorch_cli.core.github_output import write_outputs
from ciorch_cli.core.options import format_option, github_output_option
from ciorch_cli.core.utils import CliOutput
from ciorch_common.io import FileOperationError, safe_read_json


def _needs_reader(needs: str) -> Callable[[], list[JobResult]]:
    """Build the poll function for ``--needs``.

    ``@path`` re-reads the file on every poll; anything else is parsed once as
    inline JSON. Inline results cannot change, so a pending job there is an error
    rather than something to wait for.
    """
    if needs.startswith("@"):
        path = Path(needs[1:])

        def read_file() -> list[JobResult]:
            try:
                payload: Any = safe_read_json(path)
            except FileOperationError as e:
                raise ConfigurationError(str(e)) from e
            return parse_needs(payload)

        return read_file

    try:
        payload = json.loads(needs)
    except json.JSONDecodeError as e:
        msg = f"--needs is not valid JSON: {e}"
        raise ConfigurationError(msg) from e
    results = parse_needs(payload)
    pending = [r.job_id for r in results if not r.status.is_terminal]
    if pending:
        msg = (
            f"Inline --needs reports pending jobs ({', '.join(pending)}); "
            "pass @file to poll a document that is updated"
        )
        raise ConfigurationError(msg)
    return lambda: results


@click.command(name="gate")
@click.option(
    "--needs",
    required=True,
    help="Upstream job results as JSON (toJSON(needs)) or @file",
)
@click.option(
    "--upload/--no-upload",
    "upload_enabled",
    default=True,
    show_default=True,
    help="Whether coverage upload is enabled for this run",
)
@click.option(
    "--artifacts-from",
    type=click.Path(file_okay=False, path_type=Path),
    help="Artifact store holding per-job coverage reports",
)
@click.option(
    "--pattern",
    default=DEFAULT_ARTIFACT_PATTERN,
    show_default=True,
    help="Artifact name pattern",
)
@click.option(
    "--reports-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default="coverage-reports",
    show_default=True,
    help="Where downloaded reports are placed",
)
@click.option("--token", envvar=EnvVars.CODECOV_TOKEN, default="", help="Codecov token")
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Seconds to wait for pending upstream jobs",
)
@click.option(
    "--poll-interval",
    type=float,
    default=DEFAULT_POLL_INTERVAL,
    show_default=True,
    help="Seconds between polls",
)
@format_option
@github_output_option
@click.pass_context
@handle_exceptions
def gate(
    ctx: click.Context,
    needs: str,
    upload_enabled: bool,
    artifacts_from: Path | None,
    pattern: str,
    reports_dir: Path,
    token: str,
    timeout: float,
    poll_interval: float,
    fmt: str,
    github_output: str | None,
) -> None:
    """Aggregate and upload coverage once every upstream job has finished.

    \b
    Nothing is uploaded if any upstream job failed or was cancelled, or if
    uploads are disabled. A failed upload fails the command.
    """  # noqa: W605
    poll = _needs_reader(needs)

    if upload_enabled and artifacts_from is None:
        msg = "--artifacts-from is required when uploads are enabled"
        raise ConfigurationError(msg)

    aggregation = AggregationGate(
        LocalArtifactStore(artifacts_from or reports_dir),
        CodecovUploader(),
    )
    results = aggregation.await_results(poll, timeout=timeout, poll_interval=poll_interval)
    outcome = aggregation.run(
        results,
        upload_enabled=upload_enabled,
        token=token,
        destination=reports_dir,
        pattern=pattern,
    )

    if fmt == OutputFormat.GITHUB:
        write_outputs(
            {"aggregated": outcome.aggregated, "reason": outcome.reason},
            github_output,
        )
    elif fmt == OutputFormat.JSON:
        data = {
            "aggregated": outcome.aggregated,
            "reason": outcome.reason,
            "files": [str(f) for f in outcome.files],
        }
        click.echo(json.dumps(data, indent=2))
    elif outcome.aggregated:
        CliOutput.success(f"{Icons.REPORT} Uploaded {len(outcome.files)} coverage reports")
    else:
        CliOutput.plain(f"{Icons.SKIPPED} Coverage aggregation skipped: {outcome.reason}")
