"""Matrix resolution and dispatch commands."""

import json
from typing import TYPE_CHECKING

import click

from ciorch.config import resolve
from ciorch.dispatch import dispatch, group_by_job
from ciorch.models import RunMode
from ciorch_cli.core.constants import Icons, OutputFormat
from ciorch_cli.core.decorators import handle_exceptions
from ciorch_cli.core.github_output import write_outputs
from ciorch_cli.core.options import (
    format_option,
    github_output_option,
    lightened_option,
    skip_option,
)
from ciorch_cli.core.utils import CliOutput

if TYPE_CHECKING:
    from ciorch_cli.cli import Context


@click.group(name="matrix")
@click.pass_context
def group(ctx: click.Context) -> None:
    """Resolve and dispatch the test matrix."""


@group.command(name="resolve")
@lightened_option
@skip_option
@format_option
@github_output_option
@click.pass_context
@handle_exceptions
def resolve_command(
    ctx: click.Context,
    lightened: bool,
    skip_list: str,
    fmt: str,
    github_output: str | None,
) -> None:
    """Print the version table, concurrency caps and skip set.

    \b
    The skip list only applies with --lightened.
    """  # noqa: W605
    ciorch_ctx: Context = ctx.obj
    mode = RunMode.from_flag(lightened)
    resolution = resolve(mode, skip_list, profiles=ciorch_ctx.profiles)

    outputs = {
        "python-version": {k: list(v) for k, v in resolution.versions.items()},
        "matrix-max-parallel": resolution.caps.to_dict(),
        "jobs-to-skip": sorted(resolution.skip),
    }

    if fmt == OutputFormat.GITHUB:
        write_outputs(outputs, github_output)
    elif fmt == OutputFormat.JSON:
        click.echo(json.dumps(outputs, indent=2))
    else:
        CliOutput.section(f"Resolved matrix ({mode.value})", Icons.LIST)
        CliOutput.plain("Python versions:")
        for key, versions in outputs["python-version"].items():
            CliOutput.plain(f"  {key}: {', '.join(versions)}")
        CliOutput.plain("Max parallel:")
        for key, cap in outputs["matrix-max-parallel"].items():
            CliOutput.plain(f"  {key}: {cap}")
        skipped = outputs["jobs-to-skip"]
        CliOutput.plain(f"Skipped jobs: {', '.join(skipped) if skipped else 'none'}")


@group.command(name="dispatch")
@lightened_option
@skip_option
@click.option("--job-name-prefix", default="", help="Prefix for job display names")
@click.option("--job-name-suffix", default="", help="Suffix for job display names")
@click.option(
    "--additional-packages",
    default="",
    help="Extra requirements installed by every job (space separated)",
)
@click.option(
    "--pytest-coverage-flags",
    default="",
    help="pytest coverage flags passed to every job",
)
@click.option(
    "--pytest-additional-args",
    default="",
    help="pytest arguments appended to every job's own arguments",
)
@format_option
@github_output_option
@click.pass_context
@handle_exceptions
def dispatch_command(
    ctx: click.Context,
    lightened: bool,
    skip_list: str,
    job_name_prefix: str,
    job_name_suffix: str,
    additional_packages: str,
    pytest_coverage_flags: str,
    pytest_additional_args: str,
    fmt: str,
    github_output: str | None,
) -> None:
    """Expand the job catalog into per-job scheduler matrices."""
    ciorch_ctx: Context = ctx.obj
    mode = RunMode.from_flag(lightened)
    resolution = resolve(mode, skip_list, profiles=ciorch_ctx.profiles)

    instances = dispatch(
        ciorch_ctx.jobs,
        resolution.versions,
        resolution.caps,
        resolution.skip,
        registry=ciorch_ctx.registry,
        job_name_prefix=job_name_prefix,
        job_name_suffix=job_name_suffix,
        additional_packages=additional_packages.split(),
        coverage_flags=pytest_coverage_flags.strip(),
        additional_pytest_args=pytest_additional_args.strip(),
    )
    matrices = group_by_job(instances)

    if fmt == OutputFormat.GITHUB:
        write_outputs(
            {
                "matrix": matrices,
                "jobs": list(matrices),
                "jobs-to-skip": sorted(resolution.skip),
            },
            github_output,
        )
    elif fmt == OutputFormat.JSON:
        click.echo(json.dumps(matrices, indent=2))
    else:
        CliOutput.section(
            f"Dispatched {len(instances)} job instances ({mode.value})",
            Icons.LIST,
        )
        for key, matrix in matrices.items():
            CliOutput.plain(
                f"{key} (max-parallel {matrix['max-parallel']}): "
                f"{len(matrix['include'])} instances",
            )
            for entry in matrix["include"]:
                CliOutput.plain(f"  {entry['job-name']}")
        for key in sorted(resolution.skip):
            CliOutput.plain(f"{Icons.SKIPPED} {key} skipped")
