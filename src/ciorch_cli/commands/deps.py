"""Dependency pin commands."""

import json
from typing import TYPE_CHECKING

import click

from ciorch_cli.core.constants import Icons, OutputFormat
from ciorch_cli.core.decorators import handle_exceptions
from ciorch_cli.core.github_output import write_outputs
from ciorch_cli.core.options import format_option, github_output_option
from ciorch_cli.core.utils import CliOutput

if TYPE_CHECKING:
    from ciorch_cli.cli import Context


@click.command(name="deps")
@format_option
@github_output_option
@click.pass_context
@handle_exceptions
def deps(ctx: click.Context, fmt: str, github_output: str | None) -> None:
    """Show the pinned third-party dependency versions."""
    ciorch_ctx: Context = ctx.obj
    pins = ciorch_ctx.registry.versions()

    if fmt == OutputFormat.GITHUB:
        write_outputs({pin.name: pin.requirement for pin in pins}, github_output)
    elif fmt == OutputFormat.JSON:
        data = [
            {
                "name": pin.name,
                "constraint": pin.constraint,
                "requirement": pin.requirement,
                "pip-args": list(pin.pip_args),
            }
            for pin in pins
        ]
        click.echo(json.dumps(data, indent=2))
    else:
        CliOutput.section("Dependency pins", Icons.PACKAGE)
        for pin in pins:
            extra = f"  ({' '.join(pin.pip_args)})" if pin.pip_args else ""
            CliOutput.plain(f"{pin.requirement}{extra}")
