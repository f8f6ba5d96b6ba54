"""Click options shared by several commands."""

import click

from ciorch_cli.core.constants import EnvVars, OutputFormat

format_option = click.option(
    "--format",
    "fmt",
    type=click.Choice(OutputFormat.ALL),
    default=OutputFormat.TEXT,
    show_default=True,
    help="Output format; 'github' writes step outputs to $GITHUB_OUTPUT",
)

github_output_option = click.option(
    "--github-output",
    envvar=EnvVars.GITHUB_OUTPUT,
    type=click.Path(dir_okay=False),
    help="Step output file used with --format github",
)

lightened_option = click.option(
    "--lightened/--full",
    default=False,
    show_default=True,
    help="Use the lightened load profile",
)

skip_option = click.option(
    "--skip",
    "skip_list",
    default="",
    help="Jobs to skip in lightened mode (comma, newline or space separated)",
)
