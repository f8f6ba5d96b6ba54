"""Main CLI entry point for ciorch.

This module provides the main Click command group and wires up the subcommands.
"""

from pathlib import Path

import click

from ciorch import __version__
from ciorch.config import ProfileSet, load_jobs, load_profiles
from ciorch.models import JobSpec
from ciorch.registry import DependencyRegistry
from ciorch_cli.commands import deps, gate, matrix, reconcile
from ciorch_cli.core.constants import EnvVars, LogLevel
from ciorch_logging import configure_logger, get_cli_logger

logger = get_cli_logger(__name__)

LOGGING_PACKAGES = ("ciorch", "ciorch_cli")


def _configure_package_loggers(level: str | None, log_file: str | None) -> None:
    for pkg_name in LOGGING_PACKAGES:
        configure_logger(pkg_name, profile="cli", level=level, log_file=log_file)


class Context:
    """CLI context object for sharing state between commands."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize CLI context.

        Parameters
        ----------
        config_path : Path | None
            Matrix data file; the packaged one is used when omitted
        """
        self.verbose: bool = False
        self.config_path = config_path
        self._profiles: ProfileSet | None = None
        self._jobs: tuple[JobSpec, ...] | None = None
        self._registry: DependencyRegistry | None = None

    @property
    def profiles(self) -> ProfileSet:
        """Load profiles, read on first access."""
        if self._profiles is None:
            self._profiles = load_profiles(self.config_path)
        return self._profiles

    @property
    def jobs(self) -> tuple[JobSpec, ...]:
        """Job catalog, read on first access."""
        if self._jobs is None:
            self._jobs = load_jobs(self.config_path)
        return self._jobs

    @property
    def registry(self) -> DependencyRegistry:
        """Dependency registry for the configured matrix data.

        The process-wide registry serves the packaged data; an explicit config
        file gets its own unregistered instance.
        """
        if self._registry is None:
            if self.config_path is None:
                self._registry = DependencyRegistry()
            else:
                self._registry = DependencyRegistry(path=self.config_path, stub=True)
        return self._registry


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(__version__, prog_name="ciorch")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel]),
    envvar=EnvVars.LOG_LEVEL,
    help="Set logging level",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Also write logs to this file",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar=EnvVars.CONFIG,
    help="Matrix data file (defaults to the packaged matrix.yaml)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_level: str | None,
    log_file: str | None,
    config_path: Path | None,
) -> None:
    """ciorch - CI matrix orchestration.

    \b
    Resolves the test matrix, dispatches job instances, reconciles generated
    artifacts with a bot branch and pull request, and gates coverage upload.
    """  # noqa: W605
    ctx.ensure_object(Context)
    ciorch_ctx: Context = ctx.obj
    ciorch_ctx.verbose = verbose
    ciorch_ctx.config_path = config_path

    effective_level = log_level or (LogLevel.DEBUG.value if verbose else None)
    _configure_package_loggers(effective_level, log_file)
    logger.debug("ciorch %s starting (config: %s)", __version__, config_path or "packaged")


cli.add_command(matrix.group)
cli.add_command(deps.deps)
cli.add_command(reconcile.reconcile)
cli.add_command(gate.gate)


def main() -> None:
    """Serve as the main entry point for the CLI."""
    cli(prog_name="ciorch")


if __name__ == "__main__":
    main()
