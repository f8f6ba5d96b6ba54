"""Custom Click decorators for common CLI patterns."""

import functools
import traceback
from collections.abc import Callable
from typing import Any, TypeVar

import click

from ciorch.common.errors import CiorchError, ConfigurationError
from ciorch_cli.core.constants import ExitCode
from ciorch_cli.core.utils import CliOutput
from ciorch_logging import get_cli_logger

logger = get_cli_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_exceptions(func: F) -> F:
    """Handle exceptions and convert to appropriate exit codes.

    Parameters
    ----------
    func : Callable
        Function to wrap

    Returns
    -------
    Callable
        Wrapped function
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            ctx = click.get_current_context()
            ctx.exit(ExitCode.GENERAL_ERROR)
        except Exception as e:
            # Allow Click's normal exit and usage handling to propagate
            if isinstance(
                e,
                (click.exceptions.Exit, click.exceptions.Abort, click.ClickException),
            ):
                raise

            ctx = click.get_current_context()
            if isinstance(e, ConfigurationError):
                CliOutput.error(f"Configuration error: {e}")
                ctx.exit(ExitCode.CONFIG_ERROR)
            elif isinstance(e, CiorchError):
                CliOutput.error(str(e))
                if e.__cause__ is not None:
                    logger.debug("Caused by: %r", e.__cause__)
                ctx.exit(ExitCode.GENERAL_ERROR)
            elif isinstance(e, FileNotFoundError):
                CliOutput.error(f"File not found: {e}")
                ctx.exit(ExitCode.NOT_FOUND)
            elif isinstance(e, PermissionError):
                CliOutput.error(f"Permission denied: {e}")
                ctx.exit(ExitCode.PERMISSION_ERROR)
            else:
                CliOutput.error(f"Unexpected error: {e}")
                verbose = bool(getattr(ctx.obj, "verbose", False))
                if verbose:
                    CliOutput.error("Full traceback:")
                    CliOutput.error(traceback.format_exc())
                else:
                    CliOutput.plain("Re-run with -v for full traceback", err=True)
                ctx.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore[return-value]
