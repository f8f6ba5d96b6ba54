"""Utility functions for the ciorch CLI."""

from collections.abc import Callable

import click

from ciorch_cli.core.constants import Icons


def format_success(msg: str) -> str:
    """Format a success message with green color."""
    return click.style(msg, fg="green")


def format_error(msg: str) -> str:
    """Format an error message with red color and icon.

    Parameters
    ----------
    msg : str
        Message to format

    Returns
    -------
    str
        Formatted message
    """
    return click.style(f"{Icons.ERROR} {msg}", fg="red")


class CliOutput:
    """Unified CLI output utility with consistent formatting.

    Coalesces consecutive blank lines to a single blank line.
    """

    _last_was_blank: bool = False

    @staticmethod
    def _emit(
        message: str,
        *,
        err: bool = False,
        formatter: Callable[[str], str] | None = None,
    ) -> None:
        if not message or message.strip() == "":
            if CliOutput._last_was_blank:
                return
            click.echo("", err=err)
            CliOutput._last_was_blank = True
            return

        rendered = formatter(message) if formatter else message
        click.echo(rendered, err=err)
        CliOutput._last_was_blank = False

    @staticmethod
    def success(message: str) -> None:
        """Echo success message in green color."""
        CliOutput._emit(message, formatter=format_success)

    @staticmethod
    def error(message: str, err: bool = True) -> None:
        """Echo error message with red X to stderr by default.

        Parameters
        ----------
        message : str
            Message to echo
        err : bool
            Whether to send to stderr (default: True)
        """
        CliOutput._emit(message, err=err, formatter=format_error)

    @staticmethod
    def plain(message: str, err: bool = False) -> None:
        """Echo plain message without icon."""
        CliOutput._emit(message, err=err)

    @staticmethod
    def section(title: str, icon: str = "") -> None:
        """Echo a bold section heading."""
        heading = f"{icon} {title}" if icon else title
        CliOutput._emit(heading, formatter=lambda m: click.style(m, bold=True))
