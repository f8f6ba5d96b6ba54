"""Write step outputs for GitHub Actions."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click

from ciorch_common.io import append_text

HEREDOC_DELIMITER = "EOF"


def render_value(value: Any) -> str:
    """Render an output value; containers become compact JSON."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def render_outputs(outputs: Mapping[str, Any]) -> str:
    """Render outputs in the ``$GITHUB_OUTPUT`` file format.

    Single-line values are written as ``name=value``; multi-line values use the
    ``name<<EOF`` heredoc form.
    """
    lines = []
    for name, value in outputs.items():
        text = render_value(value)
        if "\n" in text:
            lines.append(f"{name}<<{HEREDOC_DELIMITER}")
            lines.append(text)
            lines.append(HEREDOC_DELIMITER)
        else:
            lines.append(f"{name}={text}")
    return "\n".join(lines) + "\n"


def write_outputs(outputs: Mapping[str, Any], github_output: str | None) -> None:
    """Append ``outputs`` to the ``$GITHUB_OUTPUT`` file, or echo them if unset."""
    rendered = render_outputs(outputs)
    if github_output:
        append_text(Path(github_output), rendered)
    else:
        click.echo(rendered, nl=False)
