"""File helpers shared by the ciorch packages."""

import json
from pathlib import Path
from typing import Any

import yaml


class FileOperationError(Exception):
    """Raised when a file cannot be read, parsed or written."""


def safe_read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML document whose top level is a mapping.

    Parameters
    ----------
    path : Path
        Path to the YAML file

    Returns
    -------
    dict[str, Any]
        Parsed document; an empty file yields an empty dict

    Raises
    ------
    FileOperationError
        If the file is missing, unreadable, malformed, or not a mapping
    """
    if not path.exists():
        msg = f"YAML file does not exist: {path}"
        raise FileOperationError(msg)

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise FileOperationError(msg) from e
    except OSError as e:
        msg = f"Cannot read YAML file {path}: {e}"
        raise FileOperationError(msg) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a mapping at the top level of {path}"
        raise FileOperationError(msg)
    return data


def safe_read_json(path: Path) -> Any:
    """Read a JSON document.

    Parameters
    ----------
    path : Path
        Path to the JSON file

    Returns
    -------
    Any
        Parsed JSON value

    Raises
    ------
    FileOperationError
        If the file is missing, unreadable or malformed
    """
    if not path.exists():
        msg = f"JSON file does not exist: {path}"
        raise FileOperationError(msg)

    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        msg = f"Invalid JSON in {path}: {e}"
        raise FileOperationError(msg) from e
    except OSError as e:
        msg = f"Cannot read JSON file {path}: {e}"
        raise FileOperationError(msg) from e


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if needed and return it.

    Raises
    ------
    FileOperationError
        If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Cannot create directory {path}: {e}"
        raise FileOperationError(msg) from e
    return path


def append_text(path: Path, content: str) -> None:
    """Append ``content`` to ``path``, creating the file if necessary.

    Raises
    ------
    FileOperationError
        If the file cannot be written
    """
    try:
        ensure_dir(path.parent)
        with path.open("a", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        msg = f"Cannot append to {path}: {e}"
        raise FileOperationError(msg) from e
