"""File IO helpers."""

from .files import (
    FileOperationError,
    append_text,
    ensure_dir,
    safe_read_json,
    safe_read_yaml,
)

__all__ = [
    "FileOperationError",
    "append_text",
    "ensure_dir",
    "safe_read_json",
    "safe_read_yaml",
]
