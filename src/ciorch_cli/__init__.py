"""Command line interface for ciorch."""

from ciorch import __version__

__all__ = ["__version__"]
