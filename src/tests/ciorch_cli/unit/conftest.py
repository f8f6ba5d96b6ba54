"""Fixtures for CLI unit tests."""

from collections.abc import Generator

import pytest
from click.testing import CliRunner

from ciorch_logging import configure_logger


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_test_logging() -> Generator[None, None, None]:
    """Put package loggers back on the test profile after each invocation.

    The CLI attaches console handlers bound to the runner's captured streams.
    """
    yield
    for package in ("ciorch", "ciorch_cli"):
        configure_logger(package, profile="test")
