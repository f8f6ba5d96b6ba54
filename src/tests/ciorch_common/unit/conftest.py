"""Fixtures for ciorch_common tests."""

from collections.abc import Generator

import pytest

from ciorch_common.patterns import Singleton


@pytest.fixture(autouse=True)
def reset_all_singletons() -> Generator[None, None, None]:
    """Clear the singleton registry around each test."""
    Singleton._instances.clear()
    yield
    Singleton._instances.clear()
