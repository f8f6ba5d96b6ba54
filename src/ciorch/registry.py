"""Process-wide registry of pinned third-party dependency versions."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ciorch.common.errors import ConfigurationError
from ciorch.config.loader import load_matrix_data, parse_dependencies
from ciorch.models.jobs import DependencyPin
from ciorch_common.patterns import Singleton
from ciorch_logging import get_logger

logger = get_logger(__name__)


class DependencyRegistry(Singleton["DependencyRegistry"]):
    """Lazily loaded, read-only set of dependency pins.

    The pins are parsed on first access and then shared by every reader for the
    rest of the run. :meth:`reset` ends that lifetime, e.g. between tests.

    Notes
    -----
    Pass ``stub=True`` to get an unregistered instance, optionally backed by an
    in-memory ``data`` document instead of a file.
    """

    def __init__(
        self,
        path: Path | None = None,
        data: dict[str, Any] | None = None,
        **_kwargs: Any,
    ) -> None:
        if self._initialized:
            return
        self._path = path
        self._data = data
        self._pins: tuple[DependencyPin, ...] | None = None
        self._load_lock = threading.Lock()
        self._initialized = True

    def versions(self) -> tuple[DependencyPin, ...]:
        """Return every pin, parsing the source on first call."""
        if self._pins is None:
            with self._load_lock:
                if self._pins is None:
                    data = self._data
                    if data is None:
                        data = load_matrix_data(self._path)
                    self._pins = parse_dependencies(data)
                    logger.debug("Loaded %d dependency pins", len(self._pins))
        return self._pins

    def pin(self, name: str) -> DependencyPin:
        """Return the pin for ``name``.

        Raises
        ------
        ConfigurationError
            If no pin is declared under ``name``
        """
        for pin in self.versions():
            if pin.name == name:
                return pin
        msg = f"Unknown dependency: {name}"
        raise ConfigurationError(msg)

    def pins_for(self, names: Iterable[str]) -> tuple[DependencyPin, ...]:
        """Return the pins for ``names`` in the order given."""
        return tuple(self.pin(name) for name in names)


def versions() -> tuple[DependencyPin, ...]:
    """Return the pins held by the process-wide registry."""
    return DependencyRegistry().versions()
