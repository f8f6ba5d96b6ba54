"""Override tables and load profiles."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Generic, TypeVar

from ciorch.common.errors import ConfigurationError
from ciorch.models.jobs import DEFAULT_KEY, RunMode

T = TypeVar("T")


class OverrideTable(Mapping[str, T], Generic[T]):
    """Per-job values with a mandatory ``default`` fallback.

    Lookups go through :meth:`lookup`, which is total for any job key as long as
    the table holds a ``default`` entry. Empty or zero explicit values also fall
    back to the default.
    """

    def __init__(self, entries: Mapping[str, T], name: str = "table") -> None:
        if DEFAULT_KEY not in entries:
            msg = f"{name} has no '{DEFAULT_KEY}' entry"
            raise ConfigurationError(msg)
        self._name = name
        self._entries: Mapping[str, T] = MappingProxyType(dict(entries))

    @property
    def name(self) -> str:
        return self._name

    @property
    def default(self) -> T:
        return self._entries[DEFAULT_KEY]

    def lookup(self, job_key: str) -> T | None:
        """Resolve ``job_key`` to its explicit entry or to the default."""
        return self._entries.get(job_key) or self._entries.get(DEFAULT_KEY)

    def overrides(self) -> dict[str, T]:
        """Explicit per-job entries, without the default."""
        return {k: v for k, v in self._entries.items() if k != DEFAULT_KEY}

    def to_dict(self) -> dict[str, T]:
        return dict(self._entries)

    def __getitem__(self, key: str) -> T:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OverrideTable({self._name!r}, {dict(self._entries)!r})"


VersionTable = OverrideTable[tuple[str, ...]]
ConcurrencyTable = OverrideTable[int]


@dataclass(frozen=True)
class LoadProfile:
    """A complete set of tables for one run mode."""

    mode: RunMode
    versions: VersionTable
    caps: ConcurrencyTable


@dataclass(frozen=True)
class ProfileSet:
    """The two load profiles; exactly one is active per run."""

    full: LoadProfile
    lightened: LoadProfile
    reference_version: str

    def select(self, mode: RunMode) -> LoadProfile:
        if mode is RunMode.LIGHTENED:
            return self.lightened
        return self.full
