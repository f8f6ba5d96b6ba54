"""Matrix and job data structures."""

from __future__ import annotations

import re
import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_KEY = "default"

JOB_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def is_valid_job_key(key: str) -> bool:
    """Return whether ``key`` is a well-formed job key."""
    return bool(JOB_KEY_PATTERN.match(key))


class RunMode(str, Enum):
    """Which load profile a run uses."""

    FULL = "full"
    LIGHTENED = "lightened"

    @classmethod
    def from_flag(cls, lightened: bool) -> RunMode:
        """Map the boolean ``run_lightened_ci`` input onto a mode."""
        return cls.LIGHTENED if lightened else cls.FULL


def axis_label(value: Any, separator: str = ", ") -> str:
    """Render an axis value for display and artifact names.

    Mapping values (e.g. ``{"device": "default.qubit", "shots": None}``) are
    joined in declaration order.
    """
    if isinstance(value, Mapping):
        return separator.join(str(v) for v in value.values())
    return str(value)


def template_fields(template: str) -> set[str]:
    """Return the names of the ``{...}`` placeholders in ``template``.

    Raises
    ------
    ValueError
        If the braces in ``template`` are unbalanced
    """
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


@dataclass(frozen=True)
class Axis:
    """A statically declared secondary matrix dimension (shards, suites, configs)."""

    name: str
    values: tuple[Any, ...] = field(hash=False)

    def ordered_values(self) -> tuple[Any, ...]:
        """Return values in enumeration order.

        Integer shard numbers are ascending; anything else keeps the declared order.
        """
        if self.values and all(
            isinstance(v, int) and not isinstance(v, bool) for v in self.values
        ):
            return tuple(sorted(self.values))
        return self.values

    def format_args(self, template: str, value: Any) -> str:
        """Fill ``template`` with ``value`` under the axis name.

        Mapping values also expose each of their keys, so a ``device`` axis value of
        ``{"device": "default.qubit", "shots": 100}`` can be referenced as
        ``{device}`` and ``{shots}``.
        """
        if not template:
            return ""
        fields: dict[str, Any] = {self.name: axis_label(value)}
        if isinstance(value, Mapping):
            fields.update(value)
        return template.format(**fields)


@dataclass(frozen=True)
class JobSpec:
    """Static declaration of a logical job family."""

    key: str
    axis: Axis | None = None
    dependencies: tuple[str, ...] = ()
    markers: str = ""
    pytest_args: str = ""
    test_directory: str = ""
    packages: tuple[str, ...] = ()

    def render(self, template: str, value: Any = None) -> str:
        """Fill ``template`` for one axis value.

        Without an axis there is nothing to substitute, so any placeholder is an
        error.

        Raises
        ------
        KeyError
            If the template names a field the axis does not provide
        ValueError
            If the template is malformed
        """
        if self.axis is None:
            fields = template_fields(template)
            if fields:
                raise KeyError(sorted(fields)[0])
            return template.format()
        return self.axis.format_args(template, value)


@dataclass(frozen=True)
class DependencyPin:
    """A human-authored third-party version pin."""

    name: str
    constraint: str
    pip_args: tuple[str, ...] = ()

    @property
    def requirement(self) -> str:
        """Requirement string suitable for ``pip install``."""
        return f"{self.name}{self.constraint}"


@dataclass(frozen=True)
class JobInstance:
    """One concrete unit of work produced by the dispatcher."""

    job_key: str
    python_version: str
    max_parallel: int
    dependencies: tuple[DependencyPin, ...] = ()
    axis_name: str | None = None
    axis_value: Any = field(default=None, hash=False)
    markers: str = ""
    pytest_args: str = ""
    test_directory: str = ""
    artifact_name: str = ""
    display_name: str = ""
    additional_packages: tuple[str, ...] = ()
    coverage_flags: str = ""

    @property
    def job_id(self) -> str:
        """Stable identifier used for reporting and artifact lookup."""
        return self.artifact_name

    def to_matrix_entry(self) -> dict[str, Any]:
        """Render the instance as a scheduler matrix ``include`` entry."""
        packages = [pin.requirement for pin in self.dependencies]
        packages.extend(self.additional_packages)
        pip_args: list[str] = []
        for pin in self.dependencies:
            pip_args.extend(pin.pip_args)

        entry: dict[str, Any] = {
            "job-key": self.job_key,
            "job-name": self.display_name,
            "python-version": self.python_version,
            "max-parallel": self.max_parallel,
            "coverage-artifact-name": self.artifact_name,
            "pytest-markers": self.markers,
            "pytest-args": self.pytest_args,
            "pytest-coverage-flags": self.coverage_flags,
            "pytest-test-directory": self.test_directory,
            "additional-packages": packages,
            "additional-pip-args": pip_args,
        }
        if self.axis_name is not None:
            entry[self.axis_name] = self.axis_value
        return entry


class JobStatus(str, Enum):
    """Result of an upstream job as reported by the scheduler."""

    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    PENDING = "pending"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING

    @property
    def blocks_aggregation(self) -> bool:
        return self in (JobStatus.FAILURE, JobStatus.CANCELLED)


@dataclass(frozen=True)
class JobResult:
    """Terminal (or pending) state of one upstream job."""

    job_id: str
    status: JobStatus
