"""Expand the job catalog into concrete job instances."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from packaging.version import InvalidVersion, Version

from ciorch.common.errors import ConfigurationError
from ciorch.config.tables import ConcurrencyTable, VersionTable
from ciorch.models.jobs import JobInstance, JobSpec, axis_label
from ciorch.registry import DependencyRegistry
from ciorch_logging import get_logger

logger = get_logger(__name__)

ARTIFACT_PREFIX = "coverage"


def _version_key(version: str) -> tuple[int, Version | str]:
    try:
        return (0, Version(version))
    except InvalidVersion:
        return (1, version)


def artifact_name(job_key: str, python_version: str, axis_value: Any = None) -> str:
    """Deterministic artifact name for one job instance."""
    name = f"{ARTIFACT_PREFIX}-{job_key}-py{python_version}"
    if axis_value is not None:
        name = f"{name}-{axis_label(axis_value, separator='-')}"
    return name


def display_name(
    job_key: str,
    python_version: str,
    axis_value: Any = None,
    prefix: str = "",
    suffix: str = "",
) -> str:
    """Human-readable job name as shown by the scheduler."""
    parts = [python_version]
    if axis_value is not None:
        parts.insert(0, axis_label(axis_value))
    return f"{prefix}{job_key} ({', '.join(parts)}){suffix}"


def _as_spec(job: JobSpec | str) -> JobSpec:
    if isinstance(job, JobSpec):
        return job
    return JobSpec(key=job)


def render_template(spec: JobSpec, template: str, value: Any = None) -> str:
    """Fill a job's ``markers`` or ``pytest_args`` template for one axis value.

    Raises
    ------
    ConfigurationError
        If the template references a field the job's axis does not provide, or is
        malformed
    """
    try:
        return spec.render(template, value)
    except KeyError as e:
        msg = f"jobs.{spec.key}: template {template!r} references unknown field {e}"
        raise ConfigurationError(msg) from e
    except (IndexError, ValueError) as e:
        msg = f"jobs.{spec.key}: invalid template {template!r}: {e}"
        raise ConfigurationError(msg) from e


def _join_args(*parts: str) -> str:
    return " ".join(p for p in parts if p)


def dispatch(
    jobs: Iterable[JobSpec | str],
    table: VersionTable,
    caps: ConcurrencyTable,
    skip: frozenset[str] = frozenset(),
    registry: DependencyRegistry | None = None,
    job_name_prefix: str = "",
    job_name_suffix: str = "",
    additional_packages: Sequence[str] = (),
    coverage_flags: str = "",
    additional_pytest_args: str = "",
) -> list[JobInstance]:
    """Produce one instance per (job, version, axis value) that is not skipped.

    Parameters
    ----------
    jobs : Iterable[JobSpec | str]
        Jobs in declaration order; a bare string is a job with no axis and no
        dependencies
    table : VersionTable
        Interpreter versions per job
    caps : ConcurrencyTable
        Concurrency cap per job
    skip : frozenset[str]
        Job keys that produce no instances
    registry : DependencyRegistry | None
        Pin source; defaults to the process-wide registry
    job_name_prefix, job_name_suffix : str
        Decoration for display names
    additional_packages : Sequence[str]
        Extra requirements installed by every instance, after the job's own
        packages
    coverage_flags : str
        pytest coverage flags passed to every instance
    additional_pytest_args : str
        pytest arguments appended to every instance's own arguments

    Returns
    -------
    list[JobInstance]
        Instances ordered by job declaration, then version, then axis value

    Raises
    ------
    ConfigurationError
        If a job resolves to no versions, duplicate versions or no cap, names an
        unknown pin, or has a template its axis cannot fill. Nothing is returned in
        that case.
    """
    specs = [_as_spec(job) for job in jobs]
    registry = registry or DependencyRegistry()
    extra = tuple(additional_packages)

    instances: list[JobInstance] = []
    for spec in specs:
        if spec.key in skip:
            logger.debug("Skipping %s", spec.key)
            continue

        versions = table.lookup(spec.key)
        if not versions:
            msg = f"No python versions resolved for {spec.key} in {table.name}"
            raise ConfigurationError(msg)
        if len(set(versions)) != len(versions):
            msg = f"Duplicate python versions for {spec.key} in {table.name}: {list(versions)}"
            raise ConfigurationError(msg)
        cap = caps.lookup(spec.key)
        if not cap:
            msg = f"No concurrency cap resolved for {spec.key} in {caps.name}"
            raise ConfigurationError(msg)

        pins = registry.pins_for(spec.dependencies)
        axis_values: tuple[Any, ...] = (
            spec.axis.ordered_values() if spec.axis else (None,)
        )

        packages = spec.packages + extra

        for version in sorted(versions, key=_version_key):
            for value in axis_values:
                markers = render_template(spec, spec.markers, value)
                pytest_args = _join_args(
                    render_template(spec, spec.pytest_args, value),
                    additional_pytest_args,
                )

                instances.append(
                    JobInstance(
                        job_key=spec.key,
                        python_version=version,
                        max_parallel=cap,
                        dependencies=pins,
                        axis_name=spec.axis.name if spec.axis else None,
                        axis_value=value,
                        markers=markers,
                        pytest_args=pytest_args,
                        test_directory=spec.test_directory,
                        artifact_name=artifact_name(spec.key, version, value),
                        display_name=display_name(
                            spec.key,
                            version,
                            value,
                            prefix=job_name_prefix,
                            suffix=job_name_suffix,
                        ),
                        additional_packages=packages,
                        coverage_flags=coverage_flags,
                    ),
                )

    logger.info(
        "Dispatched %d instances across %d jobs (%d skipped)",
        len(instances),
        len(specs),
        sum(1 for s in specs if s.key in skip),
    )
    return instances


def group_by_job(instances: Iterable[JobInstance]) -> dict[str, dict[str, Any]]:
    """Group instances into one scheduler matrix per job key.

    Returns
    -------
    dict[str, dict[str, Any]]
        ``{job_key: {"max-parallel": cap, "include": [matrix entries]}}`` in
        dispatch order
    """
    grouped: dict[str, dict[str, Any]] = {}
    for instance in instances:
        group = grouped.setdefault(
            instance.job_key,
            {"max-parallel": instance.max_parallel, "include": []},
        )
        group["include"].append(instance.to_matrix_entry())
    return grouped
