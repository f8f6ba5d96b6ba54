"""Load the static matrix data (profiles, dependency pins, job catalog).

The packaged ``data/matrix.yaml`` is used unless a path is given. Any file with the
same schema can stand in for it.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from packaging.specifiers import InvalidSpecifier, SpecifierSet

from ciorch.common.errors import ConfigurationError
from ciorch.config.tables import (
    ConcurrencyTable,
    LoadProfile,
    OverrideTable,
    ProfileSet,
    VersionTable,
)
from ciorch.models.jobs import (
    DEFAULT_KEY,
    Axis,
    DependencyPin,
    JobSpec,
    RunMode,
    is_valid_job_key,
)
from ciorch_common.io import FileOperationError, safe_read_yaml
from ciorch_logging import get_logger

logger = get_logger(__name__)

DEFAULT_MATRIX_PATH = Path(__file__).parent / "data" / "matrix.yaml"

REQUIRED_KEYS = ("version", "reference_version", "profiles")


def load_matrix_data(path: Path | None = None) -> dict[str, Any]:
    """Read and minimally validate the matrix document.

    Parameters
    ----------
    path : Path | None
        Path to a matrix YAML file. Defaults to the packaged one.

    Returns
    -------
    dict[str, Any]
        Raw document

    Raises
    ------
    ConfigurationError
        If the file cannot be read or required top-level keys are missing
    """
    path = path or DEFAULT_MATRIX_PATH
    try:
        data = safe_read_yaml(path)
    except FileOperationError as e:
        raise ConfigurationError(str(e)) from e

    missing = [k for k in REQUIRED_KEYS if k not in data]
    if missing:
        msg = f"Missing required keys in {path}: {missing}"
        raise ConfigurationError(msg)

    logger.debug("Loaded matrix data from %s (version %s)", path, data["version"])
    return data


def _version_table(raw: Any, name: str) -> VersionTable:
    if not isinstance(raw, Mapping):
        msg = f"{name} must be a mapping of job key to version list"
        raise ConfigurationError(msg)

    entries: dict[str, tuple[str, ...]] = {}
    for key, versions in raw.items():
        if isinstance(versions, str):
            versions = [versions]
        if not isinstance(versions, list) or not all(
            isinstance(v, str) for v in versions
        ):
            msg = f"{name}.{key}: versions must be strings, got {versions!r}"
            raise ConfigurationError(msg)
        if len(set(versions)) != len(versions):
            msg = f"{name}.{key}: duplicate versions in {versions!r}"
            raise ConfigurationError(msg)
        entries[str(key)] = tuple(versions)
    return OverrideTable(entries, name=name)


def _concurrency_table(raw: Any, name: str) -> ConcurrencyTable:
    if not isinstance(raw, Mapping):
        msg = f"{name} must be a mapping of job key to integer"
        raise ConfigurationError(msg)

    entries: dict[str, int] = {}
    for key, cap in raw.items():
        if isinstance(cap, bool) or not isinstance(cap, int) or cap < 1:
            msg = f"{name}.{key}: cap must be a positive integer, got {cap!r}"
            raise ConfigurationError(msg)
        entries[str(key)] = cap
    return OverrideTable(entries, name=name)


def _profile(raw: Any, mode: RunMode) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        msg = f"profiles.{mode.value} is missing or not a mapping"
        raise ConfigurationError(msg)
    return raw


def _caps(raw: Mapping[str, Any], mode: RunMode) -> ConcurrencyTable:
    return _concurrency_table(
        raw.get("max_parallel"),
        f"profiles.{mode.value}.max_parallel",
    )


def _lightened_versions(raw: Mapping[str, Any], reference_version: str) -> VersionTable:
    """Version table for the lightened profile: the reference version only.

    The table is built from ``reference_version``. An explicit
    ``python_versions`` entry is accepted only if it says the same thing.
    """
    name = f"profiles.{RunMode.LIGHTENED.value}.python_versions"
    expected = OverrideTable({DEFAULT_KEY: (reference_version,)}, name=name)
    if raw.get("python_versions") is None:
        return expected

    declared = _version_table(raw["python_versions"], name)
    if declared.to_dict() != expected.to_dict():
        msg = (
            f"{name} must be exactly {{default: [{reference_version}]}} "
            f"(reference_version), got {declared.to_dict()}"
        )
        raise ConfigurationError(msg)
    return expected


def parse_profiles(data: Mapping[str, Any]) -> ProfileSet:
    """Build the :class:`ProfileSet` from a raw matrix document.

    The lightened profile may omit ``python_versions``; it always resolves to the
    reference version alone.
    """
    profiles = data.get("profiles")
    if not isinstance(profiles, Mapping):
        msg = "profiles must be a mapping"
        raise ConfigurationError(msg)

    reference_version = data.get("reference_version")
    if not isinstance(reference_version, str) or not reference_version:
        msg = f"reference_version must be a non-empty string, got {reference_version!r}"
        raise ConfigurationError(msg)

    full = _profile(profiles.get(RunMode.FULL.value), RunMode.FULL)
    lightened = _profile(profiles.get(RunMode.LIGHTENED.value), RunMode.LIGHTENED)

    return ProfileSet(
        full=LoadProfile(
            mode=RunMode.FULL,
            versions=_version_table(
                full.get("python_versions"),
                f"profiles.{RunMode.FULL.value}.python_versions",
            ),
            caps=_caps(full, RunMode.FULL),
        ),
        lightened=LoadProfile(
            mode=RunMode.LIGHTENED,
            versions=_lightened_versions(lightened, reference_version),
            caps=_caps(lightened, RunMode.LIGHTENED),
        ),
        reference_version=reference_version,
    )


def load_profiles(path: Path | None = None) -> ProfileSet:
    """Load both load profiles from ``path`` (or the packaged data)."""
    return parse_profiles(load_matrix_data(path))


def parse_dependencies(data: Mapping[str, Any]) -> tuple[DependencyPin, ...]:
    """Build dependency pins, validating each constraint literal.

    Raises
    ------
    ConfigurationError
        If a pin has no constraint or the constraint is not a valid specifier
    """
    raw = data.get("dependencies") or {}
    if not isinstance(raw, Mapping):
        msg = "dependencies must be a mapping"
        raise ConfigurationError(msg)

    pins = []
    for name, entry in raw.items():
        if isinstance(entry, str):
            entry = {"constraint": entry}
        if not isinstance(entry, Mapping) or "constraint" not in entry:
            msg = f"dependencies.{name}: missing constraint"
            raise ConfigurationError(msg)

        constraint = str(entry["constraint"])
        try:
            SpecifierSet(constraint)
        except InvalidSpecifier as e:
            msg = f"dependencies.{name}: invalid constraint {constraint!r}"
            raise ConfigurationError(msg) from e

        pip_args = entry.get("pip_args") or []
        pins.append(
            DependencyPin(
                name=str(name),
                constraint=constraint,
                pip_args=tuple(str(a) for a in pip_args),
            ),
        )
    return tuple(pins)


def _axis(raw: Any, job_key: str) -> Axis | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping) or "name" not in raw or not raw.get("values"):
        msg = f"jobs.{job_key}.axis needs a name and a non-empty values list"
        raise ConfigurationError(msg)

    values = tuple(
        dict(v) if isinstance(v, Mapping) else v for v in raw["values"]
    )
    return Axis(name=str(raw["name"]), values=values)


def _names(raw: Any, job_key: str, field_name: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(n, str) for n in raw):
        msg = f"jobs.{job_key}.{field_name} must be a list of strings, got {raw!r}"
        raise ConfigurationError(msg)
    return tuple(raw)


def _check_templates(spec: JobSpec) -> None:
    """Fill every template for every axis value so bad placeholders fail at load."""
    values = spec.axis.values if spec.axis else (None,)
    for field_name in ("markers", "pytest_args"):
        template = getattr(spec, field_name)
        for value in values:
            try:
                spec.render(template, value)
            except KeyError as e:
                msg = (
                    f"jobs.{spec.key}.{field_name}: {template!r} references unknown "
                    f"field {e}"
                )
                raise ConfigurationError(msg) from e
            except (IndexError, ValueError) as e:
                msg = f"jobs.{spec.key}.{field_name}: invalid template {template!r}: {e}"
                raise ConfigurationError(msg) from e


def parse_jobs(data: Mapping[str, Any]) -> tuple[JobSpec, ...]:
    """Build the job catalog in declaration order.

    Raises
    ------
    ConfigurationError
        If a key is invalid or repeated, a list field is not a list, or a
        ``markers``/``pytest_args`` template names a field its axis lacks
    """
    raw = data.get("jobs") or []
    if not isinstance(raw, list):
        msg = "jobs must be a list"
        raise ConfigurationError(msg)

    jobs = []
    seen: set[str] = set()
    for entry in raw:
        if isinstance(entry, str):
            entry = {"key": entry}
        key = entry.get("key") if isinstance(entry, Mapping) else None
        if not isinstance(key, str) or not is_valid_job_key(key):
            msg = f"Invalid job key: {key!r}"
            raise ConfigurationError(msg)
        if key in seen:
            msg = f"Duplicate job key: {key}"
            raise ConfigurationError(msg)
        seen.add(key)

        spec = JobSpec(
            key=key,
            axis=_axis(entry.get("axis"), key),
            dependencies=_names(entry.get("dependencies"), key, "dependencies"),
            markers=entry.get("markers") or "",
            pytest_args=entry.get("pytest_args") or "",
            test_directory=entry.get("test_directory") or "",
            packages=_names(entry.get("packages"), key, "packages"),
        )
        _check_templates(spec)
        jobs.append(spec)
    return tuple(jobs)


def load_jobs(path: Path | None = None) -> tuple[JobSpec, ...]:
    """Load the job catalog from ``path`` (or the packaged data)."""
    return parse_jobs(load_matrix_data(path))
