"""Tests for ciorch.dispatch."""

import pytest

from ciorch.common.errors import ConfigurationError
from ciorch.config import load_jobs, load_profiles, resolve
from ciorch.config.tables import OverrideTable
from ciorch.dispatch import artifact_name, dispatch, display_name, group_by_job
from ciorch.models import Axis, JobSpec, RunMode
from ciorch.registry import DependencyRegistry

PIN_DATA = {
    "dependencies": {
        "numpy": {"constraint": ">=1.26"},
        "torch": {"constraint": "==2.3.0", "pip_args": ["-f", "url"]},
    },
}


@pytest.fixture
def registry():
    """Registry backed by in-memory pins."""
    return DependencyRegistry(data=PIN_DATA, stub=True)


@pytest.fixture
def tables():
    """Small version and cap tables."""
    versions = OverrideTable({"default": ("3.11", "3.10"), "solo": ("3.12",)})
    caps = OverrideTable({"default": 2, "sharded": 4})
    return versions, caps


@pytest.mark.unit
class TestDispatch:
    """Tests for dispatch."""

    def test_lightened_skip_scenario(self):
        """Test that skipped jobs yield no instances at all."""
        resolution = resolve(RunMode.LIGHTENED, "qcut-tests, data-tests")
        instances = dispatch(
            ["core-tests", "qcut-tests", "data-tests"],
            resolution.versions,
            resolution.caps,
            resolution.skip,
        )

        assert instances
        assert {i.job_key for i in instances} == {"core-tests"}

    def test_fallback_is_total(self, tables, registry):
        """Test that every job gets a version and cap, explicit or default."""
        versions, caps = tables
        instances = dispatch(["solo", "anything", "sharded"], versions, caps, registry=registry)

        by_key = {}
        for instance in instances:
            by_key.setdefault(instance.job_key, []).append(instance)

        assert [i.python_version for i in by_key["solo"]] == ["3.12"]
        assert [i.python_version for i in by_key["anything"]] == ["3.10", "3.11"]
        assert by_key["anything"][0].max_parallel == 2
        assert by_key["sharded"][0].max_parallel == 4

    def test_enumeration_order(self, tables, registry):
        """Test ordering by declaration, then version, then axis value."""
        versions, caps = tables
        jobs = [
            JobSpec(key="sharded", axis=Axis("group", (3, 1, 2))),
            "solo",
        ]
        instances = dispatch(jobs, versions, caps, registry=registry)

        assert [(i.job_key, i.python_version, i.axis_value) for i in instances] == [
            ("sharded", "3.10", 1),
            ("sharded", "3.10", 2),
            ("sharded", "3.10", 3),
            ("sharded", "3.11", 1),
            ("sharded", "3.11", 2),
            ("sharded", "3.11", 3),
            ("solo", "3.12", None),
        ]

    def test_versions_sort_numerically(self, registry):
        """Test that 3.10 sorts after 3.9."""
        versions = OverrideTable({"default": ("3.10", "3.9")})
        caps = OverrideTable({"default": 1})
        instances = dispatch(["core"], versions, caps, registry=registry)
        assert [i.python_version for i in instances] == ["3.9", "3.10"]

    def test_deterministic(self):
        """Test that identical inputs yield identical output."""
        profiles = load_profiles()
        resolution = resolve(RunMode.FULL, "", profiles=profiles)
        jobs = load_jobs()

        first = dispatch(jobs, resolution.versions, resolution.caps, resolution.skip)
        second = dispatch(jobs, resolution.versions, resolution.caps, resolution.skip)

        assert [i.to_matrix_entry() for i in first] == [i.to_matrix_entry() for i in second]

    def test_pins_snapshot(self, tables, registry):
        """Test that instances carry the pins their job declares."""
        versions, caps = tables
        job = JobSpec(key="solo", dependencies=("torch", "numpy"))
        (instance,) = dispatch([job], versions, caps, registry=registry)

        assert [p.name for p in instance.dependencies] == ["torch", "numpy"]
        entry = instance.to_matrix_entry()
        assert entry["additional-packages"] == ["torch==2.3.0", "numpy>=1.26"]
        assert entry["additional-pip-args"] == ["-f", "url"]

    def test_unknown_dependency_fails_closed(self, tables, registry):
        """Test that an unknown pin aborts the whole dispatch."""
        versions, caps = tables
        jobs = ["solo", JobSpec(key="broken", dependencies=("tensorflow",))]
        with pytest.raises(ConfigurationError, match="Unknown dependency"):
            dispatch(jobs, versions, caps, registry=registry)

    def test_missing_from_every_table(self, registry):
        """Test that a table whose default resolves to nothing is an error."""
        versions = OverrideTable({"default": ()})
        caps = OverrideTable({"default": 1})
        with pytest.raises(ConfigurationError, match="No python versions"):
            dispatch(["core"], versions, caps, registry=registry)

    def test_axis_args_formatted(self, tables, registry):
        """Test that markers and pytest args are filled from the axis value."""
        versions, caps = tables
        job = JobSpec(
            key="solo",
            axis=Axis("config", ({"device": "cpu", "shots": 100},)),
            markers="{device}",
            pytest_args="--device={device} --shots={shots}",
            test_directory="tests/devices",
        )
        (instance,) = dispatch([job], versions, caps, registry=registry)

        assert instance.markers == "cpu"
        assert instance.pytest_args == "--device=cpu --shots=100"
        assert instance.test_directory == "tests/devices"
        assert instance.to_matrix_entry()["config"] == {"device": "cpu", "shots": 100}

    def test_names(self, tables, registry):
        """Test artifact and display names."""
        versions, caps = tables
        job = JobSpec(key="solo", axis=Axis("group", (2,)))
        (instance,) = dispatch(
            [job],
            versions,
            caps,
            registry=registry,
            job_name_prefix="[nightly] ",
            job_name_suffix=" *",
        )

        assert instance.artifact_name == "coverage-solo-py3.12-2"
        assert instance.job_id == instance.artifact_name
        assert instance.display_name == "[nightly] solo (2, 3.12) *"

    def test_additional_packages(self, tables, registry):
        """Test that extra packages are appended after the pins."""
        versions, caps = tables
        job = JobSpec(key="solo", dependencies=("numpy",))
        (instance,) = dispatch(
            [job],
            versions,
            caps,
            registry=registry,
            additional_packages=["pytest-rerunfailures"],
        )
        assert instance.to_matrix_entry()["additional-packages"] == [
            "numpy>=1.26",
            "pytest-rerunfailures",
        ]

    def test_packaged_catalog_full_mode(self):
        """Test the shipped catalog in full mode."""
        resolution = resolve(RunMode.FULL, "")
        instances = dispatch(load_jobs(), resolution.versions, resolution.caps)

        core = [i for i in instances if i.job_key == "core-tests"]
        gradients = [i for i in instances if i.job_key == "gradients-tests"]

        assert len(core) == 3 * 6
        assert {i.max_parallel for i in core} == {6}
        assert [i.markers for i in gradients] == ["finite-diff", "param-shift"]


@pytest.mark.unit
class TestNames:
    """Tests for the naming helpers."""

    def test_artifact_name_without_axis(self):
        """Test the artifact name for a job with no axis."""
        assert artifact_name("core-tests", "3.10") == "coverage-core-tests-py3.10"

    def test_artifact_name_with_mapping_axis(self):
        """Test that mapping values are joined with dashes."""
        name = artifact_name("device-tests", "3.10", {"device": "default.qubit", "shots": None})
        assert name == "coverage-device-tests-py3.10-default.qubit-None"

    def test_display_name(self):
        """Test the display name without an axis."""
        assert display_name("core-tests", "3.10") == "core-tests (3.10)"


@pytest.mark.unit
class TestGroupByJob:
    """Tests for group_by_job."""

    def test_groups_in_dispatch_order(self, tables, registry):
        """Test that instances group per job with the job cap."""
        versions, caps = tables
        instances = dispatch(
            [JobSpec(key="sharded", axis=Axis("group", (1, 2))), "solo"],
            versions,
            caps,
            registry=registry,
        )
        grouped = group_by_job(instances)

        assert list(grouped) == ["sharded", "solo"]
        assert grouped["sharded"]["max-parallel"] == 4
        assert len(grouped["sharded"]["include"]) == 4
        assert grouped["solo"]["include"][0]["python-version"] == "3.12"


@pytest.mark.unit
class TestDispatchChecks:
    """Tests for configuration errors raised while dispatching."""

    def test_duplicate_versions_rejected(self, registry):
        """Test that repeated versions cannot yield clashing artifact names."""
        versions = OverrideTable({"default": ("3.10", "3.10")})
        caps = OverrideTable({"default": 1})
        with pytest.raises(ConfigurationError, match="Duplicate python versions"):
            dispatch(["core-tests"], versions, caps, registry=registry)

    def test_unknown_placeholder_is_configuration_error(self, tables, registry):
        """Test that a bad template surfaces as ConfigurationError, not KeyError."""
        versions, caps = tables
        job = JobSpec(key="sharded", axis=Axis("group", (1,)), pytest_args="--shard {grp}")
        with pytest.raises(ConfigurationError, match="unknown field 'grp'"):
            dispatch([job], versions, caps, registry=registry)

    def test_placeholder_without_axis(self, tables, registry):
        """Test that placeholders in a job with no axis are rejected."""
        versions, caps = tables
        job = JobSpec(key="solo", markers="{group}")
        with pytest.raises(ConfigurationError, match="unknown field 'group'"):
            dispatch([job], versions, caps, registry=registry)


@pytest.mark.unit
class TestRunLevelArguments:
    """Tests for arguments applied to every instance."""

    def test_coverage_flags_and_additional_args(self, tables, registry):
        """Test that run-level pytest inputs reach every matrix entry."""
        versions, caps = tables
        job = JobSpec(key="sharded", axis=Axis("group", (1, 2)), pytest_args="--group {group}")
        instances = dispatch(
            [job, "solo"],
            versions,
            caps,
            registry=registry,
            coverage_flags="--cov=pkg --cov-report=xml",
            additional_pytest_args="-x",
        )
        entries = [i.to_matrix_entry() for i in instances]

        assert {e["pytest-coverage-flags"] for e in entries} == {"--cov=pkg --cov-report=xml"}
        assert entries[0]["pytest-args"] == "--group 1 -x"
        assert entries[-1]["pytest-args"] == "-x"

    def test_job_packages_before_run_packages(self, tables, registry):
        """Test that a job's own packages come after pins and before run extras."""
        versions, caps = tables
        job = JobSpec(key="solo", dependencies=("numpy",), packages=("h5py",))
        (instance,) = dispatch(
            [job],
            versions,
            caps,
            registry=registry,
            additional_packages=["pytest-split"],
        )
        assert instance.to_matrix_entry()["additional-packages"] == [
            "numpy>=1.26",
            "h5py",
            "pytest-split",
        ]

    def test_defaults_leave_args_unchanged(self, tables, registry):
        """Test that no run-level input means no extra arguments."""
        versions, caps = tables
        (instance,) = dispatch([JobSpec(key="solo")], versions, caps, registry=registry)
        entry = instance.to_matrix_entry()

        assert entry["pytest-args"] == ""
        assert entry["pytest-coverage-flags"] == ""
