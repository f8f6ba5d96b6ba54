"""Tests for ciorch.gate."""

from pathlib import Path

import pytest

from ciorch.collaborators import LocalArtifactStore
from ciorch.common.errors import ConfigurationError, CoverageUploadError, GateTimeoutError
from ciorch.gate import AggregationGate, parse_needs, should_aggregate
from ciorch.models import JobResult, JobStatus
from tests._helpers.fakes import FakeCoverageUploader


def _results(*statuses: JobStatus) -> list[JobResult]:
    return [JobResult(f"job-{i}", status) for i, status in enumerate(statuses)]


@pytest.fixture
def store(tmp_path: Path) -> LocalArtifactStore:
    """Artifact store holding two coverage artifacts and one unrelated one."""
    root = tmp_path / "store"
    for name in ("coverage-core-tests-py3.10-1", "coverage-core-tests-py3.10-2", "docs"):
        (root / name).mkdir(parents=True)
        (root / name / "coverage.xml").write_text(f"<coverage name='{name}'/>")
    return LocalArtifactStore(root)


@pytest.mark.unit
class TestShouldAggregate:
    """Tests for the gate predicate."""

    def test_all_success(self):
        """Test that all successes aggregate."""
        assert should_aggregate(_results(JobStatus.SUCCESS, JobStatus.SUCCESS), True)

    def test_skipped_counts_as_pass(self):
        """Test that skipped jobs do not block aggregation."""
        assert should_aggregate(_results(JobStatus.SUCCESS, JobStatus.SKIPPED), True)

    @pytest.mark.parametrize("blocking", [JobStatus.FAILURE, JobStatus.CANCELLED])
    def test_single_blocking_result(self, blocking):
        """Test that one failed or cancelled job blocks aggregation."""
        results = _results(JobStatus.SUCCESS, blocking, JobStatus.SKIPPED)
        assert not should_aggregate(results, True)

    def test_upload_disabled(self):
        """Test that disabled uploads never aggregate."""
        assert not should_aggregate(_results(JobStatus.SUCCESS), False)

    def test_no_upstream_jobs(self):
        """Test that an empty result set aggregates."""
        assert should_aggregate([], True)


@pytest.mark.unit
class TestParseNeeds:
    """Tests for parse_needs."""

    def test_needs_document(self):
        """Test parsing the scheduler's needs JSON."""
        payload = {
            "core-tests": {"result": "success", "outputs": {}},
            "qcut-tests": {"result": "skipped", "outputs": {}},
            "tf-tests": {"result": "cancelled"},
        }

        assert parse_needs(payload) == [
            JobResult("core-tests", JobStatus.SUCCESS),
            JobResult("qcut-tests", JobStatus.SKIPPED),
            JobResult("tf-tests", JobStatus.CANCELLED),
        ]

    def test_plain_strings(self):
        """Test that plain result strings are accepted."""
        assert parse_needs({"a": "FAILURE"}) == [JobResult("a", JobStatus.FAILURE)]

    def test_unknown_result(self):
        """Test that unknown results are configuration errors."""
        with pytest.raises(ConfigurationError, match="Unknown result"):
            parse_needs({"a": {"result": "exploded"}})

    def test_not_a_mapping(self):
        """Test that a non-mapping payload is rejected."""
        with pytest.raises(ConfigurationError):
            parse_needs(["success"])


@pytest.mark.unit
class TestAggregationGate:
    """Tests for AggregationGate."""

    def test_aggregates_matching_artifacts(self, store, tmp_path):
        """Test that matching reports are downloaded and uploaded."""
        uploader = FakeCoverageUploader()
        gate = AggregationGate(store, uploader)

        outcome = gate.run(
            _results(JobStatus.SUCCESS, JobStatus.SKIPPED),
            upload_enabled=True,
            token="t",
            destination=tmp_path / "reports",
        )

        assert outcome.aggregated
        assert len(outcome.files) == 2
        assert all(f.is_file() for f in outcome.files)
        assert uploader.uploads == [("t", outcome.files)]

    def test_blocked_gate_does_nothing(self, store, tmp_path):
        """Test that a failed upstream job skips aggregation without error."""
        uploader = FakeCoverageUploader()
        gate = AggregationGate(store, uploader)

        outcome = gate.run(
            [JobResult("core", JobStatus.FAILURE)],
            upload_enabled=True,
            token="t",
            destination=tmp_path / "reports",
        )

        assert not outcome.aggregated
        assert "core" in outcome.reason
        assert uploader.uploads == []
        assert not (tmp_path / "reports").exists()

    def test_disabled_upload_reason(self, store, tmp_path):
        """Test the reason given when uploads are disabled."""
        gate = AggregationGate(store, FakeCoverageUploader())
        outcome = gate.run([], upload_enabled=False, token="", destination=tmp_path)
        assert outcome.reason == "coverage upload disabled"

    def test_upload_failure_is_fatal(self, store, tmp_path):
        """Test that an upload failure propagates."""
        gate = AggregationGate(store, FakeCoverageUploader(fail=True))

        with pytest.raises(CoverageUploadError):
            gate.run(
                _results(JobStatus.SUCCESS),
                upload_enabled=True,
                token="t",
                destination=tmp_path / "reports",
            )

    def test_await_results_polls_until_terminal(self, store):
        """Test that pending results are polled again after sleeping."""
        responses = [
            _results(JobStatus.SUCCESS, JobStatus.PENDING),
            _results(JobStatus.SUCCESS, JobStatus.SUCCESS),
        ]
        sleeps = []
        gate = AggregationGate(store, FakeCoverageUploader())

        results = gate.await_results(
            lambda: responses.pop(0),
            timeout=60,
            poll_interval=5,
            sleep=sleeps.append,
            clock=lambda: 0.0,
        )

        assert [r.status for r in results] == [JobStatus.SUCCESS, JobStatus.SUCCESS]
        assert sleeps == [5]

    def test_await_results_timeout(self, store):
        """Test that pending jobs past the timeout raise."""
        ticks = iter([0.0, 30.0, 61.0])
        gate = AggregationGate(store, FakeCoverageUploader())

        with pytest.raises(GateTimeoutError, match="job-0"):
            gate.await_results(
                lambda: _results(JobStatus.PENDING),
                timeout=60,
                poll_interval=1,
                sleep=lambda _: None,
                clock=lambda: next(ticks),
            )
