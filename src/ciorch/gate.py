"""Fan-in gate that decides whether coverage is aggregated and uploaded."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ciorch.collaborators.artifacts import ArtifactStore
from ciorch.collaborators.coverage import CoverageUploader
from ciorch.common.errors import ConfigurationError, GateTimeoutError
from ciorch.models.jobs import JobResult, JobStatus
from ciorch_logging import get_logger

logger = get_logger(__name__)

DEFAULT_ARTIFACT_PATTERN = "coverage-*"
DEFAULT_TIMEOUT = 600
DEFAULT_POLL_INTERVAL = 10


def should_aggregate(results: Iterable[JobResult], upload_enabled: bool) -> bool:
    """Return whether coverage should be aggregated.

    True iff uploads are enabled and no upstream job failed or was cancelled.
    Skipped jobs count as passing.
    """
    if not upload_enabled:
        return False
    return not any(r.status.blocks_aggregation for r in results)


def parse_needs(payload: Mapping[str, Any]) -> list[JobResult]:
    """Convert a scheduler ``needs`` document into job results.

    Parameters
    ----------
    payload : Mapping[str, Any]
        ``{job_id: {"result": "success", ...}}``, as produced by ``toJSON(needs)``

    Raises
    ------
    ConfigurationError
        If the payload is malformed or reports an unknown result
    """
    if not isinstance(payload, Mapping):
        msg = "needs payload must be a mapping of job id to result"
        raise ConfigurationError(msg)

    results = []
    for job_id, entry in payload.items():
        raw = entry.get("result") if isinstance(entry, Mapping) else entry
        try:
            status = JobStatus(str(raw).lower())
        except ValueError as e:
            msg = f"Unknown result for {job_id}: {raw!r}"
            raise ConfigurationError(msg) from e
        results.append(JobResult(job_id=str(job_id), status=status))
    return results


@dataclass(frozen=True)
class GateOutcome:
    """What the gate decided and, if it aggregated, which reports it sent."""

    aggregated: bool
    reason: str
    files: tuple[Path, ...] = ()


class AggregationGate:
    """Single synchronisation point after the fan-out jobs.

    Parameters
    ----------
    store : ArtifactStore
        Source of the per-job coverage artifacts
    uploader : CoverageUploader
        Coverage backend
    """

    def __init__(self, store: ArtifactStore, uploader: CoverageUploader) -> None:
        self.store = store
        self.uploader = uploader

    def await_results(
        self,
        poll: Callable[[], list[JobResult]],
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> list[JobResult]:
        """Poll until every upstream job is terminal.

        Raises
        ------
        GateTimeoutError
            If some job is still pending after ``timeout`` seconds
        """
        start = clock()
        while True:
            results = poll()
            pending = [r.job_id for r in results if not r.status.is_terminal]
            if not pending:
                return results

            elapsed = clock() - start
            if elapsed >= timeout:
                msg = f"Timeout after {timeout}s waiting for: {', '.join(pending)}"
                raise GateTimeoutError(msg)

            logger.info(
                "Waiting for %d jobs to finish (%ds elapsed)",
                len(pending),
                int(elapsed),
            )
            sleep(poll_interval)

    def run(
        self,
        results: Iterable[JobResult],
        upload_enabled: bool,
        token: str,
        destination: Path,
        pattern: str = DEFAULT_ARTIFACT_PATTERN,
    ) -> GateOutcome:
        """Evaluate the gate once and aggregate if it opens.

        Raises
        ------
        CoverageUploadError
            If the gate opened and the upload failed
        """
        results = list(results)
        if not should_aggregate(results, upload_enabled):
            if not upload_enabled:
                reason = "coverage upload disabled"
            else:
                blocked = sorted(r.job_id for r in results if r.status.blocks_aggregation)
                reason = f"upstream jobs did not succeed: {', '.join(blocked)}"
            logger.info("Skipping coverage aggregation: %s", reason)
            return GateOutcome(aggregated=False, reason=reason)

        files = self.store.download(pattern, destination)
        self.uploader.upload(token, files)
        logger.info("Uploaded %d coverage reports", len(files))
        return GateOutcome(
            aggregated=True,
            reason=f"{len(results)} upstream jobs passed",
            files=tuple(files),
        )
