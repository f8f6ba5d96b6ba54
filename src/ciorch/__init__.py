"""ciorch: CI matrix resolution, dispatch, artifact reconciliation and coverage gating."""

from ciorch.common.errors import (
    CiorchError,
    ConfigurationError,
    CoverageUploadError,
    GateTimeoutError,
    PullRequestApiError,
    ReconciliationError,
    VcsError,
)
from ciorch.config import Resolution, load_jobs, load_profiles, parse_skip_list, resolve
from ciorch.dispatch import dispatch, group_by_job
from ciorch.gate import AggregationGate, GateOutcome, parse_needs, should_aggregate
from ciorch.models import (
    JobInstance,
    JobResult,
    JobSpec,
    JobStatus,
    ReconcileRequest,
    ReconciliationOutcome,
    ReconciliationResult,
    ReconciliationState,
    RunMode,
)
from ciorch.reconcile import ArtifactReconciler
from ciorch.registry import DependencyRegistry, versions

__version__ = "1.0.0"

__all__ = [
    "AggregationGate",
    "ArtifactReconciler",
    "CiorchError",
    "ConfigurationError",
    "CoverageUploadError",
    "DependencyRegistry",
    "GateOutcome",
    "GateTimeoutError",
    "JobInstance",
    "JobResult",
    "JobSpec",
    "JobStatus",
    "PullRequestApiError",
    "ReconcileRequest",
    "ReconciliationError",
    "ReconciliationOutcome",
    "ReconciliationResult",
    "ReconciliationState",
    "Resolution",
    "RunMode",
    "VcsError",
    "__version__",
    "dispatch",
    "group_by_job",
    "load_jobs",
    "load_profiles",
    "parse_needs",
    "parse_skip_list",
    "resolve",
    "should_aggregate",
    "versions",
]
