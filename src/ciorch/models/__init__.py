"""Data models for ciorch."""

from .jobs import (
    DEFAULT_KEY,
    Axis,
    DependencyPin,
    JobInstance,
    JobResult,
    JobSpec,
    JobStatus,
    RunMode,
    axis_label,
    is_valid_job_key,
    template_fields,
)
from .reconciliation import (
    PullRequest,
    PullRequestState,
    ReconcileRequest,
    ReconciliationOutcome,
    ReconciliationResult,
    ReconciliationState,
)

__all__ = [
    "DEFAULT_KEY",
    "Axis",
    "DependencyPin",
    "JobInstance",
    "JobResult",
    "JobSpec",
    "JobStatus",
    "PullRequest",
    "PullRequestState",
    "ReconcileRequest",
    "ReconciliationOutcome",
    "ReconciliationResult",
    "ReconciliationState",
    "RunMode",
    "axis_label",
    "is_valid_job_key",
    "template_fields",
]
