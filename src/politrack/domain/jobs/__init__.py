"""Resumable batch execution."""

from __future__ import annotations

from .checkpoint import (
    Checkpoint,
    CheckpointStatus,
    CheckpointStore,
    resume_checkpoint,
    resume_index,
)
from .runner import CheckpointedJobRunner, FailureOutcome, JobResult
from .summary import JobSummary, format_summary

__all__ = [
    "Checkpoint",
    "CheckpointStatus",
    "CheckpointStore",
    "CheckpointedJobRunner",
    "FailureOutcome",
    "JobResult",
    "JobSummary",
    "format_summary",
    "resume_checkpoint",
    "resume_index",
]
