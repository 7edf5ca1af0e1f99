"""Job progress as an explicit value.

A ``Checkpoint`` is immutable: the runner returns a new one after every record,
and resuming is a pure function of the stored value plus the original item list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


class CheckpointStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True, kw_only=True)
class Checkpoint:
    job_name: str
    last_key: str | None = None
    processed_count: int = 0
    status: CheckpointStatus = CheckpointStatus.RUNNING

    @classmethod
    def start(cls, job_name: str) -> Checkpoint:
        return cls(job_name=job_name)

    def advance(self, key: str) -> Checkpoint:
        return replace(self, last_key=key, processed_count=self.processed_count + 1)

    def complete(self) -> Checkpoint:
        return replace(self, status=CheckpointStatus.COMPLETED)

    @property
    def is_resumable(self) -> bool:
        return self.status is CheckpointStatus.RUNNING and self.processed_count > 0


class CheckpointStore(Protocol):
    def load(self, job_name: str) -> Checkpoint | None: ...

    def save(self, checkpoint: Checkpoint) -> None: ...


def resume_checkpoint(store: CheckpointStore, job_name: str, *, resume: bool) -> Checkpoint | None:
    """Return the checkpoint to continue from, or None for a fresh start."""

    if not resume:
        return None
    stored = store.load(job_name)
    if stored is None:
        log.info("No checkpoint for %s; starting from the beginning", job_name)
        return None
    if stored.status is CheckpointStatus.COMPLETED:
        log.info("Previous %s run completed; starting over", job_name)
        return None
    log.info(
        "Resuming %s after %s (%d records already processed)",
        job_name,
        stored.last_key,
        stored.processed_count,
    )
    return stored


def resume_index(checkpoint: Checkpoint | None, keys: Sequence[str]) -> int:
    """Index of the first item still to process."""

    if checkpoint is None or not checkpoint.is_resumable:
        return 0
    if checkpoint.last_key is not None:
        try:
            return keys.index(checkpoint.last_key) + 1
        except ValueError:
            log.warning(
                "Checkpoint key %r for %s not found in the current batch; "
                "falling back to the processed count",
                checkpoint.last_key,
                checkpoint.job_name,
            )
    return min(checkpoint.processed_count, len(keys))
