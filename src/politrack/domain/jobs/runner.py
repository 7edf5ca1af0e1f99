"""Run a handler over a batch of records with resumable progress."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from politrack.domain.errors import (
    AmbiguousMatchError,
    ConflictingExternalIdError,
    ProviderError,
)

from .checkpoint import Checkpoint, CheckpointStatus, resume_index
from .summary import DEFAULT_ERROR_SAMPLE_SIZE, JobSummary

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .checkpoint import CheckpointStore

log = logging.getLogger(__name__)

DEFAULT_CHECKPOINT_INTERVAL = 100
DEFAULT_PROGRESS_INTERVAL = 50


class FailureOutcome(StrEnum):
    """Categories the runner assigns itself when a handler raises a recoverable error."""

    AMBIGUOUS = "ambiguous"
    CONFLICT = "conflict"
    PROVIDER_ERROR = "provider_error"


@dataclass(frozen=True, slots=True, kw_only=True)
class JobResult:
    checkpoint: Checkpoint
    summary: JobSummary

    @property
    def cancelled(self) -> bool:
        return self.summary.cancelled


def _never_stop() -> bool:
    return False


class CheckpointedJobRunner[T]:
    """Process items in order, persisting a ``Checkpoint`` every ``checkpoint_every`` records.

    The handler returns an outcome category that is counted in the summary.
    Recoverable per-record failures (provider errors, conflicting identifiers,
    ambiguous matches) are caught, counted and sampled; anything else propagates
    and leaves the last saved checkpoint untouched.
    """

    def __init__(
        self,
        *,
        job_name: str,
        store: CheckpointStore | None = None,
        checkpoint_every: int = DEFAULT_CHECKPOINT_INTERVAL,
        error_sample_size: int = DEFAULT_ERROR_SAMPLE_SIZE,
        progress_every: int = DEFAULT_PROGRESS_INTERVAL,
        should_stop: Callable[[], bool] | None = None,
    ) -> None:
        if checkpoint_every < 1:
            raise ValueError("checkpoint_every must be at least 1")
        self.job_name = job_name
        self._store = store
        self._checkpoint_every = checkpoint_every
        self._error_sample_size = error_sample_size
        self._progress_every = max(progress_every, 1)
        self._should_stop = should_stop or _never_stop

    def run(
        self,
        items: Sequence[T],
        *,
        key: Callable[[T], str],
        handle: Callable[[T], str],
        checkpoint: Checkpoint | None = None,
    ) -> JobResult:
        keys = [key(item) for item in items]
        start = resume_index(checkpoint, keys)
        if checkpoint is not None and checkpoint.status is CheckpointStatus.RUNNING:
            current = checkpoint
        else:
            current = Checkpoint.start(self.job_name)
        summary = JobSummary(job_name=self.job_name, error_sample_size=self._error_sample_size)

        log.info(
            "Starting %s: %d records, %d to process",
            self.job_name,
            len(items),
            len(items) - start,
        )
        self._save(current)

        unsaved = 0
        for index in range(start, len(items)):
            if self._should_stop():
                summary.cancelled = True
                log.warning("Stop requested; %s halts after %s", self.job_name, current.last_key)
                break

            item = items[index]
            outcome = self._handle_one(item, keys[index], handle, summary)
            summary.count(outcome)
            current = current.advance(keys[index])
            unsaved += 1

            if unsaved >= self._checkpoint_every:
                self._save(current)
                unsaved = 0
            done = index + 1
            if done % self._progress_every == 0:
                log.info("%s progress: %d/%d", self.job_name, done, len(items))

        if not summary.cancelled:
            current = current.complete()
        self._save(current)
        return JobResult(checkpoint=current, summary=summary)

    def _handle_one(
        self,
        item: T,
        item_key: str,
        handle: Callable[[T], str],
        summary: JobSummary,
    ) -> str:
        try:
            return handle(item)
        except ProviderError as exc:
            log.warning("Provider error on %s: %s", item_key, exc)
            summary.record_error(f"{item_key}: {exc}")
            return FailureOutcome.PROVIDER_ERROR
        except ConflictingExternalIdError as exc:
            log.warning("Data-quality finding on %s: %s", item_key, exc)
            summary.record_error(f"{item_key}: {exc}")
            return FailureOutcome.CONFLICT
        except AmbiguousMatchError as exc:
            log.info("Skipping %s: %s", item_key, exc)
            return FailureOutcome.AMBIGUOUS

    def _save(self, checkpoint: Checkpoint) -> None:
        if self._store is not None:
            self._store.save(checkpoint)
