from __future__ import annotations

from uuid import uuid4

import pytest

from politrack.domain.errors import (
    AmbiguousMatchError,
    ConflictingExternalIdError,
    ProviderError,
)
from politrack.domain.jobs import (
    Checkpoint,
    CheckpointedJobRunner,
    CheckpointStatus,
    FailureOutcome,
    format_summary,
    resume_checkpoint,
)
from tests.support.reconciliation import MemoryCheckpointStore

ITEMS = [f"item-{number}" for number in range(1, 8)]


def _identity(item: str) -> str:
    return item


def test_runner_counts_outcomes_and_completes() -> None:
    store = MemoryCheckpointStore()
    runner = CheckpointedJobRunner[str](job_name="job", store=store, checkpoint_every=3)

    result = runner.run(ITEMS, key=_identity, handle=lambda _item: "linked")

    assert result.summary["linked"] == 7
    assert result.summary.total == 7
    assert result.checkpoint.status is CheckpointStatus.COMPLETED
    assert result.checkpoint.last_key == "item-7"
    assert store.saved["job"] == result.checkpoint
    # start, after 3, after 6, final
    assert [checkpoint.processed_count for checkpoint in store.history] == [0, 3, 6, 7]


def test_stop_request_keeps_the_last_completed_record() -> None:
    store = MemoryCheckpointStore()
    processed: list[str] = []

    def handle(item: str) -> str:
        processed.append(item)
        return "linked"

    runner = CheckpointedJobRunner[str](
        job_name="job",
        store=store,
        should_stop=lambda: len(processed) >= 3,
    )
    result = runner.run(ITEMS, key=_identity, handle=handle)

    assert result.cancelled
    assert result.checkpoint.status is CheckpointStatus.RUNNING
    assert result.checkpoint.last_key == "item-3"
    assert result.checkpoint.processed_count == 3


def test_resume_continues_after_the_checkpoint() -> None:
    store = MemoryCheckpointStore()
    store.save(Checkpoint(job_name="job", last_key="item-4", processed_count=4))
    seen: list[str] = []

    def handle(item: str) -> str:
        seen.append(item)
        return "linked"

    checkpoint = resume_checkpoint(store, "job", resume=True)
    result = CheckpointedJobRunner[str](job_name="job", store=store).run(
        ITEMS, key=_identity, handle=handle, checkpoint=checkpoint
    )

    assert seen == ["item-5", "item-6", "item-7"]
    assert result.checkpoint.processed_count == 7
    assert result.checkpoint.status is CheckpointStatus.COMPLETED


def test_completed_checkpoint_restarts_from_zero() -> None:
    store = MemoryCheckpointStore()
    store.save(Checkpoint(job_name="job", last_key="item-7", processed_count=7).complete())

    assert resume_checkpoint(store, "job", resume=True) is None
    assert resume_checkpoint(store, "job", resume=False) is None


def test_resume_falls_back_to_processed_count_for_an_unknown_key() -> None:
    seen: list[str] = []
    checkpoint = Checkpoint(job_name="job", last_key="gone", processed_count=5)

    CheckpointedJobRunner[str](job_name="job").run(
        ITEMS, key=_identity, handle=lambda item: seen.append(item) or "ok", checkpoint=checkpoint
    )

    assert seen == ["item-6", "item-7"]


def test_recoverable_errors_are_counted_and_sampled() -> None:
    owner = uuid4()

    def handle(item: str) -> str:
        if item == "item-1":
            raise ProviderError("wikidata", "timeout")
        if item == "item-2":
            raise ConflictingExternalIdError(
                source="senat",
                external_id="19000A",
                existing_owner_id=owner,
                requested_owner_id=uuid4(),
            )
        if item == "item-3":
            raise AmbiguousMatchError("Jean Dupont", [uuid4(), uuid4()])
        return "linked"

    runner = CheckpointedJobRunner[str](job_name="job", error_sample_size=1)
    result = runner.run(ITEMS, key=_identity, handle=handle)

    summary = result.summary
    assert summary[FailureOutcome.PROVIDER_ERROR] == 1
    assert summary[FailureOutcome.CONFLICT] == 1
    assert summary[FailureOutcome.AMBIGUOUS] == 1
    assert summary["linked"] == 4
    assert summary.error_count == 2
    assert summary.errors == ["item-1: wikidata: timeout"]
    rendered = format_summary(summary)
    assert "job: 7 records" in rendered
    assert "... and 1 more" in rendered


def test_fatal_errors_propagate_without_advancing_the_checkpoint() -> None:
    store = MemoryCheckpointStore()

    def handle(item: str) -> str:
        if item == "item-2":
            raise RuntimeError("store gone")
        return "linked"

    runner = CheckpointedJobRunner[str](job_name="job", store=store, checkpoint_every=100)
    with pytest.raises(RuntimeError, match="store gone"):
        runner.run(ITEMS, key=_identity, handle=handle)

    assert store.saved["job"].processed_count == 0


def test_checkpoint_interval_must_be_positive() -> None:
    with pytest.raises(ValueError, match="checkpoint_every"):
        CheckpointedJobRunner[str](job_name="job", checkpoint_every=0)
