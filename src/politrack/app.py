"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING

from politrack.adapters.checkpoints import JsonCheckpointStore
from politrack.adapters.registries import (
    MANDATE_TYPE_BY_SOURCE,
    read_roster,
    to_candidate,
    to_seat,
)
from politrack.adapters.sqlalchemy.migrations import current_revision
from politrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    configured_engine,
    is_started,
    startup,
)
from politrack.adapters.wikidata import WikidataClient
from politrack.config import (
    WIKIDATA_MAX_IDS_PER_CALL,
    get_storage_config,
    get_sync_config,
    get_wikidata_config,
)
from politrack.domain.consistency import (
    close_stale_roster_mandates,
    dismiss_duplicate,
    find_duplicate_affairs,
    merge_duplicate_affairs,
    reconcile_stored_mandates,
    record_roster_seats,
)
from politrack.domain.jobs import CheckpointedJobRunner, format_summary, resume_checkpoint
from politrack.domain.linking import (
    REGISTRY_SOURCES,
    sync_external_links,
    sync_registry_ids_via_pivot,
    sync_wikidata_ids,
)
from politrack.domain.model import DuplicateConfidence
from politrack.domain.ports.unit_of_work import ReconciliationUnitOfWork

if TYPE_CHECKING:
    from pathlib import Path
    from uuid import UUID

    from politrack.config import SyncConfig
    from politrack.domain.consistency import AffairMergeReport, RosterImportReport
    from politrack.domain.jobs import CheckpointStore, JobResult
    from politrack.domain.model import DataSource, MandateType
    from politrack.domain.resolution import DuplicatePair, MandateReconciliation

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]
StopCondition = Callable[[], bool]

WIKIDATA_SEARCH_JOB = "wikidata-search"
WIKIDATA_PIVOT_JOB = "wikidata-pivot"

log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def _checkpoint_store(store: CheckpointStore | None) -> CheckpointStore:
    return store or JsonCheckpointStore(get_storage_config().checkpoint_dir())


def _runner[T](
    job_name: str,
    *,
    store: CheckpointStore,
    sync: SyncConfig,
    should_stop: StopCondition | None,
) -> CheckpointedJobRunner[T]:
    return CheckpointedJobRunner[T](
        job_name=job_name,
        store=store,
        checkpoint_every=sync.checkpoint_interval,
        error_sample_size=sync.error_sample_size,
        should_stop=should_stop,
    )


def _log_result(result: JobResult) -> None:
    log.info("%s", format_summary(result.summary))


def link_job_name(source: DataSource) -> str:
    return f"link-{source}"


def init_database(*, database_uri: str | None = None) -> str:
    """Create or migrate the record store and return its URL."""

    if not is_started():
        startup(database_uri=database_uri)
    engine = configured_engine()
    if engine is None:
        return ""
    log.info("Schema revision %s", current_revision(engine))
    return str(engine.url)


def link_registry_records(
    *,
    source: DataSource,
    input_path: Path,
    create_missing: bool = False,
    limit: int | None = None,
    resume: bool = False,
    dry_run: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    checkpoint_store: CheckpointStore | None = None,
    should_stop: StopCondition | None = None,
) -> JobResult:
    """Link the records of one provider roster file to stored politicians."""

    if source not in REGISTRY_SOURCES:
        raise ValueError(f"No roster format for {source}")
    sync = get_sync_config()
    uow_factory = _unit_of_work_factory(unit_of_work_factory)
    store = _checkpoint_store(checkpoint_store)
    job_name = link_job_name(source)

    candidates = [to_candidate(entry) for entry in read_roster(input_path, source=source)]
    if limit is not None:
        candidates = candidates[:limit]
    log.info(
        "Starting %s: input=%s, create_missing=%s, dry_run=%s",
        job_name,
        input_path,
        create_missing,
        dry_run,
    )

    result = sync_external_links(
        candidates=candidates,
        source=source,
        unit_of_work_factory=uow_factory,
        runner=_runner(job_name, store=store, sync=sync, should_stop=should_stop),
        checkpoint=resume_checkpoint(store, job_name, resume=resume),
        tolerance_days=sync.birth_date_tolerance_days,
        create_missing=create_missing,
        dry_run=dry_run,
    )
    _log_result(result)
    return result


def sync_wikidata(
    *,
    limit: int | None = None,
    resume: bool = False,
    dry_run: bool = False,
    client: WikidataClient | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    checkpoint_store: CheckpointStore | None = None,
    should_stop: StopCondition | None = None,
) -> list[JobResult]:
    """Search Wikidata ids by name, then copy registry ids through the found ids.

    The pivot pass is skipped when the search pass was cancelled.
    """

    sync = get_sync_config()
    uow_factory = _unit_of_work_factory(unit_of_work_factory)
    store = _checkpoint_store(checkpoint_store)
    if client is None:
        config = get_wikidata_config()
        effective_client = WikidataClient(config=config)
        batch_size = config.batch_size
    else:
        effective_client = client
        batch_size = WIKIDATA_MAX_IDS_PER_CALL

    search_result = sync_wikidata_ids(
        search=effective_client,
        unit_of_work_factory=uow_factory,
        runner=_runner(WIKIDATA_SEARCH_JOB, store=store, sync=sync, should_stop=should_stop),
        checkpoint=resume_checkpoint(store, WIKIDATA_SEARCH_JOB, resume=resume),
        limit=limit,
        tolerance_days=sync.birth_date_tolerance_days,
        dry_run=dry_run,
    )
    _log_result(search_result)
    if search_result.cancelled:
        return [search_result]

    pivot_result = sync_registry_ids_via_pivot(
        pivot=effective_client,
        unit_of_work_factory=uow_factory,
        runner=_runner(WIKIDATA_PIVOT_JOB, store=store, sync=sync, should_stop=should_stop),
        checkpoint=resume_checkpoint(store, WIKIDATA_PIVOT_JOB, resume=resume),
        batch_size=batch_size,
        dry_run=dry_run,
    )
    _log_result(pivot_result)
    return [search_result, pivot_result]


def reconcile_mandates(
    *,
    as_of: date | None = None,
    apply: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> MandateReconciliation:
    return reconcile_stored_mandates(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        as_of=as_of or date.today(),
        apply=apply,
    )


def source_for_mandate_type(mandate_type: MandateType) -> DataSource:
    for source, roster_type in MANDATE_TYPE_BY_SOURCE.items():
        if roster_type is mandate_type:
            return source
    supported = ", ".join(MANDATE_TYPE_BY_SOURCE.values())
    raise ValueError(f"No roster for {mandate_type}; supported types: {supported}")


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterSyncResult:
    imported: RosterImportReport
    stale: MandateReconciliation
    reconciled: MandateReconciliation


def sync_roster(
    *,
    mandate_type: MandateType,
    input_path: Path,
    term_start: date,
    as_of: date | None = None,
    apply: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RosterSyncResult:
    """Record a current roster, close seats missing from it and re-run the mandate rules."""

    source = source_for_mandate_type(mandate_type)
    sync = get_sync_config()
    uow_factory = _unit_of_work_factory(unit_of_work_factory)
    effective_as_of = as_of or date.today()

    entries = read_roster(input_path, source=source)
    seats = [to_seat(entry) for entry in entries]
    imported = record_roster_seats(
        seats=seats,
        unit_of_work_factory=uow_factory,
        window_days=sync.mandate_window_days,
        apply=apply,
    )
    stale = close_stale_roster_mandates(
        unit_of_work_factory=uow_factory,
        mandate_type=mandate_type,
        roster_ids={seat.external_id for seat in seats},
        term_start=term_start,
        as_of=effective_as_of,
        apply=apply,
    )
    reconciled = reconcile_stored_mandates(
        unit_of_work_factory=uow_factory,
        as_of=effective_as_of,
        apply=apply,
    )
    return RosterSyncResult(imported=imported, stale=stale, reconciled=reconciled)


def detect_affair_duplicates(
    *,
    min_confidence: DuplicateConfidence = DuplicateConfidence.POSSIBLE,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[DuplicatePair]:
    sync = get_sync_config()
    pairs = find_duplicate_affairs(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        min_confidence=min_confidence,
        date_tolerance_days=sync.duplicate_date_tolerance_days,
        floor=sync.duplicate_score_floor,
    )
    for pair in pairs:
        log.info(
            "%s %.2f via %s: %s (%s) / %s (%s)",
            pair.confidence,
            pair.score,
            pair.matched_by,
            pair.first.title,
            pair.first.id,
            pair.second.title,
            pair.second.id,
        )
    return pairs


def merge_affair_duplicates(
    *,
    min_confidence: DuplicateConfidence = DuplicateConfidence.CERTAIN,
    apply: bool = False,
    created_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> AffairMergeReport:
    sync = get_sync_config()
    return merge_duplicate_affairs(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        min_confidence=min_confidence,
        date_tolerance_days=sync.duplicate_date_tolerance_days,
        floor=sync.duplicate_score_floor,
        dry_run=not apply,
        created_by=created_by,
    )


def dismiss_affair_duplicate(
    first_id: UUID,
    second_id: UUID,
    *,
    created_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    return dismiss_duplicate(
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
        first_id=first_id,
        second_id=second_id,
        created_by=created_by,
    )

