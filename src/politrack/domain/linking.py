"""Application services that attach external identifiers to politicians."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from politrack.domain.errors import ConflictingExternalIdError
from politrack.domain.model import DataSource, EntityType, Politician
from politrack.domain.resolution import (
    ConfirmedMatch,
    NameIndex,
    NoMatch,
    confidence_for,
    match_candidate,
)
from politrack.domain.resolution.matching import DEFAULT_TOLERANCE_DAYS

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence, Set
    from uuid import UUID

    from politrack.domain.jobs import Checkpoint, CheckpointedJobRunner, JobResult
    from politrack.domain.model import CandidateRecord
    from politrack.domain.ports import (
        PersonSearch,
        ReconciliationUnitOfWork,
        RegistryPivot,
    )
    from politrack.domain.resolution import LinkConfidence

log = logging.getLogger(__name__)

REGISTRY_SOURCES: tuple[DataSource, ...] = (
    DataSource.ASSEMBLEE_NATIONALE,
    DataSource.SENAT,
    DataSource.PARLEMENT_EUROPEEN,
)


class LinkOutcome(StrEnum):
    LINKED = "linked"
    CREATED = "created"
    ALREADY_LINKED = "already_linked"
    NO_MATCH = "no_match"
    AMBIGUOUS = "ambiguous"
    NO_IDENTIFIER = "no_identifier"
    ID_MISMATCH = "id_mismatch"
    WOULD_LINK = "would_link"
    WOULD_CREATE = "would_create"


def attach_link(
    uow: ReconciliationUnitOfWork,
    politician: Politician,
    *,
    source: DataSource,
    external_id: str,
    confidence: LinkConfidence,
    dry_run: bool = False,
) -> LinkOutcome:
    """Attach ``(source, external_id)`` to ``politician`` unless it is already claimed.

    Re-issuing the same link is a no-op. An identifier owned by another politician
    raises ``ConflictingExternalIdError`` and nothing is written.
    """

    owner = uow.repositories.external_links.find_owner(
        source, external_id, EntityType.POLITICIAN
    )
    if owner is not None:
        if owner == politician.id:
            return LinkOutcome.ALREADY_LINKED
        raise ConflictingExternalIdError(
            source=source,
            external_id=external_id,
            existing_owner_id=owner,
            requested_owner_id=politician.id,
        )

    existing = politician.link_for(source)
    if existing is not None:
        if existing.external_id == external_id:
            return LinkOutcome.ALREADY_LINKED
        log.warning(
            "%s (%s) already carries %s id %r; candidate id %r not applied",
            politician.full_name,
            politician.id,
            source,
            existing.external_id,
            external_id,
        )
        return LinkOutcome.ID_MISMATCH

    if dry_run:
        log.info("Would link %s to %s %s", politician.full_name, source, external_id)
        return LinkOutcome.WOULD_LINK

    politician.add_external_link(
        source,
        external_id,
        confidence=confidence.confidence,
        matched_by=confidence.matched_by,
    )
    uow.commit()
    log.debug("Linked %s to %s %s", politician.full_name, source, external_id)
    return LinkOutcome.LINKED


def _create_politician(
    uow: ReconciliationUnitOfWork,
    candidate: CandidateRecord,
    external_id: str,
    *,
    dry_run: bool,
) -> LinkOutcome:
    if dry_run:
        log.info("Would create %s from %s %s", candidate.name, candidate.source, external_id)
        return LinkOutcome.WOULD_CREATE
    confidence = confidence_for(candidate.source)
    politician = Politician(
        full_name=candidate.name,
        first_name=candidate.first_name,
        last_name=candidate.last_name,
        birth_date=candidate.birth_date,
        death_date=candidate.death_date,
    )
    politician.add_external_link(
        candidate.source,
        external_id,
        confidence=confidence.confidence,
        matched_by=confidence.matched_by,
    )
    uow.repositories.politicians.add(politician)
    uow.commit()
    log.info("Created %s from %s %s", candidate.name, candidate.source, external_id)
    return LinkOutcome.CREATED


def link_candidate(
    candidate: CandidateRecord,
    *,
    uow: ReconciliationUnitOfWork,
    index: NameIndex[Politician],
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
    create_missing: bool = False,
    dry_run: bool = False,
) -> LinkOutcome:
    """Resolve one candidate and persist the resulting link."""

    external_id = candidate.external_id
    if not external_id:
        return LinkOutcome.NO_IDENTIFIER

    owner = uow.repositories.external_links.find_owner(
        candidate.source, external_id, EntityType.POLITICIAN
    )
    if owner is not None:
        return LinkOutcome.ALREADY_LINKED

    outcome = match_candidate(candidate, index, tolerance_days=tolerance_days)
    match outcome:
        case NoMatch():
            if create_missing:
                return _create_politician(uow, candidate, external_id, dry_run=dry_run)
            return LinkOutcome.NO_MATCH
        case ConfirmedMatch(entity=entity):
            politician = uow.repositories.politicians.get(entity.id)
            if politician is None:
                log.warning("Matched politician %s vanished before linking", entity.id)
                return LinkOutcome.NO_MATCH
            result = attach_link(
                uow,
                politician,
                source=candidate.source,
                external_id=external_id,
                confidence=confidence_for(candidate.source),
                dry_run=dry_run,
            )
            if result in {LinkOutcome.LINKED, LinkOutcome.WOULD_LINK}:
                # one link per (source, politician): later candidates must not claim it
                index.discard(entity)
            return result
        case _:
            log.info(
                "Skipping %s (%s %s): %s",
                candidate.name,
                candidate.source,
                external_id,
                outcome.reason,
            )
            return LinkOutcome.AMBIGUOUS


def sync_external_links(
    *,
    candidates: Sequence[CandidateRecord],
    source: DataSource,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    runner: CheckpointedJobRunner[CandidateRecord],
    checkpoint: Checkpoint | None = None,
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
    create_missing: bool = False,
    dry_run: bool = False,
) -> JobResult:
    """Match a batch of provider records against politicians lacking a ``source`` link."""

    foreign = {candidate.source for candidate in candidates if candidate.source != source}
    if foreign:
        raise ValueError(
            f"Batch for {source} contains records from {', '.join(sorted(foreign))}"
        )

    with unit_of_work_factory() as uow:
        pool = uow.repositories.politicians.without_link(source)
    index = NameIndex.build(pool)
    log.info("Matching %d %s records against %d politicians", len(candidates), source, len(pool))

    def handle(candidate: CandidateRecord) -> str:
        with unit_of_work_factory() as uow:
            return link_candidate(
                candidate,
                uow=uow,
                index=index,
                tolerance_days=tolerance_days,
                create_missing=create_missing,
                dry_run=dry_run,
            )

    return runner.run(
        candidates,
        key=lambda candidate: candidate.key,
        handle=handle,
        checkpoint=checkpoint,
    )


def sync_wikidata_ids(
    *,
    search: PersonSearch,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    runner: CheckpointedJobRunner[Politician],
    checkpoint: Checkpoint | None = None,
    limit: int | None = None,
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
    dry_run: bool = False,
) -> JobResult:
    """Search the knowledge graph for every politician without a Wikidata id.

    A hit is accepted only when the matcher, run against every unlinked
    politician, resolves it to the politician being searched and no other hit
    does the same with a different id.

    The work list holds every politician in name order so that a resumed run
    sees the same keys as the interrupted one; politicians linked in the
    meantime are counted as already linked. ``limit`` caps the number of
    unlinked politicians searched.
    """

    with unit_of_work_factory() as uow:
        everyone = uow.repositories.politicians.list_all()
        linked = {
            politician.id
            for politician in everyone
            if politician.link_for(DataSource.WIKIDATA) is not None
        }
    pool = [politician for politician in everyone if politician.id not in linked]
    index = NameIndex.build(pool)
    targets = _up_to_unlinked(everyone, linked, limit)
    confidence = confidence_for(DataSource.WIKIDATA)

    def handle(target: Politician) -> str:
        if target.id in linked:
            return LinkOutcome.ALREADY_LINKED
        hits = search.search_people(target.full_name)
        accepted: set[str] = set()
        for hit in hits:
            if not hit.external_id:
                continue
            outcome = match_candidate(hit, index, tolerance_days=tolerance_days)
            if isinstance(outcome, ConfirmedMatch) and outcome.entity.id == target.id:
                accepted.add(hit.external_id)
        if not accepted:
            return LinkOutcome.NO_MATCH
        if len(accepted) > 1:
            log.info(
                "Skipping %s: %d knowledge-graph entries fit (%s)",
                target.full_name,
                len(accepted),
                ", ".join(sorted(accepted)),
            )
            return LinkOutcome.AMBIGUOUS
        (qid,) = accepted
        with unit_of_work_factory() as uow:
            politician = uow.repositories.politicians.get(target.id)
            if politician is None:
                return LinkOutcome.NO_MATCH
            return attach_link(
                uow,
                politician,
                source=DataSource.WIKIDATA,
                external_id=qid,
                confidence=confidence,
                dry_run=dry_run,
            )

    return runner.run(
        targets,
        key=lambda politician: str(politician.id),
        handle=handle,
        checkpoint=checkpoint,
    )


def _up_to_unlinked(
    politicians: Sequence[Politician], linked: Set[UUID], limit: int | None
) -> list[Politician]:
    """Shortest prefix of ``politicians`` holding ``limit`` politicians still to search."""

    if limit is None:
        return list(politicians)
    prefix: list[Politician] = []
    remaining = limit
    for politician in politicians:
        if remaining <= 0:
            break
        prefix.append(politician)
        if politician.id not in linked:
            remaining -= 1
    return prefix


class _PivotWindow:
    """Fetches registry ids for a window of upcoming entity ids in one provider call."""

    def __init__(self, pivot: RegistryPivot, entity_ids: Sequence[str], *, window: int) -> None:
        self._pivot = pivot
        self._entity_ids = list(entity_ids)
        self._window = max(window, 1)
        self._position = {entity_id: index for index, entity_id in enumerate(self._entity_ids)}
        self._cache: dict[str, Mapping[DataSource, str]] = {}

    def lookup(self, entity_id: str) -> Mapping[DataSource, str]:
        if entity_id not in self._cache:
            start = self._position[entity_id]
            chunk = [
                pending
                for pending in self._entity_ids[start : start + self._window]
                if pending not in self._cache
            ]
            fetched = self._pivot.registry_ids(chunk)
            for pending in chunk:
                self._cache[pending] = fetched.get(pending, {})
        return self._cache[entity_id]


def sync_registry_ids_via_pivot(
    *,
    pivot: RegistryPivot,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    runner: CheckpointedJobRunner[tuple[UUID, str]],
    checkpoint: Checkpoint | None = None,
    batch_size: int = 50,
    dry_run: bool = False,
) -> JobResult:
    """Copy registry identifiers recorded by the knowledge graph onto linked politicians."""

    with unit_of_work_factory() as uow:
        linked: list[tuple[UUID, str]] = []
        for politician in uow.repositories.politicians.with_link(DataSource.WIKIDATA):
            link = politician.link_for(DataSource.WIKIDATA)
            if link is not None:
                linked.append((politician.id, link.external_id))

    window = _PivotWindow(pivot, [qid for _, qid in linked], window=batch_size)
    confidence = confidence_for(DataSource.WIKIDATA)

    def handle(item: tuple[UUID, str]) -> str:
        politician_id, qid = item
        registry_ids = window.lookup(qid)
        if not registry_ids:
            return LinkOutcome.NO_IDENTIFIER
        outcomes: list[LinkOutcome] = []
        conflicts: list[ConflictingExternalIdError] = []
        with unit_of_work_factory() as uow:
            politician = uow.repositories.politicians.get(politician_id)
            if politician is None:
                return LinkOutcome.NO_MATCH
            for source in REGISTRY_SOURCES:
                registry_id = registry_ids.get(source)
                if registry_id is None:
                    continue
                try:
                    outcomes.append(
                        attach_link(
                            uow,
                            politician,
                            source=source,
                            external_id=registry_id,
                            confidence=confidence,
                            dry_run=dry_run,
                        )
                    )
                except ConflictingExternalIdError as exc:
                    conflicts.append(exc)
        if conflicts:
            raise conflicts[0]
        for preferred in (LinkOutcome.LINKED, LinkOutcome.WOULD_LINK, LinkOutcome.ID_MISMATCH):
            if preferred in outcomes:
                return preferred
        return LinkOutcome.ALREADY_LINKED

    return runner.run(
        linked,
        key=lambda item: str(item[0]),
        handle=handle,
        checkpoint=checkpoint,
    )
