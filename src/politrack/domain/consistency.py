"""Consistency passes over stored mandates and affairs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from politrack.domain.model import (
    DismissedDuplicate,
    DuplicateConfidence,
    EntityMerge,
    EntityType,
    MergeReason,
    pair_key,
)
from politrack.domain.resolution import (
    MergePlan,
    apply_closures,
    apply_merge,
    close_absent_from_roster,
    detect_duplicate_affairs,
    plan_merge,
    reconcile_mandates,
)
from politrack.domain.resolution.duplicates import (
    DEFAULT_DATE_TOLERANCE_DAYS,
    DEFAULT_SCORE_FLOOR,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Sequence
    from datetime import date
    from uuid import UUID

    from politrack.domain.model import Mandate, MandateType, RosterSeat
    from politrack.domain.ports import ReconciliationUnitOfWork
    from politrack.domain.resolution import DuplicatePair, MandateReconciliation

log = logging.getLogger(__name__)

DEFAULT_MANDATE_WINDOW_DAYS = 30


def reconcile_stored_mandates(
    *,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    as_of: date,
    apply: bool = False,
) -> MandateReconciliation:
    """Run the temporal reconciler over every stored mandate.

    Without ``apply`` the decisions are returned and logged but nothing is written.
    """

    with unit_of_work_factory() as uow:
        mandates = uow.repositories.mandates.list_all()
        reconciliation = reconcile_mandates(mandates, as_of=as_of)
        log.info(
            "Mandate reconciliation over %d mandates: %s",
            len(mandates),
            reconciliation.counts(),
        )
        if apply:
            apply_closures(reconciliation)
            uow.commit()
        else:
            for closure in reconciliation.closures:
                log.info(
                    "Would close mandate %s (%s) on %s: %s",
                    closure.mandate.id,
                    closure.mandate.mandate_type,
                    closure.end_date,
                    closure.reason,
                )
    return reconciliation


def close_stale_roster_mandates(
    *,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    mandate_type: MandateType,
    roster_ids: Collection[str],
    term_start: date,
    as_of: date,
    apply: bool = False,
) -> MandateReconciliation:
    if not roster_ids:
        # an empty roster would close every seat; treat it as a broken input
        raise ValueError(f"Refusing to close {mandate_type} mandates against an empty roster")

    with unit_of_work_factory() as uow:
        open_mandates = uow.repositories.mandates.list_open(mandate_type)
        reconciliation = close_absent_from_roster(
            open_mandates,
            mandate_type=mandate_type,
            roster_ids=roster_ids,
            term_start=term_start,
            as_of=as_of,
        )
        log.info(
            "%d open %s mandates checked against a roster of %d: %s",
            len(open_mandates),
            mandate_type,
            len(roster_ids),
            reconciliation.counts(),
        )
        if apply:
            apply_closures(reconciliation)
            uow.commit()
    return reconciliation


def record_mandate(
    uow: ReconciliationUnitOfWork,
    mandate: Mandate,
    *,
    window_days: int = DEFAULT_MANDATE_WINDOW_DAYS,
) -> tuple[Mandate, bool]:
    """Store ``mandate`` unless the politician already holds the same office starting nearby.

    Returns the stored mandate and whether it was newly added. The caller commits.
    """

    existing = uow.repositories.mandates.find_near(
        politician_id=mandate.politician_id,
        mandate_type=mandate.mandate_type,
        start_date=mandate.start_date,
        window=timedelta(days=window_days),
    )
    if existing is None:
        uow.repositories.mandates.add(mandate)
        return mandate, True

    if existing.external_id is None and mandate.external_id is not None:
        existing.external_id = mandate.external_id
        existing.source = mandate.source
    if existing.constituency is None and mandate.constituency is not None:
        existing.constituency = mandate.constituency
    if existing.department_code is None and mandate.department_code is not None:
        existing.department_code = mandate.department_code
    return existing, False


@dataclass(slots=True)
class RosterImportReport:
    recorded: int = 0
    already_known: int = 0
    unlinked: int = 0


def record_roster_seats(
    *,
    seats: Sequence[RosterSeat],
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    window_days: int = DEFAULT_MANDATE_WINDOW_DAYS,
    apply: bool = False,
) -> RosterImportReport:
    """Record one mandate per roster seat whose holder is already linked to the registry."""

    report = RosterImportReport()
    window = timedelta(days=window_days)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        for seat in seats:
            politician = repositories.politicians.get_by_external_id(
                seat.source, seat.external_id
            )
            if politician is None:
                report.unlinked += 1
                continue
            if not apply:
                known = repositories.mandates.find_near(
                    politician_id=politician.id,
                    mandate_type=seat.mandate_type,
                    start_date=seat.start_date,
                    window=window,
                )
                if known is None:
                    report.recorded += 1
                else:
                    report.already_known += 1
                continue
            _, created = record_mandate(
                uow, seat.to_mandate(politician.id), window_days=window_days
            )
            if created:
                report.recorded += 1
            else:
                report.already_known += 1
        if apply:
            uow.commit()
    log.info(
        "Roster of %d seats: %d %s, %d already known, %d holders not linked yet",
        len(seats),
        report.recorded,
        "recorded" if apply else "to record",
        report.already_known,
        report.unlinked,
    )
    return report


def find_duplicate_affairs(
    *,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    min_confidence: DuplicateConfidence = DuplicateConfidence.POSSIBLE,
    date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
    floor: float = DEFAULT_SCORE_FLOOR,
) -> list[DuplicatePair]:
    with unit_of_work_factory() as uow:
        affairs = uow.repositories.affairs.list_all()
        dismissed = uow.repositories.dismissed_duplicates.keys()
        pairs = detect_duplicate_affairs(
            affairs,
            dismissed=dismissed,
            date_tolerance_days=date_tolerance_days,
            floor=floor,
        )
    selected = [pair for pair in pairs if pair.confidence.rank >= min_confidence.rank]
    log.info(
        "%d candidate duplicate pairs among %d affairs (%d at %s or above)",
        len(pairs),
        len(affairs),
        len(selected),
        min_confidence,
    )
    return selected


@dataclass(slots=True)
class AffairMergeReport:
    """Outcome of a merge pass."""

    plans: list[MergePlan] = field(default_factory=list[MergePlan])
    merged: int = 0
    skipped: int = 0
    dry_run: bool = True


def _merge_pair(
    uow: ReconciliationUnitOfWork,
    first_id: UUID,
    second_id: UUID,
    *,
    dry_run: bool,
    created_by: str | None,
) -> MergePlan | None:
    repositories = uow.repositories
    first = repositories.affairs.get(first_id)
    second = repositories.affairs.get(second_id)
    if first is None or second is None:
        return None

    plan = plan_merge(first, second)
    log.info("%s %s", "Would merge:" if dry_run else "Merging:", plan.describe())
    if dry_run:
        return plan

    apply_merge(plan)
    repositories.affairs.delete(plan.loser)
    repositories.dismissed_duplicates.delete_involving(plan.loser.id)
    repositories.merges.add(
        EntityMerge(
            entity_type=EntityType.AFFAIR,
            source_id=plan.loser.id,
            target_id=plan.survivor.id,
            reason=MergeReason.DUPLICATE,
            created_by=created_by,
        )
    )
    uow.commit()
    return plan


def merge_duplicate_affairs(
    *,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    min_confidence: DuplicateConfidence = DuplicateConfidence.CERTAIN,
    date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
    floor: float = DEFAULT_SCORE_FLOOR,
    dry_run: bool = True,
    created_by: str | None = None,
) -> AffairMergeReport:
    """Merge detected pairs at or above ``min_confidence``, one unit of work per pair.

    A pair whose member was already folded away earlier in the pass is skipped; the
    next pass re-detects it against the survivor.
    """

    pairs = find_duplicate_affairs(
        unit_of_work_factory=unit_of_work_factory,
        min_confidence=min_confidence,
        date_tolerance_days=date_tolerance_days,
        floor=floor,
    )
    report = AffairMergeReport(dry_run=dry_run)
    removed: set[UUID] = set()
    for pair in pairs:
        first_id, second_id = pair.key
        if first_id in removed or second_id in removed:
            report.skipped += 1
            continue
        with unit_of_work_factory() as uow:
            plan = _merge_pair(uow, first_id, second_id, dry_run=dry_run, created_by=created_by)
        if plan is None:
            report.skipped += 1
            continue
        report.plans.append(plan)
        removed.add(plan.loser.id)
        if not dry_run:
            report.merged += 1

    log.info(
        "Affair merge pass: %d planned, %d merged, %d skipped%s",
        len(report.plans),
        report.merged,
        report.skipped,
        " (dry run)" if dry_run else "",
    )
    return report


def dismiss_duplicate(
    *,
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
    first_id: UUID,
    second_id: UUID,
    created_by: str | None = None,
) -> bool:
    """Record that two affairs are distinct. Returns ``False`` if already dismissed."""

    key = pair_key(first_id, second_id)
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        for affair_id in key:
            if repositories.affairs.get(affair_id) is None:
                raise ValueError(f"Unknown affair {affair_id}")
        if key in repositories.dismissed_duplicates.keys():
            return False
        repositories.dismissed_duplicates.add(
            DismissedDuplicate.for_pair(first_id, second_id, created_by=created_by)
        )
        uow.commit()
    log.info("Dismissed duplicate pair %s / %s", *key)
    return True
