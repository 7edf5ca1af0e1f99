"""Temporal invariants over office-holding history.

A mandate is OPEN (``is_current`` and no end date) or CLOSED. For every exclusive
office category at most one mandate may be OPEN: per politician for per-entity
categories, across the whole population for singleton offices. The reconciler
decides which mandates to close and when; ``apply_closures`` performs the
transitions.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from politrack.domain.model import MandateType

from .normalize import fold_accents, normalize_name

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping, Sequence
    from uuid import UUID

    from politrack.domain.model import Mandate

log = logging.getLogger(__name__)

# Promulgation of the 1958 constitution; nothing earlier can still be current.
CONSTITUTION_DATE: Final = date(1958, 10, 4)
PHANTOM_END_OFFSET: Final = timedelta(days=1)


class OfficeScope(StrEnum):
    SINGLETON = "singleton"
    PER_ENTITY = "per_entity"


@dataclass(frozen=True, slots=True)
class OfficeRule:
    category: str
    scope: OfficeScope


OFFICE_RULES: Final[Mapping[MandateType, OfficeRule]] = MappingProxyType(
    {
        MandateType.PRESIDENT_REPUBLIQUE: OfficeRule("head_of_state", OfficeScope.SINGLETON),
        MandateType.PREMIER_MINISTRE: OfficeRule("head_of_government", OfficeScope.SINGLETON),
        MandateType.DEPUTE: OfficeRule("national_legislature", OfficeScope.PER_ENTITY),
        MandateType.SENATEUR: OfficeRule("national_legislature", OfficeScope.PER_ENTITY),
        MandateType.DEPUTE_EUROPEEN: OfficeRule("european_parliament", OfficeScope.PER_ENTITY),
        MandateType.MINISTRE: OfficeRule("government", OfficeScope.PER_ENTITY),
        MandateType.MINISTRE_DELEGUE: OfficeRule("government", OfficeScope.PER_ENTITY),
        MandateType.SECRETAIRE_ETAT: OfficeRule("government", OfficeScope.PER_ENTITY),
        MandateType.MAIRE: OfficeRule("mayor", OfficeScope.PER_ENTITY),
        MandateType.PRESIDENT_REGION: OfficeRule("region_presidency", OfficeScope.PER_ENTITY),
        MandateType.PRESIDENT_DEPARTEMENT: OfficeRule(
            "department_presidency", OfficeScope.PER_ENTITY
        ),
        MandateType.PRESIDENT_PARTI: OfficeRule("party_presidency", OfficeScope.PER_ENTITY),
    }
)

OFFICE_LABELS: Final[Mapping[MandateType, str]] = MappingProxyType(
    {
        MandateType.DEPUTE: "Député",
        MandateType.SENATEUR: "Sénateur",
        MandateType.DEPUTE_EUROPEEN: "Député européen",
        MandateType.PRESIDENT_REPUBLIQUE: "Président de la République",
        MandateType.PREMIER_MINISTRE: "Premier ministre",
        MandateType.MINISTRE: "Ministre",
        MandateType.MINISTRE_DELEGUE: "Ministre délégué",
        MandateType.SECRETAIRE_ETAT: "Secrétaire d'État",
        MandateType.PRESIDENT_PARTI: "Président de parti",
        MandateType.MAIRE: "Maire",
        MandateType.ADJOINT_MAIRE: "Adjoint au maire",
        MandateType.PRESIDENT_REGION: "Président de région",
        MandateType.PRESIDENT_DEPARTEMENT: "Président de département",
        MandateType.CONSEILLER_REGIONAL: "Conseiller régional",
        MandateType.CONSEILLER_DEPARTEMENTAL: "Conseiller départemental",
        MandateType.CONSEILLER_MUNICIPAL: "Conseiller municipal",
    }
)


# Senate ---------------------------------------------------------------------


class SenateSeries(IntEnum):
    SERIES_1 = 1
    SERIES_2 = 2


# A renewal year of each series; seats are renewed every six years, half the
# chamber every three, and the new term starts on October 1st.
_SERIES_ANCHOR_YEAR: Final[Mapping[SenateSeries, int]] = MappingProxyType(
    {SenateSeries.SERIES_1: 2023, SenateSeries.SERIES_2: 2020}
)
SENATE_TERM_YEARS: Final = 6

SERIES_1_DEPARTMENTS: Final[frozenset[str]] = frozenset(
    {
        "01", "03", "06", "08", "09", "11", "13", "15", "17", "19", "2A", "22", "24",
        "26", "28", "30", "32", "34", "36", "38", "40", "42", "44", "46", "48", "50",
        "52", "54", "56", "58", "60", "62", "64", "66", "68", "70", "72", "74", "76",
        "78", "80", "82", "84", "86", "88", "90", "92", "94", "971", "973", "976",
        "986", "988",
    }
)  # fmt: skip

_SERIES_PATTERN = re.compile(r"serie\s+(\d)")


def senate_series(constituency: str | None, department_code: str | None) -> SenateSeries:
    """Renewal series of a senate seat: explicit label, then department, then series 1."""

    if constituency:
        found = _SERIES_PATTERN.search(fold_accents(constituency))
        if found is not None:
            return SenateSeries.SERIES_1 if found.group(1) == "1" else SenateSeries.SERIES_2
    if department_code:
        code = department_code.strip().upper()
        return SenateSeries.SERIES_1 if code in SERIES_1_DEPARTMENTS else SenateSeries.SERIES_2
    return SenateSeries.SERIES_1


def renewal_boundary(series: SenateSeries, *, after: date, not_after: date) -> date | None:
    """Latest October 1st renewal of ``series`` in ``(after, not_after]``."""

    anchor = _SERIES_ANCHOR_YEAR[series]
    year = not_after.year
    while (year - anchor) % SENATE_TERM_YEARS:
        year -= 1
    boundary = date(year, 10, 1)
    if boundary > not_after:
        boundary = date(year - SENATE_TERM_YEARS, 10, 1)
    if boundary <= after:
        return None
    return boundary


# Decisions ------------------------------------------------------------------


class ClosureReason(StrEnum):
    SUPERSEDED = "superseded"
    SENATE_RENEWAL = "senate_renewal"
    PRE_CONSTITUTIONAL = "pre_constitutional"
    INCONSISTENT_FLAG = "inconsistent_flag"
    ABSENT_FROM_ROSTER = "absent_from_roster"


@dataclass(frozen=True, slots=True, kw_only=True)
class MandateClosure:
    mandate: Mandate
    end_date: date
    reason: ClosureReason
    survivor_id: UUID | None = None
    needs_review: bool = False


@dataclass(slots=True)
class MandateReconciliation:
    closures: list[MandateClosure] = field(default_factory=list["MandateClosure"])
    flagged: list[Mandate] = field(default_factory=list["Mandate"])

    def counts(self) -> dict[str, int]:
        counts: dict[str, int] = defaultdict(int)
        for closure in self.closures:
            counts[closure.reason] += 1
        if self.flagged:
            counts["flagged"] = len(self.flagged)
        return dict(counts)


def title_specificity(mandate: Mandate) -> int:
    """2 when a concrete seat is named, 1 for a title beyond the bare office label, else 0."""

    if mandate.constituency or mandate.department_code:
        return 2
    title = normalize_name(mandate.title)
    label = normalize_name(OFFICE_LABELS.get(mandate.mandate_type, ""))
    if title and title != label:
        return 1
    return 0


def choose_surviving_mandate(mandates: Sequence[Mandate]) -> Mandate:
    return max(
        mandates,
        key=lambda mandate: (title_specificity(mandate), mandate.start_date, str(mandate.id)),
    )


def _group_key(mandate: Mandate) -> tuple[str, UUID | None] | None:
    rule = OFFICE_RULES.get(mandate.mandate_type)
    if rule is None:
        return None
    if rule.scope is OfficeScope.SINGLETON:
        return (rule.category, None)
    return (rule.category, mandate.politician_id)


def _loser_end_date(loser: Mandate, survivor: Mandate, as_of: date) -> tuple[date, ClosureReason]:
    if loser.mandate_type == MandateType.SENATEUR:
        series = senate_series(loser.constituency, loser.department_code)
        # no later than the survivor start
        boundary = renewal_boundary(
            series, after=loser.start_date, not_after=min(as_of, survivor.start_date)
        )
        if boundary is not None:
            return boundary, ClosureReason.SENATE_RENEWAL
    return max(survivor.start_date, loser.start_date), ClosureReason.SUPERSEDED


def reconcile_mandates(mandates: Iterable[Mandate], *, as_of: date) -> MandateReconciliation:
    """Decide closures; nothing is mutated."""

    result = MandateReconciliation()
    groups: dict[tuple[str, UUID | None], list[Mandate]] = defaultdict(list)

    for mandate in mandates:
        if mandate.end_date is not None and mandate.end_date < mandate.start_date:
            result.flagged.append(mandate)
            continue
        if mandate.is_current and mandate.end_date is not None:
            result.closures.append(
                MandateClosure(
                    mandate=mandate,
                    end_date=mandate.end_date,
                    reason=ClosureReason.INCONSISTENT_FLAG,
                )
            )
            continue
        if not mandate.is_current and mandate.end_date is None:
            # closed without a date: nothing to infer it from
            result.flagged.append(mandate)
            continue
        if not mandate.is_open:
            continue
        if mandate.start_date < CONSTITUTION_DATE:
            result.closures.append(
                MandateClosure(
                    mandate=mandate,
                    end_date=mandate.start_date + PHANTOM_END_OFFSET,
                    reason=ClosureReason.PRE_CONSTITUTIONAL,
                    needs_review=True,
                )
            )
            continue
        key = _group_key(mandate)
        if key is not None:
            groups[key].append(mandate)

    for (category, politician_id), group in groups.items():
        if len(group) < 2:
            continue
        survivor = choose_surviving_mandate(group)
        for loser in group:
            if loser is survivor:
                continue
            end_date, reason = _loser_end_date(loser, survivor, as_of)
            result.closures.append(
                MandateClosure(
                    mandate=loser,
                    end_date=end_date,
                    reason=reason,
                    survivor_id=survivor.id,
                )
            )
        log.debug(
            "Category %s (politician %s): kept %s, closing %d",
            category,
            politician_id,
            survivor.id,
            len(group) - 1,
        )

    return result


def close_absent_from_roster(
    mandates: Iterable[Mandate],
    *,
    mandate_type: MandateType,
    roster_ids: Collection[str],
    term_start: date,
    as_of: date,
) -> MandateReconciliation:
    """Close OPEN mandates whose registry id is no longer on the official roster.

    Senators end at their series' last renewal; other offices at ``term_start``
    (the start of the current legislature). Mandates that began after the term
    started cannot be dated that way and are flagged instead.
    """

    roster = set(roster_ids)
    result = MandateReconciliation()
    for mandate in mandates:
        if mandate.mandate_type != mandate_type or not mandate.is_open:
            continue
        if mandate.external_id is None or mandate.external_id in roster:
            continue
        if mandate_type == MandateType.SENATEUR:
            series = senate_series(mandate.constituency, mandate.department_code)
            boundary = renewal_boundary(series, after=mandate.start_date, not_after=as_of)
            if boundary is not None:
                result.closures.append(
                    MandateClosure(
                        mandate=mandate,
                        end_date=boundary,
                        reason=ClosureReason.ABSENT_FROM_ROSTER,
                    )
                )
                continue
        elif mandate.start_date < term_start:
            result.closures.append(
                MandateClosure(
                    mandate=mandate,
                    end_date=term_start,
                    reason=ClosureReason.ABSENT_FROM_ROSTER,
                )
            )
            continue
        result.flagged.append(mandate)
    return result


def apply_closures(reconciliation: MandateReconciliation) -> int:
    """Perform the OPEN → CLOSED transitions and raise review flags; return the count."""

    for closure in reconciliation.closures:
        closure.mandate.close(closure.end_date, needs_review=closure.needs_review)
        log.info(
            "Closed mandate %s (%s, started %s) on %s: %s",
            closure.mandate.id,
            closure.mandate.mandate_type,
            closure.mandate.start_date,
            closure.end_date,
            closure.reason,
        )
    for mandate in reconciliation.flagged:
        mandate.needs_review = True
    return len(reconciliation.closures)
