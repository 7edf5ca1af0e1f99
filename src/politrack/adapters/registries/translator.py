"""Translate roster entries into candidate records and roster seats."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from politrack.domain.model import CandidateRecord, DataSource, MandateType, RosterSeat
from politrack.domain.resolution.mandates import OFFICE_LABELS

from .schema import AssembleeRosterEntry, EuroparlRosterEntry, SenatRosterEntry

if TYPE_CHECKING:
    from .schema import RosterEntry

INSTITUTIONS: Final[dict[DataSource, str]] = {
    DataSource.ASSEMBLEE_NATIONALE: "Assemblée nationale",
    DataSource.SENAT: "Sénat",
    DataSource.PARLEMENT_EUROPEEN: "Parlement européen",
}

MANDATE_TYPE_BY_SOURCE: Final[dict[DataSource, MandateType]] = {
    DataSource.ASSEMBLEE_NATIONALE: MandateType.DEPUTE,
    DataSource.SENAT: MandateType.SENATEUR,
    DataSource.PARLEMENT_EUROPEEN: MandateType.DEPUTE_EUROPEEN,
}


def entry_source(entry: RosterEntry) -> DataSource:
    return DataSource(entry.provider)


def entry_external_id(entry: RosterEntry) -> str:
    match entry:
        case AssembleeRosterEntry():
            return entry.uid
        case SenatRosterEntry():
            return entry.matricule
        case EuroparlRosterEntry():
            return entry.mep_id


def to_candidate(entry: RosterEntry) -> CandidateRecord:
    return CandidateRecord(
        name=entry.display_name,
        source=entry_source(entry),
        birth_date=entry.birth_date,
        death_date=entry.death_date,
        external_id=entry_external_id(entry),
        first_name=entry.first_name,
        last_name=entry.last_name,
    )


def to_seat(entry: RosterEntry) -> RosterSeat:
    source = entry_source(entry)
    mandate_type = MANDATE_TYPE_BY_SOURCE[source]
    label = OFFICE_LABELS[mandate_type]
    constituency: str | None = None
    department_code: str | None = None
    if isinstance(entry, AssembleeRosterEntry | SenatRosterEntry):
        constituency = entry.constituency
        department_code = entry.department_code
    return RosterSeat(
        source=source,
        external_id=entry_external_id(entry),
        mandate_type=mandate_type,
        title=f"{label} ({constituency})" if constituency else label,
        start_date=entry.mandate_start,
        end_date=entry.mandate_end,
        institution=INSTITUTIONS[source],
        constituency=constituency,
        department_code=department_code,
    )
