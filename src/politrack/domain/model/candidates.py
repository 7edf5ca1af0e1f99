"""Shapes provider records are normalized into before they reach the resolution core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from politrack.domain.model.politics import Mandate

if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from politrack.domain.model.enums import DataSource, MandateType


@dataclass(frozen=True, slots=True, kw_only=True)
class CandidateRecord:
    name: str
    source: DataSource
    birth_date: date | None = None
    death_date: date | None = None
    external_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def key(self) -> str:
        """Stable identity of the record inside a batch (used for checkpoints)."""
        if self.external_id:
            return f"{self.source}:{self.external_id}"
        born = self.birth_date.isoformat() if self.birth_date else "?"
        return f"{self.source}:{self.name}:{born}"


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterSeat:
    """A seat on an official roster, keyed by the holder's registry identifier."""

    source: DataSource
    external_id: str
    mandate_type: MandateType
    title: str
    start_date: date
    end_date: date | None = None
    institution: str | None = None
    constituency: str | None = None
    department_code: str | None = None

    def to_mandate(self, politician_id: UUID) -> Mandate:
        return Mandate(
            politician_id=politician_id,
            mandate_type=self.mandate_type,
            title=self.title,
            start_date=self.start_date,
            end_date=self.end_date,
            institution=self.institution,
            constituency=self.constituency,
            department_code=self.department_code,
            source=self.source,
            external_id=self.external_id,
        )
