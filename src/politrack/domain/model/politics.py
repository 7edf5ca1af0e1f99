"""Politicians, parties and their mandates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, ClassVar

from politrack.domain.model.entity import Entity, utcnow
from politrack.domain.model.enums import EntityType, MandateType
from politrack.domain.model.external_links import ExternallyLinkedMixin

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from politrack.domain.model.enums import DataSource


@dataclass(eq=False, kw_only=True)
class Politician(ExternallyLinkedMixin):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.POLITICIAN

    full_name: str
    first_name: str | None = None
    last_name: str | None = None
    birth_date: date | None = None
    death_date: date | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Party(ExternallyLinkedMixin):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PARTY

    name: str
    short_name: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Mandate(Entity):
    """One office held by one politician.

    ``is_current`` and ``end_date`` move together: a mandate is OPEN while it has no
    end date and CLOSED once it has one.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.MANDATE

    politician_id: UUID
    mandate_type: MandateType
    title: str
    start_date: date
    end_date: date | None = None
    is_current: bool = True
    institution: str | None = None
    constituency: str | None = None
    department_code: str | None = None
    source: DataSource | None = None
    external_id: str | None = None
    needs_review: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.end_date is not None:
            self.is_current = False

    @property
    def is_open(self) -> bool:
        return self.is_current and self.end_date is None

    @property
    def has_consistent_state(self) -> bool:
        return self.is_current == (self.end_date is None)

    def close(self, end_date: date, *, needs_review: bool = False) -> None:
        if end_date < self.start_date:
            raise ValueError(
                f"mandate {self.id} cannot end on {end_date} before it starts on {self.start_date}"
            )
        self.end_date = end_date
        self.is_current = False
        if needs_review:
            self.needs_review = True

    def starts_near(self, other_start: date, window: timedelta) -> bool:
        return abs(self.start_date - other_start) < window
