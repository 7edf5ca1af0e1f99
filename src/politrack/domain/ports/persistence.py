"""Ports for persisting reconciliation records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from politrack.domain.model import (
    Affair,
    DismissedDuplicate,
    EntityMerge,
    Mandate,
    Party,
    Politician,
)

if TYPE_CHECKING:
    from datetime import date, timedelta
    from uuid import UUID

    from politrack.domain.model import DataSource, EntityType, MandateType


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class PoliticianRepository(Repository[Politician], Protocol):
    def get(self, politician_id: UUID) -> Politician | None: ...

    def list_all(self) -> list[Politician]: ...

    def without_link(self, source: DataSource) -> list[Politician]:
        """Politicians that have no external link for ``source`` yet."""
        ...

    def with_link(self, source: DataSource) -> list[Politician]: ...

    def get_by_external_id(self, source: DataSource, external_id: str) -> Politician | None: ...


@runtime_checkable
class PartyRepository(Repository[Party], Protocol):
    def get_by_external_id(self, source: DataSource, external_id: str) -> Party | None: ...


@runtime_checkable
class ExternalLinkRepository(Protocol):
    def find_owner(
        self, source: DataSource, external_id: str, owner_type: EntityType
    ) -> UUID | None:
        """Id of the record already claiming ``(source, external_id)``, if any."""
        ...


@runtime_checkable
class AffairRepository(Repository[Affair], Protocol):
    def get(self, affair_id: UUID) -> Affair | None: ...

    def list_all(self) -> list[Affair]: ...

    def delete(self, affair: Affair) -> None: ...


@runtime_checkable
class MandateRepository(Repository[Mandate], Protocol):
    def list_all(self) -> list[Mandate]: ...

    def list_open(self, mandate_type: MandateType | None = None) -> list[Mandate]: ...

    def find_near(
        self,
        *,
        politician_id: UUID,
        mandate_type: MandateType,
        start_date: date,
        window: timedelta,
    ) -> Mandate | None: ...


@runtime_checkable
class DismissedDuplicateRepository(Repository[DismissedDuplicate], Protocol):
    def keys(self) -> set[tuple[UUID, UUID]]: ...

    def delete_involving(self, record_id: UUID) -> int: ...


@runtime_checkable
class EntityMergeRepository(Repository[EntityMerge], Protocol):
    def list_for_target(self, target_id: UUID) -> list[EntityMerge]: ...
