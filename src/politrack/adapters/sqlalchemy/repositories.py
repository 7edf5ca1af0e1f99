"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, or_, select

from politrack.adapters.sqlalchemy.mappings import (
    ENTITY_TYPE_BY_CLASS,
    affair_table,
    dismissed_duplicate_table,
    entity_merge_table,
    external_link_table,
    mandate_table,
    politician_table,
)
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

    from sqlalchemy import CursorResult, Select
    from sqlalchemy.orm import Session

    from politrack.domain.model import DataSource, EntityType, ExternallyLinkedMixin, MandateType


class SqlAlchemyLinkedRepository[TEntity: ExternallyLinkedMixin]:
    """Shared helpers for repositories managing records that own external links."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._entity_type = ENTITY_TYPE_BY_CLASS[entity_cls]

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)

    def get_by_external_id(self, source: DataSource, external_id: str) -> TEntity | None:
        stmt = (
            select(external_link_table.c.owner_id)
            .where(external_link_table.c.source == source)
            .where(external_link_table.c.external_id == external_id)
            .where(external_link_table.c.owner_type == self._entity_type)
            .limit(1)
        )
        entity_id = self.session.execute(stmt).scalar_one_or_none()
        if not isinstance(entity_id, uuid.UUID):
            return None
        return self.session.get(self._entity_cls, entity_id)

    def _linked_ids(self, source: DataSource) -> Select[tuple[uuid.UUID]]:
        return (
            select(external_link_table.c.owner_id)
            .where(external_link_table.c.owner_type == self._entity_type)
            .where(external_link_table.c.source == source)
        )


class SqlAlchemyPoliticianRepository(SqlAlchemyLinkedRepository[Politician]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Politician)

    def list_all(self) -> list[Politician]:
        stmt = select(Politician).order_by(politician_table.c.full_name, politician_table.c.id)
        return list(self.session.scalars(stmt))

    def without_link(self, source: DataSource) -> list[Politician]:
        stmt = (
            select(Politician)
            .where(politician_table.c.id.not_in(self._linked_ids(source)))
            .order_by(politician_table.c.full_name, politician_table.c.id)
        )
        return list(self.session.scalars(stmt))

    def with_link(self, source: DataSource) -> list[Politician]:
        stmt = (
            select(Politician)
            .where(politician_table.c.id.in_(self._linked_ids(source)))
            .order_by(politician_table.c.full_name, politician_table.c.id)
        )
        return list(self.session.scalars(stmt))


class SqlAlchemyPartyRepository(SqlAlchemyLinkedRepository[Party]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Party)


class SqlAlchemyAffairRepository(SqlAlchemyLinkedRepository[Affair]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Affair)

    def list_all(self) -> list[Affair]:
        stmt = select(Affair).order_by(affair_table.c.politician_id, affair_table.c.id)
        return list(self.session.scalars(stmt))

    def delete(self, affair: Affair) -> None:
        self.session.delete(affair)


class SqlAlchemyExternalLinkRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_owner(
        self, source: DataSource, external_id: str, owner_type: EntityType
    ) -> uuid.UUID | None:
        stmt = (
            select(external_link_table.c.owner_id)
            .where(external_link_table.c.source == source)
            .where(external_link_table.c.external_id == external_id)
            .where(external_link_table.c.owner_type == owner_type)
            .limit(1)
        )
        owner_id = self.session.execute(stmt).scalar_one_or_none()
        return owner_id if isinstance(owner_id, uuid.UUID) else None


class SqlAlchemyMandateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Mandate) -> None:
        self.session.add(entity)

    def list_all(self) -> list[Mandate]:
        stmt = select(Mandate).order_by(mandate_table.c.start_date, mandate_table.c.id)
        return list(self.session.scalars(stmt))

    def list_open(self, mandate_type: MandateType | None = None) -> list[Mandate]:
        stmt = (
            select(Mandate)
            .where(mandate_table.c.is_current.is_(True))
            .where(mandate_table.c.end_date.is_(None))
        )
        if mandate_type is not None:
            stmt = stmt.where(mandate_table.c.mandate_type == mandate_type)
        return list(self.session.scalars(stmt.order_by(mandate_table.c.start_date)))

    def find_near(
        self,
        *,
        politician_id: uuid.UUID,
        mandate_type: MandateType,
        start_date: date,
        window: timedelta,
    ) -> Mandate | None:
        stmt = (
            select(Mandate)
            .where(mandate_table.c.politician_id == politician_id)
            .where(mandate_table.c.mandate_type == mandate_type)
        )
        nearby = [
            mandate
            for mandate in self.session.scalars(stmt)
            if mandate.starts_near(start_date, window)
        ]
        if not nearby:
            return None
        return min(
            nearby,
            key=lambda mandate: (abs(mandate.start_date - start_date), str(mandate.id)),
        )


class SqlAlchemyDismissedDuplicateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: DismissedDuplicate) -> None:
        self.session.add(entity)

    def keys(self) -> set[tuple[uuid.UUID, uuid.UUID]]:
        stmt = select(
            dismissed_duplicate_table.c.first_id,
            dismissed_duplicate_table.c.second_id,
        )
        return {(first, second) for first, second in self.session.execute(stmt)}

    def delete_involving(self, record_id: uuid.UUID) -> int:
        stmt = delete(dismissed_duplicate_table).where(
            or_(
                dismissed_duplicate_table.c.first_id == record_id,
                dismissed_duplicate_table.c.second_id == record_id,
            )
        )
        result = cast("CursorResult[Any]", self.session.execute(stmt))
        return result.rowcount


class SqlAlchemyEntityMergeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: EntityMerge) -> None:
        self.session.add(entity)

    def list_for_target(self, target_id: uuid.UUID) -> list[EntityMerge]:
        stmt = (
            select(EntityMerge)
            .where(entity_merge_table.c.target_id == target_id)
            .order_by(entity_merge_table.c.created_at)
        )
        return list(self.session.scalars(stmt))


if TYPE_CHECKING:
    from politrack.domain.ports.persistence import (
        AffairRepository,
        DismissedDuplicateRepository,
        EntityMergeRepository,
        ExternalLinkRepository,
        MandateRepository,
        PartyRepository,
        PoliticianRepository,
    )

    _session_stub = cast("Session", object())
    _politician_repo: PoliticianRepository = SqlAlchemyPoliticianRepository(_session_stub)
    _party_repo: PartyRepository = SqlAlchemyPartyRepository(_session_stub)
    _affair_repo: AffairRepository = SqlAlchemyAffairRepository(_session_stub)
    _link_repo: ExternalLinkRepository = SqlAlchemyExternalLinkRepository(_session_stub)
    _mandate_repo: MandateRepository = SqlAlchemyMandateRepository(_session_stub)
    _dismissed_repo: DismissedDuplicateRepository = SqlAlchemyDismissedDuplicateRepository(
        _session_stub
    )
    _merge_repo: EntityMergeRepository = SqlAlchemyEntityMergeRepository(_session_stub)
