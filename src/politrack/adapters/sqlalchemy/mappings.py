"""SQLAlchemy mapping metadata for the politrack domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    and_,
    func,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from politrack.domain.model import (
    Affair,
    AffairCategory,
    AffairEvent,
    AffairPressLink,
    AffairSource,
    DataSource,
    DismissedDuplicate,
    EntityMerge,
    EntityType,
    ExternalLink,
    Mandate,
    MandateType,
    MatchMethod,
    MergeReason,
    Party,
    Politician,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from politrack.domain.model import ExternallyLinkedMixin

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class StringSetType(TypeDecorator[set[str]]):
    """A set of strings stored as a sorted JSON array."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: set[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> set[str]:
        _ = dialect
        if value is None:
            return set()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return set()
        items = cast(list[Any], loaded)
        return {item for item in items if isinstance(item, str)}


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

politician_table = Table(
    "politician",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("full_name", String, nullable=False),
    Column("first_name", String, nullable=True),
    Column("last_name", String, nullable=True),
    Column("birth_date", Date, nullable=True),
    Column("death_date", Date, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
)

party_table = Table(
    "party",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("short_name", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
)

mandate_table = Table(
    "mandate",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "politician_id",
        UUIDColumnType,
        ForeignKey("politician.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("mandate_type", Enum(MandateType, native_enum=False), nullable=False),
    Column("title", String, nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=True),
    Column("is_current", Boolean, nullable=False, default=True),
    Column("institution", String, nullable=True),
    Column("constituency", String, nullable=True),
    Column("department_code", String(3), nullable=True),
    Column("source", Enum(DataSource, native_enum=False), nullable=True),
    Column("external_id", String, nullable=True),
    Column("needs_review", Boolean, nullable=False, default=False),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Index("ix_mandate_politician_type", "politician_id", "mandate_type"),
)

affair_table = Table(
    "affair",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "politician_id",
        UUIDColumnType,
        ForeignKey("politician.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("title", String, nullable=False),
    Column("category", Enum(AffairCategory, native_enum=False), nullable=False),
    Column("fact_date", Date, nullable=True),
    Column("start_date", Date, nullable=True),
    Column("verdict_date", Date, nullable=True),
    Column("ecli", String, nullable=True),
    Column("pourvoi_number", String, nullable=True),
    Column("case_numbers", StringSetType(), nullable=False, default=set),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Index("ix_affair_politician", "politician_id"),
)

affair_source_table = Table(
    "affair_source",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "affair_id", UUIDColumnType, ForeignKey("affair.id", ondelete="CASCADE"), nullable=False
    ),
    Column("url", String, nullable=False),
    Column("title", String, nullable=True),
    Column("publisher", String, nullable=True),
    Column("published_at", Date, nullable=True),
)

affair_event_table = Table(
    "affair_event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "affair_id", UUIDColumnType, ForeignKey("affair.id", ondelete="CASCADE"), nullable=False
    ),
    Column("occurred_on", Date, nullable=False),
    Column("description", String, nullable=False),
)

affair_press_link_table = Table(
    "affair_press_link",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "affair_id", UUIDColumnType, ForeignKey("affair.id", ondelete="CASCADE"), nullable=False
    ),
    Column("article_id", String, nullable=False),
    Column("url", String, nullable=True),
)

# Review and audit ------------------------------------------------------------

dismissed_duplicate_table = Table(
    "dismissed_duplicate",
    mapper_registry.metadata,
    Column("first_id", UUIDColumnType, primary_key=True),
    Column("second_id", UUIDColumnType, primary_key=True),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Column("created_by", String, nullable=True),
)

entity_merge_table = Table(
    "entity_merge",
    mapper_registry.metadata,
    Column("entity_type", Enum(EntityType, native_enum=False), primary_key=True),
    Column("source_id", UUIDColumnType, primary_key=True),
    Column("target_id", UUIDColumnType, primary_key=True),
    Column("reason", Enum(MergeReason, native_enum=False), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    Column("created_by", String, nullable=True),
)

external_link_table = Table(
    "external_link",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source", Enum(DataSource, native_enum=False), nullable=False),
    Column("external_id", String, nullable=False),
    Column("owner_type", Enum(EntityType, native_enum=False), nullable=False),
    Column("owner_id", UUIDColumnType, nullable=False),
    Column("confidence", Float, nullable=False),
    Column("matched_by", Enum(MatchMethod, native_enum=False), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False, server_default=func.now()),
    UniqueConstraint("source", "external_id", "owner_type", name="uq_external_link_identity"),
    UniqueConstraint("owner_type", "owner_id", "source", name="uq_external_link_owner_source"),
    Index("ix_external_link_owner", "owner_type", "owner_id"),
)

ENTITY_TYPE_BY_CLASS: Final[dict[type[ExternallyLinkedMixin], EntityType]] = {
    Politician: EntityType.POLITICIAN,
    Party: EntityType.PARTY,
    Affair: EntityType.AFFAIR,
}


def _external_links_relationship(
    entity_table: Table, entity_type: EntityType
) -> orm.RelationshipProperty[ExternalLink]:
    return relationship(
        ExternalLink,
        cascade="all, delete-orphan",
        primaryjoin=and_(
            external_link_table.c.owner_id == entity_table.c.id,
            external_link_table.c.owner_type == entity_type,
        ),
        foreign_keys=[external_link_table.c.owner_id],
        overlaps="_external_links",
    )


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Politician,
        politician_table,
        properties={
            "_external_links": _external_links_relationship(
                politician_table, EntityType.POLITICIAN
            ),
        },
    )

    mapper_registry.map_imperatively(
        Party,
        party_table,
        properties={
            "_external_links": _external_links_relationship(party_table, EntityType.PARTY),
        },
    )

    mapper_registry.map_imperatively(Mandate, mandate_table)

    mapper_registry.map_imperatively(
        Affair,
        affair_table,
        properties={
            "_external_links": _external_links_relationship(affair_table, EntityType.AFFAIR),
            "_sources": relationship(
                AffairSource,
                cascade="all, delete-orphan",
                order_by=affair_source_table.c.url,
            ),
            "_events": relationship(
                AffairEvent,
                cascade="all, delete-orphan",
                order_by=affair_event_table.c.occurred_on,
            ),
            "_press_links": relationship(
                AffairPressLink,
                cascade="all, delete-orphan",
                order_by=affair_press_link_table.c.article_id,
            ),
        },
    )

    mapper_registry.map_imperatively(AffairSource, affair_source_table)
    mapper_registry.map_imperatively(AffairEvent, affair_event_table)
    mapper_registry.map_imperatively(AffairPressLink, affair_press_link_table)

    mapper_registry.map_imperatively(DismissedDuplicate, dismissed_duplicate_table)
    mapper_registry.map_imperatively(EntityMerge, entity_merge_table)
    mapper_registry.map_imperatively(ExternalLink, external_link_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
