"""Audit and review records for duplicate handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .entity import utcnow
from .enums import MergeReason

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .enums import EntityType


@dataclass(eq=False)
class EntityMerge:
    """Audit record for folding a duplicate (``source_id``) into its survivor."""

    entity_type: EntityType
    source_id: UUID
    target_id: UUID
    reason: MergeReason = MergeReason.DUPLICATE
    created_at: datetime = field(default_factory=utcnow)
    created_by: str | None = None


@dataclass(eq=False, kw_only=True)
class DismissedDuplicate:
    """Operator decision that two records are distinct despite looking alike.

    The pair is stored in sorted order so (a, b) and (b, a) share one row.
    """

    first_id: UUID
    second_id: UUID
    created_at: datetime = field(default_factory=utcnow)
    created_by: str | None = None

    @classmethod
    def for_pair(cls, a: UUID, b: UUID, *, created_by: str | None = None) -> DismissedDuplicate:
        if a == b:
            raise ValueError("cannot dismiss a record as a duplicate of itself")
        first, second = sorted((a, b), key=str)
        return cls(first_id=first, second_id=second, created_by=created_by)

    @property
    def key(self) -> tuple[UUID, UUID]:
        return (self.first_id, self.second_id)


def pair_key(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    first, second = sorted((a, b), key=str)
    return (first, second)
