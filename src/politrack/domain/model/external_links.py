"""External identifiers owned by typed references.

An ExternalLink points to (owner_type, owner_id) rather than to a concrete
foreign key, so the same table serves politicians, parties and affairs. A link
belongs to exactly one owner.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from politrack.domain.model.entity import Entity, new_id, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from politrack.domain.model.enums import DataSource, EntityType, MatchMethod


@dataclass(eq=False, kw_only=True)
class ExternalLink:
    source: DataSource
    external_id: str

    owner_type: EntityType
    owner_id: UUID

    confidence: float
    matched_by: MatchMethod
    id: UUID = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must lie in [0, 1], got {self.confidence}")
        if not self.external_id:
            raise ValueError("external_id must not be empty")


class ExternallyLinked(Protocol):
    """An entity that owns external links."""

    @property
    def id(self) -> UUID: ...

    @property
    def entity_type(self) -> EntityType: ...

    @property
    def external_links(self) -> tuple[ExternalLink, ...]: ...

    def link_for(self, source: DataSource) -> ExternalLink | None: ...


@dataclass(eq=False, kw_only=True)
class ExternallyLinkedMixin(Entity, ABC):
    """Capability: owns ExternalLinks, at most one per source."""

    _external_links: list[ExternalLink] = field(
        default_factory=list["ExternalLink"], repr=False, init=False
    )

    @property
    def external_links(self) -> tuple[ExternalLink, ...]:
        return tuple(self._external_links)

    def link_for(self, source: DataSource) -> ExternalLink | None:
        for link in self._external_links:
            if link.source == source:
                return link
        return None

    def add_external_link(
        self,
        source: DataSource,
        external_id: str,
        *,
        confidence: float,
        matched_by: MatchMethod,
    ) -> ExternalLink:
        """Attach a link for ``source``; re-adding the same identifier is a no-op."""

        existing = self.link_for(source)
        if existing is not None:
            if existing.external_id == external_id:
                return existing
            raise ValueError(
                f"{self.entity_type} {self.id} is already linked to {source} "
                f"as {existing.external_id!r}; use replace_external_id to correct it"
            )
        link = ExternalLink(
            source=source,
            external_id=external_id,
            owner_type=self.entity_type,
            owner_id=self.id,
            confidence=confidence,
            matched_by=matched_by,
        )
        self._external_links.append(link)
        return link

    def replace_external_id(self, source: DataSource, external_id: str) -> ExternalLink:
        """Correct a known-wrong identifier in place."""

        existing = self.link_for(source)
        if existing is None:
            raise ValueError(f"{self.entity_type} {self.id} has no {source} link to replace")
        existing.external_id = external_id
        return existing

    def adopt_external_link(self, link: ExternalLink) -> bool:
        """Take over a link from another owner; refused when ``source`` is already linked."""

        if self.link_for(link.source) is not None:
            return False
        link.owner_type = self.entity_type
        link.owner_id = self.id
        self._external_links.append(link)
        return True

    def release_external_link(self, link: ExternalLink) -> None:
        self._external_links.remove(link)
