"""Judicial affairs and the rows that hang off them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from politrack.domain.model.entity import new_id, utcnow
from politrack.domain.model.enums import EntityType
from politrack.domain.model.external_links import ExternallyLinkedMixin

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from politrack.domain.model.enums import AffairCategory


@dataclass(eq=False, kw_only=True)
class AffairSource:
    """A citation backing an affair; the URL identifies it."""

    url: str
    title: str | None = None
    publisher: str | None = None
    published_at: date | None = None
    id: UUID = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class AffairEvent:
    occurred_on: date
    description: str
    id: UUID = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class AffairPressLink:
    """Cross-reference to a press article mentioning the affair."""

    article_id: str
    url: str | None = None
    id: UUID = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class Affair(ExternallyLinkedMixin):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.AFFAIR

    politician_id: UUID
    title: str
    category: AffairCategory
    fact_date: date | None = None
    start_date: date | None = None
    verdict_date: date | None = None
    ecli: str | None = None
    pourvoi_number: str | None = None
    case_numbers: set[str] = field(default_factory=set[str])
    created_at: datetime = field(default_factory=utcnow)

    _sources: list[AffairSource] = field(default_factory=list["AffairSource"], init=False)
    _events: list[AffairEvent] = field(default_factory=list["AffairEvent"], init=False)
    _press_links: list[AffairPressLink] = field(
        default_factory=list["AffairPressLink"], init=False
    )

    @property
    def sources(self) -> tuple[AffairSource, ...]:
        return tuple(self._sources)

    @property
    def events(self) -> tuple[AffairEvent, ...]:
        return tuple(self._events)

    @property
    def press_links(self) -> tuple[AffairPressLink, ...]:
        return tuple(self._press_links)

    @property
    def event_date(self) -> date | None:
        """The date that defines the affair: verdict, else opening, else facts."""
        return self.verdict_date or self.start_date or self.fact_date

    def source_urls(self) -> set[str]:
        return {source.url for source in self._sources}

    def press_article_ids(self) -> set[str]:
        return {link.article_id for link in self._press_links}

    def add_source(self, source: AffairSource) -> bool:
        if source.url in self.source_urls():
            return False
        self._sources.append(source)
        return True

    def add_event(self, event: AffairEvent) -> None:
        self._events.append(event)

    def add_press_link(self, link: AffairPressLink) -> bool:
        if link.article_id in self.press_article_ids():
            return False
        self._press_links.append(link)
        return True

    def remove_source(self, source: AffairSource) -> None:
        self._sources.remove(source)

    def remove_event(self, event: AffairEvent) -> None:
        self._events.remove(event)

    def remove_press_link(self, link: AffairPressLink) -> None:
        self._press_links.remove(link)
