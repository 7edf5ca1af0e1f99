"""Wikidata action-API response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type EntityId = str  # Q-id, e.g. "Q2105"
type PropertyId = str  # P-id, e.g. "P569"


class WikidataBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Wikidata %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class WikidataApiErrorBody(WikidataBaseModel):
    code: str
    info: str | None = None


class WikidataSearchHit(WikidataBaseModel):
    id: EntityId
    label: str | None = None
    description: str | None = None


class WikidataSearchResponse(WikidataBaseModel):
    search: list[WikidataSearchHit] = Field(default_factory=list["WikidataSearchHit"])
    error: WikidataApiErrorBody | None = None


class WikidataTime(WikidataBaseModel):
    time: str  # "+1960-03-02T00:00:00Z"
    precision: int
    calendarmodel: str | None = None


class WikidataEntityRef(WikidataBaseModel):
    id: EntityId


class WikidataDataValue(WikidataBaseModel):
    type: str
    value: object


class WikidataSnak(WikidataBaseModel):
    snaktype: Literal["value", "somevalue", "novalue"]
    property: PropertyId
    datavalue: WikidataDataValue | None = None


class WikidataClaim(WikidataBaseModel):
    mainsnak: WikidataSnak
    rank: Literal["preferred", "normal", "deprecated"] = "normal"


class WikidataLabel(WikidataBaseModel):
    language: str
    value: str


class WikidataEntity(WikidataBaseModel):
    id: EntityId
    missing: str | None = None
    labels: dict[str, WikidataLabel] = Field(default_factory=dict[str, WikidataLabel])
    claims: dict[PropertyId, list[WikidataClaim]] = Field(
        default_factory=dict[PropertyId, list[WikidataClaim]]
    )

    @property
    def is_missing(self) -> bool:
        return self.missing is not None


class WikidataEntitiesResponse(WikidataBaseModel):
    entities: dict[EntityId, WikidataEntity] = Field(
        default_factory=dict[EntityId, WikidataEntity]
    )
    error: WikidataApiErrorBody | None = None
