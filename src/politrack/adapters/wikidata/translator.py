"""Translate Wikidata entities into candidate records and registry identifiers."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter, ValidationError

from politrack.domain.model import CandidateRecord, DataSource

from .schema import WikidataEntityRef, WikidataTime

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .schema import PropertyId, WikidataClaim, WikidataEntity

log = logging.getLogger(__name__)

INSTANCE_OF: Final = "P31"
HUMAN: Final = "Q5"
BIRTH_DATE: Final = "P569"
DEATH_DATE: Final = "P570"

REGISTRY_PROPERTIES: Final[Mapping[DataSource, PropertyId]] = {
    DataSource.ASSEMBLEE_NATIONALE: "P4123",
    DataSource.SENAT: "P4324",
    DataSource.PARLEMENT_EUROPEEN: "P1186",
}

# day precision; month or year precision dates cannot support a 5-day tie-break
DAY_PRECISION: Final = 11

_TIME_PATTERN = re.compile(r"^[+-]?(\d{4,})-(\d{2})-(\d{2})T")
_STRING_ADAPTER: TypeAdapter[str] = TypeAdapter(str)


def _usable_claims(entity: WikidataEntity, prop: PropertyId) -> list[WikidataClaim]:
    claims = [
        claim
        for claim in entity.claims.get(prop, [])
        if claim.rank != "deprecated"
        and claim.mainsnak.snaktype == "value"
        and claim.mainsnak.datavalue is not None
    ]
    # preferred statements first
    return sorted(claims, key=lambda claim: claim.rank != "preferred")


def parse_time(value: WikidataTime) -> date | None:
    if value.precision < DAY_PRECISION:
        return None
    if value.time.startswith("-"):
        return None
    match = _TIME_PATTERN.match(value.time)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def claim_date(entity: WikidataEntity, prop: PropertyId) -> date | None:
    for claim in _usable_claims(entity, prop):
        datavalue = claim.mainsnak.datavalue
        if datavalue is None:
            continue
        try:
            parsed = parse_time(WikidataTime.model_validate(datavalue.value))
        except ValidationError:
            continue
        if parsed is not None:
            return parsed
    return None


def claim_string(entity: WikidataEntity, prop: PropertyId) -> str | None:
    for claim in _usable_claims(entity, prop):
        datavalue = claim.mainsnak.datavalue
        if datavalue is None:
            continue
        try:
            value = _STRING_ADAPTER.validate_python(datavalue.value, strict=True)
        except ValidationError:
            continue
        if value:
            return value
    return None


def is_human(entity: WikidataEntity) -> bool:
    for claim in _usable_claims(entity, INSTANCE_OF):
        datavalue = claim.mainsnak.datavalue
        if datavalue is None:
            continue
        try:
            ref = WikidataEntityRef.model_validate(datavalue.value)
        except ValidationError:
            continue
        if ref.id == HUMAN:
            return True
    return False


def entity_label(entity: WikidataEntity, languages: Sequence[str]) -> str | None:
    for language in languages:
        label = entity.labels.get(language)
        if label is not None and label.value:
            return label.value
    return None


def translate_person(
    entity: WikidataEntity,
    *,
    languages: Sequence[str] = ("fr", "en"),
    fallback_label: str | None = None,
) -> CandidateRecord | None:
    """Return a candidate for a human entity, ``None`` for anything else."""

    if entity.is_missing or not is_human(entity):
        return None
    name = entity_label(entity, languages) or fallback_label
    if not name:
        log.debug("Skipping %s: no usable label", entity.id)
        return None
    return CandidateRecord(
        name=name,
        source=DataSource.WIKIDATA,
        external_id=entity.id,
        birth_date=claim_date(entity, BIRTH_DATE),
        death_date=claim_date(entity, DEATH_DATE),
    )


def translate_registry_ids(entity: WikidataEntity) -> dict[DataSource, str]:
    if entity.is_missing:
        return {}
    found: dict[DataSource, str] = {}
    for source, prop in REGISTRY_PROPERTIES.items():
        value = claim_string(entity, prop)
        if value is not None:
            found[source] = value
    return found
