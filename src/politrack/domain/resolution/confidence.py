"""Confidence assigned to a new external link, by source.

The table encodes how much independent verification backs a link: an
authoritative registry identifier beats a knowledge-graph pivot, which beats a
curated manual entry, which beats a name-only match.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from politrack.domain.model import DataSource, MatchMethod

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class LinkConfidence:
    confidence: float
    matched_by: MatchMethod


REGISTRY_CONFIDENCE: Final = LinkConfidence(1.0, MatchMethod.EXTERNAL_ID)
PIVOT_CONFIDENCE: Final = LinkConfidence(0.95, MatchMethod.WIKIDATA_PIVOT)
MANUAL_CONFIDENCE: Final = LinkConfidence(0.8, MatchMethod.MANUAL)
NAME_ONLY_CONFIDENCE: Final = LinkConfidence(0.7, MatchMethod.NAME_ONLY)
DEFAULT_CONFIDENCE: Final = LinkConfidence(0.5, MatchMethod.NAME_ONLY)

CONFIDENCE_TABLE: Final[Mapping[DataSource, LinkConfidence]] = MappingProxyType(
    {
        DataSource.ASSEMBLEE_NATIONALE: REGISTRY_CONFIDENCE,
        DataSource.SENAT: REGISTRY_CONFIDENCE,
        DataSource.PARLEMENT_EUROPEEN: REGISTRY_CONFIDENCE,
        DataSource.GOUVERNEMENT: REGISTRY_CONFIDENCE,
        DataSource.WIKIDATA: PIVOT_CONFIDENCE,
        DataSource.MANUAL: MANUAL_CONFIDENCE,
        DataSource.NOSDEPUTES: NAME_ONLY_CONFIDENCE,
        DataSource.HATVP: NAME_ONLY_CONFIDENCE,
        DataSource.RNE: NAME_ONLY_CONFIDENCE,
    }
)


def confidence_for(source: DataSource | str) -> LinkConfidence:
    """Return the link confidence for ``source``; unknown sources get the floor value."""

    try:
        resolved = DataSource(source)
    except ValueError:
        return DEFAULT_CONFIDENCE
    return CONFIDENCE_TABLE.get(resolved, DEFAULT_CONFIDENCE)
