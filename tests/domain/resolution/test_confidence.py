from __future__ import annotations

import pytest

from politrack.domain.model import DataSource, MatchMethod
from politrack.domain.resolution import CONFIDENCE_TABLE, confidence_for


@pytest.mark.parametrize(
    "registry",
    [DataSource.ASSEMBLEE_NATIONALE, DataSource.SENAT, DataSource.PARLEMENT_EUROPEEN],
)
@pytest.mark.parametrize("name_only", [DataSource.HATVP, DataSource.NOSDEPUTES, DataSource.RNE])
def test_registry_links_outrank_name_only_links(
    registry: DataSource, name_only: DataSource
) -> None:
    assert confidence_for(registry).confidence > confidence_for(name_only).confidence


def test_ordering_registry_pivot_manual_name_only() -> None:
    ordered = [
        confidence_for(DataSource.ASSEMBLEE_NATIONALE),
        confidence_for(DataSource.WIKIDATA),
        confidence_for(DataSource.MANUAL),
        confidence_for(DataSource.HATVP),
    ]

    values = [entry.confidence for entry in ordered]
    assert values == sorted(values, reverse=True)
    assert len(set(values)) == len(values)


def test_registry_link_is_certain_and_matched_by_identifier() -> None:
    registry = confidence_for(DataSource.SENAT)

    assert registry.confidence == 1.0
    assert registry.matched_by is MatchMethod.EXTERNAL_ID
    assert confidence_for(DataSource.WIKIDATA).matched_by is MatchMethod.WIKIDATA_PIVOT


def test_unknown_source_gets_the_floor_value() -> None:
    unknown = confidence_for("some_blog")

    assert unknown.confidence == 0.5
    assert unknown.matched_by is MatchMethod.NAME_ONLY


def test_every_source_has_a_confidence_in_range() -> None:
    for source in DataSource:
        assert source in CONFIDENCE_TABLE
        assert 0.0 <= confidence_for(source).confidence <= 1.0
