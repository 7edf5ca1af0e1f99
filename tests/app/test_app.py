from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, cast

import pytest

from politrack.app import (
    WIKIDATA_PIVOT_JOB,
    WIKIDATA_SEARCH_JOB,
    detect_affair_duplicates,
    link_job_name,
    link_registry_records,
    merge_affair_duplicates,
    source_for_mandate_type,
    sync_roster,
    sync_wikidata,
)
from politrack.domain.model import DataSource, DuplicateConfidence, MandateType
from tests.helpers.records import make_affair, make_candidate, make_politician
from tests.helpers.rosters import assemblee_entry, write_roster
from tests.support.reconciliation import (
    FakePersonSearch,
    FakeRegistryPivot,
    InMemoryStore,
    MemoryCheckpointStore,
    fake_unit_of_work_factory,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from pathlib import Path

    from politrack.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from politrack.adapters.wikidata import WikidataClient
    from politrack.domain.model import CandidateRecord

type UowFactory = Callable[[], SqlAlchemyUnitOfWork]


class FakeWikidata:
    def __init__(
        self,
        results: Mapping[str, Sequence[CandidateRecord]],
        registry: Mapping[str, Mapping[DataSource, str]],
    ) -> None:
        self.search = FakePersonSearch(results)
        self.pivot = FakeRegistryPivot(registry)

    def search_people(self, name: str) -> list[CandidateRecord]:
        return self.search.search_people(name)

    def registry_ids(self, entity_ids: Sequence[str]) -> Mapping[str, Mapping[DataSource, str]]:
        return self.pivot.registry_ids(entity_ids)


def test_link_then_roster_import(sqlite_unit_of_work: UowFactory, tmp_path: Path) -> None:
    roster = write_roster(
        tmp_path / "an.jsonl",
        [
            assemblee_entry("PA1001", "Jean", "Dupont"),
            assemblee_entry("PA1002", "Anne", "Leroy", birth_date="1972-04-11"),
        ],
    )
    with sqlite_unit_of_work() as uow:
        uow.repositories.politicians.add(
            make_politician("Jean Dupont", birth_date=date(1960, 3, 4))
        )
        uow.commit()
    checkpoints = MemoryCheckpointStore()

    result = link_registry_records(
        source=DataSource.ASSEMBLEE_NATIONALE,
        input_path=roster,
        create_missing=True,
        unit_of_work_factory=sqlite_unit_of_work,
        checkpoint_store=checkpoints,
    )

    assert result.summary["linked"] == 1
    assert result.summary["created"] == 1
    assert checkpoints.saved[link_job_name(DataSource.ASSEMBLEE_NATIONALE)].processed_count == 2

    roster_result = sync_roster(
        mandate_type=MandateType.DEPUTE,
        input_path=roster,
        term_start=date(2024, 7, 18),
        as_of=date(2024, 9, 1),
        apply=True,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert roster_result.imported.recorded == 2
    assert roster_result.stale.closures == []
    with sqlite_unit_of_work() as uow:
        open_mandates = uow.repositories.mandates.list_open(MandateType.DEPUTE)
        assert {mandate.external_id for mandate in open_mandates} == {"PA1001", "PA1002"}


def test_roster_import_dry_run_writes_nothing(
    sqlite_unit_of_work: UowFactory,
    tmp_path: Path,
) -> None:
    roster = write_roster(tmp_path / "an.jsonl", [assemblee_entry()])
    with sqlite_unit_of_work() as uow:
        uow.repositories.politicians.add(
            make_politician("Jean Dupont", links={DataSource.ASSEMBLEE_NATIONALE: "PA1001"})
        )
        uow.commit()

    result = sync_roster(
        mandate_type=MandateType.DEPUTE,
        input_path=roster,
        term_start=date(2024, 7, 18),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert result.imported.recorded == 1
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.mandates.list_all() == []


def test_link_rejects_sources_without_roster(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="No roster format"):
        link_registry_records(
            source=DataSource.HATVP,
            input_path=tmp_path / "unused.jsonl",
            unit_of_work_factory=fake_unit_of_work_factory(InMemoryStore()),
            checkpoint_store=MemoryCheckpointStore(),
        )


def test_source_for_mandate_type() -> None:
    assert source_for_mandate_type(MandateType.SENATEUR) is DataSource.SENAT
    with pytest.raises(ValueError, match="No roster for maire"):
        source_for_mandate_type(MandateType.MAIRE)


def test_sync_wikidata_runs_search_then_pivot() -> None:
    store = InMemoryStore()
    politician = make_politician("Jean Dupont", birth_date=date(1960, 3, 2))
    store.politicians[politician.id] = politician
    wikidata = FakeWikidata(
        {
            "Jean Dupont": [
                make_candidate(
                    source=DataSource.WIKIDATA,
                    external_id="Q100",
                    birth_date=date(1960, 3, 2),
                )
            ]
        },
        {"Q100": {DataSource.ASSEMBLEE_NATIONALE: "PA1001"}},
    )
    checkpoints = MemoryCheckpointStore()

    search, pivot = sync_wikidata(
        client=cast("WikidataClient", wikidata),
        unit_of_work_factory=fake_unit_of_work_factory(store),
        checkpoint_store=checkpoints,
    )

    assert search.summary["linked"] == 1
    assert pivot.summary["linked"] == 1
    assert wikidata.pivot.calls == [["Q100"]]
    assert set(checkpoints.saved) == {WIKIDATA_SEARCH_JOB, WIKIDATA_PIVOT_JOB}
    link = politician.link_for(DataSource.ASSEMBLEE_NATIONALE)
    assert link is not None
    assert link.external_id == "PA1001"


def test_sync_wikidata_skips_pivot_when_cancelled() -> None:
    store = InMemoryStore()
    politician = make_politician("Jean Dupont")
    store.politicians[politician.id] = politician
    wikidata = FakeWikidata({}, {})

    results = sync_wikidata(
        client=cast("WikidataClient", wikidata),
        unit_of_work_factory=fake_unit_of_work_factory(store),
        checkpoint_store=MemoryCheckpointStore(),
        should_stop=lambda: True,
    )

    assert len(results) == 1
    assert results[0].cancelled
    assert wikidata.pivot.calls == []


def test_detect_then_merge_affairs() -> None:
    store = InMemoryStore()
    politician = make_politician()
    store.politicians[politician.id] = politician
    first = make_affair(
        politician.id,
        verdict_date=date(2020, 6, 29),
        source_urls=("https://example.org/a",),
    )
    second = make_affair(
        politician.id,
        verdict_date=date(2020, 6, 29),
        source_urls=("https://example.org/b",),
    )
    for affair in (first, second):
        store.affairs[affair.id] = affair
    factory = fake_unit_of_work_factory(store)

    pairs = detect_affair_duplicates(unit_of_work_factory=factory)
    report = merge_affair_duplicates(
        apply=True,
        created_by="operator",
        unit_of_work_factory=factory,
    )

    assert [pair.confidence for pair in pairs] == [DuplicateConfidence.CERTAIN]
    assert report.merged == 1
    assert len(store.affairs) == 1
    (survivor,) = store.affairs.values()
    assert survivor.source_urls() == {"https://example.org/a", "https://example.org/b"}
    assert store.merges[0].created_by == "operator"
