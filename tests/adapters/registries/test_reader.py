from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from politrack.adapters.registries import (
    AssembleeRosterEntry,
    EuroparlRosterEntry,
    RosterFormatError,
    SenatRosterEntry,
    read_roster,
)
from politrack.domain.model import DataSource
from tests.helpers.rosters import assemblee_entry, write_roster

if TYPE_CHECKING:
    from pathlib import Path


SENAT_ENTRY = {
    "provider": "senat",
    "matricule": "19000A",
    "first_name": "Claire",
    "last_name": "Martin",
    "mandate_start": "2023-10-01",
    "department_code": "33",
}
EUROPARL_ENTRY = {
    "provider": "parlement_europeen",
    "mep_id": 124831,
    "full_name": "Anne Leroy",
    "mandate_start": "2024-07-16",
    "country": "FR",
}


def test_reads_each_provider_variant(tmp_path: Path) -> None:
    path = write_roster(
        tmp_path / "roster.jsonl",
        [assemblee_entry(), SENAT_ENTRY, EUROPARL_ENTRY],
    )

    entries = read_roster(path)

    assert [type(entry) for entry in entries] == [
        AssembleeRosterEntry,
        SenatRosterEntry,
        EuroparlRosterEntry,
    ]
    assert entries[0].birth_date == date(1960, 3, 2)
    assert isinstance(entries[2], EuroparlRosterEntry)
    assert entries[2].mep_id == "124831"
    assert entries[2].display_name == "Anne Leroy"


def test_source_filter_keeps_one_provider(tmp_path: Path) -> None:
    path = write_roster(tmp_path / "roster.jsonl", [assemblee_entry(), SENAT_ENTRY])

    entries = read_roster(path, source=DataSource.SENAT)

    assert len(entries) == 1
    assert isinstance(entries[0], SenatRosterEntry)


def test_blank_lines_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "roster.jsonl"
    write_roster(path, [assemblee_entry()])
    path.write_text("\n" + path.read_text(encoding="utf-8") + "\n\n", encoding="utf-8")

    assert len(read_roster(path)) == 1


def test_invalid_line_reports_line_number(tmp_path: Path) -> None:
    path = write_roster(
        tmp_path / "roster.jsonl",
        [assemblee_entry(), assemblee_entry(uid="not-a-uid")],
    )

    with pytest.raises(RosterFormatError) as excinfo:
        read_roster(path)

    assert excinfo.value.line_number == 2
    assert str(excinfo.value).startswith(f"{path}:2:")


def test_unknown_provider_is_a_format_error(tmp_path: Path) -> None:
    path = write_roster(
        tmp_path / "roster.jsonl",
        [{"provider": "hatvp", "mandate_start": "2024-01-01"}],
    )

    with pytest.raises(RosterFormatError):
        read_roster(path)
