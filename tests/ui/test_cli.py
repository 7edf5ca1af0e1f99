from __future__ import annotations

from datetime import date
from pathlib import Path
from uuid import uuid4

import pytest

from politrack.app import RosterSyncResult
from politrack.config import MissingConfigurationError
from politrack.domain.consistency import AffairMergeReport, RosterImportReport
from politrack.domain.model import DataSource, DuplicateConfidence, MandateType
from politrack.domain.resolution import MandateReconciliation
from politrack.ui import cli


@pytest.fixture(autouse=True)
def reset_stop_flag() -> None:
    cli.STOP.requested = False


def _capture(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    result: object = True,
) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake(*args: object, **kwargs: object) -> object:
        captured["args"] = args
        captured.update(kwargs)
        return result

    monkeypatch.setattr(cli, name, fake)
    return captured


def test_link_command_passes_options(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch, "link_registry_records")

    cli.main(
        [
            "link",
            "--source",
            "senat",
            "--input",
            "senat.jsonl",
            "--create-missing",
            "--limit",
            "10",
            "--dry-run",
        ]
    )

    assert captured["source"] is DataSource.SENAT
    assert captured["input_path"] == Path("senat.jsonl")
    assert captured["create_missing"] is True
    assert captured["limit"] == 10
    assert captured["resume"] is False
    assert captured["dry_run"] is True
    assert captured["should_stop"] is cli.STOP


def test_roster_command_parses_dates(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(
        monkeypatch,
        "sync_roster",
        RosterSyncResult(
            imported=RosterImportReport(),
            stale=MandateReconciliation(),
            reconciled=MandateReconciliation(),
        ),
    )

    cli.main(
        [
            "roster",
            "--type",
            "senateur",
            "--input",
            "senat.jsonl",
            "--term-start",
            "2023-10-01",
            "--as-of",
            "2024-02-01",
        ]
    )

    assert captured["mandate_type"] is MandateType.SENATEUR
    assert captured["term_start"] == date(2023, 10, 1)
    assert captured["as_of"] == date(2024, 2, 1)
    assert captured["apply"] is False


def test_dismiss_command_parses_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch, "dismiss_affair_duplicate")
    first, second = uuid4(), uuid4()

    cli.main(["affairs", "dismiss", str(first), str(second), "--operator", "alice"])

    assert captured["args"] == (first, second)
    assert captured["created_by"] == "alice"


def test_merge_defaults_to_certain_dry_run(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch, "merge_affair_duplicates", AffairMergeReport())

    cli.main(["affairs", "merge"])

    assert captured["min_confidence"] is DuplicateConfidence.CERTAIN
    assert captured["apply"] is False


@pytest.mark.parametrize(
    "argv",
    [
        ["mandates", "--as-of", "01/02/2024"],
        ["link", "--source", "senat", "--input", "x.jsonl", "--limit", "0"],
        ["affairs", "dismiss", "not-a-uuid", str(uuid4())],
    ],
)
def test_invalid_arguments_exit_with_2(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2


def test_dismissing_an_affair_against_itself_exits_with_2() -> None:
    affair_id = str(uuid4())

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["affairs", "dismiss", affair_id, affair_id])

    assert excinfo.value.code == 2


def test_configuration_error_exits_with_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(**_: object) -> None:
        raise MissingConfigurationError("Missing configuration for: POLITRACK_CONTACT")

    monkeypatch.setattr(cli, "sync_wikidata", fail)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["wikidata"])

    assert excinfo.value.code == 1


def test_bad_input_during_run_exits_with_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(**_: object) -> None:
        raise ValueError("roster.jsonl:3: invalid entry")

    monkeypatch.setattr(cli, "link_registry_records", fail)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["link", "--source", "assemblee_nationale", "--input", "roster.jsonl"])

    assert excinfo.value.code == 2


def test_second_interrupt_exits() -> None:
    cli.sigint_handler(2, None)
    assert cli.STOP()

    with pytest.raises(SystemExit) as excinfo:
        cli.sigint_handler(2, None)

    assert excinfo.value.code == 1

