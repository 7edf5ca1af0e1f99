from __future__ import annotations

import json
from typing import TYPE_CHECKING

from politrack.adapters.checkpoints import JsonCheckpointStore
from politrack.domain.jobs import Checkpoint, CheckpointStatus, resume_checkpoint

if TYPE_CHECKING:
    from pathlib import Path


def test_save_then_load(tmp_path: Path) -> None:
    store = JsonCheckpointStore(tmp_path / "checkpoints")
    checkpoint = Checkpoint.start("link-senat").advance("19000A").advance("19001B")

    store.save(checkpoint)

    assert store.load("link-senat") == checkpoint
    assert not list((tmp_path / "checkpoints").glob("*.tmp"))


def test_missing_checkpoint_loads_as_none(tmp_path: Path) -> None:
    assert JsonCheckpointStore(tmp_path).load("wikidata-search") is None


def test_job_name_is_sanitised_for_the_file_name(tmp_path: Path) -> None:
    store = JsonCheckpointStore(tmp_path)

    assert store.path_for("link/../senat").name == "link_.._senat.json"
    assert store.path_for("///").name == "job.json"


def test_unreadable_checkpoint_is_ignored(tmp_path: Path) -> None:
    store = JsonCheckpointStore(tmp_path)
    store.path_for("link-senat").write_text("{not json", encoding="utf-8")

    assert store.load("link-senat") is None


def test_checkpoint_of_another_job_is_ignored(tmp_path: Path) -> None:
    store = JsonCheckpointStore(tmp_path)
    payload = {"job_name": "link-assemblee_nationale", "processed_count": 4}
    store.path_for("link-senat").write_text(json.dumps(payload), encoding="utf-8")

    assert store.load("link-senat") is None


def test_completed_checkpoint_restarts_from_scratch(tmp_path: Path) -> None:
    store = JsonCheckpointStore(tmp_path)
    store.save(Checkpoint.start("wikidata-pivot").advance("Q1").complete())

    loaded = store.load("wikidata-pivot")

    assert loaded is not None
    assert loaded.status is CheckpointStatus.COMPLETED
    assert resume_checkpoint(store, "wikidata-pivot", resume=True) is None
    assert resume_checkpoint(store, "wikidata-pivot", resume=False) is None
