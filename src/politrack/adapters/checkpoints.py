"""Checkpoint persistence as one JSON document per job."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, ValidationError

from politrack.domain.jobs import Checkpoint, CheckpointStatus
from politrack.domain.model import utcnow

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class CheckpointDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job_name: str
    last_key: str | None = None
    processed_count: int = 0
    status: CheckpointStatus = CheckpointStatus.RUNNING
    updated_at: datetime | None = None

    @classmethod
    def from_checkpoint(cls, checkpoint: Checkpoint) -> CheckpointDocument:
        return cls(
            job_name=checkpoint.job_name,
            last_key=checkpoint.last_key,
            processed_count=checkpoint.processed_count,
            status=checkpoint.status,
            updated_at=utcnow(),
        )

    def to_checkpoint(self) -> Checkpoint:
        return Checkpoint(
            job_name=self.job_name,
            last_key=self.last_key,
            processed_count=self.processed_count,
            status=self.status,
        )


class JsonCheckpointStore:
    """Stores ``<directory>/<job_name>.json``; each save replaces the file atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, job_name: str) -> Path:
        safe_name = _UNSAFE_CHARS.sub("_", job_name).strip("_") or "job"
        return self.directory / f"{safe_name}.json"

    def load(self, job_name: str) -> Checkpoint | None:
        path = self.path_for(job_name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            document = CheckpointDocument.model_validate_json(raw)
        except ValidationError:
            log.warning("Ignoring unreadable checkpoint %s", path)
            return None
        if document.job_name != job_name:
            log.warning(
                "Checkpoint %s belongs to %r, not %r; ignoring it",
                path,
                document.job_name,
                job_name,
            )
            return None
        return document.to_checkpoint()

    def save(self, checkpoint: Checkpoint) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(checkpoint.job_name)
        tmp_path = path.with_suffix(".json.tmp")
        payload = CheckpointDocument.from_checkpoint(checkpoint).model_dump_json(indent=2)
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)
        log.debug(
            "Saved checkpoint %s at %s (%d processed)",
            checkpoint.job_name,
            checkpoint.last_key,
            checkpoint.processed_count,
        )


if TYPE_CHECKING:
    from politrack.domain.jobs import CheckpointStore

    _store_check: CheckpointStore = JsonCheckpointStore(Path())
