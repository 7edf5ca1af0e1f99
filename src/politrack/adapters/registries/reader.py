"""Read roster files: one JSON roster entry per line."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import ROSTER_ENTRY_ADAPTER

if TYPE_CHECKING:
    from pathlib import Path

    from politrack.domain.model import DataSource

    from .schema import RosterEntry

log = logging.getLogger(__name__)


class RosterFormatError(ValueError):
    """A roster file line does not describe a valid entry."""

    def __init__(self, path: Path, line_number: int, detail: str) -> None:
        super().__init__(f"{path}:{line_number}: {detail}")
        self.path = path
        self.line_number = line_number


def read_roster(path: Path, *, source: DataSource | None = None) -> list[RosterEntry]:
    """Parse every non-blank line; with ``source``, keep only that provider's entries."""

    entries: list[RosterEntry] = []
    skipped = 0
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                entry = ROSTER_ENTRY_ADAPTER.validate_json(line)
            except ValidationError as exc:
                raise RosterFormatError(path, line_number, str(exc)) from exc
            if source is not None and entry.provider != source:
                skipped += 1
                continue
            entries.append(entry)
    if skipped:
        log.info("Ignored %d entries from other providers in %s", skipped, path)
    log.info("Read %d roster entries from %s", len(entries), path)
    return entries
