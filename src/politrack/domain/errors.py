"""Error taxonomy shared by the reconciliation jobs.

``NoMatch`` and ``AmbiguousMatch`` are ordinary outcomes (see
``politrack.domain.resolution.matching``); the classes below are raised. Fatal
configuration problems live in ``politrack.config.errors`` and are never caught by
the job runner.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


class ReconciliationError(RuntimeError):
    """Base class for recoverable, per-record reconciliation failures."""


class AmbiguousMatchError(ReconciliationError):
    """Raised when a caller demands a single entity but several are plausible."""

    def __init__(self, name: str, candidate_ids: Sequence[UUID]) -> None:
        ids = ", ".join(str(candidate_id) for candidate_id in candidate_ids)
        super().__init__(f"Ambiguous match for {name!r}: {ids}")
        self.name = name
        self.candidate_ids = tuple(candidate_ids)


class ConflictingExternalIdError(ReconciliationError):
    """An external identifier already belongs to a different record."""

    def __init__(
        self,
        *,
        source: str,
        external_id: str,
        existing_owner_id: UUID,
        requested_owner_id: UUID,
    ) -> None:
        super().__init__(
            f"{source} id {external_id!r} already belongs to {existing_owner_id}; "
            f"refusing to link it to {requested_owner_id}"
        )
        self.source = source
        self.external_id = external_id
        self.existing_owner_id = existing_owner_id
        self.requested_owner_id = requested_owner_id


class ProviderError(RuntimeError):
    """A provider call failed or returned an unusable payload for one record."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class MergeError(ReconciliationError):
    """A merge request is inconsistent (self-merge, different owners, missing record)."""
