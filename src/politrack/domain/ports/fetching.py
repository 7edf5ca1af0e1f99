"""Ports for provider clients that supply candidate records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from politrack.domain.model import CandidateRecord, DataSource


class PersonSearch(Protocol):
    """Name search against a provider; raises ``ProviderError`` on failure."""

    def search_people(self, name: str) -> list[CandidateRecord]: ...


class RegistryPivot(Protocol):
    """Registry identifiers a knowledge graph records for the given entity ids.

    Implementations batch ``entity_ids`` up to their provider's per-call maximum.
    """

    def registry_ids(
        self, entity_ids: Sequence[str]
    ) -> Mapping[str, Mapping[DataSource, str]]: ...
