"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import PersonSearch, RegistryPivot
from .persistence import (
    AffairRepository,
    DismissedDuplicateRepository,
    EntityMergeRepository,
    ExternalLinkRepository,
    MandateRepository,
    PartyRepository,
    PoliticianRepository,
    Repository,
)
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AffairRepository",
    "DismissedDuplicateRepository",
    "EntityMergeRepository",
    "ExternalLinkRepository",
    "MandateRepository",
    "PartyRepository",
    "PersonSearch",
    "PoliticianRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RegistryPivot",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
