"""SQLAlchemy adapter package for politrack."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAffairRepository,
    SqlAlchemyDismissedDuplicateRepository,
    SqlAlchemyEntityMergeRepository,
    SqlAlchemyExternalLinkRepository,
    SqlAlchemyMandateRepository,
    SqlAlchemyPartyRepository,
    SqlAlchemyPoliticianRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyAffairRepository",
    "SqlAlchemyDismissedDuplicateRepository",
    "SqlAlchemyEntityMergeRepository",
    "SqlAlchemyExternalLinkRepository",
    "SqlAlchemyMandateRepository",
    "SqlAlchemyPartyRepository",
    "SqlAlchemyPoliticianRepository",
    "SqlAlchemyUnitOfWork",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
    "shutdown",
    "startup",
]
