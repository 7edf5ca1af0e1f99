"""Public domain model surface."""

from __future__ import annotations

from politrack.domain.model.affairs import Affair, AffairEvent, AffairPressLink, AffairSource
from politrack.domain.model.audit import DismissedDuplicate, EntityMerge, pair_key
from politrack.domain.model.candidates import CandidateRecord, RosterSeat
from politrack.domain.model.entity import Entity, new_id, utcnow
from politrack.domain.model.enums import (
    AffairCategory,
    DataSource,
    DuplicateConfidence,
    DuplicateSignal,
    EntityType,
    MandateType,
    MatchMethod,
    MergeReason,
)
from politrack.domain.model.external_links import (
    ExternalLink,
    ExternallyLinked,
    ExternallyLinkedMixin,
)
from politrack.domain.model.politics import Mandate, Party, Politician

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "utcnow",
    # enums
    "AffairCategory",
    "DataSource",
    "DuplicateConfidence",
    "DuplicateSignal",
    "EntityType",
    "MandateType",
    "MatchMethod",
    "MergeReason",
    # external links
    "ExternalLink",
    "ExternallyLinked",
    "ExternallyLinkedMixin",
    # politics
    "Mandate",
    "Party",
    "Politician",
    # affairs
    "Affair",
    "AffairEvent",
    "AffairPressLink",
    "AffairSource",
    # audit
    "DismissedDuplicate",
    "EntityMerge",
    "pair_key",
    # boundary
    "CandidateRecord",
    "RosterSeat",
]
