"""Entity resolution and reconciliation rules.

Everything in this package is pure: functions take domain records and return
decisions. Persistence and batching live in ``politrack.domain.linking``,
``politrack.domain.consistency`` and ``politrack.domain.jobs``.
"""

from __future__ import annotations

from .confidence import CONFIDENCE_TABLE, LinkConfidence, confidence_for
from .duplicates import DuplicatePair, detect_duplicate_affairs, score_pair
from .mandates import (
    OFFICE_RULES,
    ClosureReason,
    MandateClosure,
    MandateReconciliation,
    OfficeScope,
    SenateSeries,
    apply_closures,
    close_absent_from_roster,
    reconcile_mandates,
    renewal_boundary,
    senate_series,
)
from .matching import (
    AmbiguousMatch,
    ConfirmedMatch,
    MatchBasis,
    MatchOutcome,
    MatchStatus,
    NameIndex,
    NoMatch,
    match_candidate,
    require_single,
    within_tolerance,
)
from .merge import MergePlan, apply_merge, choose_survivor, plan_merge
from .normalize import name_keys, normalize_name, normalize_title

__all__ = [
    "CONFIDENCE_TABLE",
    "OFFICE_RULES",
    "AmbiguousMatch",
    "ClosureReason",
    "ConfirmedMatch",
    "DuplicatePair",
    "LinkConfidence",
    "MandateClosure",
    "MandateReconciliation",
    "MatchBasis",
    "MatchOutcome",
    "MatchStatus",
    "MergePlan",
    "NameIndex",
    "NoMatch",
    "OfficeScope",
    "SenateSeries",
    "apply_closures",
    "apply_merge",
    "choose_survivor",
    "close_absent_from_roster",
    "confidence_for",
    "detect_duplicate_affairs",
    "match_candidate",
    "name_keys",
    "normalize_name",
    "normalize_title",
    "plan_merge",
    "reconcile_mandates",
    "renewal_boundary",
    "require_single",
    "score_pair",
    "senate_series",
    "within_tolerance",
]
