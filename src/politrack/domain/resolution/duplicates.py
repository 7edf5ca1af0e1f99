"""Find affairs that probably describe the same real event.

Only affairs of the same politician are compared. Judicial identifiers decide on
their own when they agree; otherwise a weighted score is built from the title,
the defining event date and the category.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from itertools import combinations
from typing import TYPE_CHECKING, Final

from politrack.domain.model import DuplicateConfidence, DuplicateSignal, pair_key

from .matching import within_tolerance
from .normalize import normalize_title

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable
    from uuid import UUID

    from politrack.domain.model import Affair

log = logging.getLogger(__name__)

TITLE_EXACT_WEIGHT: Final = 0.5
TITLE_PARTIAL_WEIGHT: Final = 0.4
EVENT_DATE_WEIGHT: Final = 0.3
CATEGORY_WEIGHT: Final = 0.2

ECLI_SCORE: Final = 1.0
POURVOI_SCORE: Final = 0.95
CASE_NUMBER_SCORE: Final = 0.8

DEFAULT_DATE_TOLERANCE_DAYS: Final = 30
DEFAULT_SCORE_FLOOR: Final = 0.4
# containment on very short titles ("Affaire X") is noise
MIN_PARTIAL_TITLE_LENGTH: Final = 10


type PairScore = tuple[float, DuplicateConfidence, DuplicateSignal]


@dataclass(frozen=True, slots=True, kw_only=True)
class DuplicatePair:
    first: Affair
    second: Affair
    score: float
    confidence: DuplicateConfidence
    matched_by: DuplicateSignal

    @property
    def key(self) -> tuple[UUID, UUID]:
        return pair_key(self.first.id, self.second.id)


@dataclass(frozen=True, slots=True)
class _Signals:
    title_exact: bool
    title_partial: bool
    dates_agree: bool
    same_category: bool


def _titles(a: Affair, b: Affair) -> tuple[bool, bool]:
    left = normalize_title(a.title)
    right = normalize_title(b.title)
    if not left or not right:
        return False, False
    if left == right:
        return True, False
    shorter = min(left, right, key=len)
    if len(shorter) < MIN_PARTIAL_TITLE_LENGTH:
        return False, False
    return False, left in right or right in left


def _signals(a: Affair, b: Affair, tolerance_days: int) -> _Signals:
    title_exact, title_partial = _titles(a, b)
    left_date = a.event_date
    right_date = b.event_date
    dates_agree = (
        left_date is not None
        and right_date is not None
        and within_tolerance(left_date, right_date, tolerance_days)
    )
    return _Signals(
        title_exact=title_exact,
        title_partial=title_partial,
        dates_agree=dates_agree,
        same_category=a.category == b.category,
    )


def _identifier_match(a: Affair, b: Affair) -> PairScore | None:
    if a.ecli and b.ecli and a.ecli.strip().upper() == b.ecli.strip().upper():
        return ECLI_SCORE, DuplicateConfidence.CERTAIN, DuplicateSignal.ECLI
    if (
        a.pourvoi_number
        and b.pourvoi_number
        and a.pourvoi_number.strip() == b.pourvoi_number.strip()
    ):
        return POURVOI_SCORE, DuplicateConfidence.HIGH, DuplicateSignal.POURVOI_NUMBER
    if a.case_numbers & b.case_numbers:
        return CASE_NUMBER_SCORE, DuplicateConfidence.HIGH, DuplicateSignal.CASE_NUMBER
    return None


def score_pair(
    a: Affair,
    b: Affair,
    *,
    date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
) -> PairScore | None:
    """Score one pair; None when nothing at all links the two affairs."""

    identified = _identifier_match(a, b)
    if identified is not None:
        return identified

    signals = _signals(a, b, date_tolerance_days)
    contributions: dict[DuplicateSignal, float] = {}
    if signals.title_exact:
        contributions[DuplicateSignal.TITLE_EXACT] = TITLE_EXACT_WEIGHT
    elif signals.title_partial:
        contributions[DuplicateSignal.TITLE_PARTIAL] = TITLE_PARTIAL_WEIGHT
    if signals.dates_agree:
        contributions[DuplicateSignal.EVENT_DATE] = EVENT_DATE_WEIGHT
    if signals.same_category:
        contributions[DuplicateSignal.CATEGORY] = CATEGORY_WEIGHT
    if not contributions:
        return None

    score = min(1.0, round(sum(contributions.values()), 6))
    # first key wins on equal weight, so insertion order above is the tie-break
    top_signal = max(contributions, key=lambda signal: contributions[signal])

    title_close = signals.title_exact or signals.title_partial
    if signals.title_exact and signals.dates_agree:
        confidence = DuplicateConfidence.CERTAIN
    elif title_close and (signals.dates_agree or signals.same_category):
        confidence = DuplicateConfidence.HIGH
    else:
        confidence = DuplicateConfidence.POSSIBLE
    return score, confidence, top_signal


def detect_duplicate_affairs(
    affairs: Iterable[Affair],
    *,
    dismissed: Collection[tuple[UUID, UUID]] = (),
    date_tolerance_days: int = DEFAULT_DATE_TOLERANCE_DAYS,
    floor: float = DEFAULT_SCORE_FLOOR,
) -> list[DuplicatePair]:
    """Return likely duplicate pairs, highest score first.

    ``dismissed`` holds sorted id pairs (see ``pair_key``) an operator already
    rejected; they are never reported again. Pairs scoring below ``floor`` are
    dropped.
    """

    by_politician: dict[UUID, list[Affair]] = defaultdict(list)
    for affair in affairs:
        by_politician[affair.politician_id].append(affair)

    dismissed_keys = set(dismissed)
    pairs: list[DuplicatePair] = []
    for group in by_politician.values():
        if len(group) < 2:
            continue
        for a, b in combinations(group, 2):
            if pair_key(a.id, b.id) in dismissed_keys:
                continue
            scored = score_pair(a, b, date_tolerance_days=date_tolerance_days)
            if scored is None:
                continue
            score, confidence, signal = scored
            if score < floor:
                continue
            pairs.append(
                DuplicatePair(
                    first=a,
                    second=b,
                    score=score,
                    confidence=confidence,
                    matched_by=signal,
                )
            )

    pairs.sort(
        key=lambda pair: (
            -pair.score,
            -pair.confidence.rank,
            str(pair.key[0]),
            str(pair.key[1]),
        )
    )
    log.info("Duplicate detection found %d candidate pairs", len(pairs))
    return pairs
