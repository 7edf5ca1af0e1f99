"""Resolve one incoming candidate record against existing entities.

The strategy is deliberately narrow: exact equality of normalized names (with a
swapped "last first" fallback), then a birth/death date proximity tie-break for
homonyms. Nothing here guesses: several plausible entities always produce an
``AmbiguousMatch``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol

from politrack.domain.errors import AmbiguousMatchError

from .normalize import name_keys, normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from uuid import UUID

    from politrack.domain.model import CandidateRecord

log = logging.getLogger(__name__)

DEFAULT_TOLERANCE_DAYS = 5


class NamedPerson(Protocol):
    @property
    def id(self) -> UUID: ...

    @property
    def full_name(self) -> str: ...

    @property
    def first_name(self) -> str | None: ...

    @property
    def last_name(self) -> str | None: ...

    @property
    def birth_date(self) -> date | None: ...

    @property
    def death_date(self) -> date | None: ...


class MatchStatus(StrEnum):
    NO_MATCH = "no_match"
    CONFIRMED = "confirmed"
    AMBIGUOUS = "ambiguous"


class MatchBasis(StrEnum):
    """What the decision rests on."""

    EXACT_NAME = "exact_name"
    SWAPPED_NAME = "swapped_name"
    NAME_AND_BIRTH_DATE = "name_and_birth_date"
    NAME_AND_DEATH_DATE = "name_and_death_date"


@dataclass(slots=True, kw_only=True)
class NoMatch:
    reason: str | None = None
    status: Literal[MatchStatus.NO_MATCH] = MatchStatus.NO_MATCH

    @property
    def ambiguous(self) -> bool:
        return False


@dataclass(slots=True, kw_only=True)
class ConfirmedMatch[T: NamedPerson]:
    entity: T
    basis: MatchBasis
    status: Literal[MatchStatus.CONFIRMED] = MatchStatus.CONFIRMED

    @property
    def ambiguous(self) -> bool:
        return False


@dataclass(slots=True, kw_only=True)
class AmbiguousMatch[T: NamedPerson]:
    """Several entities share the name and the dates do not single one out."""

    candidates: tuple[T, ...]
    basis: MatchBasis
    reason: str | None = None
    status: Literal[MatchStatus.AMBIGUOUS] = MatchStatus.AMBIGUOUS

    def __post_init__(self) -> None:
        if len(self.candidates) < 2:
            raise ValueError("Ambiguous match must include at least two candidates")

    @property
    def ambiguous(self) -> bool:
        return True


type MatchOutcome[T: NamedPerson] = NoMatch | ConfirmedMatch[T] | AmbiguousMatch[T]


@dataclass(slots=True)
class NameIndex[T: NamedPerson]:
    """Normalized-name lookup over a pool of entities, built once per batch."""

    _by_key: dict[str, list[T]] = field(default_factory=lambda: defaultdict(list))

    @classmethod
    def build(cls, entities: Iterable[T]) -> NameIndex[T]:
        index = cls()
        for entity in entities:
            index.add(entity)
        return index

    def add(self, entity: T) -> None:
        keys = {normalize_name(entity.full_name)}
        if entity.first_name and entity.last_name:
            keys.add(normalize_name(f"{entity.first_name} {entity.last_name}"))
        for key in keys:
            if key:
                self._by_key[key].append(entity)

    def discard(self, entity: T) -> None:
        for bucket in self._by_key.values():
            if entity in bucket:
                bucket.remove(entity)

    def lookup(self, candidate: CandidateRecord) -> list[tuple[T, MatchBasis]]:
        keys = name_keys(
            candidate.name,
            first_name=candidate.first_name,
            last_name=candidate.last_name,
        )
        if not keys:
            return []
        found: list[tuple[T, MatchBasis]] = []
        seen: set[UUID] = set()
        for position, key in enumerate(keys):
            basis = MatchBasis.EXACT_NAME if position == 0 else MatchBasis.SWAPPED_NAME
            for entity in self._by_key.get(key, ()):
                if entity.id in seen:
                    continue
                seen.add(entity.id)
                found.append((entity, basis))
        return found


def within_tolerance(first: date, second: date, tolerance_days: int) -> bool:
    """Inclusive: dates exactly ``tolerance_days`` apart still agree."""
    return abs(first - second) <= timedelta(days=tolerance_days)


def _disagrees(left: date | None, right: date | None, tolerance_days: int) -> bool:
    if left is None or right is None:
        return False
    return not within_tolerance(left, right, tolerance_days)


def _agrees(left: date | None, right: date | None, tolerance_days: int) -> bool:
    if left is None or right is None:
        return False
    return within_tolerance(left, right, tolerance_days)


def match_candidate[T: NamedPerson](
    candidate: CandidateRecord,
    pool: NameIndex[T] | Iterable[T],
    *,
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
) -> MatchOutcome[T]:
    """Decide which existing entity, if any, ``candidate`` describes."""

    index = pool if isinstance(pool, NameIndex) else NameIndex.build(pool)
    found = index.lookup(candidate)

    if not found:
        return NoMatch(reason="no entity with this name")

    if len(found) == 1:
        entity, basis = found[0]
        # a lone namesake is accepted unless a date present on both sides disagrees
        if _disagrees(candidate.birth_date, entity.birth_date, tolerance_days):
            return NoMatch(reason="only namesake has a different birth date")
        if _disagrees(candidate.death_date, entity.death_date, tolerance_days):
            return NoMatch(reason="only namesake has a different death date")
        if _agrees(candidate.birth_date, entity.birth_date, tolerance_days):
            basis = MatchBasis.NAME_AND_BIRTH_DATE
        return ConfirmedMatch(entity=entity, basis=basis)

    homonyms = tuple(entity for entity, _ in found)
    survivors = [
        entity
        for entity in homonyms
        if _agrees(candidate.birth_date, entity.birth_date, tolerance_days)
    ]
    basis = MatchBasis.NAME_AND_BIRTH_DATE
    if not survivors and candidate.death_date is not None:
        survivors = [
            entity
            for entity in homonyms
            if _agrees(candidate.death_date, entity.death_date, tolerance_days)
        ]
        basis = MatchBasis.NAME_AND_DEATH_DATE

    if len(survivors) == 1:
        return ConfirmedMatch(entity=survivors[0], basis=basis)

    reason = (
        f"{len(homonyms)} namesakes, none within {tolerance_days} days"
        if not survivors
        else f"{len(survivors)} namesakes within {tolerance_days} days"
    )
    log.debug("Ambiguous match for %r: %s", candidate.name, reason)
    return AmbiguousMatch(candidates=homonyms, basis=basis, reason=reason)


def require_single[T: NamedPerson](
    candidate: CandidateRecord, outcome: MatchOutcome[T]
) -> T | None:
    """Return the matched entity, None for no match; raise when ambiguous."""

    match outcome:
        case ConfirmedMatch(entity=entity):
            return entity
        case AmbiguousMatch(candidates=candidates):
            raise AmbiguousMatchError(candidate.name, [entity.id for entity in candidates])
        case _:
            return None
