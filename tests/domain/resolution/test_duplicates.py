from __future__ import annotations

from datetime import date, timedelta
from uuid import uuid4

from politrack.domain.model import (
    AffairCategory,
    DuplicateConfidence,
    DuplicateSignal,
    pair_key,
)
from politrack.domain.resolution import detect_duplicate_affairs, score_pair
from tests.helpers.records import make_affair

VERDICT = date(2021, 3, 1)


def test_identical_titles_same_day_are_certain() -> None:
    owner = uuid4()
    a = make_affair(owner, verdict_date=VERDICT)
    b = make_affair(owner, verdict_date=VERDICT)

    (pair,) = detect_duplicate_affairs([a, b])

    assert pair.confidence is DuplicateConfidence.CERTAIN
    assert pair.matched_by is DuplicateSignal.TITLE_EXACT
    assert pair.score == 1.0


def test_identical_titles_forty_days_apart_same_category_are_high() -> None:
    owner = uuid4()
    a = make_affair(owner, verdict_date=VERDICT)
    b = make_affair(owner, verdict_date=VERDICT + timedelta(days=40))

    (pair,) = detect_duplicate_affairs([a, b])

    assert pair.confidence is DuplicateConfidence.HIGH
    assert pair.score == 0.7


def test_affairs_of_different_politicians_are_never_compared() -> None:
    a = make_affair(uuid4(), verdict_date=VERDICT)
    b = make_affair(uuid4(), verdict_date=VERDICT)

    assert detect_duplicate_affairs([a, b]) == []


def test_dismissed_pairs_are_not_reported_again() -> None:
    owner = uuid4()
    a = make_affair(owner, verdict_date=VERDICT)
    b = make_affair(owner, verdict_date=VERDICT)

    assert detect_duplicate_affairs([a, b], dismissed={pair_key(b.id, a.id)}) == []


def test_matching_ecli_is_certain_regardless_of_titles() -> None:
    owner = uuid4()
    a = make_affair(owner, "Affaire Bygmalion", ecli="ECLI:FR:CCASS:2023:CR00123")
    b = make_affair(
        owner,
        "Financement de la campagne de 2012",
        category=AffairCategory.FINANCEMENT_ILLEGAL_CAMPAGNE,
        ecli=" ecli:fr:ccass:2023:cr00123 ",
    )

    scored = score_pair(a, b)

    assert scored == (1.0, DuplicateConfidence.CERTAIN, DuplicateSignal.ECLI)


def test_shared_case_number_is_high() -> None:
    owner = uuid4()
    a = make_affair(owner, "Première affaire")
    b = make_affair(owner, "Seconde affaire", category=AffairCategory.FRAUDE_FISCALE)
    a.case_numbers = {"17/012345"}
    b.case_numbers = {"17/012345", "18/000001"}

    scored = score_pair(a, b)

    assert scored is not None
    assert scored[1] is DuplicateConfidence.HIGH
    assert scored[2] is DuplicateSignal.CASE_NUMBER


def test_category_alone_falls_below_the_floor() -> None:
    owner = uuid4()
    a = make_affair(owner, "Affaire du logement de fonction")
    b = make_affair(owner, "Dossier des frais de mandat")

    assert detect_duplicate_affairs([a, b]) == []


def test_partial_title_with_close_dates_is_high() -> None:
    owner = uuid4()
    a = make_affair(owner, "Emplois fictifs au Parlement européen", verdict_date=VERDICT)
    b = make_affair(
        owner,
        "[À vérifier] Emplois fictifs au Parlement européen : condamnation en appel",
        verdict_date=VERDICT + timedelta(days=10),
    )

    (pair,) = detect_duplicate_affairs([a, b])

    assert pair.confidence is DuplicateConfidence.HIGH
    assert pair.matched_by is DuplicateSignal.TITLE_PARTIAL


def test_pairs_are_sorted_highest_score_first() -> None:
    owner = uuid4()
    a = make_affair(owner, verdict_date=VERDICT)
    b = make_affair(owner, verdict_date=VERDICT)
    c = make_affair(owner, verdict_date=VERDICT + timedelta(days=400))

    pairs = detect_duplicate_affairs([c, a, b])

    assert [pair.confidence for pair in pairs] == [
        DuplicateConfidence.CERTAIN,
        DuplicateConfidence.HIGH,
        DuplicateConfidence.HIGH,
    ]
    assert pairs[0].key == pair_key(a.id, b.id)


def test_score_outranks_confidence_bucket() -> None:
    first_owner = uuid4()
    a = make_affair(first_owner, verdict_date=VERDICT)
    b = make_affair(first_owner, verdict_date=VERDICT, category=AffairCategory.FRAUDE_FISCALE)
    second_owner = uuid4()
    c = make_affair(second_owner, "Pourvoi contre l'arrêt d'appel")
    d = make_affair(
        second_owner,
        "Arrêt de la chambre criminelle",
        category=AffairCategory.FRAUDE_FISCALE,
    )
    c.pourvoi_number = "22-81.234"
    d.pourvoi_number = "22-81.234"

    pairs = detect_duplicate_affairs([a, b, c, d])

    assert [(pair.confidence, pair.score) for pair in pairs] == [
        (DuplicateConfidence.HIGH, 0.95),
        (DuplicateConfidence.CERTAIN, 0.8),
    ]
    assert pairs[0].key == pair_key(c.id, d.id)
