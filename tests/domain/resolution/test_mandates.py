from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest

from politrack.domain.model import MandateType
from politrack.domain.resolution import (
    ClosureReason,
    SenateSeries,
    apply_closures,
    close_absent_from_roster,
    reconcile_mandates,
    renewal_boundary,
    senate_series,
)
from politrack.domain.resolution.mandates import title_specificity
from tests.helpers.records import make_mandate

AS_OF = date(2024, 6, 1)


def test_later_mandate_stays_open_and_earlier_ends_when_it_starts() -> None:
    politician_id = uuid4()
    earlier = make_mandate(politician_id, date(2022, 1, 1))
    later = make_mandate(politician_id, date(2024, 1, 1))

    reconciliation = reconcile_mandates([earlier, later], as_of=AS_OF)
    apply_closures(reconciliation)

    assert later.is_open
    assert earlier.end_date == date(2024, 1, 1)
    assert not earlier.is_current
    (closure,) = reconciliation.closures
    assert closure.reason is ClosureReason.SUPERSEDED
    assert closure.survivor_id == later.id


def test_reconciler_does_not_mutate_before_apply() -> None:
    politician_id = uuid4()
    earlier = make_mandate(politician_id, date(2022, 1, 1))
    later = make_mandate(politician_id, date(2024, 1, 1))

    reconcile_mandates([earlier, later], as_of=AS_OF)

    assert earlier.is_open


def test_deputy_and_senator_share_one_category() -> None:
    politician_id = uuid4()
    senator = make_mandate(
        politician_id,
        date(2014, 10, 1),
        mandate_type=MandateType.SENATEUR,
        title="Sénateur de Paris",
        department_code="75",
    )
    deputy = make_mandate(politician_id, date(2017, 6, 21), constituency="Paris (1re)")

    reconciliation = reconcile_mandates([senator, deputy], as_of=AS_OF)

    (closure,) = reconciliation.closures
    assert closure.mandate is senator
    assert closure.reason is ClosureReason.SUPERSEDED
    assert closure.end_date == date(2017, 6, 21)


def test_replaced_senator_ends_at_the_last_renewal_before_the_new_mandate() -> None:
    politician_id = uuid4()
    senator = make_mandate(
        politician_id,
        date(2008, 10, 1),
        mandate_type=MandateType.SENATEUR,
        title="Sénateur de Paris",
        department_code="75",
    )
    deputy = make_mandate(politician_id, date(2022, 6, 22), constituency="Paris (1re)")

    (closure,) = reconcile_mandates([senator, deputy], as_of=AS_OF).closures

    assert closure.reason is ClosureReason.SENATE_RENEWAL
    assert closure.end_date == date(2020, 10, 1)


def test_overlapping_senate_terms_do_not_overlap_after_reconciliation() -> None:
    politician_id = uuid4()
    first_term = make_mandate(
        politician_id,
        date(2011, 10, 1),
        mandate_type=MandateType.SENATEUR,
        title="Sénateur de l'Ain",
        department_code="01",
    )
    second_term = make_mandate(
        politician_id,
        date(2017, 10, 1),
        mandate_type=MandateType.SENATEUR,
        title="Sénateur de l'Ain",
        department_code="01",
    )

    reconciliation = reconcile_mandates([first_term, second_term], as_of=date(2025, 1, 1))
    apply_closures(reconciliation)

    (closure,) = reconciliation.closures
    assert closure.mandate is first_term
    assert closure.reason is ClosureReason.SENATE_RENEWAL
    assert first_term.end_date == date(2017, 10, 1)
    assert first_term.end_date <= second_term.start_date
    assert second_term.is_open


def test_more_specific_title_survives() -> None:
    politician_id = uuid4()
    specific = make_mandate(politician_id, date(2017, 6, 21), constituency="Gironde (3e)")
    generic = make_mandate(politician_id, date(2022, 6, 22))

    assert title_specificity(specific) > title_specificity(generic)
    (closure,) = reconcile_mandates([specific, generic], as_of=AS_OF).closures
    assert closure.mandate is generic
    assert closure.end_date == date(2022, 6, 22)


def test_singleton_office_is_exclusive_across_politicians() -> None:
    first = make_mandate(
        uuid4(),
        date(2017, 5, 14),
        mandate_type=MandateType.PREMIER_MINISTRE,
        title="Premier ministre",
    )
    second = make_mandate(
        uuid4(),
        date(2020, 7, 3),
        mandate_type=MandateType.PREMIER_MINISTRE,
        title="Premier ministre",
    )

    (closure,) = reconcile_mandates([first, second], as_of=AS_OF).closures

    assert closure.mandate is first
    assert closure.end_date == date(2020, 7, 3)


def test_councillor_mandates_are_not_exclusive() -> None:
    politician_id = uuid4()
    mandates = [
        make_mandate(
            politician_id,
            start,
            mandate_type=MandateType.CONSEILLER_MUNICIPAL,
            title="Conseiller municipal",
        )
        for start in (date(2014, 3, 30), date(2020, 6, 28))
    ]

    assert reconcile_mandates(mandates, as_of=AS_OF).closures == []


def test_pre_constitution_mandate_gets_a_phantom_end_and_review_flag() -> None:
    old = make_mandate(uuid4(), date(1951, 7, 4))

    reconciliation = reconcile_mandates([old], as_of=AS_OF)
    apply_closures(reconciliation)

    assert old.end_date == date(1951, 7, 5)
    assert old.needs_review
    assert reconciliation.closures[0].reason is ClosureReason.PRE_CONSTITUTIONAL


def test_inconsistent_flags_are_repaired_and_dateless_closures_flagged() -> None:
    politician_id = uuid4()
    inconsistent = make_mandate(politician_id, date(2012, 6, 17), end=date(2017, 6, 20))
    inconsistent.is_current = True
    dateless = make_mandate(politician_id, date(2007, 6, 17))
    dateless.is_current = False

    reconciliation = reconcile_mandates([inconsistent, dateless], as_of=AS_OF)
    apply_closures(reconciliation)

    assert reconciliation.closures[0].reason is ClosureReason.INCONSISTENT_FLAG
    assert inconsistent.has_consistent_state
    assert reconciliation.flagged == [dateless]
    assert dateless.needs_review
    assert reconciliation.counts() == {ClosureReason.INCONSISTENT_FLAG: 1, "flagged": 1}


def test_end_date_before_start_is_flagged_instead_of_closed() -> None:
    reversed_dates = make_mandate(uuid4(), date(2017, 6, 21), end=date(2012, 6, 17))
    reversed_dates.is_current = True
    healthy = make_mandate(uuid4(), date(2022, 6, 22))

    reconciliation = reconcile_mandates([reversed_dates, healthy], as_of=AS_OF)
    applied = apply_closures(reconciliation)

    assert applied == 0
    assert reconciliation.flagged == [reversed_dates]
    assert reversed_dates.needs_review
    assert reversed_dates.end_date == date(2012, 6, 17)
    assert healthy.is_open


def test_close_rejects_an_end_before_the_start() -> None:
    mandate = make_mandate(uuid4(), date(2022, 6, 22))

    with pytest.raises(ValueError, match="cannot end"):
        mandate.close(date(2022, 1, 1))


@pytest.mark.parametrize(
    ("constituency", "department_code", "expected"),
    [
        ("Paris (série 2)", None, SenateSeries.SERIES_2),
        ("Ain - Serie 1", "75", SenateSeries.SERIES_1),
        (None, "01", SenateSeries.SERIES_1),
        (None, "75", SenateSeries.SERIES_2),
        (None, "2a", SenateSeries.SERIES_1),
        (None, None, SenateSeries.SERIES_1),
    ],
)
def test_senate_series(
    constituency: str | None, department_code: str | None, expected: SenateSeries
) -> None:
    assert senate_series(constituency, department_code) is expected


def test_renewal_boundary() -> None:
    assert renewal_boundary(
        SenateSeries.SERIES_1, after=date(2015, 1, 1), not_after=date(2024, 1, 1)
    ) == date(2023, 10, 1)
    assert renewal_boundary(
        SenateSeries.SERIES_1, after=date(2015, 1, 1), not_after=date(2023, 9, 1)
    ) == date(2017, 10, 1)
    assert (
        renewal_boundary(SenateSeries.SERIES_1, after=date(2018, 1, 1), not_after=date(2023, 9, 1))
        is None
    )


def test_roster_closes_absent_deputies_at_term_start() -> None:
    term_start = date(2024, 7, 18)
    gone = make_mandate(uuid4(), date(2022, 6, 22), external_id="PA1")
    kept = make_mandate(uuid4(), date(2022, 6, 22), external_id="PA2")
    late = make_mandate(uuid4(), date(2024, 9, 1), external_id="PA3")
    unknown = make_mandate(uuid4(), date(2022, 6, 22))

    reconciliation = close_absent_from_roster(
        [gone, kept, late, unknown],
        mandate_type=MandateType.DEPUTE,
        roster_ids={"PA2"},
        term_start=term_start,
        as_of=AS_OF,
    )

    (closure,) = reconciliation.closures
    assert closure.mandate is gone
    assert closure.end_date == term_start
    assert closure.reason is ClosureReason.ABSENT_FROM_ROSTER
    assert reconciliation.flagged == [late]


def test_roster_closes_absent_senators_at_their_renewal() -> None:
    senator = make_mandate(
        uuid4(),
        date(2017, 10, 1),
        mandate_type=MandateType.SENATEUR,
        title="Sénateur",
        department_code="01",
        external_id="19000A",
    )

    reconciliation = close_absent_from_roster(
        [senator],
        mandate_type=MandateType.SENATEUR,
        roster_ids={"20000B"},
        term_start=date(2023, 10, 1),
        as_of=AS_OF,
    )

    (closure,) = reconciliation.closures
    assert closure.end_date == date(2023, 10, 1)
