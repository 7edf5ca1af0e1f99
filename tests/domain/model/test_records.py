from __future__ import annotations

from datetime import date, timedelta
from uuid import uuid4

import pytest

from politrack.domain.model import DismissedDuplicate, pair_key
from tests.helpers.records import make_affair, make_mandate


def test_mandate_with_end_date_starts_closed() -> None:
    mandate = make_mandate(uuid4(), date(2017, 6, 21), end=date(2022, 6, 21))

    assert not mandate.is_current
    assert not mandate.is_open
    assert mandate.has_consistent_state


def test_mandate_close_sets_end_date_and_review_flag() -> None:
    mandate = make_mandate(uuid4(), date(2022, 6, 22))

    mandate.close(date(2024, 6, 9), needs_review=True)
    assert (mandate.end_date, mandate.is_current, mandate.needs_review) == (
        date(2024, 6, 9),
        False,
        True,
    )


def test_mandate_cannot_end_before_it_starts() -> None:
    mandate = make_mandate(uuid4(), date(2022, 6, 22))

    with pytest.raises(ValueError, match="before it starts"):
        mandate.close(date(2022, 6, 21))


def test_starts_near_uses_a_strict_window() -> None:
    mandate = make_mandate(uuid4(), date(2022, 6, 22))

    assert mandate.starts_near(date(2022, 7, 21), timedelta(days=30))
    assert not mandate.starts_near(date(2022, 7, 22), timedelta(days=30))


def test_affair_sources_are_unique_by_url() -> None:
    affair = make_affair(uuid4(), source_urls=("https://example.org/a", "https://example.org/a"))

    assert affair.source_urls() == {"https://example.org/a"}
    assert len(affair.sources) == 1


def test_affair_event_date_prefers_verdict() -> None:
    affair = make_affair(uuid4(), fact_date=date(2012, 1, 1), verdict_date=date(2020, 6, 29))

    assert affair.event_date == date(2020, 6, 29)


def test_dismissed_pair_is_order_independent() -> None:
    a, b = uuid4(), uuid4()

    assert DismissedDuplicate.for_pair(a, b).key == DismissedDuplicate.for_pair(b, a).key
    assert DismissedDuplicate.for_pair(a, b).key == pair_key(b, a)
    with pytest.raises(ValueError, match="itself"):
        DismissedDuplicate.for_pair(a, a)
