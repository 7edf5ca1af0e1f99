from __future__ import annotations

import asyncio

import pytest

from politrack.adapters.http_resilience import RequestPacer
from politrack.config import RateLimit


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_pacer_waits_out_the_remaining_interval() -> None:
    clock = FakeClock()
    pacer = RequestPacer(0.5, clock=clock, sleep=clock.sleep)

    async def three_requests() -> None:
        await pacer.wait()
        clock.now += 0.2
        await pacer.wait()
        await pacer.wait()

    asyncio.run(three_requests())

    assert clock.sleeps == pytest.approx([0.3, 0.5])


def test_pacer_state_survives_separate_event_loops() -> None:
    clock = FakeClock()
    pacer = RequestPacer(1.0, clock=clock, sleep=clock.sleep)

    asyncio.run(pacer.wait())
    asyncio.run(pacer.wait())

    assert clock.sleeps == [1.0]


def test_pacer_from_ratelimit() -> None:
    assert RequestPacer.from_ratelimit(None) is None
    pacer = RequestPacer.from_ratelimit(RateLimit(max_calls=4, per_seconds=2.0))
    assert pacer is not None
    assert pacer.interval == 0.5
