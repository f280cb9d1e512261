from __future__ import annotations

import asyncio

import pytest

from envfeed.schemas.event import BurstState, BurstStopReason
from envfeed.services.polling import PollingBurst


def _burst(clock, results, fired, interval_s=3.0, total_s=15.0) -> PollingBurst:
    async def tick() -> bool:
        fired.append(clock())
        return results.get(len(fired) - 1, False)

    return PollingBurst(tick, interval_s, total_s, clock=clock, sleep=clock.sleep)


def test_burst_times_out_after_deadline(clock) -> None:
    fired: list[float] = []
    burst = _burst(clock, {}, fired)

    reason = asyncio.run(burst.run())

    assert reason == BurstStopReason.TIMEOUT
    assert fired == [0.0, 3.0, 6.0, 9.0, 12.0]
    assert clock.now == 15.0
    assert burst.state == BurstState.STOPPED
    assert burst.ticks == 5


def test_burst_stops_on_first_new_arrival(clock) -> None:
    fired: list[float] = []
    burst = _burst(clock, {2: True}, fired)

    reason = asyncio.run(burst.run())

    assert reason == BurstStopReason.NEW_ARRIVAL
    assert fired == [0.0, 3.0, 6.0]


def test_burst_immediate_tick_can_finish_it(clock) -> None:
    fired: list[float] = []
    burst = _burst(clock, {0: True}, fired)

    assert asyncio.run(burst.run()) == BurstStopReason.NEW_ARRIVAL
    assert fired == [0.0]
    assert clock.now == 0.0


def test_burst_cancel_during_tick_stops_without_more_ticks(clock) -> None:
    fired: list[float] = []
    holder: dict = {}

    async def tick() -> bool:
        fired.append(clock())
        if len(fired) == 2:
            holder["burst"].cancel()
        return False

    burst = PollingBurst(tick, 3.0, 15.0, clock=clock, sleep=clock.sleep)
    holder["burst"] = burst

    assert asyncio.run(burst.run()) == BurstStopReason.CANCELLED
    assert fired == [0.0, 3.0]


def test_burst_cancel_wakes_default_wait() -> None:
    async def scenario():
        async def tick() -> bool:
            return False

        burst = PollingBurst(tick, interval_s=60.0, total_s=600.0)
        task = asyncio.create_task(burst.run())
        await asyncio.sleep(0.01)
        assert burst.active
        burst.cancel()
        return await asyncio.wait_for(task, timeout=1.0), burst

    reason, burst = asyncio.run(scenario())
    assert reason == BurstStopReason.CANCELLED
    assert burst.ticks == 1


def test_burst_runs_once(clock) -> None:
    burst = _burst(clock, {0: True}, [])
    asyncio.run(burst.run())
    with pytest.raises(RuntimeError):
        asyncio.run(burst.run())


def test_cancel_after_stop_keeps_reason(clock) -> None:
    burst = _burst(clock, {0: True}, [])
    asyncio.run(burst.run())
    burst.cancel()
    assert burst.stop_reason == BurstStopReason.NEW_ARRIVAL


def test_burst_cancelled_before_start_never_ticks(clock) -> None:
    fired: list[float] = []
    burst = _burst(clock, {}, fired)
    burst.cancel()

    assert asyncio.run(burst.run()) == BurstStopReason.CANCELLED
    assert fired == []
