from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from envfeed.schemas.event import BurstState, BurstStopReason

logger = logging.getLogger(__name__)

TickFn = Callable[[], Awaitable[bool]]
SleepFn = Callable[[float], Awaitable[None]]


class PollingBurst:
    """Bounded fixed-interval polling.

    Fires one tick immediately, then one every ``interval_s`` until a tick
    reports a new arrival, ``total_s`` has elapsed, or ``cancel()`` is called.
    A tick waking at or after the deadline stops the burst without firing.

    ``clock`` and ``sleep`` can be swapped for fakes; by default the wait
    between ticks also wakes early on cancel.
    """

    def __init__(
        self,
        tick: TickFn,
        interval_s: float,
        total_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[SleepFn] = None,
    ):
        self._tick = tick
        self.interval_s = interval_s
        self.total_s = total_s
        self._clock = clock
        self._sleep = sleep
        self._cancelled = asyncio.Event()

        self.state = BurstState.IDLE
        self.stop_reason: Optional[BurstStopReason] = None
        self.started_at: Optional[float] = None
        self.ticks = 0

    @property
    def active(self) -> bool:
        return self.state == BurstState.POLLING

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return self._clock() - self.started_at

    def _stop(self, reason: BurstStopReason) -> None:
        self.state = BurstState.STOPPED
        self.stop_reason = reason
        logger.info(f"[BURST] stopped reason={reason.value} ticks={self.ticks} elapsed={self.elapsed:.1f}s")

    def cancel(self) -> None:
        if self.state == BurstState.STOPPED:
            return
        self._stop(BurstStopReason.CANCELLED)
        self._cancelled.set()

    async def _wait(self, seconds: float) -> None:
        if self._sleep is not None:
            await self._sleep(seconds)
            return
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def _fire(self) -> bool:
        """Run one tick; True when the burst is over afterwards."""
        self.ticks += 1
        found = await self._tick()
        # cancel() may have landed while the tick was awaiting its fetch
        if self.state != BurstState.POLLING:
            return True
        if found:
            self._stop(BurstStopReason.NEW_ARRIVAL)
            return True
        return False

    async def run(self) -> Optional[BurstStopReason]:
        if self.state == BurstState.STOPPED and self.started_at is None:
            # cancelled before the first tick
            return self.stop_reason
        if self.state != BurstState.IDLE:
            raise RuntimeError("polling burst can only be run once")

        self.state = BurstState.POLLING
        self.started_at = self._clock()
        logger.info(f"[BURST] start interval={self.interval_s}s total={self.total_s}s")

        if await self._fire():
            return self.stop_reason

        while self.state == BurstState.POLLING:
            await self._wait(self.interval_s)
            if self.state != BurstState.POLLING:
                break
            if self.elapsed >= self.total_s:
                self._stop(BurstStopReason.TIMEOUT)
                break
            if await self._fire():
                break

        return self.stop_reason
