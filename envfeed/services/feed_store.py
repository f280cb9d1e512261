from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from envfeed.config import FeedSettings
from envfeed.pipeline.feed_client import FeedError
from envfeed.pipeline.normalize import (
    clamp_index,
    detect_new_arrival,
    ingest,
    resolve_selection,
    summarize,
)
from envfeed.schemas.event import (
    BurstState,
    BurstStopReason,
    FeedSummary,
    FetchStatus,
    IngestOutcome,
    NormalizedEvent,
    SelectionPolicy,
)
from envfeed.services.polling import PollingBurst

logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    async def fetch_records(self) -> List[Dict[str, Any]]: ...

    async def aclose(self) -> None: ...


class EventFeedStore:
    """Owns the displayed record set, selection and status for one viewer session.

    All mutation happens on the event loop thread. While a fetch is in flight
    further refresh requests are dropped (returned as SKIPPED), which also
    keeps burst and background ticks from piling up requests.
    """

    def __init__(
        self,
        source: FeedSource,
        settings: Optional[FeedSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.source = source
        self.settings = settings or FeedSettings()
        self._clock = clock
        self._sleep = sleep

        self._events: List[NormalizedEvent] = []
        self._last_max_id = 0
        self._selected_index = 0
        self._status = "Not loaded yet."
        self._fetching = False

        self._burst: Optional[PollingBurst] = None
        self._burst_task: Optional[asyncio.Task] = None
        self._background_task: Optional[asyncio.Task] = None

    # ----------------------------
    # Read side (renderer)
    # ----------------------------

    def get_display_list(self) -> List[NormalizedEvent]:
        return list(self._events)

    def get_selected_index(self) -> int:
        return clamp_index(self._selected_index, len(self._events))

    def set_selected_index(self, index: int) -> int:
        self._selected_index = index
        return self.get_selected_index()

    def get_selected_event(self) -> Optional[NormalizedEvent]:
        if not self._events:
            return None
        return self._events[self.get_selected_index()]

    def get_status_message(self) -> str:
        return self._status

    @property
    def last_max_id(self) -> int:
        return self._last_max_id

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    def summary(self) -> FeedSummary:
        return summarize(self._events)

    # ----------------------------
    # Ingest
    # ----------------------------

    def apply_records(
        self,
        raw_list: Any,
        policy: SelectionPolicy = SelectionPolicy.PRESERVE,
    ) -> IngestOutcome:
        """Replace the record set with a freshly ingested one."""
        new_set = ingest(raw_list, strict_numeric=self.settings.strict_numeric)
        arrival = detect_new_arrival(self._last_max_id, new_set)

        previous = self.get_selected_event()
        self._selected_index = resolve_selection(
            previous.event_id if previous is not None else None,
            new_set,
            policy,
            previous_index=self._selected_index,
            previous_length=len(self._events),
        )
        self._events = new_set
        self._last_max_id = arrival.max_id

        if arrival.is_new_arrival:
            self._status = f"✅ New entry detected: id={arrival.max_id}"
        else:
            self._status = f"OK • {len(new_set)} valid events"

        logger.info(
            f"[INGEST] count={len(new_set)} max_id={arrival.max_id} "
            f"new={arrival.is_new_arrival} selected={self._selected_index}"
        )
        return IngestOutcome(
            status=FetchStatus.OK,
            count=len(new_set),
            max_id=arrival.max_id,
            is_new_arrival=arrival.is_new_arrival,
        )

    async def refresh(self, policy: SelectionPolicy = SelectionPolicy.PRESERVE) -> IngestOutcome:
        """One fetch + ingest cycle. Feed failures never propagate past here."""
        if self._fetching:
            logger.debug("[FETCH] skipped, request already in flight")
            return IngestOutcome(
                status=FetchStatus.SKIPPED,
                count=len(self._events),
                max_id=self._last_max_id,
            )

        self._fetching = True
        self._status = "Loading…"
        try:
            raw_list = await self.source.fetch_records()
        except FeedError as e:
            self._status = f"Fetch error: {e}"
            logger.warning(f"[FETCH] failed: {e}")
            return IngestOutcome(
                status=FetchStatus.ERROR,
                count=len(self._events),
                max_id=self._last_max_id,
                error=str(e),
            )
        finally:
            self._fetching = False

        return self.apply_records(raw_list, policy)

    # ----------------------------
    # Polling burst
    # ----------------------------

    @property
    def burst(self) -> Optional[PollingBurst]:
        return self._burst

    def burst_info(self) -> Dict[str, Any]:
        b = self._burst
        if b is None:
            return {"state": BurstState.IDLE.value, "reason": None, "ticks": 0, "elapsed_s": 0.0}
        return {
            "state": b.state.value,
            "reason": b.stop_reason.value if b.stop_reason else None,
            "ticks": b.ticks,
            "elapsed_s": round(b.elapsed, 3),
        }

    async def _burst_tick(self) -> bool:
        outcome = await self.refresh(SelectionPolicy.JUMP_TO_LATEST_ON_GROWTH)
        return outcome.status == FetchStatus.OK and outcome.is_new_arrival

    async def _run_burst(self, burst: PollingBurst) -> Optional[BurstStopReason]:
        reason = await burst.run()
        if reason == BurstStopReason.TIMEOUT and self._burst is burst:
            self._status = f"No new event detected in {round(burst.total_s)}s."
        return reason

    def start_burst(
        self,
        interval_ms: Optional[int] = None,
        total_ms: Optional[int] = None,
    ) -> PollingBurst:
        """Start a new burst, cancelling any running one. Needs a running loop."""
        self.cancel_burst(announce=False)

        interval_ms = self.settings.poll_interval_ms if interval_ms is None else interval_ms
        total_ms = self.settings.poll_total_ms if total_ms is None else total_ms

        burst = PollingBurst(
            self._burst_tick,
            interval_s=interval_ms / 1000.0,
            total_s=total_ms / 1000.0,
            clock=self._clock,
            sleep=self._sleep,
        )
        self._burst = burst
        self._status = "Refreshing… (polling for new entry)"
        self._burst_task = asyncio.create_task(self._run_burst(burst))
        return burst

    def cancel_burst(self, announce: bool = True) -> bool:
        b = self._burst
        if b is None or b.state == BurstState.STOPPED:
            return False
        b.cancel()
        if announce:
            self._status = "Polling cancelled."
        return True

    async def wait_burst(self) -> Optional[BurstStopReason]:
        if self._burst_task is None:
            return None
        return await self._burst_task

    # ----------------------------
    # Background polling
    # ----------------------------

    async def _background_loop(self, interval_s: float) -> None:
        sleep = self._sleep or asyncio.sleep
        while True:
            await sleep(interval_s)
            outcome = await self.refresh(SelectionPolicy.JUMP_TO_LATEST_ON_GROWTH)
            logger.debug(f"[POLL] background status={outcome.status.value}")

    def start_background_polling(self, interval_ms: Optional[int] = None) -> bool:
        interval_ms = self.settings.background_poll_ms if interval_ms is None else interval_ms
        if interval_ms <= 0:
            return False
        if self._background_task and not self._background_task.done():
            return False
        self._background_task = asyncio.create_task(self._background_loop(interval_ms / 1000.0))
        logger.info(f"[POLL] background every {interval_ms}ms")
        return True

    # ----------------------------
    # Teardown
    # ----------------------------

    async def aclose(self) -> None:
        self.cancel_burst(announce=False)
        tasks = [t for t in (self._burst_task, self._background_task) if t and not t.done()]
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._burst_task = None
        self._background_task = None
        await self.source.aclose()
