from __future__ import annotations

import asyncio
from typing import Any, List

import pytest


class FakeClock:
    """Monotonic clock that only moves when `sleep` is awaited."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds
        await asyncio.sleep(0)


class ScriptedSource:
    """Feed source replaying a fixed script of responses.

    Each step is a list of raw rows or an exception instance to raise.
    The last step repeats once the script is exhausted.
    """

    def __init__(self, steps: List[Any], clock: FakeClock | None = None) -> None:
        self.steps = list(steps)
        self.clock = clock
        self.calls: List[float] = []
        self.closed = False

    async def fetch_records(self):
        self.calls.append(self.clock() if self.clock else 0.0)
        step = self.steps[min(len(self.calls) - 1, len(self.steps) - 1)]
        if isinstance(step, Exception):
            raise step
        return [dict(r) for r in step]

    async def aclose(self) -> None:
        self.closed = True


def rows(*ids: int) -> list[dict]:
    return [{"event_id": i, "note": f"row {i}", "temp_c": 20.0} for i in ids]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scripted():
    return ScriptedSource


@pytest.fixture
def feed_rows():
    return rows
