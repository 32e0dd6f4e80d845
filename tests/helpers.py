"""Fakes and record builders shared by the test modules."""

from __future__ import annotations

import asyncio
from typing import Any

from src.session_stats.models import SessionRecord
from src.usage_tracker.models import FetchOutcome, FetchResult, UsageSnapshot, UsageWindow


async def drain(rounds: int = 20) -> None:
    """Let every ready task run until the loop goes quiet."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """Simulated time for the poller's sleep function."""

    def __init__(self) -> None:
        self.now = 0.0
        self._sleepers: list[tuple[float, asyncio.Future[None]]] = []

    async def sleep(self, delay: float) -> None:
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now + delay, fut))
        await fut

    @property
    def pending(self) -> int:
        return sum(1 for _, fut in self._sleepers if not fut.done())

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            await drain()
            due = [s for s in self._sleepers if s[0] <= target]
            if not due:
                break
            entry = min(due, key=lambda s: s[0])
            self._sleepers.remove(entry)
            self.now = entry[0]
            if not entry[1].done():
                entry[1].set_result(None)
        self.now = target
        await drain()


class FakeFetcher:
    """Returns scripted FetchResults; can hold each call open on a gate."""

    def __init__(self, *results: FetchResult) -> None:
        self.results = list(results)
        self.calls = 0
        self.gates: list[asyncio.Event] = []
        self.hold = False

    def _next_result(self) -> FetchResult:
        if len(self.results) > 1:
            return self.results.pop(0)
        if self.results:
            return self.results[0]
        return FetchResult(outcome=FetchOutcome.TRANSIENT_FAILURE)

    async def fetch(self) -> FetchResult:
        # Bound at call time so completion order alone decides what gets stored.
        self.calls += 1
        result = self._next_result()
        if self.hold:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()
        return result


def make_snapshot(five_hour: float = 10.0, seven_day: float = 20.0) -> UsageSnapshot:
    return UsageSnapshot(
        five_hour=UsageWindow(utilization=five_hour, resets_at="2026-10-18T15:00:00Z"),
        seven_day=UsageWindow(utilization=seven_day, resets_at="2026-10-22T00:00:00Z"),
    )


def make_session(
    session_id: str,
    five_hour: float | None = None,
    seven_day: float = 0.0,
    total_tokens: int = 0,
    hidden: bool = False,
    with_usage: bool = True,
) -> SessionRecord:
    """Session with token usage; a usage delta only when ``five_hour`` is given."""
    token_usage: dict[str, Any] | None = None
    if with_usage:
        token_usage = {"totalTokens": total_tokens}
        if five_hour is not None:
            token_usage["usageDelta"] = {"fiveHourDelta": five_hour, "sevenDayDelta": seven_day}
    return SessionRecord.model_validate(
        {"id": session_id, "hidden": hidden, "tokenUsage": token_usage}
    )
