"""Background poller that keeps the latest usage snapshot fresh.

- Immediate fetch on start, then one fetch every ``interval`` seconds
- ``refresh()`` for out-of-band fetches (e.g. after a chat turn completes)
- Listeners get a UsageEvent whenever the snapshot or availability changes

Interval and manual fetches are not serialized: whichever response lands
last is the one stored.  Results of fetches that were in flight when
``stop()`` ran are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from src.config import settings
from src.usage_tracker.client import UsageFetcher
from src.usage_tracker.models import (
    FetchOutcome,
    FetchResult,
    UsageAvailability,
    UsageEvent,
    UsageEventKind,
    UsageSnapshot,
    UsageState,
)

logger = logging.getLogger(__name__)

UsageListener = Callable[[UsageEvent], None]
SleepFn = Callable[[float], Awaitable[Any]]


class UsagePoller:
    """Owns the fetch timer and the single stored snapshot."""

    def __init__(
        self,
        fetcher: UsageFetcher,
        interval: float | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.fetcher = fetcher
        self.interval = float(interval or settings.usage_poll_interval)
        self._sleep = sleep

        self._timer: asyncio.Task[None] | None = None
        self._fetches: set[asyncio.Task[UsageState]] = set()
        # Bumped by stop(); fetches started under an older generation are discarded.
        self._generation = 0
        self._in_flight = 0

        self._snapshot: UsageSnapshot | None = None
        self._availability = UsageAvailability.UNKNOWN
        self._last_updated: str | None = None
        self._last_outcome: FetchOutcome | None = None
        self._listeners: list[UsageListener] = []

    @property
    def running(self) -> bool:
        return self._timer is not None

    # ── Lifecycle ────────────────────────────────────────────────────────

    def start(self) -> None:
        """Fetch now and arm the recurring timer. Must run inside an event loop."""
        if self._timer is not None:
            return
        self._spawn_fetch()
        self._timer = asyncio.create_task(self._timer_loop(), name="usage-poller")
        logger.info("Usage poller started (interval=%ss)", self.interval)

    def stop(self) -> None:
        """Cancel the timer. Safe before start() and when already stopped."""
        self._generation += 1
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        logger.info("Usage poller stopped")

    async def aclose(self) -> None:
        """Stop and wait for the timer and any in-flight fetch tasks to settle."""
        timer = self._timer
        self.stop()
        pending: list[asyncio.Task[Any]] = list(self._fetches)
        if timer is not None:
            pending.append(timer)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def refresh(self) -> UsageState:
        """Fetch immediately without touching the timer schedule."""
        self._in_flight += 1
        return await self._run_fetch(self._generation)

    def current(self) -> UsageState:
        return UsageState(
            snapshot=self._snapshot,
            availability=self._availability,
            is_loading=self._in_flight > 0,
            last_updated=self._last_updated,
            last_outcome=self._last_outcome,
        )

    # ── Listeners ────────────────────────────────────────────────────────

    def subscribe(self, listener: UsageListener) -> Callable[[], None]:
        """Register *listener*; the returned callable unregisters it.

        Listeners are plain synchronous callables invoked inline from the
        fetch task. A coroutine function here would never be awaited.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, kind: UsageEventKind) -> None:
        event = UsageEvent(kind=kind, state=self.current())
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Usage listener error")

    # ── Internals ────────────────────────────────────────────────────────

    async def _timer_loop(self) -> None:
        while True:
            await self._sleep(self.interval)
            self._spawn_fetch()

    def _spawn_fetch(self) -> None:
        # Counted before scheduling so current() reports loading right after start().
        self._in_flight += 1
        task = asyncio.create_task(self._run_fetch(self._generation))
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)

    async def _run_fetch(self, generation: int) -> UsageState:
        """Run one fetch. The caller has already counted it in ``_in_flight``."""
        try:
            result = await self.fetcher.fetch()
        except Exception as e:
            # Fetchers are supposed to classify everything; treat leaks as a blip.
            logger.warning("Usage fetcher raised, skipping this cycle: %s", e)
            result = FetchResult(outcome=FetchOutcome.TRANSIENT_FAILURE, detail=str(e))
        finally:
            self._in_flight -= 1

        if generation != self._generation:
            logger.debug("Dropping usage result from a stopped poller")
            return self.current()

        self._apply(result)
        return self.current()

    def _apply(self, result: FetchResult) -> None:
        prev_snapshot = self._snapshot
        prev_availability = self._availability
        self._last_outcome = result.outcome

        if result.outcome is FetchOutcome.SNAPSHOT:
            self._snapshot = result.snapshot
            self._availability = UsageAvailability.AVAILABLE
            self._last_updated = datetime.now(timezone.utc).isoformat()
        elif result.outcome is FetchOutcome.NOT_ELIGIBLE:
            self._snapshot = None
            self._availability = UsageAvailability.UNAVAILABLE
        else:
            logger.debug("No usage update this cycle (%s)", result.outcome.value)
            return

        if self._snapshot != prev_snapshot:
            self._notify(UsageEventKind.SNAPSHOT_CHANGED)
        if self._availability is not prev_availability:
            logger.info("Usage availability: %s → %s", prev_availability.value, self._availability.value)
            self._notify(UsageEventKind.AVAILABILITY_CHANGED)
