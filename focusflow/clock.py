"""
Clock Source — a periodic wall-clock pulse that triggers re-evaluation.

The pulse is a trigger only. Pulses can be missed (suspended laptop,
throttled process), so consumers must never count them; every elapsed-time
computation is `now - started_at` against the timestamp delivered here.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, List

from .logging_handler import setup_logger

logger = setup_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClockSource:
    """
    Usage:
        clock = ClockSource(interval_ms=1000)
        clock.register_listener(timer.tick)
        task = asyncio.create_task(clock.run())
    """

    def __init__(
        self,
        interval_ms: int = 1000,
        now_fn: Callable[[], datetime] = utc_now,
    ):
        self.interval_ms = interval_ms
        self._now_fn = now_fn
        self._listeners: List[Callable[[datetime], object]] = []

    def now(self) -> datetime:
        return self._now_fn()

    def register_listener(self, fn: Callable[[datetime], object]) -> None:
        """Register a callback(now) invoked on every pulse."""
        self._listeners.append(fn)

    def pulse(self) -> datetime:
        """Read the clock once and hand the reading to every listener."""
        now = self.now()
        for listener in self._listeners:
            try:
                listener(now)
            except Exception:
                logger.exception("Clock listener %r failed", listener)
        return now

    async def run(self) -> None:
        """Pulse forever on the running event loop; cancel the task to stop."""
        while True:
            await asyncio.sleep(self.interval_ms / 1000.0)
            self.pulse()
