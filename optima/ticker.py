"""Periodic screen-time tick.

The ticker measures elapsed time on an injected clock and fires
``on_tick(interval)`` once for every whole interval that has passed. Tests
drive it by advancing a fake clock and calling poll(); the app runs the
polling loop as an asyncio task so ticks always execute on the event loop
that owns the manager's state.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ScreenTimeTicker:
    def __init__(
        self,
        on_tick: Callable[[float], object],
        interval: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self.on_tick = on_tick
        self.interval = float(interval)
        self._clock = clock
        self._last: float | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._last is not None

    def reset(self) -> None:
        """Start measuring from now. Called by start(); tests may call it directly."""
        self._last = self._clock()

    def poll(self) -> int:
        """Fire one tick per whole interval elapsed since the last one. Returns ticks fired."""
        if self._last is None:
            return 0
        fired = 0
        now = self._clock()
        while now - self._last >= self.interval:
            self._last += self.interval
            try:
                self.on_tick(self.interval)
            except Exception:
                logger.exception("Tick callback failed")
            fired += 1
        if fired:
            logger.debug("Fired %d tick(s)", fired)
        return fired

    async def _run(self) -> None:
        while self._last is not None:
            await asyncio.sleep(self.interval)
            self.poll()

    def start(self) -> asyncio.Task:
        """Schedule the polling loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self.reset()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Screen-time ticker started (interval=%.0fs)", self.interval)
        return self._task

    def stop(self) -> None:
        """Stop ticking. No tick fires after this returns."""
        self._last = None
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Screen-time ticker stopped")
