"""Signed-in session: settings, identity, task manager and ticker, with a defined lifecycle.

Created when a user signs in, closed when they sign out. Closing stops the
screen-time ticker and writes state back to the workspace. Inside an event loop,
use ``save_async``/``aclose`` so file I/O stays off the loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

from optima.config import Settings, load_settings, workspace_root
from optima.hooks import HookPublisher
from optima.manager import TaskManager
from optima.models import Actor, utc_now
from optima.storage import load_state, sample_tasks, save_state, snapshot_state, write_state
from optima.ticker import ScreenTimeTicker

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        actor: Actor | None = None,
        settings: Settings | None = None,
        root: Path | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.root = root if root is not None else workspace_root()
        self.settings = settings or load_settings(self.root)
        self.actor = actor or Actor()

        stored = load_state(self.root, self.settings)
        tasks = stored.tasks
        if not stored.exists and self.settings.seed_sample_tasks:
            tasks = sample_tasks(clock())
        self.manager = TaskManager(
            actor=self.actor,
            settings=self.settings,
            tasks=tasks,
            feed=stored.feed,
            reward_state=stored.reward,
            clock=clock,
        )
        self.hooks = HookPublisher(self.manager, self.root)
        self.ticker = ScreenTimeTicker(self.manager.tick, interval=self.settings.tick_interval_seconds)
        self._io = ThreadPoolExecutor(max_workers=1, thread_name_prefix="optima-save")
        self.closed = False
        logger.info("Session opened for user=%s", self.actor.resolved_id)

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> None:
        """Start the screen-time ticker. Must be called from inside a running event loop."""
        self.ticker.start()

    def save(self) -> None:
        save_state(self.manager, self.root)

    async def save_async(self) -> None:
        """Save without blocking the event loop. Writes happen one at a time, in call order."""
        snapshot = snapshot_state(self.manager)
        await asyncio.get_running_loop().run_in_executor(self._io, write_state, snapshot, self.root)

    def close(self) -> None:
        if self.closed:
            return
        self.ticker.stop()
        self.hooks.close()
        self.save()
        self._io.shutdown(wait=True)
        self.closed = True
        logger.info("Session closed for user=%s", self.actor.resolved_id)

    async def aclose(self) -> None:
        """Sign out from inside the event loop: waits for pending hooks, then saves."""
        if self.closed:
            return
        self.ticker.stop()
        await self.hooks.drain()
        self.hooks.close()
        await self.save_async()
        self._io.shutdown(wait=True)
        self.closed = True
        logger.info("Session closed for user=%s", self.actor.resolved_id)
