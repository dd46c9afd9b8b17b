"""Lifecycle hooks for Optima.

Hooks run shell commands when achievements happen, e.g. to post them to an
external feed service. Configured via optima/hooks.yaml:

    on_task_complete:
      - ./bin/notify.sh
    on_achievement_shared:
      - command: ./bin/post_to_feed.py
        timeout: 10

Hook points:
- on_task_complete
- on_achievement_shared
- on_streak_increment
"""

from __future__ import annotations

import asyncio
import json
import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from optima.config import hooks_config_path, workspace_root
from optima.fileio import read_yaml
from optima.manager import (
    ACHIEVEMENT_SHARED,
    STREAK_INCREMENTED,
    TASK_COMPLETED,
    ChangeEvent,
    TaskManager,
)

logger = logging.getLogger(__name__)


VALID_HOOK_POINTS = {
    "on_task_complete",
    "on_achievement_shared",
    "on_streak_increment",
}

EVENT_HOOK_POINTS = {
    TASK_COMPLETED: "on_task_complete",
    ACHIEVEMENT_SHARED: "on_achievement_shared",
    STREAK_INCREMENTED: "on_streak_increment",
}

DEFAULT_TIMEOUT = 30
OUTPUT_CAP = 4096


def load_hooks_config(root: Path | None = None) -> dict[str, Any]:
    return read_yaml(hooks_config_path(root))


def run_hooks(
    hook_point: str,
    context: dict[str, Any],
    root: Path | None = None,
) -> list[dict[str, Any]]:
    """Run every command registered for *hook_point*.

    Context is passed as JSON on stdin. Returns one result dict per command
    with exit code and captured output; failures never raise.
    """
    if hook_point not in VALID_HOOK_POINTS:
        logger.warning("Ignoring unknown hook point %r", hook_point)
        return []

    if root is None:
        root = workspace_root()

    hooks = load_hooks_config(root).get(hook_point, [])
    if not hooks or not isinstance(hooks, list):
        return []

    context_json = json.dumps(context, ensure_ascii=False, default=str)
    results = []
    for hook in hooks:
        if isinstance(hook, str):
            command, timeout = hook, DEFAULT_TIMEOUT
        elif isinstance(hook, dict):
            command, timeout = hook.get("command", ""), hook.get("timeout", DEFAULT_TIMEOUT)
        else:
            continue
        if not command:
            continue

        result: dict[str, Any] = {"command": command, "hook_point": hook_point}
        try:
            proc = subprocess.run(
                command,
                shell=True,
                input=context_json,
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=str(root),
            )
            result["exit_code"] = proc.returncode
            result["stdout"] = proc.stdout[:OUTPUT_CAP]
            result["stderr"] = proc.stderr[:OUTPUT_CAP]
            if proc.returncode != 0:
                logger.warning("Hook %r (%s) exited with %d", command, hook_point, proc.returncode)
        except subprocess.TimeoutExpired:
            result["exit_code"] = -1
            result["error"] = f"Hook timed out after {timeout}s"
            logger.warning("Hook %r (%s) timed out after %ss", command, hook_point, timeout)
        except OSError as e:
            result["exit_code"] = -1
            result["error"] = str(e)
            logger.exception("Hook %r (%s) failed to start", command, hook_point)
        results.append(result)

    return results


def event_context(event: ChangeEvent) -> dict[str, Any]:
    """Flatten a change event into the JSON context handed to hook commands."""
    context: dict[str, Any] = {"event": event.kind}
    for key, value in event.payload.items():
        to_dict = getattr(value, "to_dict", None)
        context[key] = to_dict() if callable(to_dict) else value
    return context


class HookPublisher:
    """Subscribes to a TaskManager and forwards its events to configured hooks.

    Inside a running event loop the commands run on a single worker thread,
    in event order, so a slow hook never stalls the loop; call ``drain()`` to
    wait for them. Without a loop they run inline.
    """

    def __init__(self, manager: TaskManager, root: Path | None = None) -> None:
        self.root = root
        self.results: list[dict[str, Any]] = []
        self._pending: set[asyncio.Future] = set()
        self._executor: ThreadPoolExecutor | None = None
        self._unsubscribe = manager.subscribe(self)

    def __call__(self, event: ChangeEvent) -> None:
        hook_point = EVENT_HOOK_POINTS.get(event.kind)
        if hook_point is None:
            return
        context = event_context(event)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.results.extend(run_hooks(hook_point, context, self.root))
            return
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="optima-hooks")
        future = loop.run_in_executor(self._executor, run_hooks, hook_point, context, self.root)
        self._pending.add(future)
        future.add_done_callback(self._collect)

    def _collect(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Hook dispatch failed", exc_info=error)
            return
        self.results.extend(future.result())

    async def drain(self) -> None:
        """Wait for every hook dispatched so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        self._unsubscribe()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
