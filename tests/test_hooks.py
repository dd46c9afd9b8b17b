"""Tests for optima/hooks.py: hook commands and event forwarding."""

import json
import time

import pytest
import yaml

from optima.hooks import HookPublisher, run_hooks
from optima.manager import TaskManager
from optima.models import Actor

from conftest import FakeClock


def _write_hooks(workspace, config):
    (workspace / "optima" / "hooks.yaml").write_text(yaml.dump(config), encoding="utf-8")


def test_run_hooks_no_config(workspace):
    assert run_hooks("on_task_complete", {"title": "x"}, workspace) == []


def test_run_hooks_with_echo(workspace):
    _write_hooks(workspace, {"on_achievement_shared": ["cat"]})
    results = run_hooks("on_achievement_shared", {"goalTitle": "Run"}, workspace)
    assert len(results) == 1
    assert results[0]["exit_code"] == 0
    assert json.loads(results[0]["stdout"])["goalTitle"] == "Run"


def test_run_hooks_invalid_hook_point(workspace):
    assert run_hooks("post_finalize", {}, workspace) == []


def test_run_hooks_timeout(workspace):
    _write_hooks(workspace, {"on_task_complete": [{"command": "sleep 10", "timeout": 1}]})
    results = run_hooks("on_task_complete", {}, workspace)
    assert results[0]["exit_code"] == -1
    assert "timed out" in results[0].get("error", "").lower()


def test_publisher_forwards_completion_events(workspace):
    _write_hooks(workspace, {"on_task_complete": ["cat"], "on_achievement_shared": ["cat"]})
    manager = TaskManager(actor=Actor("u1", "Ada"), clock=FakeClock())
    publisher = HookPublisher(manager, workspace)

    task = manager.add_task("Run", category="fitness", duration=600)
    manager.complete_task(task.id)

    assert [r["hook_point"] for r in publisher.results] == ["on_task_complete", "on_achievement_shared"]
    completed = json.loads(publisher.results[0]["stdout"])
    assert completed["event"] == "task_completed"
    assert completed["task"]["title"] == "Run"
    shared = json.loads(publisher.results[1]["stdout"])
    assert shared["completion"]["goalType"] == "Workout"
    assert shared["completion"]["username"] == "Ada"


def test_publisher_close_unsubscribes(workspace):
    _write_hooks(workspace, {"on_task_complete": ["cat"]})
    manager = TaskManager(clock=FakeClock())
    publisher = HookPublisher(manager, workspace)
    publisher.close()
    manager.complete_task(manager.add_task("x").id)
    assert publisher.results == []


@pytest.mark.asyncio
async def test_publisher_runs_hooks_off_the_event_loop(workspace) -> None:
    _write_hooks(workspace, {"on_task_complete": ["sleep 1; cat"], "on_achievement_shared": ["cat"]})
    manager = TaskManager(actor=Actor("u1", "Ada"), clock=FakeClock())
    publisher = HookPublisher(manager, workspace)

    started = time.monotonic()
    manager.complete_task(manager.add_task("Run").id)
    assert time.monotonic() - started < 0.5
    assert publisher.results == []

    await publisher.drain()
    assert [r["hook_point"] for r in publisher.results] == ["on_task_complete", "on_achievement_shared"]
    assert json.loads(publisher.results[0]["stdout"])["task"]["title"] == "Run"
    publisher.close()
