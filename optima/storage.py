"""Load and save tasks, feed and reward state in the Optima workspace.

Layout under <root>/optima/:
    tasks.yaml   task list
    feed.json    achievement feed, most recent first
    state.json   screen-time ledger and streak
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from optima.config import Settings, feed_path, state_path, tasks_path
from optima.fileio import read_json, read_yaml, write_json_atomic, write_yaml_atomic
from optima.manager import TaskManager
from optima.models import GoalCompletion, RewardState, Task, TaskCategory, utc_now

logger = logging.getLogger(__name__)


@dataclass
class StoredState:
    tasks: list[Task] = field(default_factory=list)
    feed: list[GoalCompletion] = field(default_factory=list)
    reward: RewardState = field(default_factory=RewardState)
    exists: bool = False


def sample_tasks(now: datetime | None = None) -> list[Task]:
    """Starter tasks for a brand-new workspace."""
    now = now or utc_now()
    return [
        Task(
            title="Study Mathematics",
            description="Complete Chapter 3 exercises",
            category=TaskCategory.ACADEMIC,
            duration=3600,
            points=20,
            due_date=now + timedelta(hours=24),
            created_date=now,
        ),
        Task(
            title="Morning Workout",
            description="30 minutes cardio",
            category=TaskCategory.FITNESS,
            duration=1800,
            points=15,
            due_date=now + timedelta(hours=2),
            created_date=now,
        ),
        Task(
            title="Meditation",
            description="15 minutes mindfulness",
            category=TaskCategory.WELLNESS,
            duration=900,
            points=10,
            due_date=now + timedelta(hours=6),
            created_date=now,
        ),
    ]


def load_state(root: Path | None = None, settings: Settings | None = None) -> StoredState:
    settings = settings or Settings()
    tp, fp, sp = tasks_path(root), feed_path(root), state_path(root)

    tasks_data = read_yaml(tp)
    tasks = [Task.from_dict(t) for t in (tasks_data.get("tasks") or [])]

    feed_data = read_json(fp)
    entries = feed_data.get("feed") if isinstance(feed_data, dict) else None
    feed = [GoalCompletion.from_dict(c) for c in (entries or [])]

    reward = RewardState.from_dict(read_json(sp), settings.initial_screen_time_seconds)
    exists = tp.exists() or fp.exists() or sp.exists()
    logger.debug("Loaded %d task(s), %d feed entr(ies) from %s", len(tasks), len(feed), tp.parent)
    return StoredState(tasks=tasks, feed=feed, reward=reward, exists=exists)


def snapshot_state(manager: TaskManager) -> dict[str, Any]:
    """Serialize everything save_state writes, so the write can happen elsewhere."""
    return {
        "tasks": {"tasks": [t.to_dict() for t in manager.store]},
        "feed": {"feed": [c.to_dict() for c in manager.feed]},
        "state": manager.reward_state().to_dict(),
    }


def write_state(snapshot: dict[str, Any], root: Path | None = None) -> None:
    write_yaml_atomic(tasks_path(root), snapshot["tasks"])
    write_json_atomic(feed_path(root), snapshot["feed"])
    write_json_atomic(state_path(root), snapshot["state"])
    logger.debug("Saved state to %s", tasks_path(root).parent)


def save_state(manager: TaskManager, root: Path | None = None) -> None:
    write_state(snapshot_state(manager), root)
