"""Tests for optima/storage.py and optima/config.py."""

import json

from optima.config import Settings, feed_path, load_settings, state_path, tasks_path
from optima.fileio import read_json
from optima.manager import TaskManager
from optima.models import Actor, GoalType, TaskCategory
from optima.storage import load_state, sample_tasks, save_state

from conftest import NOW, FakeClock


def test_load_settings(workspace):
    settings = load_settings(workspace)
    assert settings.daily_goal == 3
    assert settings.initial_screen_time_seconds == 14400
    assert settings.tz.key == "UTC"


def test_load_settings_missing_file(tmp_path):
    assert load_settings(tmp_path) == Settings()


def test_unknown_timezone_falls_back_to_utc():
    assert Settings(timezone="Mars/Olympus").tz.key == "UTC"


def test_load_state_empty_workspace(workspace):
    stored = load_state(workspace, Settings(initial_screen_time_seconds=600))
    assert stored.exists is False
    assert stored.tasks == []
    assert stored.feed == []
    assert stored.reward.allowance == 600


def test_save_and_load_round_trip(workspace):
    manager = TaskManager(actor=Actor("u1", "Ada"), clock=FakeClock())
    task = manager.add_task("Run", category="fitness", duration=1800, points=15)
    manager.add_task("Read", category="academic")
    completion = manager.complete_task(task.id)
    manager.comment(completion.id, "Felt great")
    manager.tick(60)

    save_state(manager, workspace)
    assert tasks_path(workspace).exists()
    assert read_json(state_path(workspace))["used"] == 60

    stored = load_state(workspace)
    assert stored.exists is True
    assert [t.title for t in stored.tasks] == ["Run", "Read"]
    assert stored.tasks[0].is_completed is True
    assert stored.tasks[0].created_date == NOW
    assert stored.feed[0].id == completion.id
    assert stored.feed[0].comments[0].content == "Felt great"
    assert stored.reward.allowance == 14400 + 1800 - 60


def test_sample_tasks():
    tasks = sample_tasks(NOW)
    assert [t.title for t in tasks] == ["Study Mathematics", "Morning Workout", "Meditation"]
    assert all(t.created_date == NOW for t in tasks)
    assert all(not t.is_completed for t in tasks)


def test_load_state_tolerates_unknown_enum_values(workspace):
    tasks_path(workspace).write_text(
        "tasks:\n  - title: Prune roses\n    category: Gardening\n", encoding="utf-8"
    )
    feed_path(workspace).write_text(
        json.dumps({"feed": [{"goalTitle": "Swim", "goalType": "Swimming"}]}), encoding="utf-8"
    )
    stored = load_state(workspace)
    assert stored.tasks[0].category is TaskCategory.CUSTOM
    assert stored.feed[0].goal_type is GoalType.FOCUS


def test_profile_stats_round_trip(workspace):
    manager = TaskManager(actor=Actor("u1", "Ada"), clock=FakeClock())
    manager.complete_task(manager.add_task("Run", points=15, duration=1800).id)
    save_state(manager, workspace)

    reward = load_state(workspace).reward
    assert reward.total_points == 15
    assert reward.tasks_completed == 1
    assert reward.screen_time_saved == 1800
