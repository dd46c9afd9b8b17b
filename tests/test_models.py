"""Tests for optima/models.py: enums, identity fallbacks, serialization."""

from datetime import datetime, timezone

import pytest

from optima.models import (
    Actor,
    GoalCompletion,
    GoalType,
    RewardState,
    Task,
    TaskCategory,
)


def test_category_parse_accepts_value_and_name():
    assert TaskCategory.parse("Academic") is TaskCategory.ACADEMIC
    assert TaskCategory.parse("wellness") is TaskCategory.WELLNESS
    assert TaskCategory.parse(TaskCategory.CUSTOM) is TaskCategory.CUSTOM


def test_category_parse_invalid():
    with pytest.raises(ValueError, match="Invalid task category"):
        TaskCategory.parse("gardening")


def test_icons():
    assert TaskCategory.FITNESS.icon == "figure.run"
    assert GoalType.FOCUS.icon == "timer"
    assert GoalType.FOCUS.value == "Focus Time"


def test_actor_fallbacks():
    anon = Actor()
    assert anon.resolved_id == "unknown"
    assert anon.resolved_name == "User"
    named = Actor(user_id="abc", display_name="Sam")
    assert named.resolved_id == "abc"
    assert named.resolved_name == "Sam"


def test_task_defaults():
    t = Task(title="Read")
    assert t.is_completed is False
    assert t.id
    assert t.created_date.tzinfo is not None
    assert Task(title="Other").id != t.id


def test_task_to_dict_uses_camel_case():
    due = datetime(2026, 3, 3, 12, 0, tzinfo=timezone.utc)
    d = Task(title="Read", category=TaskCategory.ACADEMIC, duration=600, points=5, due_date=due).to_dict()
    assert d["category"] == "Academic"
    assert d["isCompleted"] is False
    assert d["dueDate"] == "2026-03-03T12:00:00+00:00"
    assert "createdDate" in d


def test_task_to_dict_omits_missing_due_date():
    assert "dueDate" not in Task(title="x").to_dict()


def test_task_from_dict_missing_keys():
    t = Task.from_dict({"title": "Sweep", "category": "household"})
    assert t.category is TaskCategory.HOUSEHOLD
    assert t.duration == 0.0
    assert t.points == 0
    assert t.due_date is None
    assert t.id


def test_task_from_dict_clamps_negative_values():
    t = Task.from_dict({"title": "x", "duration": -5, "points": -1})
    assert t.duration == 0.0
    assert t.points == 0


def test_goal_completion_from_dict():
    c = GoalCompletion.from_dict({
        "id": "c1",
        "userId": "1",
        "username": "John",
        "goalTitle": "Morning Workout",
        "description": "Great way to start the day!",
        "duration": 30,
        "points": 15,
        "completedAt": "2026-03-02T08:00:00+00:00",
        "goalType": "Workout",
        "likes": 5,
        "comments": [
            {"id": "m1", "userId": "2", "username": "Sarah", "content": "Keep it up!",
             "timestamp": "2026-03-02T08:05:00+00:00"},
        ],
    })
    assert c.goal_type is GoalType.WORKOUT
    assert c.likes == 5
    assert c.comments[0].username == "Sarah"
    assert c.to_dict()["comments"][0]["content"] == "Keep it up!"


def test_reward_state_defaults():
    s = RewardState.from_dict({}, default_allowance=600)
    assert s.allowance == 600
    assert s.used == 0.0
    assert s.weekly_streak == 0
    assert s.last_streak_date is None


def test_reward_state_from_dict():
    s = RewardState.from_dict({"allowance": 100, "used": 20, "weeklyStreak": 2, "lastStreakDate": "2026-03-01"})
    assert s.to_dict() == {
        "allowance": 100.0,
        "used": 20.0,
        "weeklyStreak": 2,
        "lastStreakDate": "2026-03-01",
        "totalPoints": 0,
        "tasksCompleted": 0,
        "longestStreak": 0,
        "screenTimeSaved": 0.0,
        "earlyCompletions": 0,
        "achievements": {},
    }


def test_reward_state_profile_fields():
    s = RewardState.from_dict({
        "totalPoints": 240,
        "tasksCompleted": 12,
        "longestStreak": 5,
        "screenTimeSaved": 7200,
        "achievements": {"Early Bird": "2026-03-01T07:30:00+00:00"},
    })
    assert s.total_points == 240
    assert s.tasks_completed == 12
    assert s.longest_streak == 5
    assert s.screen_time_saved == 7200.0
    assert s.achievements == {"Early Bird": "2026-03-01T07:30:00+00:00"}
    assert RewardState.from_dict({"achievements": ["Early Bird"]}).achievements == {}


def test_task_from_dict_unknown_category_falls_back():
    t = Task.from_dict({"title": "Prune roses", "category": "Gardening"})
    assert t.category is TaskCategory.CUSTOM


def test_goal_completion_unknown_goal_type_falls_back():
    c = GoalCompletion.from_dict({"goalTitle": "Swim", "goalType": "Swimming"})
    assert c.goal_type is GoalType.FOCUS
