"""Tests for optima/streak.py."""

from datetime import date, timedelta

from optima.streak import StreakTracker


DAY = date(2026, 3, 2)


def test_below_goal_does_not_count():
    tracker = StreakTracker(daily_goal=3)
    assert tracker.on_task_completed(2, DAY) is False
    assert tracker.weekly_streak == 0


def test_goal_met_increments_once_per_day():
    tracker = StreakTracker(daily_goal=3)
    assert tracker.on_task_completed(3, DAY) is True
    assert tracker.weekly_streak == 1
    assert tracker.on_task_completed(4, DAY) is False
    assert tracker.weekly_streak == 1
    assert tracker.last_streak_date == DAY


def test_next_day_counts_again():
    tracker = StreakTracker(daily_goal=1)
    tracker.on_task_completed(1, DAY)
    tracker.on_task_completed(1, DAY + timedelta(days=1))
    assert tracker.weekly_streak == 2


def test_streak_capped_at_seven():
    tracker = StreakTracker(daily_goal=1)
    for i in range(10):
        tracker.on_task_completed(1, DAY + timedelta(days=i))
    assert tracker.weekly_streak == 7


def test_restored_state():
    tracker = StreakTracker(daily_goal=3, weekly_streak=4, last_streak_date="2026-03-02")
    assert tracker.on_task_completed(3, DAY) is False
    assert tracker.weekly_streak == 4


def test_remaining_today():
    tracker = StreakTracker(daily_goal=3)
    assert tracker.remaining_today(1) == 2
    assert tracker.remaining_today(5) == 0
