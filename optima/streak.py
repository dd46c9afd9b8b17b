"""Daily goal and weekly streak counting for Optima."""

from __future__ import annotations

import logging
from datetime import date

logger = logging.getLogger(__name__)

DEFAULT_DAILY_GOAL = 3
MAX_STREAK = 7


class StreakTracker:
    """Bumps the weekly streak when the daily completion goal is met.

    The bump happens at most once per calendar day; further completions on a
    day that already counted leave the streak unchanged.
    """

    def __init__(
        self,
        daily_goal: int = DEFAULT_DAILY_GOAL,
        weekly_streak: int = 0,
        max_streak: int = MAX_STREAK,
        last_streak_date: date | str | None = None,
    ) -> None:
        self.daily_goal = daily_goal
        self.max_streak = max_streak
        self.weekly_streak = min(max(0, weekly_streak), max_streak)
        if isinstance(last_streak_date, str):
            last_streak_date = date.fromisoformat(last_streak_date)
        self.last_streak_date: date | None = last_streak_date

    def goal_met(self, completed_today: int) -> bool:
        return completed_today >= self.daily_goal

    def remaining_today(self, completed_today: int) -> int:
        return max(0, self.daily_goal - completed_today)

    def on_task_completed(self, completed_today: int, today: date) -> bool:
        """Update the streak after a completion. Returns True if it was incremented."""
        if not self.goal_met(completed_today):
            return False
        if self.last_streak_date == today:
            return False
        self.last_streak_date = today
        before = self.weekly_streak
        self.weekly_streak = min(self.weekly_streak + 1, self.max_streak)
        logger.info("Daily goal met on %s, streak %d -> %d", today.isoformat(), before, self.weekly_streak)
        return True
