"""Profile stats and unlockable achievements.

Points accrue from completed tasks; every 100 points is one level. The
achievements mirror the profile screen of the mobile app:

- Early Bird: complete 5 tasks before 9 AM
- Streak Master: reach a 7-day streak
- Digital Detox: earn 24 hours of screen time
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from optima.models import Task, _format_dt, _parse_dt

logger = logging.getLogger(__name__)

POINTS_PER_LEVEL = 100
EARLY_BIRD_HOUR = 9


@dataclass(frozen=True)
class Achievement:
    title: str
    description: str
    icon: str
    unlocked_by: Callable[[ProfileStats], bool]


class ProfileStats:
    def __init__(
        self,
        total_points: int = 0,
        tasks_completed: int = 0,
        longest_streak: int = 0,
        screen_time_saved: float = 0.0,
        early_completions: int = 0,
        unlocked: dict[str, datetime] | None = None,
    ) -> None:
        self.total_points = max(0, total_points)
        self.tasks_completed = max(0, tasks_completed)
        self.longest_streak = max(0, longest_streak)
        self.screen_time_saved = max(0.0, float(screen_time_saved))
        self.early_completions = max(0, early_completions)
        self.unlocked: dict[str, datetime] = dict(unlocked or {})

    @property
    def level(self) -> int:
        return self.total_points // POINTS_PER_LEVEL

    def record_completion(self, task: Task, completed_at: datetime) -> None:
        """Count a completed task. *completed_at* is in the user's local time."""
        self.total_points += task.points
        self.tasks_completed += 1
        self.screen_time_saved += task.duration
        if completed_at.hour < EARLY_BIRD_HOUR:
            self.early_completions += 1

    def record_streak(self, weekly_streak: int) -> None:
        self.longest_streak = max(self.longest_streak, weekly_streak)

    def unlock_new(self, now: datetime) -> list[Achievement]:
        """Unlock every achievement whose condition now holds. Returns the newly unlocked ones."""
        newly = []
        for achievement in ACHIEVEMENTS:
            if achievement.title in self.unlocked or not achievement.unlocked_by(self):
                continue
            self.unlocked[achievement.title] = now
            newly.append(achievement)
            logger.info("Achievement unlocked: %s", achievement.title)
        return newly

    def unlocked_dates(self) -> dict[str, str]:
        return {title: _format_dt(when) for title, when in self.unlocked.items()}

    def achievements(self) -> list[dict[str, Any]]:
        return [
            {
                "title": a.title,
                "description": a.description,
                "iconName": a.icon,
                "isUnlocked": a.title in self.unlocked,
                "unlockedDate": _format_dt(self.unlocked.get(a.title)),
            }
            for a in ACHIEVEMENTS
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPoints": self.total_points,
            "level": self.level,
            "tasksCompleted": self.tasks_completed,
            "longestStreak": self.longest_streak,
            "screenTimeSaved": self.screen_time_saved,
            "achievements": self.achievements(),
        }


def parse_unlocked(raw: Any) -> dict[str, datetime]:
    if not isinstance(raw, dict):
        return {}
    unlocked = {}
    for title, when in raw.items():
        parsed = _parse_dt(when)
        if parsed is not None:
            unlocked[str(title)] = parsed
    return unlocked


ACHIEVEMENTS = (
    Achievement(
        "Early Bird",
        "Complete 5 tasks before 9 AM",
        "sunrise.fill",
        lambda s: s.early_completions >= 5,
    ),
    Achievement(
        "Streak Master",
        "Maintain a 7-day streak",
        "flame.fill",
        lambda s: s.longest_streak >= 7,
    ),
    Achievement(
        "Digital Detox",
        "Save 24 hours of screen time",
        "timer",
        lambda s: s.screen_time_saved >= 24 * 3600,
    ),
)
