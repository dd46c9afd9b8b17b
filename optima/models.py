"""Typed dataclasses for the Optima data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults.
Datetimes are stored as ISO-8601 strings.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


UNKNOWN_USER_ID = "unknown"
DEFAULT_USERNAME = "User"


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def _format_dt(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None


# ── Enumerations ──────────────────────────────────────────────


class TaskCategory(str, Enum):
    ACADEMIC = "Academic"
    FITNESS = "Fitness"
    HOUSEHOLD = "Household"
    WELLNESS = "Wellness"
    CUSTOM = "Custom"

    @property
    def icon(self) -> str:
        return _CATEGORY_ICONS[self]

    @classmethod
    def parse(cls, raw: Any) -> TaskCategory:
        """Accept either the display value ('Academic') or the member name ('academic')."""
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"Invalid task category: {raw!r}")


_CATEGORY_ICONS = {
    TaskCategory.ACADEMIC: "book.fill",
    TaskCategory.FITNESS: "figure.run",
    TaskCategory.HOUSEHOLD: "house.fill",
    TaskCategory.WELLNESS: "heart.fill",
    TaskCategory.CUSTOM: "star.fill",
}


class GoalType(str, Enum):
    WORKOUT = "Workout"
    MEDITATION = "Meditation"
    STUDY = "Study"
    FOCUS = "Focus Time"

    @property
    def icon(self) -> str:
        return _GOAL_ICONS[self]


_GOAL_ICONS = {
    GoalType.WORKOUT: "figure.run",
    GoalType.MEDITATION: "brain.head.profile",
    GoalType.STUDY: "book.fill",
    GoalType.FOCUS: "timer",
}


def _stored_category(raw: Any) -> TaskCategory:
    try:
        return TaskCategory.parse(raw)
    except ValueError:
        logger.warning("Unknown stored task category %r, using %s", raw, TaskCategory.CUSTOM.value)
        return TaskCategory.CUSTOM


def _stored_goal_type(raw: Any) -> GoalType:
    try:
        return GoalType(raw)
    except ValueError:
        logger.warning("Unknown stored goal type %r, using %s", raw, GoalType.FOCUS.value)
        return GoalType.FOCUS


class SortOption(str, Enum):
    DUE_DATE = "due_date"
    CATEGORY = "category"
    POINTS = "points"


# ── Identity ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Actor:
    """The signed-in user as reported by the auth provider (either field may be absent)."""

    user_id: str | None = None
    display_name: str | None = None

    @property
    def resolved_id(self) -> str:
        return self.user_id or UNKNOWN_USER_ID

    @property
    def resolved_name(self) -> str:
        return self.display_name or DEFAULT_USERNAME


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class Task:
    title: str = ""
    description: str = ""
    category: TaskCategory = TaskCategory.CUSTOM
    duration: float = 0.0  # seconds
    points: int = 0
    is_completed: bool = False
    due_date: datetime | None = None
    created_date: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        created = _parse_dt(d.get("createdDate"))
        return cls(
            id=str(d.get("id") or new_id()),
            title=str(d.get("title", "")),
            description=str(d.get("description", "")),
            category=_stored_category(d.get("category", TaskCategory.CUSTOM.value)),
            duration=max(0.0, float(d.get("duration", 0.0))),
            points=max(0, int(d.get("points", 0))),
            is_completed=bool(d.get("isCompleted", False)),
            due_date=_parse_dt(d.get("dueDate")),
            created_date=created or utc_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "duration": self.duration,
            "points": self.points,
            "isCompleted": self.is_completed,
            "createdDate": _format_dt(self.created_date),
        }
        if self.due_date:
            d["dueDate"] = _format_dt(self.due_date)
        return d


# ── Social feed ───────────────────────────────────────────────


@dataclass(frozen=True)
class GoalComment:
    user_id: str
    username: str
    content: str
    timestamp: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> GoalComment:
        return cls(
            id=str(d.get("id") or new_id()),
            user_id=str(d.get("userId", UNKNOWN_USER_ID)),
            username=str(d.get("username", DEFAULT_USERNAME)),
            content=str(d.get("content", "")),
            timestamp=_parse_dt(d.get("timestamp")) or utc_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "username": self.username,
            "content": self.content,
            "timestamp": _format_dt(self.timestamp),
        }


@dataclass
class GoalCompletion:
    user_id: str
    username: str
    goal_title: str
    description: str
    duration: int  # minutes
    points: int
    goal_type: GoalType
    completed_at: datetime = field(default_factory=utc_now)
    likes: int = 0
    comments: list[GoalComment] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> GoalCompletion:
        return cls(
            id=str(d.get("id") or new_id()),
            user_id=str(d.get("userId", UNKNOWN_USER_ID)),
            username=str(d.get("username", DEFAULT_USERNAME)),
            goal_title=str(d.get("goalTitle", "")),
            description=str(d.get("description", "")),
            duration=int(d.get("duration", 0)),
            points=int(d.get("points", 0)),
            goal_type=_stored_goal_type(d.get("goalType", GoalType.FOCUS.value)),
            completed_at=_parse_dt(d.get("completedAt")) or utc_now(),
            likes=max(0, int(d.get("likes", 0))),
            comments=[GoalComment.from_dict(c) for c in (d.get("comments") or [])],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "username": self.username,
            "goalTitle": self.goal_title,
            "description": self.description,
            "duration": self.duration,
            "points": self.points,
            "completedAt": _format_dt(self.completed_at),
            "goalType": self.goal_type.value,
            "likes": self.likes,
            "comments": [c.to_dict() for c in self.comments],
        }


# ── Persisted reward state ────────────────────────────────────


@dataclass
class RewardState:
    allowance: float = 4 * 3600.0
    used: float = 0.0
    weekly_streak: int = 0
    last_streak_date: str | None = None  # ISO date
    total_points: int = 0
    tasks_completed: int = 0
    longest_streak: int = 0
    screen_time_saved: float = 0.0
    early_completions: int = 0
    achievements: dict[str, str] = field(default_factory=dict)  # title -> ISO unlock time

    @classmethod
    def from_dict(cls, d: dict[str, Any], default_allowance: float = 4 * 3600.0) -> RewardState:
        if not d or not isinstance(d, dict):
            return cls(allowance=default_allowance)
        achievements = d.get("achievements")
        return cls(
            allowance=max(0.0, float(d.get("allowance", default_allowance))),
            used=max(0.0, float(d.get("used", 0.0))),
            weekly_streak=int(d.get("weeklyStreak", 0) or 0),
            last_streak_date=d.get("lastStreakDate"),
            total_points=max(0, int(d.get("totalPoints", 0) or 0)),
            tasks_completed=max(0, int(d.get("tasksCompleted", 0) or 0)),
            longest_streak=max(0, int(d.get("longestStreak", 0) or 0)),
            screen_time_saved=max(0.0, float(d.get("screenTimeSaved", 0.0) or 0.0)),
            early_completions=max(0, int(d.get("earlyCompletions", 0) or 0)),
            achievements=dict(achievements) if isinstance(achievements, dict) else {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowance": self.allowance,
            "used": self.used,
            "weeklyStreak": self.weekly_streak,
            "lastStreakDate": self.last_streak_date,
            "totalPoints": self.total_points,
            "tasksCompleted": self.tasks_completed,
            "longestStreak": self.longest_streak,
            "screenTimeSaved": self.screen_time_saved,
            "earlyCompletions": self.early_completions,
            "achievements": dict(self.achievements),
        }
