"""Task manager: the single state container the presentation layer talks to.

Commands mutate the task store, ledger, streak tracker and feed, then emit
a ChangeEvent to every subscriber. Completion runs, in order:

1. mark the task completed (one-way)
2. credit the ledger with the task's duration
3. update the streak from today's completed count
4. accrue points and profile stats, unlocking achievements
5. project the task into a GoalCompletion and publish it to the feed
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from optima.config import Settings
from optima.feed import Feed, project
from optima.ledger import RewardLedger
from optima.models import (
    Actor,
    GoalComment,
    GoalCompletion,
    RewardState,
    SortOption,
    Task,
    TaskCategory,
    utc_now,
)
from optima.profile import ProfileStats, parse_unlocked
from optima.streak import StreakTracker
from optima.tasks import TaskStore

logger = logging.getLogger(__name__)


TASK_ADDED = "task_added"
TASK_DELETED = "task_deleted"
TASK_COMPLETED = "task_completed"
SCREEN_TIME_CREDITED = "screen_time_credited"
SCREEN_TIME_TICKED = "screen_time_ticked"
STREAK_INCREMENTED = "streak_incremented"
ACHIEVEMENT_SHARED = "achievement_shared"
ACHIEVEMENT_LIKED = "achievement_liked"
ACHIEVEMENT_UNLIKED = "achievement_unliked"
COMMENT_ADDED = "comment_added"
ACHIEVEMENT_UNLOCKED = "achievement_unlocked"


@dataclass(frozen=True)
class ChangeEvent:
    kind: str
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[ChangeEvent], None]


class TaskManager:
    def __init__(
        self,
        actor: Actor | None = None,
        settings: Settings | None = None,
        tasks: Iterable[Task] | None = None,
        feed: Iterable[GoalCompletion] | None = None,
        reward_state: RewardState | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.actor = actor or Actor()
        self.settings = settings or Settings()
        self._clock = clock
        self._listeners: list[Listener] = []

        if reward_state is None:
            reward_state = RewardState(allowance=self.settings.initial_screen_time_seconds)
        self.store = TaskStore(tasks, clock=clock)
        self.feed = Feed(feed)
        self.ledger = RewardLedger(reward_state.allowance, reward_state.used)
        self.streak = StreakTracker(
            daily_goal=self.settings.daily_goal,
            weekly_streak=reward_state.weekly_streak,
            max_streak=self.settings.max_streak,
            last_streak_date=reward_state.last_streak_date,
        )
        self.profile = ProfileStats(
            total_points=reward_state.total_points,
            tasks_completed=reward_state.tasks_completed,
            longest_streak=max(reward_state.longest_streak, self.streak.weekly_streak),
            screen_time_saved=reward_state.screen_time_saved,
            early_completions=reward_state.early_completions,
            unlocked=parse_unlocked(reward_state.achievements),
        )

    # ── Subscriptions ─────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for change events. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str, **payload: Any) -> None:
        event = ChangeEvent(kind, payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, kind)

    # ── Queries ───────────────────────────────────────────────

    def today(self) -> date:
        return self._clock().astimezone(self.settings.tz).date()

    def sorted_view(
        self,
        sort_option: SortOption | str = SortOption.DUE_DATE,
        filter_category: TaskCategory | str | None = None,
    ) -> tuple[Task, ...]:
        return self.store.sorted_view(sort_option, filter_category)

    @property
    def completed_tasks(self) -> list[Task]:
        return self.store.completed_tasks

    @property
    def pending_tasks(self) -> list[Task]:
        return self.store.pending_tasks

    @property
    def allowance(self) -> float:
        return self.ledger.allowance

    @property
    def used(self) -> float:
        return self.ledger.used

    @property
    def weekly_streak(self) -> int:
        return self.streak.weekly_streak

    @property
    def daily_goal(self) -> int:
        return self.streak.daily_goal

    @property
    def completed_today(self) -> int:
        return self.store.completed_on(self.today(), self.settings.tz)

    def reward_state(self) -> RewardState:
        last = self.streak.last_streak_date
        return RewardState(
            allowance=self.ledger.allowance,
            used=self.ledger.used,
            weekly_streak=self.streak.weekly_streak,
            last_streak_date=last.isoformat() if last else None,
            total_points=self.profile.total_points,
            tasks_completed=self.profile.tasks_completed,
            longest_streak=self.profile.longest_streak,
            screen_time_saved=self.profile.screen_time_saved,
            early_completions=self.profile.early_completions,
            achievements=self.profile.unlocked_dates(),
        )

    def snapshot(self) -> dict[str, Any]:
        completed_today = self.completed_today
        return {
            "user": {"userId": self.actor.resolved_id, "username": self.actor.resolved_name},
            "screenTime": {
                "allowance": self.ledger.allowance,
                "used": self.ledger.used,
                "total": self.ledger.total,
            },
            "streak": {
                "weeklyStreak": self.streak.weekly_streak,
                "dailyGoal": self.streak.daily_goal,
                "completedToday": completed_today,
                "remainingToday": self.streak.remaining_today(completed_today),
            },
            "pendingCount": len(self.pending_tasks),
            "completedCount": len(self.completed_tasks),
            "feedCount": len(self.feed),
            "profile": self.profile.to_dict(),
        }

    # ── Commands ──────────────────────────────────────────────

    def add_task(self, title: str, **fields: Any) -> Task:
        task = self.store.add_task(title, **fields)
        self._emit(TASK_ADDED, task=task)
        return task

    def delete_task(self, task_id: str) -> bool:
        deleted = self.store.delete_task(task_id)
        if deleted:
            self._emit(TASK_DELETED, task_id=task_id)
        return deleted

    def complete_task(self, task_id: str) -> GoalCompletion | None:
        """Complete a task and publish its achievement.

        Unknown ids are ignored (returns None). Raises AlreadyCompleted if the
        task was completed before; nothing is credited or published then.
        """
        task = self.store.mark_completed(task_id)
        if task is None:
            return None
        logger.info("Task completed id=%s title=%r", task.id, task.title)
        self._emit(TASK_COMPLETED, task=task)

        self.ledger.credit(task.duration)
        self._emit(SCREEN_TIME_CREDITED, amount=task.duration, allowance=self.ledger.allowance)

        today = self.today()
        if self.streak.on_task_completed(self.store.completed_on(today, self.settings.tz), today):
            self._emit(STREAK_INCREMENTED, weekly_streak=self.streak.weekly_streak, day=today.isoformat())

        now = self._clock()
        self.profile.record_completion(task, now.astimezone(self.settings.tz))
        self.profile.record_streak(self.streak.weekly_streak)
        for achievement in self.profile.unlock_new(now):
            self._emit(ACHIEVEMENT_UNLOCKED, title=achievement.title, description=achievement.description)

        return self._publish(task, "")

    def share_achievement(self, task_id: str, comment: str = "") -> GoalCompletion | None:
        """Publish a task to the feed again, optionally with the user's own comment."""
        task = self.store.find_task(task_id)
        if task is None:
            return None
        return self._publish(task, comment)

    def _publish(self, task: Task, comment: str) -> GoalCompletion:
        completion = self.feed.publish(project(task, self.actor, comment, now=self._clock()))
        self._emit(ACHIEVEMENT_SHARED, completion=completion, task_id=task.id)
        return completion

    def like(self, completion_id: str) -> GoalCompletion:
        completion = self.feed.like(completion_id)
        self._emit(ACHIEVEMENT_LIKED, completion=completion)
        return completion

    def unlike(self, completion_id: str) -> GoalCompletion:
        completion = self.feed.unlike(completion_id)
        self._emit(ACHIEVEMENT_UNLIKED, completion=completion)
        return completion

    def comment(self, completion_id: str, content: str) -> GoalComment:
        comment = self.feed.add_comment(completion_id, self.actor, content, now=self._clock())
        self._emit(COMMENT_ADDED, completion_id=completion_id, comment=comment)
        return comment

    def tick(self, interval: float) -> float:
        spent = self.ledger.tick(interval)
        if spent:
            self._emit(SCREEN_TIME_TICKED, spent=spent, allowance=self.ledger.allowance, used=self.ledger.used)
        return spent
