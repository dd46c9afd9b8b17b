"""Completion-to-feed projection and the social feed collection."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from optima.models import Actor, GoalComment, GoalCompletion, GoalType, Task, TaskCategory, utc_now

logger = logging.getLogger(__name__)


CATEGORY_GOAL_TYPES: dict[TaskCategory, GoalType] = {
    TaskCategory.ACADEMIC: GoalType.STUDY,
    TaskCategory.FITNESS: GoalType.WORKOUT,
    TaskCategory.WELLNESS: GoalType.MEDITATION,
    TaskCategory.HOUSEHOLD: GoalType.FOCUS,
    TaskCategory.CUSTOM: GoalType.FOCUS,
}


def project(task: Task, actor: Actor, comment: str = "", now: datetime | None = None) -> GoalCompletion:
    """Build the shareable achievement record for *task*.

    A non-empty *comment* replaces the task description. The record copies the
    task's fields and keeps no reference to the task itself.
    """
    return GoalCompletion(
        user_id=actor.resolved_id,
        username=actor.resolved_name,
        goal_title=task.title,
        description=comment if comment else task.description,
        duration=int(task.duration // 60),
        points=task.points,
        goal_type=CATEGORY_GOAL_TYPES[task.category],
        completed_at=now or utc_now(),
    )


class Feed:
    """Most-recent-first list of achievement records."""

    def __init__(self, entries: Iterable[GoalCompletion] | None = None) -> None:
        self._entries: list[GoalCompletion] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __getitem__(self, index: int) -> GoalCompletion:
        return self._entries[index]

    @property
    def entries(self) -> tuple[GoalCompletion, ...]:
        return tuple(self._entries)

    def publish(self, completion: GoalCompletion) -> GoalCompletion:
        self._entries.insert(0, completion)
        logger.info(
            "Published %s achievement %r for user=%s",
            completion.goal_type.value, completion.goal_title, completion.user_id,
        )
        return completion

    def find(self, completion_id: str) -> GoalCompletion | None:
        for c in self._entries:
            if c.id == completion_id:
                return c
        return None

    def _get(self, completion_id: str) -> GoalCompletion:
        completion = self.find(completion_id)
        if completion is None:
            raise KeyError(completion_id)
        return completion

    def by_user(self, user_id: str) -> list[GoalCompletion]:
        return [c for c in self._entries if c.user_id == user_id]

    def like(self, completion_id: str) -> GoalCompletion:
        completion = self._get(completion_id)
        completion.likes += 1
        return completion

    def unlike(self, completion_id: str) -> GoalCompletion:
        completion = self._get(completion_id)
        completion.likes = max(0, completion.likes - 1)
        return completion

    def add_comment(
        self,
        completion_id: str,
        actor: Actor,
        content: str,
        now: datetime | None = None,
    ) -> GoalComment:
        """Append a comment. Comments are immutable once added."""
        completion = self._get(completion_id)
        text = (content or "").strip()
        if not text:
            raise ValueError("Comment content must not be empty")
        comment = GoalComment(
            user_id=actor.resolved_id,
            username=actor.resolved_name,
            content=text,
            timestamp=now or utc_now(),
        )
        completion.comments.append(comment)
        return comment
