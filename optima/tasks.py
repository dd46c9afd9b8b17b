"""Task store: add, delete, one-way completion, and the sorted/filtered view."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone, tzinfo
from typing import Any

from optima.models import SortOption, Task, TaskCategory, utc_now

logger = logging.getLogger(__name__)

# Tasks without a due date sort after every dated task.
DISTANT_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


class AlreadyCompleted(ValueError):
    """Raised when completing a task that is already completed."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task already completed: {task_id}")
        self.task_id = task_id


def _due_key(task: Task) -> datetime:
    due = task.due_date
    if due is None:
        return DISTANT_FUTURE
    if due.tzinfo is None:
        return due.replace(tzinfo=timezone.utc)
    return due


class TaskStore:
    """Owns the mutable list of tasks. Stored order is insertion order."""

    def __init__(
        self,
        tasks: Iterable[Task] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._tasks: list[Task] = list(tasks or [])
        self._clock = clock

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self):
        return iter(self._tasks)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def find_task(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def add_task(
        self,
        title: str,
        description: str = "",
        category: TaskCategory | str = TaskCategory.CUSTOM,
        duration: float = 0.0,
        points: int = 0,
        due_date: datetime | None = None,
    ) -> Task:
        """Create a task with a fresh id and append it. Title checks belong to the caller."""
        task = Task(
            title=title,
            description=description,
            category=TaskCategory.parse(category),
            duration=max(0.0, float(duration)),
            points=max(0, int(points)),
            due_date=due_date,
            created_date=self._clock(),
        )
        self._tasks.append(task)
        logger.info("Task added id=%s title=%r category=%s", task.id, task.title, task.category.value)
        return task

    def delete_task(self, task_id: str) -> bool:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                self._tasks.pop(i)
                logger.info("Task deleted id=%s", task_id)
                return True
        logger.debug("delete_task: no task with id=%s", task_id)
        return False

    def mark_completed(self, task_id: str) -> Task | None:
        """Flip is_completed to True. Returns None for an unknown id."""
        task = self.find_task(task_id)
        if task is None:
            logger.debug("mark_completed: no task with id=%s", task_id)
            return None
        if task.is_completed:
            raise AlreadyCompleted(task_id)
        task.is_completed = True
        return task

    # ── Derived views ─────────────────────────────────────────

    @property
    def completed_tasks(self) -> list[Task]:
        return [t for t in self._tasks if t.is_completed]

    @property
    def pending_tasks(self) -> list[Task]:
        return [t for t in self._tasks if not t.is_completed]

    def sorted_view(
        self,
        sort_option: SortOption | str = SortOption.DUE_DATE,
        filter_category: TaskCategory | str | None = None,
    ) -> tuple[Task, ...]:
        return sorted_view(self._tasks, sort_option, filter_category)

    def completed_on(self, day: date, tz: tzinfo = timezone.utc) -> int:
        """Count completed tasks *created* on the given calendar day."""
        return sum(
            1 for t in self._tasks
            if t.is_completed and t.created_date.astimezone(tz).date() == day
        )


def sorted_view(
    tasks: Iterable[Task],
    sort_option: SortOption | str = SortOption.DUE_DATE,
    filter_category: TaskCategory | str | None = None,
) -> tuple[Task, ...]:
    """Return tasks ordered by *sort_option*, optionally restricted to one category.

    - due_date: ascending, undated tasks last
    - category: category display name ascending
    - points: descending
    """
    option = SortOption(sort_option)
    key: Callable[[Task], Any]
    reverse = False
    if option is SortOption.DUE_DATE:
        key = _due_key
    elif option is SortOption.CATEGORY:
        key = lambda t: t.category.value  # noqa: E731
    else:
        key = lambda t: t.points  # noqa: E731
        reverse = True

    result = sorted(tasks, key=key, reverse=reverse)
    if filter_category is not None:
        category = TaskCategory.parse(filter_category)
        result = [t for t in result if t.category == category]
    return tuple(result)
