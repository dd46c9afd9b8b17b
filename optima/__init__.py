"""Optima core library: tasks, screen-time rewards, streaks and the achievement feed.

Public API re-exports for convenient imports:
    from optima import TaskManager, Session, Task, TaskCategory, ...
"""

# Configuration
from optima.config import (
    Settings,
    workspace_root,
    load_settings,
    settings_path,
    tasks_path,
    feed_path,
    state_path,
    hooks_config_path,
)

# Models
from optima.models import (
    Actor,
    GoalComment,
    GoalCompletion,
    GoalType,
    RewardState,
    SortOption,
    Task,
    TaskCategory,
)

# Domain
from optima.tasks import AlreadyCompleted, TaskStore, sorted_view
from optima.ledger import RewardLedger
from optima.streak import StreakTracker
from optima.feed import CATEGORY_GOAL_TYPES, Feed, project
from optima.profile import ACHIEVEMENTS, Achievement, ProfileStats
from optima.manager import ChangeEvent, TaskManager

# Runtime
from optima.ticker import ScreenTimeTicker
from optima.storage import load_state, save_state, sample_tasks, snapshot_state, write_state
from optima.hooks import HookPublisher, run_hooks
from optima.session import Session
from optima.logging_setup import setup_logging
