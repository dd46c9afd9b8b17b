"""Workspace root, settings, timezone and path helpers for Optima."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from optima.fileio import read_yaml

logger = logging.getLogger(__name__)


def workspace_root() -> Path:
    """Get the workspace root directory (contains optima/)."""
    return Path(
        os.environ.get("OPTIMA_ROOT", str(Path.home() / "optima"))
    ).expanduser().resolve()


@dataclass(frozen=True)
class Settings:
    timezone: str = "UTC"
    initial_screen_time_seconds: float = 4 * 3600.0
    daily_goal: int = 3
    max_streak: int = 7
    tick_interval_seconds: float = 60.0
    seed_sample_tasks: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        defaults = cls()
        return cls(
            timezone=str(d.get("timezone", defaults.timezone)),
            initial_screen_time_seconds=float(
                d.get("initial_screen_time_seconds", defaults.initial_screen_time_seconds)
            ),
            daily_goal=int(d.get("daily_goal", defaults.daily_goal)),
            max_streak=int(d.get("max_streak", defaults.max_streak)),
            tick_interval_seconds=float(d.get("tick_interval_seconds", defaults.tick_interval_seconds)),
            seed_sample_tasks=bool(d.get("seed_sample_tasks", defaults.seed_sample_tasks)),
            log_level=str(d.get("log_level", defaults.log_level)).upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timezone": self.timezone,
            "initial_screen_time_seconds": self.initial_screen_time_seconds,
            "daily_goal": self.daily_goal,
            "max_streak": self.max_streak,
            "tick_interval_seconds": self.tick_interval_seconds,
            "seed_sample_tasks": self.seed_sample_tasks,
            "log_level": self.log_level,
        }

    @property
    def tz(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, using UTC", self.timezone)
            return ZoneInfo("UTC")


def load_settings(root: Path | None = None) -> Settings:
    """Read optima/settings.yaml, falling back to defaults for anything missing."""
    return Settings.from_dict(read_yaml(settings_path(root)))


# ── Path helpers ──────────────────────────────────────────────

def _data_dir(root: Path | None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "optima"


def settings_path(root: Path | None = None) -> Path:
    return _data_dir(root) / "settings.yaml"


def tasks_path(root: Path | None = None) -> Path:
    return _data_dir(root) / "tasks.yaml"


def feed_path(root: Path | None = None) -> Path:
    return _data_dir(root) / "feed.json"


def state_path(root: Path | None = None) -> Path:
    return _data_dir(root) / "state.json"


def hooks_config_path(root: Path | None = None) -> Path:
    return _data_dir(root) / "hooks.yaml"


def log_dir(root: Path | None = None) -> Path:
    return _data_dir(root) / "logs"
