"""Shared test fixtures for Optima tests."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from optima.config import Settings
from optima.manager import TaskManager
from optima.models import Actor


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Wall clock for the domain (aware datetimes) that only moves when told to."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeMonotonic:
    """Monotonic seconds counter for the ticker."""

    def __init__(self) -> None:
        self.t = 1000.0

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def actor() -> Actor:
    return Actor(user_id="u-42", display_name="Ada")


@pytest.fixture
def manager(actor: Actor, clock: FakeClock) -> TaskManager:
    return TaskManager(actor=actor, settings=Settings(), clock=clock)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with a settings file."""
    root = tmp_path / "workspace"
    (root / "optima").mkdir(parents=True)

    settings = {
        "timezone": "UTC",
        "initial_screen_time_seconds": 14400,
        "daily_goal": 3,
        "tick_interval_seconds": 60,
        "seed_sample_tasks": True,
    }
    (root / "optima" / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    os.environ["OPTIMA_ROOT"] = str(root)
    yield root
    if "OPTIMA_ROOT" in os.environ:
        del os.environ["OPTIMA_ROOT"]
