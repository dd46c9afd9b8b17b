"""Screen-time reward ledger.

Completing a task credits its duration to the allowance; a periodic tick
moves time from the allowance into ``used``. The allowance never goes
below zero: the tick that crosses zero deducts only what is left.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_ALLOWANCE_SECONDS = 4 * 3600.0


class RewardLedger:
    def __init__(self, allowance: float = DEFAULT_ALLOWANCE_SECONDS, used: float = 0.0) -> None:
        self.allowance = max(0.0, float(allowance))
        self.used = max(0.0, float(used))

    def __repr__(self) -> str:
        return f"RewardLedger(allowance={self.allowance!r}, used={self.used!r})"

    @property
    def total(self) -> float:
        return self.allowance + self.used

    def credit(self, duration: float) -> None:
        if duration < 0:
            raise ValueError(f"credit duration must be non-negative, got {duration!r}")
        self.allowance += duration
        logger.debug("Credited %.0fs, allowance now %.0fs", duration, self.allowance)

    def tick(self, interval: float) -> float:
        """Consume up to *interval* seconds of allowance. Returns the amount consumed."""
        if interval < 0:
            raise ValueError(f"tick interval must be non-negative, got {interval!r}")
        if self.allowance <= 0:
            return 0.0
        spent = min(float(interval), self.allowance)
        self.allowance -= spent
        self.used += spent
        if self.allowance <= 0:
            self.allowance = 0.0
            logger.info("Screen time allowance exhausted (used=%.0fs)", self.used)
        return spent
