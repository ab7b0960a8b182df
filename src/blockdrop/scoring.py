"""Score keeping and level progression."""

from __future__ import annotations

from dataclasses import dataclass

from .config import BASE_TICK_MS, LEVEL_THRESHOLD, MAX_LEVEL, MAX_SCORE, POINTS_PER_LINE


def saturating_add(value: int, amount: int, limit: int = MAX_SCORE) -> int:
    """Return ``value + amount`` clamped to ``limit``.

    Raises:
        ValueError: If ``amount`` is negative.
    """

    if amount < 0:
        raise ValueError("Cannot add a negative amount")
    return min(value + amount, limit)


def tick_period_for(level: int) -> int:
    """Return the gravity period in milliseconds for ``level``."""

    return BASE_TICK_MS // level


@dataclass
class Scoring:
    """Score, level and the gravity period derived from the level."""

    score: int = 0
    level: int = 1
    tick_period_ms: int = BASE_TICK_MS

    def reset(self) -> None:
        self.score = 0
        self.level = 1
        self.tick_period_ms = tick_period_for(1)

    def on_lines_cleared(self, lines: int) -> int:
        """Award points for ``lines`` cleared rows and return the award.

        Each row is worth ``100 * level``.  The score saturates at
        :data:`~blockdrop.config.MAX_SCORE`.
        """

        points = lines * POINTS_PER_LINE * self.level
        self.score = saturating_add(self.score, points)
        return points

    def maybe_level_up(self) -> bool:
        """Advance one level if the score has reached the threshold.

        Returns ``True`` when the level (and therefore the tick period)
        changed.
        """

        if self.score >= self.level * LEVEL_THRESHOLD and self.level < MAX_LEVEL:
            self.level += 1
            self.tick_period_ms = tick_period_for(self.level)
            return True
        return False
