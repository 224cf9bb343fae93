from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class XpBreakdown:
    base: int
    correct_answers: int
    perfect_bonus: int
    daily_bonus: int
    streak_bonus: int

    @property
    def total(self) -> int:
        return (
            self.base
            + self.correct_answers
            + self.perfect_bonus
            + self.daily_bonus
            + self.streak_bonus
        )


@dataclass(slots=True, frozen=True)
class LevelProgress:
    level: int
    current_level_xp: int
    next_level_xp: int
    xp_in_current_level: int
    xp_needed_for_next: int
    progress_percent: int


@dataclass(slots=True, frozen=True)
class XpGrant:
    earned: int
    total: int
    level: int
    level_up: bool
    new_level: int | None
