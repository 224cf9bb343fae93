from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True, frozen=True)
class ScoreBreakdown:
    best_score: int
    activity_bonus: int
    total_score: int
    games_played: int
    games_until_max_bonus: int


@dataclass(slots=True)
class LeaderboardUpdate:
    best_score: int
    attempts: int
    activity_bonus: int
    total_score: int
    games_until_max_bonus: int
    is_new_best: bool
    overtaken_user_ids: list[int] = field(default_factory=list)


@dataclass(slots=True)
class WeeklyUpdate:
    week_start: datetime
    best_score: int
    quizzes: int
    activity_bonus: int
    total_score: int
    games_until_max_bonus: int
    is_new_best: bool
