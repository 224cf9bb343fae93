from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from app.economy.energy.types import EnergyGateRejection


@dataclass(slots=True, frozen=True)
class AnswerScore:
    base: int
    time_bonus: int
    streak_bonus: int

    @property
    def total(self) -> int:
        return self.base + self.time_bonus + self.streak_bonus


@dataclass(slots=True, frozen=True)
class AnswerTiming:
    time_spent_ms: int
    is_late: bool


@dataclass(slots=True, frozen=True)
class TimeoutBackfill:
    """Outcome of closing every question whose time budget ran out."""

    elapsed_questions: int
    inserted_answers: int
    question_index: int
    is_exhausted: bool


@dataclass(slots=True, frozen=True)
class PendingNotification:
    notification_type: str
    user_id: int
    payload: dict[str, Any]
    eta: datetime | None = None


@dataclass(slots=True, frozen=True)
class SessionStartResult:
    kind: str
    payload: dict[str, Any]
    rejection: EnergyGateRejection | None = None
    session_id: UUID | None = None
    notifications: tuple[PendingNotification, ...] = ()


@dataclass(slots=True, frozen=True)
class ViewSignalResult:
    question_index: int
    server_time: datetime
    question_started_at: datetime


@dataclass(slots=True, frozen=True)
class AnswerResult:
    correct: bool
    score: AnswerScore
    time_spent_ms: int
    total_score: int
    streak: int
    current_question_index: int
    correct_option_id: int | None
    is_last_question: bool


@dataclass(slots=True, frozen=True)
class TimeoutResult:
    skipped: bool
    current_question_index: int
    total_score: int
    streak: int
    is_last_question: bool
    message: str | None = None


@dataclass(slots=True, frozen=True)
class FinishResult:
    payload: dict[str, Any]
    already_finished: bool
    notifications: tuple[PendingNotification, ...] = ()
