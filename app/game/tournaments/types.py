from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


@dataclass(slots=True, frozen=True)
class TournamentQuizAccess:
    """Whether a quiz start runs as energy-free tournament play.

    All three flags must hold; they are kept apart so each rule can be
    checked on its own.
    """

    is_within_window: bool
    is_participant: bool
    prev_stages_ok: bool
    tournament_id: UUID | None = None
    tournament_title: str | None = None
    stage_id: UUID | None = None
    stage_order: int | None = None
    stage_title: str | None = None

    @property
    def is_tournament_quiz(self) -> bool:
        return self.is_within_window and self.is_participant and self.prev_stages_ok


NOT_A_TOURNAMENT_QUIZ_ACCESS = TournamentQuizAccess(
    is_within_window=False,
    is_participant=False,
    prev_stages_ok=False,
)


class StageOutcomeKind(str, Enum):
    SCORED = "SCORED"
    NOT_A_TOURNAMENT_QUIZ = "NOT_A_TOURNAMENT_QUIZ"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    SEQUENCE_VIOLATION = "SEQUENCE_VIOLATION"


@dataclass(slots=True, frozen=True)
class StageScore:
    tournament_id: UUID
    tournament_title: str
    stage_id: UUID
    stage_order: int
    total_stages: int
    score_multiplier: float
    score: int
    total_score: int
    rank: int
    passed: bool
    is_last_stage: bool
    next_stage_title: str | None


@dataclass(slots=True, frozen=True)
class StageOutcome:
    kind: StageOutcomeKind
    scored: StageScore | None = None

    @classmethod
    def not_a_tournament_quiz(cls) -> StageOutcome:
        return cls(kind=StageOutcomeKind.NOT_A_TOURNAMENT_QUIZ)

    @classmethod
    def already_completed(cls) -> StageOutcome:
        return cls(kind=StageOutcomeKind.ALREADY_COMPLETED)

    @classmethod
    def sequence_violation(cls) -> StageOutcome:
        return cls(kind=StageOutcomeKind.SEQUENCE_VIOLATION)


@dataclass(slots=True, frozen=True)
class TournamentRegistration:
    tournament_id: UUID
    slug: str
    status: str
    entry_fee_xp: int
    xp_after: int | None
    joined_at: datetime


@dataclass(slots=True, frozen=True)
class LeaderboardRow:
    position: int
    user_id: int
    username: str | None
    first_name: str | None
    total_score: int
    current_stage: int
    status: str


@dataclass(slots=True, frozen=True)
class TournamentLeaderboard:
    tournament_id: UUID
    slug: str
    title: str
    status: str
    participants_total: int
    rows: tuple[LeaderboardRow, ...]
    my_position: int | None
    my_total_score: int | None


@dataclass(slots=True, frozen=True)
class PrizeAward:
    user_id: int
    place: int
    prize_type: str
    value: int
    title: str


@dataclass(slots=True, frozen=True)
class TournamentFinalization:
    tournament_id: UUID
    tournament_title: str
    finalized_now: bool
    participants_total: int
    awards: tuple[PrizeAward, ...]
