from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from app.game.tournaments.constants import (
    START_ELIGIBLE_PARTICIPANT_STATUSES,
    TOURNAMENT_STATUS_ACTIVE,
    TOURNAMENT_STATUS_FINISHED,
)


def is_within_start_window(*, status: str, ends_at: datetime, now_utc: datetime) -> bool:
    """ACTIVE, or FINISHED but still inside the finalization grace window."""
    if status == TOURNAMENT_STATUS_ACTIVE:
        return True
    return status == TOURNAMENT_STATUS_FINISHED and now_utc <= ends_at


def is_start_participant(participant_status: str | None) -> bool:
    return participant_status in START_ELIGIBLE_PARTICIPANT_STATUSES


def prev_stages_completed(*, stage_order: int, lower_stages_total: int, lower_completed_total: int) -> bool:
    if stage_order <= 1:
        return True
    return lower_completed_total >= lower_stages_total


def prev_stages_passed(*, stage_order: int, lower_stages_total: int, lower_passed_total: int) -> bool:
    if stage_order <= 1:
        return True
    return lower_passed_total >= lower_stages_total


def stage_score(raw_score: int, multiplier: Decimal | float | int) -> int:
    value = Decimal(raw_score) * Decimal(str(multiplier))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def passed_min_score(score: int, min_score: int | None) -> bool:
    return min_score is None or score >= min_score


def passed_top_n(rank: int, top_n: int | None) -> bool:
    return top_n is None or rank <= top_n


def rank_from_count_above(count_above: int) -> int:
    return 1 + max(0, count_above)
