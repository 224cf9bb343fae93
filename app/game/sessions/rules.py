from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from app.game.sessions.constants import (
    BASE_SCORE,
    FAST_ANSWER_MS,
    MAX_STREAK_BONUS,
    MAX_TIME_BONUS,
    STREAK_BONUS_STEP,
)
from app.game.sessions.types import AnswerScore, AnswerTiming


def time_bonus(time_spent_ms: int, time_limit_ms: int) -> int:
    if time_spent_ms <= FAST_ANSWER_MS:
        return MAX_TIME_BONUS
    if time_limit_ms <= 0 or time_spent_ms >= time_limit_ms:
        return 0
    remaining = Decimal(time_limit_ms - time_spent_ms) / Decimal(time_limit_ms)
    bonus = (remaining * MAX_TIME_BONUS).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, int(bonus))


def streak_bonus(streak: int) -> int:
    if streak <= 0:
        return 0
    return min(streak * STREAK_BONUS_STEP, MAX_STREAK_BONUS)


def answer_score(
    *,
    is_correct: bool,
    time_spent_ms: int,
    time_limit_ms: int,
    streak_before: int,
) -> AnswerScore:
    if not is_correct:
        return AnswerScore(base=0, time_bonus=0, streak_bonus=0)
    return AnswerScore(
        base=BASE_SCORE,
        time_bonus=time_bonus(time_spent_ms, time_limit_ms),
        streak_bonus=streak_bonus(streak_before),
    )


def answer_timing(
    *,
    question_started_at: datetime,
    now_utc: datetime,
    time_limit_ms: int,
    grace_ms: int,
) -> AnswerTiming:
    elapsed_ms = max(0, int((now_utc - question_started_at).total_seconds() * 1000))
    return AnswerTiming(
        time_spent_ms=min(elapsed_ms, time_limit_ms),
        is_late=elapsed_ms > time_limit_ms + grace_ms,
    )


def max_streak(correctness: Iterable[bool]) -> int:
    best = 0
    current = 0
    for is_correct in correctness:
        if is_correct:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def session_age_seconds(question_started_at: datetime | None, now_utc: datetime) -> float:
    if question_started_at is None:
        return float("inf")
    return (now_utc - question_started_at).total_seconds()


def is_abandoned(
    question_started_at: datetime | None,
    *,
    now_utc: datetime,
    abandon_seconds: int,
) -> bool:
    return session_age_seconds(question_started_at, now_utc) > abandon_seconds


def elapsed_question_budgets(
    *,
    question_started_at: datetime,
    now_utc: datetime,
    time_limits_ms: Sequence[int],
) -> int:
    """How many consecutive question budgets fully elapsed since the timer started.

    ``time_limits_ms`` lists the limits of the current question and every
    question after it, in order.
    """
    elapsed_ms = (now_utc - question_started_at).total_seconds() * 1000
    consumed = 0
    count = 0
    for limit_ms in time_limits_ms:
        consumed += limit_ms
        if consumed > elapsed_ms:
            break
        count += 1
    return count
