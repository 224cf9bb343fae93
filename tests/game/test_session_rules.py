from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.game.sessions.rules import (
    answer_score,
    answer_timing,
    elapsed_question_budgets,
    is_abandoned,
    max_streak,
    session_age_seconds,
    streak_bonus,
    time_bonus,
)

UTC = timezone.utc
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("time_spent_ms", "expected"),
    [
        (0, 50),
        (500, 50),
        (3000, 40),
        (7500, 25),
        (14_999, 0),
        (15_000, 0),
        (20_000, 0),
    ],
)
def test_time_bonus_scales_with_remaining_time(time_spent_ms: int, expected: int) -> None:
    assert time_bonus(time_spent_ms, 15_000) == expected


def test_streak_bonus_grows_then_caps() -> None:
    assert [streak_bonus(value) for value in range(0, 6)] == [0, 10, 20, 30, 30, 30]


def test_answer_score_for_correct_answer_uses_streak_before_answer() -> None:
    score = answer_score(is_correct=True, time_spent_ms=7500, time_limit_ms=15_000, streak_before=2)

    assert score.base == 100
    assert score.time_bonus == 25
    assert score.streak_bonus == 20
    assert score.total == 145


def test_answer_score_for_wrong_answer_is_zero() -> None:
    score = answer_score(is_correct=False, time_spent_ms=100, time_limit_ms=15_000, streak_before=4)
    assert score.total == 0


def test_answer_timing_caps_spent_time_and_applies_grace() -> None:
    started = NOW - timedelta(milliseconds=16_000)
    within_grace = answer_timing(
        question_started_at=started,
        now_utc=NOW,
        time_limit_ms=15_000,
        grace_ms=2000,
    )
    assert within_grace.time_spent_ms == 15_000
    assert within_grace.is_late is False

    too_late = answer_timing(
        question_started_at=NOW - timedelta(seconds=18),
        now_utc=NOW,
        time_limit_ms=15_000,
        grace_ms=2000,
    )
    assert too_late.is_late is True


def test_answer_timing_clamps_clock_skew_to_zero() -> None:
    timing = answer_timing(
        question_started_at=NOW + timedelta(seconds=1),
        now_utc=NOW,
        time_limit_ms=15_000,
        grace_ms=2000,
    )
    assert timing.time_spent_ms == 0
    assert timing.is_late is False


def test_max_streak_counts_longest_correct_run() -> None:
    assert max_streak([]) == 0
    assert max_streak([False, False]) == 0
    assert max_streak([True, True, False, True, True, True, False, True]) == 3


def test_missing_timer_counts_as_abandoned() -> None:
    assert session_age_seconds(None, NOW) == float("inf")
    assert is_abandoned(None, now_utc=NOW, abandon_seconds=1800) is True


def test_abandon_threshold_is_strict() -> None:
    assert is_abandoned(NOW - timedelta(seconds=1800), now_utc=NOW, abandon_seconds=1800) is False
    assert is_abandoned(NOW - timedelta(seconds=1801), now_utc=NOW, abandon_seconds=1800) is True


def test_elapsed_question_budgets_counts_only_full_budgets() -> None:
    limits = [15_000, 10_000, 20_000]

    assert (
        elapsed_question_budgets(
            question_started_at=NOW - timedelta(seconds=14),
            now_utc=NOW,
            time_limits_ms=limits,
        )
        == 0
    )
    assert (
        elapsed_question_budgets(
            question_started_at=NOW - timedelta(seconds=25),
            now_utc=NOW,
            time_limits_ms=limits,
        )
        == 2
    )
    assert (
        elapsed_question_budgets(
            question_started_at=NOW - timedelta(minutes=10),
            now_utc=NOW,
            time_limits_ms=limits,
        )
        == 3
    )
