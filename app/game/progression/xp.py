from __future__ import annotations

from math import isqrt

from app.game.progression.constants import (
    LEVEL_TITLES,
    XP_CORRECT_ANSWER,
    XP_FIRST_QUIZ_OF_DAY,
    XP_PER_LEVEL_UNIT,
    XP_PERFECT_QUIZ,
    XP_QUIZ_COMPLETE,
    XP_STREAK_5,
    XP_STREAK_10,
)
from app.game.progression.types import LevelProgress, XpBreakdown


def xp_for_level(level: int) -> int:
    if level <= 1:
        return 0
    return XP_PER_LEVEL_UNIT * level * (level + 1)


def level_from_xp(xp: int) -> int:
    if xp <= 0:
        return 1
    # largest level with 50 * level * (level + 1) <= xp
    level = (isqrt(1 + 4 * (xp // XP_PER_LEVEL_UNIT)) - 1) // 2
    while XP_PER_LEVEL_UNIT * (level + 1) * (level + 2) <= xp:
        level += 1
    while level > 1 and XP_PER_LEVEL_UNIT * level * (level + 1) > xp:
        level -= 1
    return max(1, level)


def level_progress(xp: int) -> LevelProgress:
    level = level_from_xp(xp)
    current_level_xp = xp_for_level(level)
    next_level_xp = xp_for_level(level + 1)
    xp_in_current_level = max(0, xp - current_level_xp)
    xp_needed_for_next = next_level_xp - current_level_xp
    progress_percent = min(100, (xp_in_current_level * 100) // max(1, xp_needed_for_next))
    return LevelProgress(
        level=level,
        current_level_xp=current_level_xp,
        next_level_xp=next_level_xp,
        xp_in_current_level=xp_in_current_level,
        xp_needed_for_next=xp_needed_for_next,
        progress_percent=progress_percent,
    )


def level_title(level: int) -> str:
    for min_level, title in LEVEL_TITLES:
        if level >= min_level:
            return title
    return LEVEL_TITLES[-1][1]


def calculate_quiz_xp(
    *,
    correct_count: int,
    total_questions: int,
    max_streak: int,
    is_first_quiz_of_day: bool,
) -> XpBreakdown:
    if max_streak >= 10:
        streak_bonus = XP_STREAK_10
    elif max_streak >= 5:
        streak_bonus = XP_STREAK_5
    else:
        streak_bonus = 0

    return XpBreakdown(
        base=XP_QUIZ_COMPLETE,
        correct_answers=max(0, correct_count) * XP_CORRECT_ANSWER,
        perfect_bonus=(
            XP_PERFECT_QUIZ if total_questions > 0 and correct_count == total_questions else 0
        ),
        daily_bonus=XP_FIRST_QUIZ_OF_DAY if is_first_quiz_of_day else 0,
        streak_bonus=streak_bonus,
    )
