from __future__ import annotations

from app.game.achievements.constants import (
    ACHIEVEMENT_FIRST_QUIZ,
    ACHIEVEMENT_PERFECT_QUIZ,
    ACHIEVEMENT_SCORE_1000,
    ACHIEVEMENT_STREAK_5,
    ACHIEVEMENT_STREAK_10,
    ACHIEVEMENT_TOURNAMENT_STAGE_PASSED,
    SCORE_1000_THRESHOLD,
)


def candidate_achievement_keys(
    *,
    game_score: int,
    correct_count: int,
    total_questions: int,
    max_streak: int,
    tournament_stage_passed: bool = False,
) -> list[str]:
    keys = [ACHIEVEMENT_FIRST_QUIZ]
    if total_questions > 0 and correct_count == total_questions:
        keys.append(ACHIEVEMENT_PERFECT_QUIZ)
    if max_streak >= 5:
        keys.append(ACHIEVEMENT_STREAK_5)
    if max_streak >= 10:
        keys.append(ACHIEVEMENT_STREAK_10)
    if game_score >= SCORE_1000_THRESHOLD:
        keys.append(ACHIEVEMENT_SCORE_1000)
    if tournament_stage_passed:
        keys.append(ACHIEVEMENT_TOURNAMENT_STAGE_PASSED)
    return keys
