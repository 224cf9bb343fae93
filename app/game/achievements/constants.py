from __future__ import annotations

ACHIEVEMENT_FIRST_QUIZ = "first_quiz"
ACHIEVEMENT_PERFECT_QUIZ = "perfect_quiz"
ACHIEVEMENT_STREAK_5 = "streak_5"
ACHIEVEMENT_STREAK_10 = "streak_10"
ACHIEVEMENT_SCORE_1000 = "score_1000"
ACHIEVEMENT_TOURNAMENT_STAGE_PASSED = "tournament_stage_passed"

ACHIEVEMENT_KEYS = (
    ACHIEVEMENT_FIRST_QUIZ,
    ACHIEVEMENT_PERFECT_QUIZ,
    ACHIEVEMENT_STREAK_5,
    ACHIEVEMENT_STREAK_10,
    ACHIEVEMENT_SCORE_1000,
    ACHIEVEMENT_TOURNAMENT_STAGE_PASSED,
)

SCORE_1000_THRESHOLD = 1000
