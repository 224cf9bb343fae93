XP_QUIZ_COMPLETE = 50
XP_CORRECT_ANSWER = 10
XP_PERFECT_QUIZ = 100
XP_FIRST_QUIZ_OF_DAY = 30
XP_STREAK_5 = 25
XP_STREAK_10 = 50

XP_PER_LEVEL_UNIT = 50

LEVEL_TITLES: tuple[tuple[int, str], ...] = (
    (100, "Legend"),
    (50, "Master"),
    (35, "Profiler"),
    (20, "Inspector"),
    (10, "Detective"),
    (5, "Tracker"),
    (1, "Novice"),
)
