from __future__ import annotations

BASE_SCORE = 100
MAX_TIME_BONUS = 50
FAST_ANSWER_MS = 500
STREAK_BONUS_STEP = 10
MAX_STREAK_BONUS = 30

SESSION_START_KIND_RESUMED = "resumed"
SESSION_START_KIND_COMPLETED = "completed"
SESSION_START_KIND_CREATED = "created"
SESSION_START_KIND_REJECTED = "rejected"

USER_STATUS_IDLE = "IDLE"
USER_STATUS_PLAYING = "PLAYING"
