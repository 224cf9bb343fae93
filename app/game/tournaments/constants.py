from __future__ import annotations

TOURNAMENT_STATUS_UPCOMING = "UPCOMING"
TOURNAMENT_STATUS_ACTIVE = "ACTIVE"
TOURNAMENT_STATUS_FINISHED = "FINISHED"
TOURNAMENT_STATUS_CANCELLED = "CANCELLED"

PARTICIPANT_STATUS_REGISTERED = "REGISTERED"
PARTICIPANT_STATUS_ACTIVE = "ACTIVE"
PARTICIPANT_STATUS_FINISHED = "FINISHED"

# start may run energy-free for any of these, scoring only for the first two
START_ELIGIBLE_PARTICIPANT_STATUSES = frozenset(
    {
        PARTICIPANT_STATUS_REGISTERED,
        PARTICIPANT_STATUS_ACTIVE,
        PARTICIPANT_STATUS_FINISHED,
    }
)
SCORING_ELIGIBLE_PARTICIPANT_STATUSES = frozenset(
    {
        PARTICIPANT_STATUS_REGISTERED,
        PARTICIPANT_STATUS_ACTIVE,
    }
)

REGISTRATION_CLOSED_STATUSES = frozenset(
    {
        TOURNAMENT_STATUS_FINISHED,
        TOURNAMENT_STATUS_CANCELLED,
    }
)

PRIZE_TYPE_XP = "XP"
PRIZE_TYPE_BADGE = "BADGE"

LEADERBOARD_DEFAULT_LIMIT = 50
LEADERBOARD_MAX_LIMIT = 100
FINALIZATION_BATCH_LIMIT = 20
