ACTIVITY_BONUS_PER_GAME = 50
MAX_ACTIVITY_BONUS = 500
MAX_GAMES_FOR_BONUS = MAX_ACTIVITY_BONUS // ACTIVITY_BONUS_PER_GAME

PERIOD_TYPE_ALL_TIME = "ALL_TIME"

OVERTAKEN_NOTIFY_LIMIT = 3
