MAX_ATTEMPTS = 5
ATTEMPT_COOLDOWN_SECONDS = 4 * 60 * 60
RATE_LIMIT_SECONDS = 60

ENERGY_RESTORED_DEDUPE_KEY_PREFIX = "energy:notified:"
