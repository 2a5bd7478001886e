MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

DEFAULT_INTERVALS_MS = (
    1 * MINUTE_MS,
    30 * MINUTE_MS,
    1 * HOUR_MS,
    6 * HOUR_MS,
    1 * DAY_MS,
    3 * DAY_MS,
    7 * DAY_MS,
    14 * DAY_MS,
    30 * DAY_MS,
)

MAX_INTERVAL_MS = 365 * DAY_MS

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
LAPSE_EASE_PENALTY = 0.2
PASSING_QUALITY = 3    # q >= 3 counts as recalled
MAX_QUALITY = 5

OVERDUE_AFTER_MS = 1 * DAY_MS

DEFAULT_SESSION_LIMIT = 10
MAX_SESSION_LIMIT = 50

CAS_MAX_ATTEMPTS = 3

MAX_WORD_LENGTH = 500
