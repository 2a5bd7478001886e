from enum import Enum, IntEnum


class SchedulingPolicy(str, Enum):
    LEVELED = "leveled"
    EASE_FACTOR = "ease_factor"


class Quality(IntEnum):
    BLACKOUT = 0
    WRONG = 1
    WRONG_FAMILIAR = 2
    HARD = 3
    GOOD = 4
    PERFECT = 5


QUALITY_LABELS = {
    Quality.BLACKOUT: "blackout",
    Quality.WRONG: "wrong",
    Quality.WRONG_FAMILIAR: "wrong, but familiar",
    Quality.HARD: "hard",
    Quality.GOOD: "good",
    Quality.PERFECT: "perfect",
}

RECALL_LABELS = {
    False: "didn't know",
    True: "knew it",
}
