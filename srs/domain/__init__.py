from .enums import QUALITY_LABELS, RECALL_LABELS, Quality, SchedulingPolicy
from .errors import ConcurrencyConflict, PolicyExhaustedWarning, ValidationError
from .intervals import DEFAULT_POLICY, IntervalPolicy
from .logic import schedule_review
from .queue import QueueStats, queue_stats, select_due
from .state import CardState, ReviewOutcome, new_card_state

__all__ = [
    "CardState",
    "ConcurrencyConflict",
    "DEFAULT_POLICY",
    "IntervalPolicy",
    "PolicyExhaustedWarning",
    "QUALITY_LABELS",
    "Quality",
    "QueueStats",
    "RECALL_LABELS",
    "ReviewOutcome",
    "SchedulingPolicy",
    "ValidationError",
    "new_card_state",
    "queue_stats",
    "schedule_review",
    "select_due",
]
