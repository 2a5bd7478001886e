from dataclasses import dataclass
from datetime import timedelta

from ..config import OVERDUE_AFTER_MS
from .errors import ValidationError
from .state import CardState, require_aware


def _check_limit(limit):
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError("limit must be an integer")
    if limit <= 0:
        raise ValidationError(f"limit must be positive, got {limit}")


def select_due(cards, now, limit=None):
    """Cards due at ``now``, most overdue first.

    Ties keep their input order, so the same input always yields the same
    list. ``limit`` keeps only the front of that list. Input cards are not
    touched; an empty result just means nothing is due.
    """
    require_aware(now)
    _check_limit(limit)

    due = []
    for card in cards:
        if not isinstance(card, CardState):
            raise ValidationError(f"expected CardState, got {type(card).__name__}")
        require_aware(card.next_review_at, "next_review_at")
        if card.next_review_at <= now:
            due.append(card)

    due.sort(key=lambda c: c.next_review_at)
    if limit is not None:
        del due[limit:]
    return due


@dataclass(frozen=True)
class QueueStats:
    total: int = 0
    due: int = 0
    overdue: int = 0
    new: int = 0
    upcoming: int = 0

    def as_dict(self):
        return {
            "total": self.total,
            "due": self.due,
            "overdue": self.overdue,
            "new": self.new,
            "upcoming": self.upcoming,
        }


def queue_stats(cards, now) -> QueueStats:
    """Counts for a card collection at ``now``.

    ``overdue`` is the part of ``due`` that has waited longer than
    OVERDUE_AFTER_MS; ``new`` counts cards never reviewed, due or not.
    """
    require_aware(now)
    overdue_before = now - timedelta(milliseconds=OVERDUE_AFTER_MS)
    total = due = overdue = new = 0
    for card in cards:
        total += 1
        if card.is_new:
            new += 1
        if card.next_review_at <= now:
            due += 1
            if card.next_review_at < overdue_before:
                overdue += 1
    return QueueStats(total=total, due=due, overdue=overdue, new=new, upcoming=total - due)
