import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..config import DEFAULT_EASE_FACTOR, MAX_QUALITY, MIN_EASE_FACTOR
from .enums import SchedulingPolicy
from .errors import ValidationError


def require_aware(value, name="now") -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{name} must be timezone-aware")
    return value


def _require_count(value, name):
    # bool is an int subclass, but True is not a level
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer")
    if value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}")


def coerce_policy(value) -> SchedulingPolicy:
    try:
        return SchedulingPolicy(value)
    except ValueError:
        raise ValidationError(f"unknown scheduling policy: {value!r}") from None


@dataclass(frozen=True)
class CardState:
    """Scheduling state of a single card.

    Only ``next_review_at`` matters for queueing; ``level``, ``ease_factor``
    and ``repetitions`` drive the next transition. ``version`` belongs to the
    store and is carried through untouched.
    """

    next_review_at: datetime
    policy: SchedulingPolicy = SchedulingPolicy.LEVELED
    level: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    last_interval_ms: int = 0
    card_id: Any = None
    owner_id: Any = None
    version: int = field(default=0, compare=False)

    def validate(self) -> "CardState":
        coerce_policy(self.policy)
        _require_count(self.level, "level")
        _require_count(self.repetitions, "repetitions")
        _require_count(self.last_interval_ms, "last_interval_ms")
        if isinstance(self.ease_factor, bool) or not isinstance(
            self.ease_factor, (int, float)
        ):
            raise ValidationError("ease_factor must be a number")
        if not math.isfinite(self.ease_factor):
            raise ValidationError("ease_factor must be finite")
        if self.ease_factor < MIN_EASE_FACTOR:
            raise ValidationError(
                f"ease_factor {self.ease_factor} is below the floor {MIN_EASE_FACTOR}"
            )
        require_aware(self.next_review_at, "next_review_at")
        return self

    @property
    def is_new(self) -> bool:
        return self.repetitions == 0 and self.last_interval_ms == 0

    def overdue_ms(self, now: datetime) -> int:
        """Milliseconds past due at ``now``; negative when not yet due."""
        return int((now - self.next_review_at).total_seconds() * 1000)


def new_card_state(now, policy=SchedulingPolicy.LEVELED, card_id=None, owner_id=None):
    """State of a freshly created card: level 0 and due immediately."""
    require_aware(now)
    return CardState(
        next_review_at=now,
        policy=coerce_policy(policy),
        card_id=card_id,
        owner_id=owner_id,
    )


@dataclass(frozen=True)
class ReviewOutcome:
    """Either a plain recalled/forgot answer or a 0-5 quality grade.

    Build one with :meth:`recalled` or :meth:`graded`; exactly one of the two
    fields is set.
    """

    recalled_correctly: Optional[bool] = None
    quality: Optional[int] = None

    @classmethod
    def recalled(cls, correct: bool) -> "ReviewOutcome":
        if not isinstance(correct, bool):
            raise ValidationError("recalled outcome must be True or False")
        return cls(recalled_correctly=correct)

    @classmethod
    def graded(cls, quality: int) -> "ReviewOutcome":
        if isinstance(quality, bool) or not isinstance(quality, int):
            raise ValidationError("quality must be an integer")
        if not 0 <= quality <= MAX_QUALITY:
            raise ValidationError(f"quality must be between 0 and {MAX_QUALITY}, got {quality}")
        return cls(quality=quality)

    @property
    def is_graded(self) -> bool:
        return self.quality is not None

    def validate(self) -> "ReviewOutcome":
        if (self.recalled_correctly is None) == (self.quality is None):
            raise ValidationError("outcome needs exactly one of recalled_correctly or quality")
        if self.is_graded:
            ReviewOutcome.graded(self.quality)
        else:
            ReviewOutcome.recalled(self.recalled_correctly)
        return self
