import math
from dataclasses import replace
from datetime import timedelta

from ..config import (
    LAPSE_EASE_PENALTY,
    MAX_INTERVAL_MS,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
)
from .enums import SchedulingPolicy
from .errors import ValidationError
from .intervals import DEFAULT_POLICY
from .state import CardState, ReviewOutcome, coerce_policy, require_aware


def adjust_ease(ease_factor: float, quality: int) -> float:
    """SM-2 ease update, floored at MIN_EASE_FACTOR.

    q=5 adds 0.1, q=4 keeps the ease, q=3 takes off 0.14.
    """
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def _grow(base_ms, ease, steps):
    """base_ms * ease ** steps, capped at MAX_INTERVAL_MS."""
    if base_ms >= MAX_INTERVAL_MS:
        return MAX_INTERVAL_MS
    if steps * math.log(ease) >= math.log(MAX_INTERVAL_MS / base_ms):
        return MAX_INTERVAL_MS
    return int(round(base_ms * ease ** steps))


def _leveled(state, outcome, intervals):
    if outcome.is_graded:
        raise ValidationError("leveled cards take a recalled/forgot outcome, not a quality grade")

    if outcome.recalled_correctly:
        level, repetitions = state.level + 1, state.repetitions + 1
    else:
        level, repetitions = 0, 0

    return level, repetitions, state.ease_factor, intervals.interval_for(level)


def _ease_factor(state, outcome, intervals):
    if not outcome.is_graded:
        raise ValidationError("ease-factor cards take a 0-5 quality grade")

    q = outcome.quality
    if q < PASSING_QUALITY:
        ease = max(MIN_EASE_FACTOR, state.ease_factor - LAPSE_EASE_PENALTY)
        return 0, 0, ease, intervals.interval_for(0)

    level, repetitions = state.level + 1, state.repetitions + 1
    ease = adjust_ease(state.ease_factor, q)
    base = intervals.interval_for(level)
    # the ceiling may not cut below the table entry
    interval = max(base, _grow(base, ease, repetitions - 1))
    return level, repetitions, ease, interval


_TRANSITIONS = {
    SchedulingPolicy.LEVELED: _leveled,
    SchedulingPolicy.EASE_FACTOR: _ease_factor,
}


def schedule_review(
    state: CardState, outcome: ReviewOutcome, now, intervals=DEFAULT_POLICY
) -> CardState:
    """Apply one review to ``state`` and return the next state.

    The card's own ``policy`` picks the transition. ``now`` is supplied by the
    caller so the result depends on the arguments alone. Bad input raises
    ValidationError and nothing is returned.
    """
    require_aware(now)
    if not isinstance(state, CardState):
        raise ValidationError(f"expected CardState, got {type(state).__name__}")
    if not isinstance(outcome, ReviewOutcome):
        raise ValidationError(f"expected ReviewOutcome, got {type(outcome).__name__}")
    state.validate()
    outcome.validate()

    policy = coerce_policy(state.policy)
    transition = _TRANSITIONS[policy]
    level, repetitions, ease, interval_ms = transition(state, outcome, intervals)

    return replace(
        state,
        policy=policy,
        level=level,
        repetitions=repetitions,
        ease_factor=ease,
        last_interval_ms=interval_ms,
        next_review_at=now + timedelta(milliseconds=interval_ms),
    )
