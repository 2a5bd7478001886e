from django.utils import timezone
import structlog
from ..config import CAS_MAX_ATTEMPTS
from ..data.repos import (
    CardStore,
    get_existing_idempotent,
    logged_state,
    persist_review,
)
from ..domain.errors import ConcurrencyConflict, PolicyExhaustedWarning
from ..domain.intervals import DEFAULT_POLICY
from ..domain.logic import schedule_review
from ..utils.time import to_local_iso

logger = structlog.get_logger()


def _outcome_fields(outcome):
    if outcome.is_graded:
        return {"quality": outcome.quality}
    return {"recalled": outcome.recalled_correctly}


def record_review(owner_id, card_id, outcome, idempotency_key: str,
                  now=None, store=None, intervals=DEFAULT_POLICY):
    """Apply one review to a stored card.

    Returns ``(state, was_idempotent)``. Raises Card.DoesNotExist for an
    unknown card, ValidationError for bad input and ConcurrencyConflict
    once CAS_MAX_ATTEMPTS writes have lost the race.
    """
    store = store or CardStore()
    logger.info("review_received",
        owner_id=str(owner_id),
        card_id=str(card_id),
        idempotency_key=idempotency_key,
        **_outcome_fields(outcome),
    )

    # Fast path: return previous result if same idempotency_key
    existing = get_existing_idempotent(owner_id, card_id, idempotency_key)
    if existing:
        logger.info("idempotent_reuse",
            owner_id=str(owner_id),
            card_id=str(card_id),
            next_review_utc=existing.next_review_at.isoformat(),
            next_review_local=to_local_iso(existing.next_review_at),
        )
        return logged_state(existing), True

    now = now or timezone.now()
    for attempt in range(1, CAS_MAX_ATTEMPTS + 1):
        current = store.get(card_id, owner_id=owner_id)
        next_state = schedule_review(current, outcome, now, intervals)

        if intervals.is_exhausted(next_state.level):
            logger.info("policy_exhausted",
                card_id=str(card_id),
                card_level=next_state.level,
                warning=str(PolicyExhaustedWarning(next_state.level, intervals.max_level_index)),
            )

        try:
            saved, log, was_idempotent = persist_review(
                store, owner_id, outcome, idempotency_key,
                current.version, next_state, now,
            )
            break
        except ConcurrencyConflict:
            if attempt == CAS_MAX_ATTEMPTS:
                logger.warning("review_conflict",
                    owner_id=str(owner_id),
                    card_id=str(card_id),
                    attempts=attempt,
                )
                raise
            logger.info("review_conflict_retry",
                card_id=str(card_id),
                expected_version=current.version,
                attempt=attempt,
            )

    logger.info("review_scheduled",
        owner_id=str(owner_id),
        card_id=str(card_id),
        card_level=saved.level,
        ease_factor=saved.ease_factor,
        interval_ms=saved.last_interval_ms,
        next_review_utc=log.next_review_at.isoformat(),
        next_review_local=to_local_iso(log.next_review_at),
        idempotent=was_idempotent,
    )

    return saved, was_idempotent
