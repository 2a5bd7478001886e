from dataclasses import replace

from django.db import transaction, IntegrityError
from django.db.models import F

from ..domain.errors import ConcurrencyConflict
from ..domain.state import CardState, coerce_policy
from .models import Card, ReviewLog


def to_state(card: Card) -> CardState:
    return CardState(
        card_id=card.pk,
        owner_id=card.owner_id,
        policy=coerce_policy(card.policy),
        level=card.level,
        ease_factor=card.ease_factor,
        repetitions=card.repetitions,
        last_interval_ms=card.last_interval_ms,
        next_review_at=card.next_review_at,
        version=card.version,
    )


def logged_state(log: ReviewLog) -> CardState:
    """The state a logged review produced, for answering a replayed request."""
    return CardState(
        card_id=log.card_id,
        owner_id=log.owner_id,
        policy=coerce_policy(log.card.policy),
        level=log.level,
        ease_factor=log.ease_factor,
        repetitions=log.repetitions,
        last_interval_ms=log.next_interval_ms,
        next_review_at=log.next_review_at,
        version=log.card.version,
    )


def _schedule_fields(state: CardState):
    return {
        "policy": coerce_policy(state.policy).value,
        "level": state.level,
        "ease_factor": state.ease_factor,
        "repetitions": state.repetitions,
        "last_interval_ms": state.last_interval_ms,
        "next_review_at": state.next_review_at,
    }


class CardStore:
    """Card schedule storage keyed by card id.

    Writes go through compare_and_swap on the ``version`` column, so a
    write computed from a stale read is refused instead of applied.
    """

    def get(self, card_id, owner_id=None) -> CardState:
        """Raises Card.DoesNotExist for unknown ids or someone else's card."""
        qs = Card.objects.filter(pk=card_id)
        if owner_id is not None:
            qs = qs.filter(owner_id=owner_id)
        return to_state(qs.get())

    def create(self, owner_id, front, back, state: CardState, created_at=None) -> CardState:
        card = Card.objects.create(
            owner_id=owner_id,
            front=front,
            back=back,
            created_at=created_at or state.next_review_at,
            **_schedule_fields(state),
        )
        return to_state(card)

    def compare_and_swap(self, card_id, expected_version, new_state: CardState) -> CardState:
        updated = (
            Card.objects
            .filter(pk=card_id, version=expected_version)
            .update(version=F("version") + 1, **_schedule_fields(new_state))
        )
        if not updated:
            raise ConcurrencyConflict(card_id, expected_version)
        return replace(new_state, version=expected_version + 1)

    def for_owner(self, owner_id):
        return [to_state(c) for c in Card.objects.filter(owner_id=owner_id).order_by("created_at", "pk")]

    def cards_for_owner(self, owner_id):
        """Full rows, word pair included, oldest first."""
        return list(Card.objects.filter(owner_id=owner_id).order_by("created_at", "pk"))

    def update_words(self, card_id, owner_id, front, back) -> Card:
        """Change the word pair only; schedule columns and version stay put."""
        updated = Card.objects.filter(pk=card_id, owner_id=owner_id).update(front=front, back=back)
        if not updated:
            raise Card.DoesNotExist(f"card {card_id} not found")
        return Card.objects.get(pk=card_id)

    def delete(self, card_id, owner_id):
        deleted, _ = Card.objects.filter(pk=card_id, owner_id=owner_id).delete()
        if not deleted:
            raise Card.DoesNotExist(f"card {card_id} not found")


def get_existing_idempotent(owner_id, card_id, idem_key):
    return ReviewLog.objects.filter(
        owner_id=owner_id, card_id=card_id, idempotency_key=idem_key
    ).first()


def persist_review(store, owner_id, outcome, idem_key, expected_version, next_state, reviewed_at):
    """
    Swap in the new schedule and insert its ReviewLog in one transaction.
    If a concurrent duplicate idempotency key slips in, roll both back and
    return the existing log.
    """
    try:
        with transaction.atomic():
            saved = store.compare_and_swap(next_state.card_id, expected_version, next_state)
            log = ReviewLog.objects.create(
                owner_id=owner_id, card_id=next_state.card_id,
                recalled=outcome.recalled_correctly, quality=outcome.quality,
                idempotency_key=idem_key, created_at=reviewed_at, level=saved.level,
                ease_factor=saved.ease_factor, repetitions=saved.repetitions,
                next_review_at=saved.next_review_at,
                next_interval_ms=saved.last_interval_ms,
            )
        return saved, log, False
    except IntegrityError:
        # Duplicate idempotency key safeguard
        existing = get_existing_idempotent(owner_id, next_state.card_id, idem_key)
        if existing is None:
            raise
        return logged_state(existing), existing, True
