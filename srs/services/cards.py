from django.conf import settings
from django.utils import timezone
import structlog

from ..config import MAX_WORD_LENGTH
from ..data.repos import CardStore
from ..domain.errors import ValidationError
from ..domain.state import new_card_state

logger = structlog.get_logger()


def clean_word(value, name):
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text")
    text = value.strip()
    if not text:
        raise ValidationError(f"{name} cannot be empty")
    if len(text) > MAX_WORD_LENGTH:
        raise ValidationError(f"{name} cannot exceed {MAX_WORD_LENGTH} characters")
    return text


def create_card(owner_id, front, back, policy=None, now=None, store=None):
    """Store a new word pair, due immediately.

    The scheduling policy is fixed here for the card's whole life; it
    defaults to settings.SRS_SCHEDULING_POLICY.
    """
    store = store or CardStore()
    now = now or timezone.now()
    front, back = clean_word(front, "front"), clean_word(back, "back")
    state = new_card_state(now, policy or settings.SRS_SCHEDULING_POLICY, owner_id=owner_id)

    saved = store.create(owner_id, front, back, state, created_at=now)
    logger.info("card_created",
        owner_id=str(owner_id),
        card_id=str(saved.card_id),
        policy=saved.policy.value,
    )
    return saved


def list_cards(owner_id, store=None):
    store = store or CardStore()
    return store.cards_for_owner(owner_id)


def update_card(owner_id, card_id, front, back, store=None):
    """Replace a card's word pair. Its schedule is left as it was."""
    store = store or CardStore()
    front, back = clean_word(front, "front"), clean_word(back, "back")
    card = store.update_words(card_id, owner_id, front, back)
    logger.info("card_updated", owner_id=str(owner_id), card_id=str(card_id))
    return card


def delete_card(owner_id, card_id, store=None):
    store = store or CardStore()
    store.delete(card_id, owner_id)
    logger.info("card_deleted", owner_id=str(owner_id), card_id=str(card_id))
