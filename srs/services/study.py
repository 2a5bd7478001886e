from django.utils import timezone
import structlog

from ..config import DEFAULT_SESSION_LIMIT, MAX_SESSION_LIMIT
from ..data.repos import CardStore
from ..domain.errors import ValidationError
from ..domain.queue import queue_stats, select_due

logger = structlog.get_logger()


def build_study_session(owner_id, limit=None, now=None, store=None):
    """The owner's due cards for one sitting, most overdue first."""
    store = store or CardStore()
    now = now or timezone.now()
    limit = DEFAULT_SESSION_LIMIT if limit is None else limit
    if isinstance(limit, int) and limit > MAX_SESSION_LIMIT:
        raise ValidationError(f"study session limit cannot exceed {MAX_SESSION_LIMIT} cards")

    cards = select_due(store.for_owner(owner_id), now, limit)
    logger.info("study_session_built",
        owner_id=str(owner_id),
        limit=limit,
        card_count=len(cards),
    )
    return cards


def owner_stats(owner_id, now=None, store=None):
    store = store or CardStore()
    return queue_stats(store.for_owner(owner_id), now or timezone.now())
