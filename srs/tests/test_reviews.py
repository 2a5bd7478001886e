import pytest
import logging
import uuid
from datetime import datetime, timedelta, timezone

from django.db.models import F
import structlog
from structlog.testing import capture_logs

from srs.config import CAS_MAX_ATTEMPTS, DAY_MS
from srs.data.models import Card, ReviewLog
from srs.data.repos import CardStore
from srs.domain import ConcurrencyConflict, ReviewOutcome, SchedulingPolicy, ValidationError
from srs.services.cards import create_card
import srs.services.reviews
from srs.services.reviews import record_review
from srs.services.study import build_study_session, owner_stats

logger = logging.getLogger(__name__)

T = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class RacingStore(CardStore):
    """Lets another writer bump the card right after each of the first reads."""

    def __init__(self, races):
        self.races = races

    def get(self, card_id, owner_id=None):
        state = super().get(card_id, owner_id)
        if self.races:
            self.races -= 1
            Card.objects.filter(pk=card_id).update(version=F("version") + 1, level=4)
        return state


@pytest.fixture
def owner():
    return uuid.uuid4()


@pytest.mark.django_db
def test_create_card_is_due_immediately(owner):
    state = create_card(owner, "  apple ", "manzana", now=T)

    card = Card.objects.get(pk=state.card_id)
    assert card.front == "apple"
    assert card.level == 0
    assert card.next_review_at == T
    assert card.policy == "leveled"
    assert state.is_new


@pytest.mark.django_db
def test_create_card_uses_configured_policy(owner, settings):
    settings.SRS_SCHEDULING_POLICY = "ease_factor"
    state = create_card(owner, "dog", "perro", now=T)
    assert state.policy is SchedulingPolicy.EASE_FACTOR


@pytest.mark.django_db
@pytest.mark.parametrize("front, back", [("", "x"), ("   ", "x"), ("x", "y" * 501)])
def test_create_card_rejects_bad_words(owner, front, back):
    with pytest.raises(ValidationError):
        create_card(owner, front, back, now=T)
    assert not Card.objects.exists()


@pytest.mark.django_db
def test_compare_and_swap_refuses_stale_version(owner):
    store = CardStore()
    state = create_card(owner, "house", "casa", now=T)

    saved = store.compare_and_swap(state.card_id, 0, state)
    assert saved.version == 1

    with pytest.raises(ConcurrencyConflict):
        store.compare_and_swap(state.card_id, 0, state)
    assert Card.objects.get(pk=state.card_id).version == 1
    logger.info("✓ Passed: stale write refused")


@pytest.mark.django_db
def test_store_get_filters_by_owner(owner):
    state = create_card(owner, "book", "libro", now=T)
    with pytest.raises(Card.DoesNotExist):
        CardStore().get(state.card_id, owner_id=uuid.uuid4())


@pytest.mark.django_db
def test_record_review_persists_state_and_log(owner):
    card = create_card(owner, "water", "agua", now=T)

    state, was_idem = record_review(owner, card.card_id, ReviewOutcome.recalled(True), "idem-1", now=T)

    assert was_idem is False
    assert state.level == 1
    assert state.version == 1
    assert state.next_review_at == T + timedelta(minutes=30)
    log = ReviewLog.objects.get(card_id=card.card_id)
    assert log.recalled is True
    assert log.quality is None
    assert log.next_interval_ms == 30 * 60 * 1000


@pytest.mark.django_db
def test_record_review_idempotent_key(owner):
    """Same key twice: second call reuses, level only moves once."""
    card = create_card(owner, "window", "ventana", now=T)

    first, idem1 = record_review(owner, card.card_id, ReviewOutcome.recalled(True), "idem-same", now=T)
    second, idem2 = record_review(owner, card.card_id, ReviewOutcome.recalled(True), "idem-same", now=T)

    assert (idem1, idem2) == (False, True)
    assert second.level == first.level == 1
    assert second.next_review_at == first.next_review_at
    assert ReviewLog.objects.count() == 1
    logger.info("✓ Passed: idempotency handled correctly")


@pytest.mark.django_db
def test_replayed_key_returns_its_own_result(owner):
    """A replayed key answers with what that review produced, not the card as it is now."""
    card = create_card(owner, "door", "puerta", now=T)

    record_review(owner, card.card_id, ReviewOutcome.recalled(True), "k1", now=T)
    later, _ = record_review(owner, card.card_id, ReviewOutcome.recalled(True), "k2", now=T + timedelta(hours=1))
    assert later.level == 2

    replay, was_idem = record_review(owner, card.card_id, ReviewOutcome.recalled(True), "k1", now=T + timedelta(hours=2))

    assert was_idem is True
    assert replay.level == 1
    assert replay.repetitions == 1
    assert replay.last_interval_ms == 30 * 60 * 1000
    assert replay.next_review_at == T + timedelta(minutes=30)
    assert Card.objects.get(pk=card.card_id).level == 2
    logger.info("✓ Passed: replay answered from its own log entry")


@pytest.mark.django_db
def test_replayed_ease_factor_key_keeps_logged_ease(owner):
    card = create_card(owner, "bread", "pan", policy="ease_factor", now=T)

    first, _ = record_review(owner, card.card_id, ReviewOutcome.graded(5), "q1", now=T)
    record_review(owner, card.card_id, ReviewOutcome.graded(2), "q2", now=T + timedelta(hours=1))

    replay, was_idem = record_review(owner, card.card_id, ReviewOutcome.graded(5), "q1", now=T)

    assert was_idem is True
    assert replay.ease_factor == pytest.approx(first.ease_factor)
    assert replay.level == first.level == 1


@pytest.mark.django_db
def test_record_review_retries_from_fresh_state(owner):
    """A lost race re-reads the stored card and schedules from that."""
    card = create_card(owner, "to remember", "recordar", now=T)

    state, _ = record_review(
        owner, card.card_id, ReviewOutcome.recalled(True), "idem-race", now=T,
        store=RacingStore(races=1),
    )

    assert state.level == 5
    assert state.version == 2
    assert state.last_interval_ms == 3 * DAY_MS
    logger.info("✓ Passed: conflict retried from persisted state")


@pytest.mark.django_db
def test_record_review_gives_up_after_max_attempts(owner):
    card = create_card(owner, "to forget", "olvidar", now=T)

    with pytest.raises(ConcurrencyConflict):
        record_review(
            owner, card.card_id, ReviewOutcome.recalled(True), "idem-lost", now=T,
            store=RacingStore(races=CAS_MAX_ATTEMPTS),
        )
    assert not ReviewLog.objects.exists()


@pytest.mark.django_db
def test_record_review_policy_mismatch_leaves_card(owner):
    card = create_card(owner, "cat", "gato", now=T)

    with pytest.raises(ValidationError):
        record_review(owner, card.card_id, ReviewOutcome.graded(5), "idem-bad", now=T)

    stored = Card.objects.get(pk=card.card_id)
    assert (stored.level, stored.version) == (0, 0)
    assert not ReviewLog.objects.exists()


@pytest.mark.django_db
def test_ease_factor_card_review(owner):
    card = create_card(owner, "tree", "árbol", policy="ease_factor", now=T)

    state, _ = record_review(owner, card.card_id, ReviewOutcome.graded(5), "idem-q5", now=T)

    assert state.ease_factor == pytest.approx(2.6)
    assert ReviewLog.objects.get(card_id=card.card_id).quality == 5


@pytest.mark.django_db
def test_study_session_orders_and_caps(owner):
    a = create_card(owner, "a", "a", now=T - timedelta(hours=5))
    b = create_card(owner, "b", "b", now=T - timedelta(hours=1))
    create_card(owner, "c", "c", now=T + timedelta(hours=1))
    create_card(uuid.uuid4(), "other", "otro", now=T - timedelta(days=9))

    due = build_study_session(owner, limit=10, now=T)
    assert [s.card_id for s in due] == [a.card_id, b.card_id]

    assert [s.card_id for s in build_study_session(owner, limit=1, now=T)] == [a.card_id]

    with pytest.raises(ValidationError):
        build_study_session(owner, limit=51, now=T)


@pytest.mark.django_db
def test_owner_stats(owner):
    create_card(owner, "a", "a", now=T - timedelta(days=2))
    create_card(owner, "b", "b", now=T + timedelta(days=1))

    stats = owner_stats(owner, now=T)
    assert stats.as_dict() == {"total": 2, "due": 1, "overdue": 1, "new": 2, "upcoming": 1}


@pytest.mark.django_db
def test_review_log_events_carry_card_level(owner, monkeypatch):
    card = create_card(owner, "moon", "luna", now=T)

    with capture_logs() as logs:
        monkeypatch.setattr(srs.services.reviews, "logger", structlog.get_logger())
        record_review(owner, card.card_id, ReviewOutcome.recalled(True), "idem-log", now=T)

    scheduled = [e for e in logs if e["event"] == "review_scheduled"]
    assert len(scheduled) == 1
    assert scheduled[0]["card_level"] == 1
    assert scheduled[0]["log_level"] == "info"


@pytest.mark.django_db
def test_top_level_review_logs_policy_exhausted(owner, monkeypatch):
    """Rule 5: past the last table entry the interval clamps and the event is logged."""
    card = create_card(owner, "sun", "sol", now=T)
    Card.objects.filter(pk=card.card_id).update(level=8)

    with capture_logs() as logs:
        monkeypatch.setattr(srs.services.reviews, "logger", structlog.get_logger())
        state, _ = record_review(owner, card.card_id, ReviewOutcome.recalled(True), "idem-top", now=T)

    assert state.level == 9
    assert state.last_interval_ms == 30 * DAY_MS
    exhausted = [e for e in logs if e["event"] == "policy_exhausted"]
    assert len(exhausted) == 1
    assert exhausted[0]["card_level"] == 9
    assert "8" in exhausted[0]["warning"]
    logger.info("✓ Passed: exhausted table logged and clamped")
