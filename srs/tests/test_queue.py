import pytest
import logging
from datetime import datetime, timedelta, timezone

from srs.domain import CardState, ValidationError, queue_stats, select_due

logger = logging.getLogger(__name__)

T = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def card(name, offset, **kw):
    return CardState(card_id=name, next_review_at=T + offset, **kw)


def test_due_cards_most_overdue_first():
    """A(-5h), B(-1h) are due in that order; C(+1h) is not."""
    a = card("A", timedelta(hours=-5))
    b = card("B", timedelta(hours=-1))
    c = card("C", timedelta(hours=1))

    due = select_due([c, b, a], T, limit=10)

    assert [x.card_id for x in due] == ["A", "B"]
    logger.info("✓ Passed: due queue ordered %s", [x.card_id for x in due])


def test_due_exactly_now_included():
    assert [x.card_id for x in select_due([card("X", timedelta(0))], T)] == ["X"]


def test_nothing_due_is_empty():
    assert select_due([card("F", timedelta(minutes=1))], T) == []
    assert select_due([], T) == []


def test_limit_keeps_overdue_prefix():
    cards = [card(f"c{i}", timedelta(minutes=-i)) for i in range(20)]

    due = select_due(cards, T, limit=5)

    assert [x.card_id for x in due] == ["c19", "c18", "c17", "c16", "c15"]


def test_ordering_property_holds():
    offsets = [-90, 30, -1, -400, 0, -7, 15, -7]
    cards = [card(f"c{i}", timedelta(minutes=m)) for i, m in enumerate(offsets)]

    due = select_due(cards, T)

    overdue = [x.overdue_ms(T) for x in due]
    assert overdue == sorted(overdue, reverse=True)
    assert all(x.next_review_at <= T for x in due)
    assert len(due) == sum(1 for m in offsets if m <= 0)


def test_ties_keep_input_order():
    cards = [card(n, timedelta(hours=-1)) for n in ["q", "a", "m"]]
    assert [x.card_id for x in select_due(cards, T)] == ["q", "a", "m"]


def test_pure_read():
    cards = [card("B", timedelta(hours=-1)), card("A", timedelta(hours=-5))]
    before = list(cards)

    first = select_due(cards, T)
    second = select_due(cards, T)

    assert first == second
    assert cards == before
    logger.info("✓ Passed: select_due is a pure read")


@pytest.mark.parametrize("limit", [0, -3, 2.0, True, "10"])
def test_bad_limit(limit):
    with pytest.raises(ValidationError):
        select_due([], T, limit=limit)


def test_naive_now_rejected():
    with pytest.raises(ValidationError):
        select_due([], datetime(2024, 3, 1))


def test_non_state_rejected():
    with pytest.raises(ValidationError):
        select_due([{"next_review_at": T}], T)


def test_queue_stats():
    cards = [
        card("new-due", timedelta(0)),
        card("overdue", timedelta(days=-3), repetitions=2, last_interval_ms=1000, level=2),
        card("due", timedelta(hours=-2), repetitions=1, last_interval_ms=1000, level=1),
        card("later", timedelta(days=2), repetitions=4, last_interval_ms=1000, level=4),
    ]

    stats = queue_stats(cards, T)

    assert stats.as_dict() == {"total": 4, "due": 3, "overdue": 1, "new": 1, "upcoming": 1}
