from ..config import DEFAULT_INTERVALS_MS
from .errors import ValidationError


class IntervalPolicy:
    """Maps a mastery level to a waiting time in milliseconds.

    Backed by an ordered, non-decreasing table. Levels past the end of the
    table reuse the last (largest) entry.
    """

    def __init__(self, table_ms=DEFAULT_INTERVALS_MS):
        table = tuple(table_ms)
        if not table:
            raise ValidationError("interval table must not be empty")
        for ms in table:
            if isinstance(ms, bool) or not isinstance(ms, int) or ms <= 0:
                raise ValidationError(f"interval {ms!r} must be a positive integer of ms")
        if any(a > b for a, b in zip(table, table[1:])):
            raise ValidationError("interval table must be non-decreasing")
        self._table = table

    @property
    def table(self):
        return self._table

    @property
    def max_level_index(self) -> int:
        return len(self._table) - 1

    def effective_level(self, level: int) -> int:
        if level < 0:
            raise ValidationError(f"level must be >= 0, got {level}")
        return min(level, self.max_level_index)

    def is_exhausted(self, level: int) -> bool:
        return level > self.max_level_index

    def interval_for(self, level: int) -> int:
        return self._table[self.effective_level(level)]

    def __repr__(self):
        return f"IntervalPolicy({list(self._table)!r})"


DEFAULT_POLICY = IntervalPolicy()
