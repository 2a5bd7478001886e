class ValidationError(ValueError):
    """Malformed scheduler input. Nothing was computed or changed."""


class PolicyExhaustedWarning(UserWarning):
    """A level ran past the interval table and was clamped to its last entry."""

    def __init__(self, level, max_level_index):
        self.level = level
        self.max_level_index = max_level_index
        super().__init__(
            f"level {level} exceeds interval table (max index {max_level_index})"
        )


class ConcurrencyConflict(RuntimeError):
    """The stored card changed between read and write."""

    def __init__(self, card_id, expected_version):
        self.card_id = card_id
        self.expected_version = expected_version
        super().__init__(
            f"card {card_id} is no longer at version {expected_version}"
        )
