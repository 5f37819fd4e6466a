"""Exceptions raised by the scheduling core."""


class InvalidDateRange(ValueError):
    """Raised when a session's start date cannot be parsed."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid start date: {value!r}")
