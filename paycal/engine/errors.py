"""
Engine Exceptions

An unaffordable bill is NOT an error: it is returned in place and
reported. Exceptions here are for inputs the engine refuses to work on.
"""

from typing import Optional


class EngineError(Exception):
    """Base exception for engine operations."""
    pass


class InvalidFrequencyError(EngineError):
    """Recurring event with a missing or unrecognised frequency."""

    def __init__(self, event_id: str, frequency: Optional[object]):
        self.event_id = event_id
        self.frequency = frequency
        super().__init__(
            f"Event {event_id} is recurring but has invalid frequency {frequency!r}"
        )


class MalformedEventError(EngineError):
    """
    One or more event records failed validation.

    The whole batch is rejected. Running the engine over a partially
    valid set would produce misleading balances.
    """

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        self.errors = errors or []
        super().__init__(message)


class NoPaydaysAvailableError(EngineError):
    """No payday falls in the range a split or savings plan needs."""
    pass
