"""
Shared fixtures for Paycal tests.

Tests never touch real storage: the in-memory adapters and a tmp_path
JSON snapshot stand in for a backend.
"""

import datetime as dt
from decimal import Decimal
from itertools import count

import pytest

from paycal.models.event import CalendarEvent


@pytest.fixture
def id_factory():
    """Deterministic ids: gen-1, gen-2, ..."""
    counter = count(1)
    return lambda: f"gen-{next(counter)}"


@pytest.fixture
def make_event():
    """
    Build a CalendarEvent with short positional arguments.

        make_event(dt.date(2024, 1, 5), 500, "bill", title="Rent")
    """
    counter = count(1)

    def _make(day: dt.date, amount, event_type: str = "bill", **fields) -> CalendarEvent:
        fields.setdefault("id", f"evt-{next(counter)}")
        return CalendarEvent(
            date=day,
            amount=Decimal(str(amount)),
            type=event_type,
            **fields,
        )

    return _make
