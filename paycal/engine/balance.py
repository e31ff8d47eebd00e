"""
Running Balance

The single balance rule shared by the rescheduler and every view:

    fold events with date <= target in date order,
    payday -> +amount, bill -> -amount, adjustment -> balance = amount

An adjustment is a checkpoint: nothing before the latest adjustment on
or before the target date contributes. Events on the same day keep
their input order (the sort is stable), which only matters when an
adjustment shares a day with other events.
"""

import datetime as dt
from decimal import Decimal
from typing import Iterable

from paycal.models.event import CalendarEvent, EventType


ZERO = Decimal("0")


def sort_by_date(events: Iterable[CalendarEvent]) -> list[CalendarEvent]:
    """Sort events by date ascending; equal dates keep input order."""
    return sorted(events, key=lambda event: event.date)


def apply_event(balance: Decimal, event: CalendarEvent) -> Decimal:
    """Balance after a single event."""
    if event.type == EventType.ADJUSTMENT:
        return event.amount
    if event.type == EventType.PAYDAY:
        return balance + event.amount
    return balance - event.amount


def running_balance(events: Iterable[CalendarEvent], on_date: dt.date) -> Decimal:
    """Projected balance at the end of `on_date` (same-day inclusive)."""
    balance = ZERO
    for event in sort_by_date(events):
        if event.date > on_date:
            break
        balance = apply_event(balance, event)
    return balance
