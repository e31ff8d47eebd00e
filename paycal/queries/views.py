"""
Calendar Views

Read-only projections of a snapshot for the display layer: month grids,
monthly totals, upcoming paydays and tagged savings.

DESIGN DECISION: Every balance shown anywhere comes from
engine.balance.running_balance. No view re-implements the rule.
"""

import calendar
import datetime as dt
from decimal import Decimal
from typing import Iterable, Optional

from paycal.engine.balance import running_balance, sort_by_date
from paycal.engine.generators import SAVINGS_TITLE
from paycal.models.event import CalendarEvent, EventType
from paycal.models.views import DayCell, MonthlySummary, UpcomingPayday


ZERO = Decimal("0")


def _week_start(day: dt.date) -> dt.date:
    # Weeks start on Sunday
    return day - dt.timedelta(days=(day.weekday() + 1) % 7)


def month_grid(events: Iterable[CalendarEvent], year: int, month: int) -> list[DayCell]:
    """
    Day cells for the full weeks covering a month.

    Leading and trailing days from the neighbouring months are included
    with is_current_month=False.
    """
    events = sort_by_date(events)
    first = dt.date(year, month, 1)
    last = dt.date(year, month, calendar.monthrange(year, month)[1])
    start = _week_start(first)
    end = _week_start(last) + dt.timedelta(days=6)

    by_day: dict[dt.date, list[CalendarEvent]] = {}
    for event in events:
        by_day.setdefault(event.date, []).append(event)

    cells = []
    day = start
    while day <= end:
        cells.append(DayCell(
            date=day,
            events=by_day.get(day, []),
            is_current_month=(day.month == month),
            running_balance=running_balance(events, day),
        ))
        day += dt.timedelta(days=1)
    return cells


def monthly_summary(events: Iterable[CalendarEvent], year: int, month: int) -> MonthlySummary:
    """Total paydays and bills dated in the month. Adjustments are not income."""
    income = ZERO
    expenses = ZERO
    for event in events:
        if event.date.year != year or event.date.month != month:
            continue
        if event.type == EventType.PAYDAY:
            income += event.amount
        elif event.type == EventType.BILL:
            expenses += event.amount
    return MonthlySummary(year=year, month=month, income=income, expenses=expenses)


def upcoming_paydays(
    events: Iterable[CalendarEvent],
    today: dt.date,
    limit: int = 4,
) -> list[UpcomingPayday]:
    """The next `limit` paydays from today on, with their same-day bills."""
    events = sort_by_date(events)
    paydays = [
        event for event in events
        if event.is_payday and event.date >= today
    ][:limit]

    return [
        UpcomingPayday(
            payday=payday,
            bills=[e for e in events if e.is_bill and e.date == payday.date],
            running_balance=running_balance(events, payday.date),
            days_until=(payday.date - today).days,
        )
        for payday in paydays
    ]


def savings_total(events: Iterable[CalendarEvent], today: dt.date) -> Decimal:
    """Sum of Savings bills already past (strictly before today)."""
    return sum(
        (
            event.amount for event in events
            if event.is_bill and event.title == SAVINGS_TITLE and event.date < today
        ),
        ZERO,
    )


def amount_by_title_prefix(
    events: Iterable[CalendarEvent],
    prefix: str,
    event_type: Optional[EventType] = EventType.BILL,
) -> Decimal:
    """
    Sum of events whose title starts with `prefix`.

    Used to total vacation savings ("Vacation - Rome") or a debt's
    payments ("Car Loan Payment").
    """
    return sum(
        (
            event.amount for event in events
            if event.title.startswith(prefix)
            and (event_type is None or event.type == event_type)
        ),
        ZERO,
    )
