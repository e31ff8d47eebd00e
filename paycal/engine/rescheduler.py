"""
Bill Rescheduler

Walks the calendar once in date order and defers every bill the balance
cannot cover on its due date to the earliest payday that can, within a
lookahead window (default one calendar month, upper bound exclusive).

Two balance views are used on purpose:

- Affordability on the due date is checked against the events already
  emitted by this pass, so a bill sees the moves made before it. Paydays
  and adjustments later on the same day count too; the check is
  inclusive of the whole due date.
- Candidate paydays are checked against the full original input
  (minus the bill being placed).

The walk is single pass. Moving a bill never re-checks bills that were
already processed, and a bill already marked `rescheduled` is never
moved again.

PERFORMANCE: the input is sorted once. Full-input balances are folded
once into end-of-day totals, and the output-side balance is carried
along the walk (debits of moved bills wait on their new date). A pass
is O(n log n) plus the candidate paydays scanned per uncovered bill.
"""

import datetime as dt
from bisect import bisect_left
from decimal import Decimal
from typing import Iterable, Optional

import structlog
from dateutil.relativedelta import relativedelta

from paycal.engine.balance import ZERO, apply_event, sort_by_date
from paycal.models.event import CalendarEvent, EventType
from paycal.models.views import RescheduleReport


DEFAULT_LOOKAHEAD_MONTHS = 1

logger = structlog.get_logger(__name__)


def lookahead_limit(due_date: dt.date, lookahead_months: int = DEFAULT_LOOKAHEAD_MONTHS) -> dt.date:
    """First date that is no longer inside the deferral window."""
    return due_date + relativedelta(months=lookahead_months)


class BalanceIndex:
    """
    Precomputed balances over one sorted snapshot.

    - `day_end[d]`: running balance at the end of day `d`
    - payday dates, sorted and unique, for the candidate search
    - for each position, the date of the first adjustment after it
    """

    def __init__(self, sorted_events: list[CalendarEvent]):
        self.day_end: dict[dt.date, Decimal] = {}
        balance = ZERO
        for event in sorted_events:
            balance = apply_event(balance, event)
            self.day_end[event.date] = balance

        self.payday_dates = sorted({
            event.date for event in sorted_events
            if event.type == EventType.PAYDAY
        })

        self._next_adjustment: list[Optional[dt.date]] = [None] * len(sorted_events)
        upcoming = None
        for position in range(len(sorted_events) - 1, -1, -1):
            self._next_adjustment[position] = upcoming
            if sorted_events[position].type == EventType.ADJUSTMENT:
                upcoming = sorted_events[position].date

    def balance_without(
        self,
        bill: CalendarEvent,
        position: Optional[int],
        on_date: dt.date,
    ) -> Decimal:
        """
        Full-input balance at the end of `on_date` with `bill` left out.

        The bill's debit only survives to `on_date` when no adjustment
        follows it on or before that date.
        """
        balance = self.day_end[on_date]
        if position is None:
            return balance
        reset_on = self._next_adjustment[position]
        if reset_on is None or reset_on > on_date:
            balance += bill.amount
        return balance

    def viable_payday(
        self,
        bill: CalendarEvent,
        position: Optional[int],
        lookahead_months: int = DEFAULT_LOOKAHEAD_MONTHS,
    ) -> Optional[dt.date]:
        limit = lookahead_limit(bill.date, lookahead_months)
        for index in range(bisect_left(self.payday_dates, bill.date), len(self.payday_dates)):
            payday_date = self.payday_dates[index]
            if payday_date >= limit:
                break
            if self.balance_without(bill, position, payday_date) >= bill.amount:
                return payday_date
        return None


def find_next_viable_payday(
    sorted_events: list[CalendarEvent],
    bill: CalendarEvent,
    lookahead_months: int = DEFAULT_LOOKAHEAD_MONTHS,
) -> Optional[dt.date]:
    """
    Earliest payday date in [bill.date, bill.date + lookahead) whose
    balance over `sorted_events` covers the bill, or None.

    The bill itself is left out of that balance: the question is whether
    the money is there to pay it on the payday, so it must not already
    count as paid on its original date.
    """
    position = next(
        (index for index, event in enumerate(sorted_events) if event.id == bill.id),
        None,
    )
    return BalanceIndex(sorted_events).viable_payday(bill, position, lookahead_months)


def _credit_suffixes(day_events: list[CalendarEvent]) -> list[tuple[Optional[Decimal], Decimal]]:
    """
    For each position in one day, the paydays and adjustments after it
    folded to (reset, add): applied to a balance b they give
    `(reset if reset is not None else b) + add`.
    """
    suffixes: list[tuple[Optional[Decimal], Decimal]] = []
    reset: Optional[Decimal] = None
    add = ZERO
    for event in reversed(day_events):
        suffixes.append((reset, add))
        if reset is not None:
            continue
        if event.type == EventType.PAYDAY:
            add += event.amount
        elif event.type == EventType.ADJUSTMENT:
            reset = event.amount
    suffixes.reverse()
    return suffixes


def reschedule_with_report(
    events: Iterable[CalendarEvent],
    lookahead_months: int = DEFAULT_LOOKAHEAD_MONTHS,
) -> RescheduleReport:
    """
    Run the reschedule pass and report which bills moved and which
    could not be covered.

    The returned snapshot has the same events (same ids) as the input,
    sorted by final date; only `date` and `rescheduled` of moved
    bills differ.
    """
    sorted_events = sort_by_date(events)
    index = BalanceIndex(sorted_events)

    output: list[CalendarEvent] = []
    moved: list[CalendarEvent] = []
    infeasible: list[CalendarEvent] = []

    # Debits of bills moved onto a later day, keyed by that day
    deferred: dict[dt.date, Decimal] = {}
    settled = ZERO

    start = 0
    while start < len(sorted_events):
        day = sorted_events[start].date
        stop = start
        while stop < len(sorted_events) and sorted_events[stop].date == day:
            stop += 1
        day_events = sorted_events[start:stop]
        credits_after = _credit_suffixes(day_events)

        balance = settled - deferred.pop(day, ZERO)
        for offset, event in enumerate(day_events):
            if event.type != EventType.BILL or event.rescheduled:
                output.append(event)
                balance = apply_event(balance, event)
                continue

            reset, add = credits_after[offset]
            if (reset if reset is not None else balance) + add >= event.amount:
                output.append(event)
                balance -= event.amount
                continue

            new_date = index.viable_payday(event, start + offset, lookahead_months)
            if new_date is None:
                logger.warning(
                    "bill_unaffordable",
                    event_id=event.id,
                    title=event.title,
                    due_date=event.date.isoformat(),
                    amount=str(event.amount),
                )
                output.append(event)
                infeasible.append(event)
                balance -= event.amount
                continue

            moved_bill = event.with_changes(date=new_date, rescheduled=True)
            logger.debug(
                "bill_rescheduled",
                event_id=event.id,
                title=event.title,
                original_date=event.date.isoformat(),
                new_date=new_date.isoformat(),
            )
            output.append(moved_bill)
            moved.append(moved_bill)
            if new_date == day:
                balance -= event.amount
            else:
                deferred[new_date] = deferred.get(new_date, ZERO) + event.amount

        settled = balance
        start = stop

    return RescheduleReport(
        events=sort_by_date(output),
        moved=moved,
        infeasible=infeasible,
    )


def reschedule(
    events: Iterable[CalendarEvent],
    lookahead_months: int = DEFAULT_LOOKAHEAD_MONTHS,
) -> list[CalendarEvent]:
    """Return a new snapshot with unaffordable bills deferred where possible."""
    return reschedule_with_report(events, lookahead_months).events
