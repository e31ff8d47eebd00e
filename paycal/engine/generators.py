"""
Programmatic Event Generators

Events the host creates on the user's behalf rather than from a form:

1. Split bills: one large bill spread over the paydays before it is due
2. Savings bills: a percentage of a payday set aside on the same day
3. Subscription and debt bills: a fixed amount on a day of each month
4. Vacation savings: the trip cost spread over paydays before departure

All generators are pure. They return new events and never touch the
snapshot they read paydays from.
"""

import calendar
import datetime as dt
from decimal import Decimal
from typing import Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta

from paycal.engine.balance import sort_by_date
from paycal.engine.errors import NoPaydaysAvailableError
from paycal.engine.splits import format_split_title
from paycal.models.event import CalendarEvent, EventType, new_event_id
from paycal.utils.money import split_evenly, to_cents


SAVINGS_TITLE = "Savings"
DEFAULT_SAVINGS_PERCENTAGE = Decimal("10")
MAX_PAYOFF_MONTHS = 360


def paydays_between(
    events: Iterable[CalendarEvent],
    start: dt.date,
    end: dt.date,
) -> list[CalendarEvent]:
    """Paydays with start <= date <= end, in date order."""
    return sort_by_date(
        event for event in events
        if event.is_payday and start <= event.date <= end
    )


def should_offer_split(event: CalendarEvent, threshold: Decimal) -> bool:
    """Bills at or above the threshold may be split across paydays."""
    return event.is_bill and event.amount >= threshold


def _spread_over_paydays(
    base_title: str,
    amount: Decimal,
    paydays: list[CalendarEvent],
    id_factory: Callable[[], str],
    **linkage,
) -> list[CalendarEvent]:
    total = len(paydays)
    shares = split_evenly(amount, total)
    return [
        CalendarEvent(
            id=id_factory(),
            title=format_split_title(base_title, index, total),
            amount=share,
            type=EventType.BILL,
            date=payday.date,
            **linkage,
        )
        for index, (payday, share) in enumerate(zip(paydays, shares), start=1)
    ]


def split_bill(
    title: str,
    amount: Decimal,
    due_date: dt.date,
    events: Iterable[CalendarEvent],
    today: dt.date,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """
    Split a bill evenly across the paydays after today up to its due date.

    Each instalment lands on a payday, is titled "<title> (Split i/n)"
    and shares one split_group_id.

    Raises:
        NoPaydaysAvailableError: no payday between tomorrow and the due date
    """
    make_id = id_factory or new_event_id
    paydays = paydays_between(events, today + dt.timedelta(days=1), due_date)
    if not paydays:
        raise NoPaydaysAvailableError(
            f"No paydays found between {today} and the due date {due_date}"
        )
    return _spread_over_paydays(
        title,
        amount,
        paydays,
        make_id,
        split_group_id=make_id(),
    )


def savings_bill(
    payday: CalendarEvent,
    percentage: Optional[Decimal] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> CalendarEvent:
    """
    A "Savings" bill on the payday's date for `percentage` of its amount.

    The percentage falls back to the payday's own savings_percentage and
    then to 10%. The bill recurs exactly like the payday does, so both
    expand into matching occurrences.
    """
    if not payday.is_payday:
        raise ValueError("Savings bills can only be created from a payday")

    if percentage is None:
        percentage = payday.savings_percentage
    if percentage is None:
        percentage = DEFAULT_SAVINGS_PERCENTAGE

    return CalendarEvent(
        id=(id_factory or new_event_id)(),
        title=SAVINGS_TITLE,
        amount=to_cents(payday.amount * Decimal(percentage) / 100),
        type=EventType.BILL,
        date=payday.date,
        is_recurring=payday.is_recurring,
        frequency=payday.frequency,
    )


def _day_in_month(year: int, month: int, day: int) -> dt.date:
    last_day = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(day, last_day))


def monthly_bills(
    title: str,
    amount: Decimal,
    due_day: int,
    today: dt.date,
    months: int = 12,
    id_factory: Optional[Callable[[], str]] = None,
    **linkage,
) -> list[CalendarEvent]:
    """
    Concrete bills on `due_day` of each month, starting with this month.

    Dates before today are skipped, so fewer than `months` bills may come
    back. Days past the end of a short month land on its last day. The
    bills share a recurring_group_id and carry any linkage ids given
    (subscription_id, debt_id).
    """
    if not 1 <= due_day <= 31:
        raise ValueError(f"due_day must be between 1 and 31, got {due_day}")

    make_id = id_factory or new_event_id
    group_id = linkage.pop("recurring_group_id", None) or make_id()
    first_of_month = today.replace(day=1)

    bills = []
    for offset in range(months):
        month_start = first_of_month + relativedelta(months=offset)
        bill_date = _day_in_month(month_start.year, month_start.month, due_day)
        if bill_date < today:
            continue
        bills.append(CalendarEvent(
            id=make_id(),
            title=title,
            amount=amount,
            type=EventType.BILL,
            date=bill_date,
            recurring_group_id=group_id,
            **linkage,
        ))
    return bills


def subscription_bills(
    name: str,
    amount: Decimal,
    due_day: int,
    today: dt.date,
    subscription_id: str,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """Twelve months of "<name> Subscription" bills."""
    return monthly_bills(
        f"{name} Subscription",
        amount,
        due_day,
        today,
        months=12,
        id_factory=id_factory,
        subscription_id=subscription_id,
    )


def payoff_months(
    balance: Decimal,
    annual_rate_percent: Decimal,
    minimum_payment: Decimal,
) -> int:
    """
    Months of minimum payments until a debt reaches zero.

    Capped at 360 months for payments that never outrun the interest.
    """
    monthly_rate = Decimal(annual_rate_percent) / 100 / 12
    payment = Decimal(minimum_payment)
    remaining = Decimal(balance)
    months = 0
    while remaining > 0 and months < MAX_PAYOFF_MONTHS:
        interest = remaining * monthly_rate
        remaining = max(Decimal("0"), remaining - (payment - interest))
        months += 1
    return months


def debt_bills(
    name: str,
    balance: Decimal,
    annual_rate_percent: Decimal,
    minimum_payment: Decimal,
    due_day: int,
    today: dt.date,
    debt_id: str,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """"<name> Payment" bills until the debt is paid off at the minimum."""
    months = payoff_months(balance, annual_rate_percent, minimum_payment)
    return monthly_bills(
        f"{name} Payment",
        minimum_payment,
        due_day,
        today,
        months=months,
        id_factory=id_factory,
        debt_id=debt_id,
    )


def vacation_savings(
    destination: str,
    cost: Decimal,
    start_date: dt.date,
    events: Iterable[CalendarEvent],
    today: dt.date,
    vacation_plan_id: str,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """
    Spread a trip's cost over every payday from today to departure.

    Bills are titled "Vacation - <destination> (Split i/n)".

    Raises:
        NoPaydaysAvailableError: no payday between today and the start date
    """
    make_id = id_factory or new_event_id
    paydays = paydays_between(events, today, start_date)
    if not paydays:
        raise NoPaydaysAvailableError(
            f"No paydays found before the vacation start date {start_date}"
        )
    group_id = make_id()
    return _spread_over_paydays(
        f"Vacation - {destination}",
        cost,
        paydays,
        make_id,
        recurring_group_id=group_id,
        split_group_id=group_id,
        vacation_plan_id=vacation_plan_id,
    )
