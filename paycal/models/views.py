"""
Result Models for the Engine and Display Helpers

These are read-only shapes handed to callers. They carry no behaviour
beyond a few derived properties.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from paycal.models.event import CalendarEvent


class RescheduleReport(BaseModel):
    """
    Outcome of one reschedule pass.

    `events` is the full new snapshot. `moved` and `infeasible` point at
    bills in that snapshot so hosts can surface them to the user.
    """

    events: list[CalendarEvent] = Field(default_factory=list)
    moved: list[CalendarEvent] = Field(
        default_factory=list,
        description="Bills moved to a later payday during this pass"
    )
    infeasible: list[CalendarEvent] = Field(
        default_factory=list,
        description="Unaffordable bills with no viable payday in the window"
    )

    @property
    def has_infeasible(self) -> bool:
        return bool(self.infeasible)


class DayCell(BaseModel):
    """One day of a month grid."""

    date: dt.date
    events: list[CalendarEvent] = Field(default_factory=list)
    is_current_month: bool
    running_balance: Decimal


class MonthlySummary(BaseModel):
    """Income and expenses for one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


class UpcomingPayday(BaseModel):
    """A future payday with the bills that fall on the same day."""

    payday: CalendarEvent
    bills: list[CalendarEvent] = Field(default_factory=list)
    running_balance: Decimal
    days_until: int = Field(ge=0)

    @property
    def total_bills(self) -> Decimal:
        return sum((bill.amount for bill in self.bills), Decimal("0"))

    @property
    def net_amount(self) -> Decimal:
        """Payday amount left after the same-day bills."""
        return self.payday.amount - self.total_bills
