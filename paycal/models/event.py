"""
Calendar Event Model

Every dated financial fact in the calendar is a CalendarEvent:
1. Paydays credit the balance
2. Bills debit the balance
3. Adjustments overwrite the balance (a checkpoint, not a delta)

DESIGN DECISION: Events are immutable (frozen Pydantic models).
The engine never edits an event in place; it returns copies with the
changed fields. This keeps every engine call a pure snapshot -> snapshot
transformation.

Field aliases are camelCase so persisted snapshots keep the same shape
as the records produced by the web client.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class EventType(str, Enum):
    """
    Kind of calendar event.

    ADJUSTMENT is an absolute balance override. It is never expanded
    and never rescheduled.
    """
    PAYDAY = "payday"
    BILL = "bill"
    ADJUSTMENT = "adjustment"


class Frequency(str, Enum):
    """Recurrence step for recurring events."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def new_event_id() -> str:
    """Generate a fresh opaque event id."""
    return str(uuid4())


# =============================================================================
# CORE EVENT MODEL
# =============================================================================

class CalendarEvent(BaseModel):
    """
    A single dated event on the calendar.

    `title` doubles as a correlation key: split instalments carry a
    "(Split i/n)" suffix and vacation/debt/subscription bills are found
    by title prefix. Linkage ids are opaque to the engine and are carried
    through every transformation unchanged.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    # Identity
    id: str = Field(
        default_factory=new_event_id,
        min_length=1,
        description="Opaque unique identifier"
    )

    # Required fields
    date: dt.date = Field(
        ...,
        description="Calendar day of the event (time of day is dropped)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative amount"
    )
    type: EventType = Field(
        ...,
        description="payday, bill or adjustment"
    )
    title: str = Field(
        default="",
        max_length=200,
        description="Display label, also used for split/prefix grouping"
    )

    # Recurrence
    is_recurring: bool = False
    frequency: Optional[Frequency] = None

    # Set once the rescheduler has moved a bill off its original date
    rescheduled: bool = False

    # Opaque linkage
    debt_id: Optional[str] = None
    subscription_id: Optional[str] = None
    vacation_plan_id: Optional[str] = None
    recurring_group_id: Optional[str] = None
    split_group_id: Optional[str] = None
    savings_percentage: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=100,
        description="Share of a payday to set aside as a Savings bill"
    )

    @field_validator('date', mode='before')
    @classmethod
    def truncate_to_day(cls, v: Any) -> Any:
        """Comparisons are day-granular, so drop any time component."""
        if isinstance(v, dt.datetime):
            return v.date()
        return v

    @model_validator(mode='after')
    def validate_recurrence(self) -> 'CalendarEvent':
        """A recurring event must say how often it recurs."""
        if self.is_recurring and self.frequency is None:
            raise ValueError("Recurring events require a frequency")
        return self

    @property
    def is_bill(self) -> bool:
        return self.type == EventType.BILL

    @property
    def is_payday(self) -> bool:
        return self.type == EventType.PAYDAY

    @property
    def is_adjustment(self) -> bool:
        return self.type == EventType.ADJUSTMENT

    def with_changes(self, **changes: Any) -> 'CalendarEvent':
        """Return a copy of this event with the given fields replaced."""
        return self.model_copy(update=changes)

    def to_record(self) -> dict:
        """
        Convert to a JSON-safe dict with camelCase keys.

        This is the shape stored in snapshots and handed to the
        display layer.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
