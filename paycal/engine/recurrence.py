"""
Recurrence Expander

Turns one recurring event definition into a bounded run of concrete,
dated occurrences.

- The first occurrence IS the original event (same id, same date).
- Each later occurrence steps from the previous occurrence's date, so
  month-end clamping carries forward (Jan 31 -> Feb 28 -> Mar 28).
- Later occurrences get fresh ids from `id_factory`; every other field
  is copied unchanged.

Adjustments are balance checkpoints, so they are never expanded.
"""

from typing import Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta

from paycal.engine.errors import InvalidFrequencyError
from paycal.models.event import CalendarEvent, Frequency, new_event_id


DEFAULT_OCCURRENCE_COUNT = 12

FREQUENCY_STEPS: dict[Frequency, relativedelta] = {
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.BIWEEKLY: relativedelta(weeks=2),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.YEARLY: relativedelta(years=1),
}


def _step_for(event: CalendarEvent) -> relativedelta:
    try:
        return FREQUENCY_STEPS[Frequency(event.frequency)]
    except (ValueError, KeyError):
        raise InvalidFrequencyError(event.id, event.frequency)


def expand(
    event: CalendarEvent,
    occurrence_count: int = DEFAULT_OCCURRENCE_COUNT,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """
    Expand a recurring event into `occurrence_count` occurrences.

    Non-recurring events and adjustments come back as a one-element list.

    Raises:
        InvalidFrequencyError: recurring event with a missing or unknown frequency
        ValueError: occurrence_count below 1
    """
    if not event.is_recurring or event.is_adjustment:
        return [event]

    if occurrence_count < 1:
        raise ValueError("occurrence_count must be at least 1")

    step = _step_for(event)
    make_id = id_factory or new_event_id

    occurrences = [event]
    current = event.date
    for _ in range(occurrence_count - 1):
        current = current + step
        occurrences.append(event.with_changes(id=make_id(), date=current))

    return occurrences


def expand_all(
    events: Iterable[CalendarEvent],
    occurrence_count: int = DEFAULT_OCCURRENCE_COUNT,
    id_factory: Optional[Callable[[], str]] = None,
) -> list[CalendarEvent]:
    """Expand every event in a batch and flatten the result."""
    flattened: list[CalendarEvent] = []
    for event in events:
        flattened.extend(expand(event, occurrence_count, id_factory))
    return flattened
