"""
Event Batch Validation

Raw records (from storage, an API payload or a form) are turned into
CalendarEvent objects before the engine sees them.

IMPORTANT: Validation NEVER silently fixes or drops records.
If any record is malformed, the whole batch is rejected with every
problem listed. Running the engine over the valid subset would produce
balances that look right but are not.
"""

from typing import Any, Iterable, Union

from pydantic import ValidationError

from paycal.engine.errors import MalformedEventError
from paycal.models.event import CalendarEvent


EventRecord = Union[CalendarEvent, dict[str, Any]]


def coerce_event(record: EventRecord) -> CalendarEvent:
    """Validate a single record (camelCase or snake_case keys)."""
    if isinstance(record, CalendarEvent):
        return record
    return CalendarEvent.model_validate(record)


def coerce_events(records: Iterable[EventRecord]) -> list[CalendarEvent]:
    """
    Validate a batch of records.

    Checks:
    - Every record has a date, amount and type of the right shape
    - Recurring records name a frequency
    - No two records share an id

    Raises:
        MalformedEventError: listing every failing record
    """
    events: list[CalendarEvent] = []
    problems: list[dict] = []

    for position, record in enumerate(records):
        try:
            events.append(coerce_event(record))
        except ValidationError as e:
            for error in e.errors():
                problems.append({
                    "index": position,
                    "field": ".".join(str(part) for part in error["loc"]),
                    "message": error["msg"],
                })

    seen: set[str] = set()
    for event in events:
        if event.id in seen:
            problems.append({
                "index": None,
                "field": "id",
                "message": f"Duplicate event id {event.id}",
            })
        seen.add(event.id)

    if problems:
        raise MalformedEventError(
            f"Rejected batch: {len(problems)} problem(s) in event records",
            errors=problems,
        )

    return events
