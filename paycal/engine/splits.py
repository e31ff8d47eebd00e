"""
Split-Payment Redistribution

A large bill can be split into instalments titled "<base> (Split i/n)".
When one instalment is deleted, its amount is spread evenly over the
instalments of the same group dated on or after it, and those are
renumbered 1..m in date order.

Instalments are grouped by `split_group_id` when the deleted event has
one. Title matching is the fallback for records created before the id
existed.

If nothing remains to absorb the amount, nothing is redistributed and
the amount is no longer tracked anywhere.
"""

import re
from typing import Iterable, NamedTuple, Optional

from paycal.engine.balance import sort_by_date
from paycal.models.event import CalendarEvent
from paycal.utils.money import split_evenly


SPLIT_PATTERN = re.compile(r"\(Split (\d+)/(\d+)\)")


class SplitTitle(NamedTuple):
    base: str
    index: int
    total: int


def parse_split_title(title: str) -> Optional[SplitTitle]:
    """Parse "<base> (Split i/n)"; None when the title has no split suffix."""
    match = SPLIT_PATTERN.search(title)
    if not match:
        return None
    base = SPLIT_PATTERN.sub("", title, count=1).strip()
    return SplitTitle(base, int(match.group(1)), int(match.group(2)))


def format_split_title(base: str, index: int, total: int) -> str:
    return f"{base} (Split {index}/{total})"


def find_split_siblings(
    events: Iterable[CalendarEvent],
    deleted: CalendarEvent,
) -> list[CalendarEvent]:
    """Instalments that should absorb `deleted`, in date order."""
    parsed = parse_split_title(deleted.title)
    candidates = [
        event for event in events
        if event.id != deleted.id and event.date >= deleted.date
    ]

    if deleted.split_group_id:
        siblings = [
            event for event in candidates
            if event.split_group_id == deleted.split_group_id
        ]
    elif parsed:
        siblings = []
        for event in candidates:
            other = parse_split_title(event.title)
            if other and other.base == parsed.base:
                siblings.append(event)
    else:
        siblings = []

    return sort_by_date(siblings)


def redistribute_split(
    events: Iterable[CalendarEvent],
    deleted: CalendarEvent,
) -> list[CalendarEvent]:
    """
    Return the updated sibling instalments for a deleted instalment.

    Each sibling gets `deleted.amount / remaining` added (in cents, the
    remainder on the last one) and is renamed "(Split k/remaining)".
    Returns an empty list when `deleted` is not an instalment or has no
    remaining siblings.
    """
    siblings = find_split_siblings(events, deleted)
    if not siblings:
        return []

    parsed = parse_split_title(deleted.title)
    shares = split_evenly(deleted.amount, len(siblings))
    total = len(siblings)

    updated = []
    for index, (sibling, share) in enumerate(zip(siblings, shares), start=1):
        own = parse_split_title(sibling.title)
        if parsed:
            base = parsed.base
        elif own:
            base = own.base
        else:
            base = sibling.title
        updated.append(sibling.with_changes(
            amount=sibling.amount + share,
            title=format_split_title(base, index, total),
        ))
    return updated


def delete_with_redistribution(
    events: Iterable[CalendarEvent],
    event_id: str,
) -> tuple[list[CalendarEvent], list[CalendarEvent]]:
    """
    Remove `event_id` from the snapshot, redistributing it first if it
    is a split instalment.

    Returns (new_snapshot, updated_siblings). The snapshot keeps input
    order; it is not rescheduled here.

    Raises:
        KeyError: no event with that id
    """
    events = list(events)
    deleted = next((event for event in events if event.id == event_id), None)
    if deleted is None:
        raise KeyError(event_id)

    updated = {event.id: event for event in redistribute_split(events, deleted)}
    snapshot = [
        updated.get(event.id, event)
        for event in events
        if event.id != event_id
    ]
    return snapshot, list(updated.values())
