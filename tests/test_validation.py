"""
Tests for event batch validation.
"""

import pytest
import datetime as dt

from paycal.engine.errors import MalformedEventError
from paycal.models.event import EventType
from paycal.validation import coerce_event, coerce_events


class TestCoerceEvents:
    """Tests for coerce_events()."""

    def test_valid_records(self):
        """Test camelCase records become events."""
        events = coerce_events([
            {"id": "a", "date": "2024-01-01", "amount": 2000, "type": "payday"},
            {"id": "b", "date": "2024-01-05", "amount": "500.00", "type": "bill", "title": "Rent"},
        ])
        assert [e.type for e in events] == [EventType.PAYDAY, EventType.BILL]
        assert events[1].date == dt.date(2024, 1, 5)

    def test_events_pass_through(self, make_event):
        """Test already-built events are returned as they are."""
        event = make_event(dt.date(2024, 1, 1), 1)
        assert coerce_event(event) is event

    def test_whole_batch_rejected(self):
        """Test one bad record rejects the batch and every problem is listed."""
        with pytest.raises(MalformedEventError) as exc_info:
            coerce_events([
                {"id": "a", "date": "2024-01-01", "amount": 2000, "type": "payday"},
                {"id": "b", "amount": 500, "type": "bill"},
                {"id": "c", "date": "2024-01-05", "amount": 500},
            ])
        errors = exc_info.value.errors
        assert {e["index"] for e in errors} == {1, 2}
        assert {e["field"] for e in errors} == {"date", "type"}

    def test_recurring_without_frequency_rejected(self):
        """Test a recurring record must name its frequency."""
        with pytest.raises(MalformedEventError):
            coerce_events([
                {"date": "2024-01-01", "amount": 2000, "type": "payday", "isRecurring": True},
            ])

    def test_duplicate_ids_rejected(self):
        """Test two records may not share an id."""
        with pytest.raises(MalformedEventError) as exc_info:
            coerce_events([
                {"id": "a", "date": "2024-01-01", "amount": 1, "type": "payday"},
                {"id": "a", "date": "2024-01-02", "amount": 1, "type": "bill"},
            ])
        assert exc_info.value.errors[0]["field"] == "id"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
