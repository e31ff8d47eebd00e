"""
Tests for Paycal models

Test strategy:
1. Unit tests for individual components (models, engine functions)
2. Flow tests for the calendar service against in-memory storage
3. No real storage in tests (in-memory adapters or tmp_path files)
"""

import pytest
import datetime as dt
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from paycal.models.event import CalendarEvent, EventType, Frequency
from paycal.models.views import MonthlySummary, RescheduleReport, UpcomingPayday
from paycal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestCalendarEvent:
    """Tests for the CalendarEvent model."""

    def test_event_creation(self):
        """Test CalendarEvent creation with defaults."""
        event = CalendarEvent(
            date=dt.date(2024, 1, 5),
            amount=Decimal("500.00"),
            type=EventType.BILL,
            title="Rent",
        )
        assert event.title == "Rent"
        assert event.is_bill is True
        assert event.is_recurring is False
        assert event.rescheduled is False
        assert event.id

    def test_event_ids_are_unique(self):
        """Test that default ids are generated per event."""
        first = CalendarEvent(date=dt.date(2024, 1, 1), amount=1, type="payday")
        second = CalendarEvent(date=dt.date(2024, 1, 1), amount=1, type="payday")
        assert first.id != second.id

    def test_event_strips_whitespace(self):
        """Test that whitespace is stripped from titles."""
        event = CalendarEvent(date=dt.date(2024, 1, 1), amount=1, type="bill", title="  Rent  ")
        assert event.title == "Rent"

    def test_event_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            CalendarEvent(date=dt.date(2024, 1, 1), amount=Decimal("-1"), type="bill")

    def test_event_rejects_unknown_type(self):
        """Test that only payday, bill and adjustment are accepted."""
        with pytest.raises(ValidationError):
            CalendarEvent(date=dt.date(2024, 1, 1), amount=1, type="transfer")

    def test_recurring_event_requires_frequency(self):
        """Test that a recurring event must name a frequency."""
        with pytest.raises(ValidationError):
            CalendarEvent(date=dt.date(2024, 1, 1), amount=1, type="payday", is_recurring=True)

    def test_datetime_is_truncated_to_day(self):
        """Test that a time component is dropped."""
        event = CalendarEvent(
            date=dt.datetime(2024, 1, 5, 18, 30),
            amount=1,
            type="bill",
        )
        assert event.date == dt.date(2024, 1, 5)

    def test_event_is_frozen(self):
        """Test that events cannot be edited in place."""
        event = CalendarEvent(date=dt.date(2024, 1, 1), amount=1, type="bill")
        with pytest.raises(ValidationError):
            event.amount = Decimal("2")

    def test_with_changes_returns_copy(self):
        """Test with_changes leaves the original untouched."""
        event = CalendarEvent(date=dt.date(2024, 1, 3), amount=500, type="bill")
        moved = event.with_changes(date=dt.date(2024, 1, 10), rescheduled=True)
        assert moved.id == event.id
        assert moved.date == dt.date(2024, 1, 10)
        assert moved.rescheduled is True
        assert event.date == dt.date(2024, 1, 3)
        assert event.rescheduled is False

    def test_camel_case_record_round_trip(self):
        """Test that camelCase records validate and serialise back."""
        record = {
            "id": "abc",
            "date": "2024-01-01",
            "amount": "2000",
            "type": "payday",
            "title": "Salary",
            "isRecurring": True,
            "frequency": "biweekly",
            "savingsPercentage": "15",
        }
        event = CalendarEvent.model_validate(record)
        assert event.frequency == Frequency.BIWEEKLY
        assert event.savings_percentage == Decimal("15")

        out = event.to_record()
        assert out["isRecurring"] is True
        assert out["date"] == "2024-01-01"
        assert "debtId" not in out

    def test_snake_case_names_accepted(self):
        """Test that field names work as well as aliases."""
        event = CalendarEvent(
            date=dt.date(2024, 1, 1),
            amount=1,
            type="bill",
            split_group_id="grp",
        )
        assert event.split_group_id == "grp"


class TestResultModels:
    """Tests for engine and display result models."""

    def test_reschedule_report_flags_infeasible(self):
        """Test has_infeasible property."""
        bill = CalendarEvent(date=dt.date(2024, 1, 3), amount=500, type="bill")
        assert RescheduleReport(events=[bill]).has_infeasible is False
        assert RescheduleReport(events=[bill], infeasible=[bill]).has_infeasible is True

    def test_monthly_summary_net(self):
        """Test net is income minus expenses."""
        summary = MonthlySummary(
            year=2024,
            month=1,
            income=Decimal("3000"),
            expenses=Decimal("1200"),
        )
        assert summary.net == Decimal("1800")

    def test_monthly_summary_rejects_bad_month(self):
        """Test month must be 1..12."""
        with pytest.raises(ValidationError):
            MonthlySummary(year=2024, month=13)

    def test_upcoming_payday_totals(self):
        """Test total_bills and net_amount."""
        payday = CalendarEvent(date=dt.date(2024, 1, 15), amount=2000, type="payday")
        bills = [
            CalendarEvent(date=dt.date(2024, 1, 15), amount=300, type="bill"),
            CalendarEvent(date=dt.date(2024, 1, 15), amount=200, type="bill"),
        ]
        upcoming = UpcomingPayday(
            payday=payday,
            bills=bills,
            running_balance=Decimal("1500"),
            days_until=3,
        )
        assert upcoming.total_bills == Decimal("500")
        assert upcoming.net_amount == Decimal("1500")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.EVENT_ADDED,
            description="Added bill",
        )
        assert event.event_type == AuditEventType.EVENT_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None
        assert event.timestamp is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.BILL_RESCHEDULED,
            description="Bill moved",
            details={"original_date": "2024-01-03", "new_date": "2024-01-10"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "bill_rescheduled"
        assert log_dict["details"]["new_date"] == "2024-01-10"

    def test_audit_event_to_row(self):
        """Test conversion to a flat row."""
        event = AuditEvent(
            event_type=AuditEventType.EVENT_DELETED,
            description="Deleted event",
            user_id="user-1",
            is_user_action=True,
        )
        row = event.to_row()
        assert len(row) == 11
        assert row[2] == "event_deleted"
        assert row[4] == "user-1"
        assert row[10] == "True"

    def test_builder_bill_rescheduled(self):
        """Test AuditEventBuilder.bill_rescheduled."""
        correlation_id = uuid4()
        event = AuditEventBuilder.bill_rescheduled(
            user_id="user-1",
            event_id="bill-1",
            title="Rent",
            original_date="2024-01-03",
            new_date="2024-01-10",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.BILL_RESCHEDULED
        assert event.entity_id == "bill-1"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is False

    def test_builder_bill_unaffordable_is_warning(self):
        """Test that an uncovered bill is logged as a warning."""
        event = AuditEventBuilder.bill_unaffordable(
            user_id="user-1",
            event_id="bill-1",
            title="Rent",
            due_date="2024-01-03",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING

    def test_builder_event_added_is_user_action(self):
        """Test AuditEventBuilder.event_added."""
        event = AuditEventBuilder.event_added(
            user_id="user-1",
            event_id="pay-1",
            event_type="payday",
            title="Salary",
            occurrences=12,
            correlation_id=uuid4(),
        )
        assert event.is_user_action is True
        assert event.details["occurrences"] == 12

    def test_builder_storage_failed(self):
        """Test AuditEventBuilder.storage_failed."""
        event = AuditEventBuilder.storage_failed(
            user_id="user-1",
            operation="replace_events",
            error_message="disk full",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"


class TestEnums:
    """Tests for model enums."""

    def test_event_type_values(self):
        """Test event type string values."""
        assert EventType("payday") == EventType.PAYDAY
        assert EventType.ADJUSTMENT.value == "adjustment"

    def test_frequency_values(self):
        """Test that every supported frequency exists."""
        for value in ("weekly", "biweekly", "monthly", "yearly"):
            assert Frequency(value) is not None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
