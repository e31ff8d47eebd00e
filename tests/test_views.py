"""
Tests for the display query helpers.
"""

import pytest
import datetime as dt
from decimal import Decimal

from paycal.queries.views import (
    amount_by_title_prefix,
    month_grid,
    monthly_summary,
    savings_total,
    upcoming_paydays,
)


@pytest.fixture
def january(make_event):
    return [
        make_event(dt.date(2024, 1, 1), 2000, "payday", id="p1"),
        make_event(dt.date(2024, 1, 5), 500, "bill", id="rent", title="Rent"),
        make_event(dt.date(2024, 1, 15), 2000, "payday", id="p2"),
        make_event(dt.date(2024, 1, 15), 200, "bill", id="sav", title="Savings"),
        make_event(dt.date(2024, 1, 20), 1000, "adjustment", id="adj"),
        make_event(dt.date(2024, 2, 1), 2000, "payday", id="p3"),
        make_event(dt.date(2024, 2, 1), 150, "bill", id="v1", title="Vacation - Rome (Split 1/2)"),
    ]


class TestMonthGrid:
    """Tests for month_grid()."""

    def test_full_weeks_starting_sunday(self, january):
        """Test January 2024 spans Dec 31 to Feb 3."""
        cells = month_grid(january, 2024, 1)
        assert cells[0].date == dt.date(2023, 12, 31)
        assert cells[-1].date == dt.date(2024, 2, 3)
        assert len(cells) % 7 == 0
        assert cells[0].is_current_month is False

    def test_cells_carry_events_and_balance(self, january):
        """Test each cell shows its events and the shared running balance."""
        cells = {cell.date: cell for cell in month_grid(january, 2024, 1)}
        assert [e.id for e in cells[dt.date(2024, 1, 15)].events] == ["p2", "sav"]
        assert cells[dt.date(2024, 1, 5)].running_balance == Decimal("1500")
        assert cells[dt.date(2024, 1, 15)].running_balance == Decimal("3300")
        assert cells[dt.date(2024, 1, 20)].running_balance == Decimal("1000")
        assert cells[dt.date(2024, 2, 1)].running_balance == Decimal("2850")


class TestSummaries:
    """Tests for monthly_summary() and upcoming_paydays()."""

    def test_monthly_summary(self, january):
        """Test income and expenses exclude adjustments."""
        summary = monthly_summary(january, 2024, 1)
        assert summary.income == Decimal("4000")
        assert summary.expenses == Decimal("700")
        assert summary.net == Decimal("3300")

    def test_upcoming_paydays(self, january):
        """Test upcoming paydays with their same-day bills."""
        upcoming = upcoming_paydays(january, dt.date(2024, 1, 10), limit=4)
        assert [u.payday.id for u in upcoming] == ["p2", "p3"]
        assert upcoming[0].days_until == 5
        assert upcoming[0].net_amount == Decimal("1800")
        assert upcoming[1].running_balance == Decimal("2850")

    def test_upcoming_paydays_limit(self, january):
        """Test the limit caps how many paydays are returned."""
        assert len(upcoming_paydays(january, dt.date(2024, 1, 1), limit=2)) == 2


class TestTaggedTotals:
    """Tests for savings_total() and amount_by_title_prefix()."""

    def test_savings_total_counts_past_only(self, january):
        """Test only savings dated before today count."""
        assert savings_total(january, dt.date(2024, 1, 15)) == Decimal("0")
        assert savings_total(january, dt.date(2024, 1, 16)) == Decimal("200")

    def test_amount_by_title_prefix(self, january):
        """Test totals by title prefix."""
        assert amount_by_title_prefix(january, "Vacation - Rome") == Decimal("150")
        assert amount_by_title_prefix(january, "Nothing") == Decimal("0")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
