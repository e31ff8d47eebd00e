"""Display query package."""

from paycal.queries.views import (
    amount_by_title_prefix,
    month_grid,
    monthly_summary,
    savings_total,
    upcoming_paydays,
)

__all__ = [
    "amount_by_title_prefix",
    "month_grid",
    "monthly_summary",
    "savings_total",
    "upcoming_paydays",
]
