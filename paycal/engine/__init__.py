"""
Scheduling Engine Package

Pure functions over immutable CalendarEvent snapshots:
recurrence expansion, the shared running-balance rule, the bill
rescheduler, split redistribution and the event generators.
"""

from paycal.engine.balance import (
    running_balance,
    sort_by_date,
)
from paycal.engine.errors import (
    EngineError,
    InvalidFrequencyError,
    MalformedEventError,
    NoPaydaysAvailableError,
)
from paycal.engine.generators import (
    debt_bills,
    monthly_bills,
    paydays_between,
    payoff_months,
    savings_bill,
    should_offer_split,
    split_bill,
    subscription_bills,
    vacation_savings,
)
from paycal.engine.recurrence import (
    DEFAULT_OCCURRENCE_COUNT,
    expand,
    expand_all,
)
from paycal.engine.rescheduler import (
    DEFAULT_LOOKAHEAD_MONTHS,
    find_next_viable_payday,
    reschedule,
    reschedule_with_report,
)
from paycal.engine.splits import (
    delete_with_redistribution,
    parse_split_title,
    redistribute_split,
)

__all__ = [
    # Balance
    "running_balance",
    "sort_by_date",
    # Errors
    "EngineError",
    "InvalidFrequencyError",
    "MalformedEventError",
    "NoPaydaysAvailableError",
    # Generators
    "debt_bills",
    "monthly_bills",
    "paydays_between",
    "payoff_months",
    "savings_bill",
    "should_offer_split",
    "split_bill",
    "subscription_bills",
    "vacation_savings",
    # Recurrence
    "DEFAULT_OCCURRENCE_COUNT",
    "expand",
    "expand_all",
    # Rescheduler
    "DEFAULT_LOOKAHEAD_MONTHS",
    "find_next_viable_payday",
    "reschedule",
    "reschedule_with_report",
    # Splits
    "delete_with_redistribution",
    "parse_split_title",
    "redistribute_split",
]
