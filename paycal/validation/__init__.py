"""Validation package."""

from paycal.validation.validator import coerce_event, coerce_events

__all__ = ["coerce_event", "coerce_events"]
