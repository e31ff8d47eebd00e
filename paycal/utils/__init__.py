"""Small shared helpers."""

from paycal.utils.money import CENT, split_evenly, to_cents

__all__ = ["CENT", "split_evenly", "to_cents"]
