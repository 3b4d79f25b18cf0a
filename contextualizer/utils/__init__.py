"""Utility functions."""

from .formatting import format_count, format_date, format_money, round_half_up
from .hashing import select, stable_index

__all__ = [
    "format_count",
    "format_date",
    "format_money",
    "round_half_up",
    "select",
    "stable_index",
]
