"""Utility functions for dreflow."""

from dreflow.utils.date_parser import parse_date, period_bounds
from dreflow.utils.amount_parser import parse_amount, split_amount
from dreflow.utils.text import normalize_text, clean_description

__all__ = [
    "parse_date",
    "period_bounds",
    "parse_amount",
    "split_amount",
    "normalize_text",
    "clean_description",
]
