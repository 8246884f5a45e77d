"""Utility functions for covtrack."""

from covtrack.utils.date_parser import parse_date, normalize_date_cell
from covtrack.utils.amount_parser import parse_amount, parse_cell_value

__all__ = ["parse_date", "normalize_date_cell", "parse_amount", "parse_cell_value"]
