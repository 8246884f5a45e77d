"""Date parsing utilities."""

from datetime import date, datetime, timedelta
import re
from typing import Any, Optional

from dateutil import parser as date_parser

# Spreadsheet day-serials count from 1899-12-30 (1900 date system, with the
# phantom 1900-02-29 already accounted for for serials after February 1900).
SPREADSHEET_EPOCH = date(1899, 12, 30)

# Two unrelated fallbacks; a string parses the same under both only when it
# names a full year, month and day.
_DEFAULTS = (datetime(1900, 1, 1), datetime(1904, 12, 28))

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SERIAL_PATTERN = re.compile(r"^\d{1,5}(\.\d+)?$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", etc.) and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats
        today: Reference date for relative words (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def serial_to_date(serial: float) -> date:
    """Convert a spreadsheet day-serial into a calendar date."""
    return SPREADSHEET_EPOCH + timedelta(days=int(serial))


def normalize_date_cell(value: Any) -> str:
    """Normalize a spreadsheet date cell to ``YYYY-MM-DD``.

    Numbers are treated as day-serials, date objects are formatted directly,
    strings are parsed leniently. Anything that cannot be understood, or that is
    missing its year, month or day, is passed through unchanged so validation
    can report it.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return serial_to_date(value).isoformat()
        except (OverflowError, ValueError):
            return str(value)

    text = str(value).strip()
    if not text:
        return ""
    if ISO_DATE_PATTERN.match(text):
        # Already in canonical form; leave impossible dates like 2024-02-30
        # for validation to reject rather than letting the parser guess.
        return text
    if SERIAL_PATTERN.match(text):
        # CSV exports of spreadsheets write date cells as bare serials
        return serial_to_date(float(text)).isoformat()
    try:
        parsed = {date_parser.parse(text, default=d).date() for d in _DEFAULTS}
    except (ValueError, TypeError, OverflowError):
        return text
    if len(parsed) != 1:
        # Partial dates such as "March 2024" are left for validation to reject
        return text
    return parsed.pop().isoformat()


def parse_iso_date(value: str) -> Optional[date]:
    """Strictly parse ``YYYY-MM-DD``; None if the text is not a real date."""
    if not ISO_DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
