"""Tests for date parsing helpers."""

import pytest
from datetime import date, datetime, timedelta

from covtrack.utils.date_parser import (
    normalize_date_cell,
    parse_date,
    parse_iso_date,
    serial_to_date,
)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_relative_words():
    """Relative words resolve against the supplied reference date."""
    today = date(2024, 3, 1)
    assert parse_date("today", today=today) == today
    assert parse_date("Yesterday", today=today) == date(2024, 2, 29)
    assert parse_date("tomorrow", today=today) == date(2024, 3, 2)


def test_parse_today_defaults_to_current_date():
    """Without a reference date, 'today' is the real current date."""
    assert parse_date("today") == date.today()
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_invalid_date():
    """Test parsing invalid date raises error."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


def test_serial_to_date():
    """Day-serials count from the spreadsheet epoch."""
    assert serial_to_date(1) == date(1899, 12, 31)
    assert serial_to_date(45292) == date(2024, 1, 1)
    assert serial_to_date(45292.75) == date(2024, 1, 1)


def test_normalize_date_cell_variants():
    """Cells of every common shape normalize to ISO dates."""
    assert normalize_date_cell(45306) == "2024-01-15"
    assert normalize_date_cell("45306") == "2024-01-15"
    assert normalize_date_cell(date(2024, 1, 15)) == "2024-01-15"
    assert normalize_date_cell(datetime(2024, 1, 15, 17, 30)) == "2024-01-15"
    assert normalize_date_cell("2024-01-15") == "2024-01-15"
    assert normalize_date_cell("Jan 15 2024") == "2024-01-15"


def test_normalize_date_cell_passthrough():
    """Blank and unparseable cells are not guessed at."""
    assert normalize_date_cell(None) == ""
    assert normalize_date_cell("   ") == ""
    assert normalize_date_cell("TBD") == "TBD"
    assert normalize_date_cell("2024-13-01") == "2024-13-01"


def test_normalize_date_cell_keeps_partial_dates():
    """Text without a full day, month and year is not completed from today."""
    assert normalize_date_cell("March 2024") == "March 2024"
    assert normalize_date_cell("Feb 2024") == "Feb 2024"
    assert normalize_date_cell("15 March") == "15 March"
    assert normalize_date_cell("March 31, 2024") == "2024-03-31"


def test_parse_iso_date_is_strict():
    """Only real YYYY-MM-DD dates are accepted."""
    assert parse_iso_date("2024-02-29") == date(2024, 2, 29)
    assert parse_iso_date("2023-02-29") is None
    assert parse_iso_date("03/31/2024") is None
    assert parse_iso_date("") is None
