"""Normalization of raw spreadsheet rows into typed covenant tests."""

from typing import Any, Iterable, Mapping, NamedTuple, Optional, Union

from covtrack.domain.entities import ColumnMapping, ParsedCovenantTest, TestResult
from covtrack.utils.amount_parser import parse_cell_value
from covtrack.utils.date_parser import normalize_date_cell

PASS_TOKENS = frozenset({"pass", "passed", "yes", "1", "true"})
FAIL_TOKENS = frozenset({"fail", "failed", "no", "0", "false"})


class RawRow(NamedTuple):
    """One decoded spreadsheet row keyed by header."""

    row_index: int
    data: Mapping[str, Any]


def normalize_test_result(
    value: Any,
    pass_tokens: frozenset[str] = PASS_TOKENS,
    fail_tokens: frozenset[str] = FAIL_TOKENS,
) -> Optional[TestResult]:
    """Map free-text pass/fail indicators to a TestResult (None if unknown)."""
    if value is None:
        return None
    token = str(value).strip().lower()
    if token in pass_tokens:
        return TestResult.PASS
    if token in fail_tokens:
        return TestResult.FAIL
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _cell(data: Mapping[str, Any], header: Optional[str]) -> Any:
    if not header:
        return None
    return data.get(header)


def parse_row(row: RawRow, mapping: ColumnMapping) -> ParsedCovenantTest:
    """Project one raw row through the column mapping."""
    data = row.data
    value_header = mapping.calculated_value
    calculated_value = parse_cell_value(_cell(data, value_header)) if value_header else None
    return ParsedCovenantTest(
        row_index=row.row_index,
        test_date=normalize_date_cell(_cell(data, mapping.test_date)),
        calculated_value=calculated_value,
        covenant_id=_text(_cell(data, mapping.covenant_id)),
        facility_id=_text(_cell(data, mapping.facility_id)),
        facility_name=_text(_cell(data, mapping.facility_name)),
        covenant_name=_text(_cell(data, mapping.covenant_name)),
        covenant_type=_text(_cell(data, mapping.covenant_type)),
        test_result=normalize_test_result(_cell(data, mapping.test_result)),
        notes=_text(_cell(data, mapping.notes)),
    )


def apply_mapping(
    rows: Iterable[Union[RawRow, Mapping[str, Any]]], mapping: ColumnMapping
) -> list[ParsedCovenantTest]:
    """Convert raw rows into parsed covenant tests.

    Plain mappings are accepted and numbered from 1 in input order.

    Args:
        rows: Raw rows, with or without explicit row indexes
        mapping: Active column mapping

    Returns:
        Parsed tests in input order
    """
    parsed = []
    for position, row in enumerate(rows, start=1):
        if not isinstance(row, RawRow):
            row = RawRow(row_index=position, data=row)
        parsed.append(parse_row(row, mapping))
    return parsed
