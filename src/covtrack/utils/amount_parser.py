"""Amount and ratio parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Any

NAN = Decimal("NaN")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount or ratio string into a Decimal.

    Handles various formats:
    - "4.25"
    - "$1,234.56"
    - "-123.45"
    - "(123.45)" (negative in parentheses)
    - "12.5%" (percent sign is dropped, the number is kept as written)
    - "3.2x" (leverage multiple)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols, percent signs and multiple suffixes
    amount_str = re.sub(r"[$€£¥%]", "", amount_str)
    amount_str = re.sub(r"(?<=\d)\s*[xX]$", "", amount_str)

    # Remove thousands separators and inner whitespace
    amount_str = amount_str.replace(",", "")
    amount_str = re.sub(r"\s+", "", amount_str)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_cell_value(value: Any) -> Decimal:
    """Parse a spreadsheet cell into a Decimal, returning NaN if unparseable.

    Never raises: a bad value is carried forward as NaN so that validation
    can report it against the row.
    """
    if isinstance(value, bool):
        return NAN
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # str() keeps the shortest repr, so 3.2 stays 3.2 rather than 3.2000000000000001776...
        return Decimal(str(value))
    if value is None:
        return NAN
    try:
        return parse_amount(str(value))
    except ValueError:
        return NAN


def is_number(value: Decimal | None) -> bool:
    """True for a finite Decimal."""
    return value is not None and value.is_finite()
