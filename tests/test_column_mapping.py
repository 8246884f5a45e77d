"""Tests for column mapping auto-detection."""

import pytest

from covtrack.domain.column_mapping import (
    DetectionRule,
    auto_detect_mapping,
    normalize_header,
)
from covtrack.domain.entities import ColumnMapping


def test_normalize_header():
    """Case, underscores, spaces and hyphens are ignored."""
    assert normalize_header("Covenant_ID") == "covenantid"
    assert normalize_header("Test - Date") == "testdate"


def test_detect_typical_headers():
    """A typical compliance export maps every field."""
    mapping = auto_detect_mapping(
        [
            "Covenant ID",
            "Facility ID",
            "Facility Name",
            "Covenant Name",
            "Covenant Type",
            "Test Date",
            "Calculated Value",
            "Test Result",
            "Notes",
        ]
    )

    assert mapping == ColumnMapping(
        covenant_id="Covenant ID",
        facility_id="Facility ID",
        facility_name="Facility Name",
        covenant_name="Covenant Name",
        covenant_type="Covenant Type",
        test_date="Test Date",
        calculated_value="Calculated Value",
        test_result="Test Result",
        notes="Notes",
    )


def test_detect_short_aliases():
    """Exact short aliases map to identifiers."""
    mapping = auto_detect_mapping(["CID", "name", "Period End", "Ratio", "Pass/Fail"])

    assert mapping.covenant_id == "CID"
    assert mapping.covenant_name == "name"
    assert mapping.test_date == "Period End"
    assert mapping.calculated_value == "Ratio"
    assert mapping.test_result == "Pass/Fail"


def test_first_header_wins_for_a_field():
    """A later candidate never overwrites an earlier mapped column."""
    mapping = auto_detect_mapping(["Actual Ratio", "Calculated Value"])
    assert mapping.calculated_value == "Actual Ratio"


def test_unmatched_headers_leave_fields_unmapped():
    """Unknown headers are ignored without raising."""
    mapping = auto_detect_mapping(["Foo", "Bar"])
    assert mapping == ColumnMapping()
    assert mapping.missing_required() == [
        "covenant_id or covenant_name",
        "test_date",
        "calculated_value",
    ]


def test_custom_rules():
    """Detection rules are data and can be replaced."""
    rules = (DetectionRule("calculated_value", equals=("kennzahl",)),)
    mapping = auto_detect_mapping(["Kennzahl", "Test Date"], rules=rules)

    assert mapping.calculated_value == "Kennzahl"
    assert mapping.test_date is None


def test_with_field_remaps_and_unmaps():
    """Users can correct a detected mapping."""
    mapping = auto_detect_mapping(["Covenant", "Date", "Value"])
    corrected = mapping.with_field("notes", "Value").with_field("calculated_value", None)

    assert corrected.notes == "Value"
    assert corrected.calculated_value is None
    assert mapping.calculated_value == "Value"


def test_with_field_rejects_unknown_field():
    """Unknown field names are rejected."""
    with pytest.raises(ValueError, match="Unknown mapping field"):
        ColumnMapping().with_field("threshold", "Threshold")


def test_covenant_prefixed_headers_map_to_their_own_field():
    """A "Covenant" prefix does not swallow result, value or notes columns."""
    mapping = auto_detect_mapping(
        ["Covenant", "Covenant Status", "Covenant Value", "Covenant Comments", "As Of Date"]
    )

    assert mapping.covenant_name == "Covenant"
    assert mapping.test_result == "Covenant Status"
    assert mapping.calculated_value == "Covenant Value"
    assert mapping.notes == "Covenant Comments"
    assert mapping.test_date == "As Of Date"


def test_bare_covenant_token_is_a_name_fallback():
    """Headers with only a covenant token still map to the covenant name."""
    assert auto_detect_mapping(["Covenant Description"]).covenant_name == "Covenant Description"
    assert auto_detect_mapping(["Covenant ID"]).covenant_id == "Covenant ID"
    assert auto_detect_mapping(["Covenant Type"]).covenant_type == "Covenant Type"
