"""Matching and validation of bulk-imported covenant tests.

Every row is validated on its own against the supplied covenants, so the
output depends only on the inputs and their order. Data problems never raise:
they are reported as row errors (the row cannot be imported) or row warnings
(the row can be imported but deserves a second look).
"""

from datetime import date, datetime
from decimal import Decimal, localcontext
from enum import Enum
from typing import Iterable, Optional, Sequence

from covtrack.domain import errors
from covtrack.domain.entities import (
    Covenant,
    CovenantMatch,
    ImportSummary,
    MatchedCovenant,
    MatchKind,
    ParsedCovenantTest,
    TestResult,
    ValidatedCovenantTest,
    ValidationResult,
)
from covtrack.domain.thresholds import calculate_headroom, is_passing, resolve_threshold
from covtrack.utils.amount_parser import is_number
from covtrack.utils.date_parser import parse_iso_date

LOW_HEADROOM_PERCENT = Decimal(10)
HEADROOM_PLACES = Decimal("0.01")


class ThresholdBasis(str, Enum):
    """Which date a row's threshold is resolved at."""

    # Threshold in force when the import runs
    CURRENT = "current"
    # Threshold in force on the row's own test date
    TEST_DATE = "test_date"


def _contains_either_way(left: str, right: str) -> bool:
    left = left.lower()
    right = right.lower()
    return left in right or right in left


def _facility_matches(covenant: Covenant, row: ParsedCovenantTest) -> bool:
    if row.facility_id and str(covenant.facility_id) != row.facility_id:
        return False
    if row.facility_name:
        if not covenant.facility_name:
            return False
        return _contains_either_way(covenant.facility_name, row.facility_name)
    return True


def match_covenant(row: ParsedCovenantTest, covenants: Sequence[Covenant]) -> CovenantMatch:
    """Resolve an import row to one of the existing covenants.

    An explicit covenant ID must match exactly. Otherwise the covenant name
    is compared case-insensitively in both directions ("Leverage" matches
    "Total Leverage Ratio" and vice versa), optionally narrowed by facility.

    Args:
        row: Parsed import row
        covenants: Candidate covenants in a stable order

    Returns:
        CovenantMatch; ambiguous matches keep every candidate in input order
    """
    if row.covenant_id:
        for covenant in covenants:
            if covenant.id == row.covenant_id:
                return CovenantMatch(MatchKind.UNIQUE, (covenant,))
        return CovenantMatch(MatchKind.NOT_FOUND)

    if not row.covenant_name:
        return CovenantMatch(MatchKind.NOT_FOUND)

    candidates = tuple(
        covenant
        for covenant in covenants
        if _contains_either_way(covenant.name, row.covenant_name)
        and _facility_matches(covenant, row)
    )
    if not candidates:
        return CovenantMatch(MatchKind.NOT_FOUND)
    if len(candidates) == 1:
        return CovenantMatch(MatchKind.UNIQUE, candidates)
    return CovenantMatch(MatchKind.AMBIGUOUS, candidates)


def _round_headroom(headroom: Decimal) -> Decimal:
    # Widen precision so very large values can still be rounded to cents
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, headroom.adjusted() + 3)
        return headroom.quantize(HEADROOM_PLACES)


def _reference_date(
    row_date: Optional[date], as_of: date, basis: ThresholdBasis
) -> date:
    if basis == ThresholdBasis.TEST_DATE and row_date is not None:
        return row_date
    return as_of


def validate_test(
    row: ParsedCovenantTest,
    covenants: Sequence[Covenant],
    as_of: date | datetime,
    threshold_basis: ThresholdBasis = ThresholdBasis.CURRENT,
) -> ValidationResult:
    """Validate a single parsed row.

    Args:
        row: Parsed import row
        covenants: Existing covenants in a stable order
        as_of: Validation date, used for the future-date check and, with the
            default basis, for threshold resolution
        threshold_basis: Date the covenant threshold is resolved at

    Returns:
        ValidationResult
    """
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    row_errors: list[str] = []
    row_warnings: list[str] = []

    # Field checks
    row_date = None
    if not row.test_date:
        row_errors.append(errors.TEST_DATE_REQUIRED)
    else:
        row_date = parse_iso_date(row.test_date)
        if row_date is None:
            row_errors.append(errors.invalid_test_date(row.test_date))
        elif row_date > as_of:
            row_warnings.append(errors.future_test_date(row.test_date))

    value = row.calculated_value
    if value is None:
        row_errors.append(errors.CALCULATED_VALUE_REQUIRED)
    elif not is_number(value):
        row_errors.append(errors.invalid_calculated_value(value))

    # Matching
    covenant = None
    if row.covenant_id or row.covenant_name:
        match = match_covenant(row, covenants)
        if match.kind == MatchKind.NOT_FOUND:
            if row.covenant_id:
                row_errors.append(errors.covenant_id_not_matched(row.covenant_id))
            else:
                row_errors.append(errors.covenant_name_not_matched(row.covenant_name))
        else:
            covenant = match.covenant
            if match.kind == MatchKind.AMBIGUOUS:
                row_warnings.append(
                    errors.multiple_covenants_matched(
                        row.covenant_name, len(match.candidates), covenant.name
                    )
                )
    else:
        row_errors.append(errors.COVENANT_IDENTIFIER_REQUIRED)

    matched = None
    predicted = None
    headroom = None
    if covenant is not None:
        threshold = resolve_threshold(
            covenant.threshold_schedule,
            _reference_date(row_date, as_of, threshold_basis),
        )
        matched = MatchedCovenant(
            id=covenant.id,
            name=covenant.name,
            facility_id=covenant.facility_id,
            facility_name=covenant.facility_name,
            threshold_type=covenant.threshold_type,
            threshold_value=threshold,
            covenant_type=covenant.covenant_type,
        )

        # Prediction
        if is_number(value):
            if threshold is None:
                row_warnings.append(errors.no_effective_threshold(covenant.name))
            else:
                passed = is_passing(value, threshold, covenant.threshold_type)
                predicted = TestResult.PASS if passed else TestResult.FAIL
                if threshold == 0:
                    row_warnings.append(errors.zero_threshold(covenant.name))
                else:
                    headroom = _round_headroom(
                        calculate_headroom(value, threshold, covenant.threshold_type)
                    )

    # Cross-checks
    if predicted is not None:
        if row.test_result is not None and row.test_result != predicted:
            row_warnings.append(
                errors.result_mismatch(row.test_result.value, predicted.value)
            )
        if (
            predicted == TestResult.PASS
            and headroom is not None
            and headroom < LOW_HEADROOM_PERCENT
        ):
            row_warnings.append(errors.low_headroom(headroom))

    return ValidationResult(
        is_valid=not row_errors,
        errors=tuple(row_errors),
        warnings=tuple(row_warnings),
        matched_covenant=matched,
        predicted_result=predicted,
        calculated_headroom=headroom,
    )


def validate_tests(
    rows: Iterable[ParsedCovenantTest],
    covenants: Sequence[Covenant],
    as_of: date | datetime,
    threshold_basis: ThresholdBasis = ThresholdBasis.CURRENT,
) -> list[ValidatedCovenantTest]:
    """Validate every row against the existing covenants.

    Args:
        rows: Parsed import rows
        covenants: Existing covenants; their order decides ambiguous matches
        as_of: Validation date
        threshold_basis: Date the covenant threshold is resolved at

    Returns:
        Validated rows in input order
    """
    covenants = tuple(covenants)
    return [
        ValidatedCovenantTest(
            test=row,
            validation=validate_test(row, covenants, as_of, threshold_basis),
        )
        for row in rows
    ]


def _distinct_labels(names_by_key: dict) -> tuple[str, ...]:
    """Sorted display names, suffixed with their key where a name repeats."""
    counts: dict[str, int] = {}
    for name in names_by_key.values():
        counts[name] = counts.get(name, 0) + 1
    labels = [
        name if counts[name] == 1 else f"{name} ({key})"
        for key, name in names_by_key.items()
    ]
    return tuple(sorted(labels))


def summarize_import(validated: Iterable[ValidatedCovenantTest]) -> ImportSummary:
    """Fold validated rows into batch totals.

    Covenants are counted by ID and facilities by facility ID, so two
    covenants sharing a name under different facilities stay distinct.
    """
    total = valid = invalid = warned = passing = failing = 0
    facilities: dict[object, str] = {}
    covenants: dict[str, str] = {}
    for item in validated:
        result = item.validation
        total += 1
        if result.is_valid:
            valid += 1
            # Only rows that will be imported count towards the outcome totals
            if result.predicted_result == TestResult.PASS:
                passing += 1
            elif result.predicted_result == TestResult.FAIL:
                failing += 1
        else:
            invalid += 1
        if result.warnings:
            warned += 1
        matched = result.matched_covenant
        if matched is not None:
            covenants[matched.id] = matched.name
            facility_key = matched.facility_id if matched.facility_id is not None else matched.facility_name
            if facility_key is not None:
                facilities[facility_key] = matched.facility_name or f"Facility {facility_key}"
    return ImportSummary(
        total=total,
        valid=valid,
        invalid=invalid,
        warnings=warned,
        passing_tests=passing,
        failing_tests=failing,
        facilities=_distinct_labels(facilities),
        covenants=_distinct_labels(covenants),
    )
