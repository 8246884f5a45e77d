"""Threshold resolution and directional covenant test evaluation."""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from covtrack.domain.entities import (
    TestEvaluation,
    TestResult,
    ThresholdStep,
    ThresholdType,
)
from covtrack.domain.errors import ValidationError


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def resolve_threshold(
    schedule: Iterable[ThresholdStep], reference: date | datetime
) -> Optional[Decimal]:
    """Return the threshold in force on ``reference``.

    The step with the latest ``effective_from`` on or before the reference
    date wins. When two steps share that date, the one listed last wins.

    Args:
        schedule: Threshold steps in any order
        reference: Date (or instant) to resolve for

    Returns:
        Threshold value, or None if the schedule is empty or nothing is
        effective yet
    """
    reference_date = _as_date(reference)
    current: Optional[ThresholdStep] = None
    for step in schedule:
        if step.effective_from > reference_date:
            continue
        if current is None or step.effective_from >= current.effective_from:
            current = step
    return current.threshold_value if current is not None else None


def calculate_headroom(
    value: Decimal, threshold: Decimal, threshold_type: ThresholdType
) -> Decimal:
    """Signed percentage distance from value to threshold.

    Positive means the value is on the compliant side of the threshold.

    Raises:
        ValidationError: If threshold is zero
    """
    if threshold == 0:
        raise ValidationError("Cannot calculate headroom against a zero threshold")
    if threshold_type == ThresholdType.MAXIMUM:
        return (threshold - value) / threshold * 100
    return (value - threshold) / threshold * 100


def is_passing(value: Decimal, threshold: Decimal, threshold_type: ThresholdType) -> bool:
    """Whether ``value`` satisfies the threshold in the given direction."""
    if threshold_type == ThresholdType.MAXIMUM:
        return value <= threshold
    return value >= threshold


def evaluate_test(
    threshold_type: ThresholdType,
    threshold_value: Decimal,
    calculated_ratio: Optional[Decimal] = None,
    numerator_value: Optional[Decimal] = None,
    denominator_value: Optional[Decimal] = None,
) -> TestEvaluation:
    """Evaluate a covenant test submission.

    The ratio is taken as given, or derived from numerator and denominator
    when no ratio is supplied. A passing test reports headroom; a failing
    test reports the breach amount instead.

    Args:
        threshold_type: Direction of the covenant
        threshold_value: Threshold to test against
        calculated_ratio: Pre-computed ratio or amount
        numerator_value: Ratio numerator (used if calculated_ratio is None)
        denominator_value: Ratio denominator (used if calculated_ratio is None)

    Returns:
        TestEvaluation

    Raises:
        ValidationError: If no ratio can be determined
    """
    if calculated_ratio is None:
        if numerator_value is None or denominator_value is None:
            raise ValidationError(
                "Either calculated_ratio or both numerator and denominator are required"
            )
        if denominator_value == 0:
            raise ValidationError("Denominator cannot be zero")
        calculated_ratio = numerator_value / denominator_value

    if not is_passing(calculated_ratio, threshold_value, threshold_type):
        return TestEvaluation(
            test_result=TestResult.FAIL,
            calculated_ratio=calculated_ratio,
            threshold_value=threshold_value,
            headroom_absolute=None,
            headroom_percentage=None,
            breach_amount=abs(calculated_ratio - threshold_value),
        )

    headroom_absolute = abs(threshold_value - calculated_ratio)
    headroom_percentage = None
    if threshold_value != 0:
        headroom_percentage = calculate_headroom(
            calculated_ratio, threshold_value, threshold_type
        )
    return TestEvaluation(
        test_result=TestResult.PASS,
        calculated_ratio=calculated_ratio,
        threshold_value=threshold_value,
        headroom_absolute=headroom_absolute,
        headroom_percentage=headroom_percentage,
        breach_amount=None,
    )
