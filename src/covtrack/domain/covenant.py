"""Covenant domain service."""

from __future__ import annotations
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covtrack.database.base import Database
from covtrack.domain.entities import (
    COVENANT_TYPES,
    Covenant,
    CovenantTest,
    ThresholdStep,
    ThresholdType,
)
from covtrack.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    covenant_not_found,
    duplicate_covenant_id,
    facility_not_found,
)
from covtrack.domain.thresholds import evaluate_test, resolve_threshold


class CovenantService:
    """Service for managing covenants and recording their tests."""

    def __init__(self, db: Database):
        """Initialize covenant service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_covenant(
        self,
        facility_id: int,
        name: str,
        threshold_type: str,
        threshold_schedule: Sequence[ThresholdStep],
        covenant_type: str = "other",
        covenant_id: Optional[str] = None,
        testing_frequency: str = "quarterly",
    ) -> str:
        """Create a new covenant.

        Args:
            facility_id: Facility the covenant belongs to
            name: Covenant name
            threshold_type: "maximum" or "minimum"
            threshold_schedule: Threshold steps in any order
            covenant_type: Covenant category (leverage_ratio, ...)
            covenant_id: Optional explicit ID (generated if omitted)
            testing_frequency: How often the covenant is tested

        Returns:
            Covenant ID

        Raises:
            NotFoundError: If facility doesn't exist
            ValidationError: If threshold type or covenant type is invalid
            ConflictError: If covenant ID already exists
        """
        if self.db.get_facility(facility_id) is None:
            raise NotFoundError(facility_not_found(facility_id))
        if not name.strip():
            raise ValidationError("Covenant name is required")

        valid_types = {t.value for t in ThresholdType}
        if threshold_type not in valid_types:
            raise ValidationError(
                f"Invalid threshold type '{threshold_type}'. "
                f"Must be one of: {', '.join(sorted(valid_types))}"
            )
        if covenant_type not in COVENANT_TYPES:
            raise ValidationError(
                f"Invalid covenant type '{covenant_type}'. "
                f"Must be one of: {', '.join(COVENANT_TYPES)}"
            )

        if covenant_id is None:
            covenant_id = str(uuid.uuid4())
        elif self.db.get_covenant(covenant_id) is not None:
            raise ConflictError(duplicate_covenant_id(covenant_id))

        return self.db.create_covenant(
            covenant_id=covenant_id,
            facility_id=facility_id,
            name=name.strip(),
            threshold_type=threshold_type,
            threshold_schedule=list(threshold_schedule),
            covenant_type=covenant_type,
            testing_frequency=testing_frequency,
        )

    def get_covenant(self, covenant_id: str) -> Optional[Covenant]:
        """Get covenant by ID."""
        return self.db.get_covenant(covenant_id)

    def list_covenants(self, facility_id: Optional[int] = None) -> list[Covenant]:
        """List active covenants in creation order."""
        return self.db.list_covenants(facility_id=facility_id)

    def current_threshold(
        self, covenant_id: str, as_of: date | datetime
    ) -> Optional[Decimal]:
        """Threshold in force for a covenant on a given date.

        Raises:
            NotFoundError: If covenant doesn't exist
        """
        covenant = self.db.get_covenant(covenant_id)
        if covenant is None:
            raise NotFoundError(covenant_not_found(covenant_id))
        return resolve_threshold(covenant.threshold_schedule, as_of)

    def submit_test(
        self,
        covenant_id: str,
        test_date: date,
        calculated_ratio: Optional[Decimal] = None,
        numerator_value: Optional[Decimal] = None,
        denominator_value: Optional[Decimal] = None,
        threshold_value: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record a manually submitted covenant test.

        The threshold defaults to the one in force on the test date.

        Returns:
            Test ID

        Raises:
            NotFoundError: If covenant doesn't exist
            ValidationError: If no threshold applies or no ratio can be
                determined
        """
        covenant = self.db.get_covenant(covenant_id)
        if covenant is None:
            raise NotFoundError(covenant_not_found(covenant_id))

        if threshold_value is None:
            threshold_value = resolve_threshold(covenant.threshold_schedule, test_date)
            if threshold_value is None:
                raise ValidationError(
                    f"Covenant '{covenant.name}' has no threshold in force on {test_date.isoformat()}"
                )

        evaluation = evaluate_test(
            covenant.threshold_type,
            threshold_value,
            calculated_ratio=calculated_ratio,
            numerator_value=numerator_value,
            denominator_value=denominator_value,
        )
        return self.db.create_covenant_test(
            covenant_id=covenant.id,
            facility_id=covenant.facility_id,
            test_date=test_date,
            calculated_ratio=evaluation.calculated_ratio,
            threshold_value=evaluation.threshold_value,
            test_result=evaluation.test_result.value,
            headroom_absolute=evaluation.headroom_absolute,
            headroom_percentage=evaluation.headroom_percentage,
            breach_amount=evaluation.breach_amount,
            notes=notes,
            source="manual",
        )

    def list_tests(self, covenant_id: str) -> list[CovenantTest]:
        """List recorded tests for a covenant, newest first."""
        return self.db.list_covenant_tests(covenant_id)
