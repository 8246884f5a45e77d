"""Facility domain service."""

from __future__ import annotations
from typing import Optional
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covtrack.database.base import Database
from covtrack.domain.entities import Facility as FacilityEntity
from covtrack.domain.errors import ConflictError, NotFoundError, ValidationError, facility_not_found


class FacilityService:
    """Service for managing credit facilities."""

    def __init__(self, db: Database):
        """Initialize facility service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_facility(self, facility_name: str, borrower_name: str) -> int:
        """Create a new facility.

        Args:
            facility_name: Facility name
            borrower_name: Borrower name

        Returns:
            Facility ID

        Raises:
            ValidationError: If a name is empty
            ConflictError: If facility name already exists
        """
        facility_name = facility_name.strip()
        if not facility_name or not borrower_name.strip():
            raise ValidationError("Facility name and borrower name are required")

        if self.db.get_facility_by_name(facility_name) is not None:
            raise ConflictError(f"Facility with name '{facility_name}' already exists")

        return self.db.create_facility(facility_name=facility_name, borrower_name=borrower_name.strip())

    def get_facility(self, facility_id: int) -> Optional[FacilityEntity]:
        """Get facility by ID."""
        return self.db.get_facility(facility_id)

    def list_facilities(self) -> list[FacilityEntity]:
        """List all facilities."""
        return self.db.list_facilities()

    def resolve_facility(self, facility: str | int) -> int:
        """Resolve a facility name or ID to a facility ID.

        Raises:
            NotFoundError: If no facility matches
        """
        if isinstance(facility, int):
            if self.db.get_facility(facility) is None:
                raise NotFoundError(facility_not_found(facility))
            return facility

        try:
            facility_id = int(facility)
        except (ValueError, TypeError):
            facility_id = None
        if facility_id is not None:
            if self.db.get_facility(facility_id) is None:
                raise NotFoundError(facility_not_found(facility_id))
            return facility_id

        found = self.db.get_facility_by_name(facility)
        if found is None:
            raise NotFoundError(f"Facility '{facility}' not found")
        return found.id
