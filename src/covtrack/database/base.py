"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from covtrack.domain.entities import (
    ComplianceEvent,
    Covenant,
    CovenantTest,
    Facility,
    Obligation,
    ThresholdStep,
)


class Database(ABC):
    """Abstract database interface for covtrack."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Facility operations
    @abstractmethod
    def create_facility(self, facility_name: str, borrower_name: str) -> int:
        """Create a new facility. Returns facility ID."""
        pass

    @abstractmethod
    def get_facility(self, facility_id: int) -> Optional[Facility]:
        """Get facility by ID."""
        pass

    @abstractmethod
    def get_facility_by_name(self, facility_name: str) -> Optional[Facility]:
        """Get facility by name."""
        pass

    @abstractmethod
    def list_facilities(self) -> list[Facility]:
        """List all facilities."""
        pass

    # Obligation operations
    @abstractmethod
    def create_obligation(
        self,
        facility_id: int,
        name: str,
        frequency: str,
        deadline_days: int,
        grace_period_days: int,
        obligation_type: str = "other",
    ) -> int:
        """Create an obligation. Returns obligation ID."""
        pass

    @abstractmethod
    def get_obligation(self, obligation_id: int) -> Optional[Obligation]:
        """Get obligation by ID."""
        pass

    @abstractmethod
    def list_obligations(self, facility_id: Optional[int] = None) -> list[Obligation]:
        """List obligations, optionally filtered by facility."""
        pass

    # Compliance event operations
    @abstractmethod
    def upsert_compliance_events(self, events: Sequence[ComplianceEvent]) -> tuple[int, int]:
        """Save generated events keyed by (obligation_id, reference_period_start).

        Existing events for the same key get their deadlines refreshed; their
        status is left alone unless it is still upcoming or due_soon.

        Returns:
            Tuple of (created, updated) counts
        """
        pass

    @abstractmethod
    def list_compliance_events(
        self,
        obligation_id: Optional[int] = None,
        facility_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[ComplianceEvent]:
        """List compliance events ordered by deadline, optionally filtered."""
        pass

    # Covenant operations
    @abstractmethod
    def create_covenant(
        self,
        covenant_id: str,
        facility_id: int,
        name: str,
        threshold_type: str,
        threshold_schedule: Sequence[ThresholdStep],
        covenant_type: str = "other",
        testing_frequency: str = "quarterly",
    ) -> str:
        """Create a covenant. Returns covenant ID."""
        pass

    @abstractmethod
    def get_covenant(self, covenant_id: str) -> Optional[Covenant]:
        """Get covenant by ID."""
        pass

    @abstractmethod
    def list_covenants(
        self, facility_id: Optional[int] = None, active_only: bool = True
    ) -> list[Covenant]:
        """List covenants in creation order, optionally filtered by facility."""
        pass

    # Covenant test operations
    @abstractmethod
    def create_covenant_test(
        self,
        covenant_id: str,
        facility_id: int,
        test_date: date,
        calculated_ratio: Optional[Decimal],
        threshold_value: Decimal,
        test_result: str,
        headroom_absolute: Optional[Decimal] = None,
        headroom_percentage: Optional[Decimal] = None,
        breach_amount: Optional[Decimal] = None,
        notes: Optional[str] = None,
        source: str = "manual",
    ) -> int:
        """Create a covenant test. Returns test ID."""
        pass

    @abstractmethod
    def list_covenant_tests(self, covenant_id: str) -> list[CovenantTest]:
        """List tests for a covenant, newest test date first."""
        pass
