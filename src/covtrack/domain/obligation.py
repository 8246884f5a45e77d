"""Obligation domain service.
Creating an obligation immediately projects its compliance events for the
next year, mirroring what happens when an obligation is added to a facility.
"""


from __future__ import annotations
import logging
from datetime import datetime
from typing import Optional

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from covtrack.database.base import Database
from covtrack.domain.entities import ComplianceEvent, Frequency, Obligation
from covtrack.domain.errors import (
    NotFoundError,
    ValidationError,
    facility_not_found,
    obligation_not_found,
)
from covtrack.domain.event_generator import default_horizon, generate_events

logger = logging.getLogger(__name__)


class ObligationService:
    """Service for managing reporting obligations and their events."""

    def __init__(self, db: Database):
        """Initialize obligation service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_obligation(
        self,
        facility_id: int,
        name: str,
        frequency: str,
        deadline_days: int = 90,
        grace_period_days: int = 0,
        obligation_type: str = "other",
        now: Optional[datetime] = None,
    ) -> tuple[int, list[ComplianceEvent]]:
        """Create an obligation and generate its events for the next year.

        Args:
            facility_id: Facility the obligation belongs to
            name: Obligation name
            frequency: Reporting frequency (unrecognised values are stored but
                produce no events)
            deadline_days: Days after period end the deliverable is due
            grace_period_days: Days after the deadline before it is overdue
            obligation_type: Kind of deliverable
            now: Generation instant (defaults to the current time)

        Returns:
            Tuple of (obligation ID, generated events)

        Raises:
            NotFoundError: If facility doesn't exist
            ValidationError: If day offsets are negative or name is empty
        """
        if self.db.get_facility(facility_id) is None:
            raise NotFoundError(facility_not_found(facility_id))
        if not name.strip():
            raise ValidationError("Obligation name is required")
        if deadline_days < 0 or grace_period_days < 0:
            raise ValidationError("Deadline and grace period days must be zero or more")

        if frequency not in {f.value for f in Frequency}:
            logger.warning(
                "Obligation '%s' has unrecognised frequency '%s'; no events will be generated",
                name,
                frequency,
            )

        obligation_id = self.db.create_obligation(
            facility_id=facility_id,
            name=name.strip(),
            frequency=frequency,
            deadline_days=deadline_days,
            grace_period_days=grace_period_days,
            obligation_type=obligation_type,
        )
        events = self.generate_obligation_events(obligation_id, now=now)
        return obligation_id, events

    def get_obligation(self, obligation_id: int) -> Optional[Obligation]:
        """Get obligation by ID."""
        return self.db.get_obligation(obligation_id)

    def list_obligations(self, facility_id: Optional[int] = None) -> list[Obligation]:
        """List obligations, optionally filtered by facility."""
        return self.db.list_obligations(facility_id=facility_id)

    def generate_obligation_events(
        self, obligation_id: int, now: Optional[datetime] = None
    ) -> list[ComplianceEvent]:
        """Generate and save one year of events for an obligation.

        Saving is an upsert keyed by obligation and reference period, so
        running this again after editing an obligation refreshes deadlines
        instead of duplicating events.

        Returns:
            The generated events

        Raises:
            NotFoundError: If obligation doesn't exist
        """
        obligation = self.db.get_obligation(obligation_id)
        if obligation is None:
            raise NotFoundError(obligation_not_found(obligation_id))
        if now is None:
            now = datetime.now()

        horizon_start, horizon_end = default_horizon(now)
        events = generate_events(obligation, horizon_start, horizon_end, now)
        if events:
            created, updated = self.db.upsert_compliance_events(events)
            logger.info(
                "Obligation %s: %d events created, %d updated",
                obligation_id,
                created,
                updated,
            )
        return events

    def list_events(
        self, obligation_id: Optional[int] = None, facility_id: Optional[int] = None
    ) -> list[ComplianceEvent]:
        """List saved compliance events ordered by deadline."""
        return self.db.list_compliance_events(obligation_id=obligation_id, facility_id=facility_id)
