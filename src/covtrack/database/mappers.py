"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the JSON encoding of
threshold schedules.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from covtrack.domain import entities as domain
from covtrack.database.models import (
    ComplianceEvent as ORMComplianceEvent,
    Covenant as ORMCovenant,
    CovenantTest as ORMCovenantTest,
    Facility as ORMFacility,
    Obligation as ORMObligation,
)


def facility_to_domain(orm_facility: ORMFacility) -> domain.Facility:
    """Convert SQLAlchemy Facility model to domain Facility entity."""
    return domain.Facility(
        id=orm_facility.id,
        facility_name=orm_facility.facility_name,
        borrower_name=orm_facility.borrower_name,
        created_at=orm_facility.created_at,
    )


def obligation_to_domain(orm_obligation: ORMObligation) -> domain.Obligation:
    """Convert SQLAlchemy Obligation model to domain Obligation entity."""
    return domain.Obligation(
        id=orm_obligation.id,
        facility_id=orm_obligation.facility_id,
        name=orm_obligation.name,
        frequency=orm_obligation.frequency,
        deadline_days=orm_obligation.deadline_days,
        grace_period_days=orm_obligation.grace_period_days,
        obligation_type=orm_obligation.obligation_type,
        is_active=orm_obligation.is_active,
    )


def compliance_event_to_domain(orm_event: ORMComplianceEvent) -> domain.ComplianceEvent:
    """Convert SQLAlchemy ComplianceEvent model to domain ComplianceEvent entity."""
    return domain.ComplianceEvent(
        id=orm_event.id,
        obligation_id=orm_event.obligation_id,
        facility_id=orm_event.facility_id,
        reference_period_start=orm_event.reference_period_start,
        reference_period_end=orm_event.reference_period_end,
        deadline_date=orm_event.deadline_date,
        grace_deadline_date=orm_event.grace_deadline_date,
        status=domain.EventStatus(orm_event.status),
    )


def schedule_to_json(schedule: Iterable[domain.ThresholdStep]) -> list[dict[str, str]]:
    """Encode a threshold schedule for the JSON column."""
    return [
        {
            "effective_from": step.effective_from.isoformat(),
            "threshold_value": str(step.threshold_value),
        }
        for step in schedule
    ]


def schedule_from_json(raw: Optional[list[dict[str, Any]]]) -> tuple[domain.ThresholdStep, ...]:
    """Decode a threshold schedule from the JSON column."""
    if not raw:
        return ()
    return tuple(
        domain.ThresholdStep(
            effective_from=date.fromisoformat(str(entry["effective_from"])[:10]),
            threshold_value=Decimal(str(entry["threshold_value"])),
        )
        for entry in raw
    )


def covenant_to_domain(orm_covenant: ORMCovenant) -> domain.Covenant:
    """Convert SQLAlchemy Covenant model to domain Covenant entity."""
    facility = orm_covenant.facility
    return domain.Covenant(
        id=orm_covenant.id,
        facility_id=orm_covenant.facility_id,
        facility_name=facility.facility_name if facility is not None else None,
        name=orm_covenant.name,
        covenant_type=orm_covenant.covenant_type,
        threshold_type=domain.ThresholdType(orm_covenant.threshold_type),
        threshold_schedule=schedule_from_json(orm_covenant.threshold_schedule),
        testing_frequency=orm_covenant.testing_frequency,
        is_active=orm_covenant.is_active,
    )


def covenant_test_to_domain(orm_test: ORMCovenantTest) -> domain.CovenantTest:
    """Convert SQLAlchemy CovenantTest model to domain CovenantTest entity."""
    return domain.CovenantTest(
        id=orm_test.id,
        covenant_id=orm_test.covenant_id,
        facility_id=orm_test.facility_id,
        test_date=orm_test.test_date,
        calculated_ratio=orm_test.calculated_ratio,
        threshold_value=orm_test.threshold_value,
        test_result=domain.TestResult(orm_test.test_result),
        headroom_absolute=orm_test.headroom_absolute,
        headroom_percentage=orm_test.headroom_percentage,
        breach_amount=orm_test.breach_amount,
        notes=orm_test.notes,
        source=orm_test.source,
        created_at=orm_test.created_at,
    )
