"""Tests for database mappers."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from covtrack.database.models import (
    ComplianceEvent as ORMComplianceEvent,
    Covenant as ORMCovenant,
    CovenantTest as ORMCovenantTest,
    Facility as ORMFacility,
    Obligation as ORMObligation,
)
from covtrack.database.mappers import (
    compliance_event_to_domain,
    covenant_test_to_domain,
    covenant_to_domain,
    facility_to_domain,
    obligation_to_domain,
    schedule_from_json,
    schedule_to_json,
)
from covtrack.domain.entities import (
    ComplianceEvent,
    Covenant,
    CovenantTest,
    EventStatus,
    Facility,
    Obligation,
    TestResult,
    ThresholdStep,
    ThresholdType,
)


class TestFacilityMapper:
    """Tests for Facility mapper."""

    def test_facility_to_domain(self):
        """Test converting ORM Facility to domain Facility."""
        orm_facility = ORMFacility(
            id=1,
            facility_name="Acme Term Loan",
            borrower_name="Acme Corp",
            created_at=datetime.now(UTC),
        )
        domain_facility = facility_to_domain(orm_facility)

        assert isinstance(domain_facility, Facility)
        assert domain_facility.id == 1
        assert domain_facility.facility_name == "Acme Term Loan"
        assert domain_facility.borrower_name == "Acme Corp"
        assert domain_facility.created_at == orm_facility.created_at


class TestObligationMapper:
    """Tests for Obligation and ComplianceEvent mappers."""

    def test_obligation_to_domain(self):
        """Test converting ORM Obligation to domain Obligation."""
        orm_obligation = ORMObligation(
            id=3,
            facility_id=1,
            name="Quarterly Financials",
            frequency="quarterly",
            deadline_days=45,
            grace_period_days=5,
            obligation_type="financial_statements",
            is_active=True,
        )
        domain_obligation = obligation_to_domain(orm_obligation)

        assert isinstance(domain_obligation, Obligation)
        assert domain_obligation.id == 3
        assert domain_obligation.frequency == "quarterly"
        assert domain_obligation.deadline_days == 45
        assert domain_obligation.grace_period_days == 5
        assert domain_obligation.obligation_type == "financial_statements"

    def test_compliance_event_to_domain(self):
        """Test converting ORM ComplianceEvent to domain ComplianceEvent."""
        orm_event = ORMComplianceEvent(
            id=7,
            facility_id=1,
            obligation_id=3,
            reference_period_start=date(2024, 1, 1),
            reference_period_end=date(2024, 3, 31),
            deadline_date=date(2024, 5, 15),
            grace_deadline_date=date(2024, 5, 20),
            status="due_soon",
        )
        domain_event = compliance_event_to_domain(orm_event)

        assert isinstance(domain_event, ComplianceEvent)
        assert domain_event.id == 7
        assert domain_event.status == EventStatus.DUE_SOON
        assert domain_event.deadline_date == date(2024, 5, 15)
        assert domain_event.grace_deadline_date == date(2024, 5, 20)


class TestScheduleEncoding:
    """Tests for threshold schedule JSON encoding."""

    def test_schedule_to_json(self):
        """Steps encode to ISO dates and decimal strings."""
        encoded = schedule_to_json([ThresholdStep(date(2024, 6, 30), Decimal("4.75"))])
        assert encoded == [{"effective_from": "2024-06-30", "threshold_value": "4.75"}]

    def test_schedule_from_json_tolerates_timestamps_and_numbers(self):
        """Timestamps are cut to dates and numeric values become decimals."""
        decoded = schedule_from_json(
            [{"effective_from": "2024-06-30T00:00:00Z", "threshold_value": 4.75}]
        )
        assert decoded == (ThresholdStep(date(2024, 6, 30), Decimal("4.75")),)

    @pytest.mark.parametrize("raw", [None, []])
    def test_schedule_from_json_empty(self, raw):
        """A missing schedule decodes to no steps."""
        assert schedule_from_json(raw) == ()


class TestCovenantMapper:
    """Tests for Covenant and CovenantTest mappers."""

    def test_covenant_to_domain(self):
        """Test converting ORM Covenant to domain Covenant."""
        orm_covenant = ORMCovenant(
            id="COV-1",
            facility_id=1,
            name="Leverage Ratio",
            covenant_type="leverage_ratio",
            threshold_type="maximum",
            threshold_schedule=[{"effective_from": "2024-01-01", "threshold_value": "5.0"}],
            testing_frequency="quarterly",
            is_active=True,
        )
        orm_covenant.facility = ORMFacility(
            id=1, facility_name="Acme Term Loan", borrower_name="Acme Corp"
        )
        domain_covenant = covenant_to_domain(orm_covenant)

        assert isinstance(domain_covenant, Covenant)
        assert domain_covenant.id == "COV-1"
        assert domain_covenant.threshold_type == ThresholdType.MAXIMUM
        assert domain_covenant.threshold_schedule == (
            ThresholdStep(date(2024, 1, 1), Decimal("5.0")),
        )
        assert domain_covenant.facility_name == "Acme Term Loan"

    def test_covenant_test_to_domain(self):
        """Test converting ORM CovenantTest to domain CovenantTest."""
        orm_test = ORMCovenantTest(
            id=9,
            covenant_id="COV-1",
            facility_id=1,
            test_date=date(2024, 3, 31),
            calculated_ratio=Decimal("3.2"),
            threshold_value=Decimal("4.0"),
            test_result="pass",
            headroom_absolute=Decimal("0.8"),
            headroom_percentage=Decimal("20.00"),
            breach_amount=None,
            notes="Q1",
            source="bulk_import",
            created_at=datetime.now(UTC),
        )
        domain_test = covenant_test_to_domain(orm_test)

        assert isinstance(domain_test, CovenantTest)
        assert domain_test.test_result == TestResult.PASS
        assert domain_test.headroom_percentage == Decimal("20")
        assert domain_test.breach_amount is None
        assert domain_test.source == "bulk_import"
