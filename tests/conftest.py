"""Shared pytest fixtures for covtrack tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from covtrack.database.factories import create_sqlite_database
from covtrack.domain.covenant import CovenantService
from covtrack.domain.covenant_import import CovenantImportService
from covtrack.domain.entities import ThresholdStep
from covtrack.domain.facility import FacilityService
from covtrack.domain.obligation import ObligationService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def facility_service(temp_db):
    """Create a FacilityService with a temporary database."""
    return FacilityService(temp_db)


@pytest.fixture
def obligation_service(temp_db):
    """Create an ObligationService with a temporary database."""
    return ObligationService(temp_db)


@pytest.fixture
def covenant_service(temp_db):
    """Create a CovenantService with a temporary database."""
    return CovenantService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a CovenantImportService with a temporary database."""
    return CovenantImportService(temp_db)


@pytest.fixture
def sample_facility(facility_service):
    """Create a sample facility for testing."""
    facility_id = facility_service.create_facility(
        facility_name="Acme Term Loan", borrower_name="Acme Corp"
    )
    return facility_service.get_facility(facility_id)


@pytest.fixture
def leverage_schedule():
    """Stepped maximum leverage schedule."""
    return [
        ThresholdStep(date(2024, 1, 1), Decimal("5.0")),
        ThresholdStep(date(2024, 6, 30), Decimal("4.75")),
        ThresholdStep(date(2025, 6, 30), Decimal("4.25")),
    ]


@pytest.fixture
def sample_covenants(covenant_service, sample_facility, leverage_schedule):
    """Create a leverage (maximum) and an interest cover (minimum) covenant."""
    leverage_id = covenant_service.create_covenant(
        facility_id=sample_facility.id,
        name="Leverage Ratio",
        threshold_type="maximum",
        threshold_schedule=leverage_schedule,
        covenant_type="leverage_ratio",
        covenant_id="COV-LEV",
    )
    coverage_id = covenant_service.create_covenant(
        facility_id=sample_facility.id,
        name="Interest Coverage",
        threshold_type="minimum",
        threshold_schedule=[ThresholdStep(date(2024, 1, 1), Decimal("2.5"))],
        covenant_type="interest_coverage",
        covenant_id="COV-ICR",
    )
    return {
        "leverage": covenant_service.get_covenant(leverage_id),
        "coverage": covenant_service.get_covenant(coverage_id),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temporary file and return its path."""

    def _write(text: str, name: str = "tests.csv") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write
