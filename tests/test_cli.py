"""Integration tests for end-to-end CLI workflows."""

import pytest
from covtrack.cli.main import cli


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


@pytest.fixture
def cli_facility(cli_runner, temp_db):
    result = run(cli_runner, temp_db, "facility", "add", "Acme Term Loan", "--borrower", "Acme Corp")
    assert result.exit_code == 0
    return "Acme Term Loan"


@pytest.fixture
def cli_covenants(cli_runner, temp_db, cli_facility):
    result = run(
        cli_runner,
        temp_db,
        "covenant",
        "add",
        cli_facility,
        "Leverage Ratio",
        "--threshold-type",
        "maximum",
        "--threshold",
        "2024-01-01=5.0",
        "--threshold",
        "2024-06-30=4.75",
        "--covenant-type",
        "leverage_ratio",
        "--id",
        "COV-LEV",
    )
    assert result.exit_code == 0
    result = run(
        cli_runner,
        temp_db,
        "covenant",
        "add",
        cli_facility,
        "Interest Coverage",
        "--threshold-type",
        "minimum",
        "--threshold",
        "2024-01-01=2.5",
        "--id",
        "COV-ICR",
    )
    assert result.exit_code == 0


def test_facility_commands(cli_runner, temp_db):
    """Test adding and listing facilities."""
    result = run(cli_runner, temp_db, "facility", "list")
    assert result.exit_code == 0
    assert "No facilities found." in result.output

    result = run(cli_runner, temp_db, "facility", "add", "Beta Revolver")
    assert result.exit_code == 0
    assert "Created facility 'Beta Revolver' (ID: 1)" in result.output

    result = run(cli_runner, temp_db, "facility", "list")
    assert "Beta Revolver" in result.output
    assert "Borrower: Beta Revolver" in result.output

    result = run(cli_runner, temp_db, "facility", "add", "Beta Revolver")
    assert result.exit_code == 1
    assert "Error: Facility with name 'Beta Revolver' already exists" in result.output


def test_obligation_and_events_workflow(cli_runner, temp_db, cli_facility):
    """Adding an obligation generates a calendar that can be regenerated."""
    result = run(
        cli_runner,
        temp_db,
        "obligation",
        "add",
        cli_facility,
        "Quarterly Financials",
        "--frequency",
        "quarterly",
        "--deadline-days",
        "45",
        "--grace-days",
        "10",
        "--as-of",
        "2024-01-15",
    )
    assert result.exit_code == 0
    assert "Created obligation 'Quarterly Financials' (ID: 1)" in result.output
    assert "Generated 4 compliance event(s)" in result.output

    result = run(cli_runner, temp_db, "events", "list", "--facility", cli_facility)
    assert result.exit_code == 0
    assert "Found 4 event(s)" in result.output
    assert "2024-05-15" in result.output
    assert "2024-05-25" in result.output

    result = run(cli_runner, temp_db, "events", "regenerate", "1", "--as-of", "2024-01-15")
    assert result.exit_code == 0
    assert "Generated 4 compliance event(s) for obligation 1" in result.output

    result = run(cli_runner, temp_db, "events", "list", "--obligation", "1")
    assert "Found 4 event(s)" in result.output


def test_obligation_with_unknown_frequency(cli_runner, temp_db, cli_facility):
    """Unknown frequencies are accepted but produce no events."""
    result = run(
        cli_runner,
        temp_db,
        "obligation",
        "add",
        cli_facility,
        "Ad hoc",
        "--frequency",
        "whenever",
    )
    assert result.exit_code == 0
    assert "No compliance events generated" in result.output

    result = run(cli_runner, temp_db, "obligation", "list")
    assert "whenever" in result.output


def test_obligation_unknown_facility(cli_runner, temp_db):
    """Test that an unknown facility is reported."""
    result = run(
        cli_runner, temp_db, "obligation", "add", "Nope", "Financials", "--frequency", "annual"
    )
    assert result.exit_code == 1
    assert "Error: Facility 'Nope' not found" in result.output


def test_covenant_commands(cli_runner, temp_db, cli_covenants):
    """Covenants list and show thresholds in force on a date."""
    result = run(cli_runner, temp_db, "covenant", "list", "--as-of", "2024-03-31")
    assert result.exit_code == 0
    assert "COV-LEV" in result.output
    assert "maximum 5.00" in result.output
    assert "minimum 2.50" in result.output

    result = run(cli_runner, temp_db, "covenant", "show", "COV-LEV", "--as-of", "2024-07-01")
    assert result.exit_code == 0
    assert "Current threshold: 4.75 (as of 2024-07-01)" in result.output
    assert "from 2024-01-01: 5.00" in result.output

    result = run(cli_runner, temp_db, "covenant", "show", "NOPE")
    assert result.exit_code == 1
    assert "Error: Covenant 'NOPE' not found" in result.output


def test_covenant_add_rejects_bad_threshold(cli_runner, temp_db, cli_facility):
    """Malformed threshold steps are reported as errors."""
    result = run(
        cli_runner, temp_db, "covenant", "add", cli_facility, "Leverage", "--threshold", "5.0"
    )
    assert result.exit_code == 1
    assert "must look like YYYY-MM-DD=VALUE" in result.output


def test_covenant_test_command(cli_runner, temp_db, cli_covenants):
    """Manual tests report pass with headroom or fail with the breach."""
    result = run(
        cli_runner, temp_db, "covenant", "test", "COV-LEV", "--date", "2024-09-30", "--ratio", "3.8x"
    )
    assert result.exit_code == 0
    assert "Recorded test 1: PASS" in result.output
    assert "Headroom: 20.00%" in result.output

    result = run(
        cli_runner,
        temp_db,
        "covenant",
        "test",
        "COV-ICR",
        "--date",
        "2024-09-30",
        "--numerator",
        "200",
        "--denominator",
        "100",
    )
    assert result.exit_code == 0
    assert "Recorded test 2: FAIL" in result.output
    assert "Breach amount: 0.50" in result.output

    result = run(cli_runner, temp_db, "covenant", "test", "COV-LEV", "--date", "2024-09-30")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_import_dry_run_and_import(cli_runner, temp_db, cli_covenants, write_csv):
    """A dry run shows validation, a real run saves valid rows."""
    path = write_csv(
        "Covenant,Facility,Period End,Ratio,Pass/Fail\n"
        "Leverage,Acme Term Loan,2024-09-30,3.8,pass\n"
        "Interest Coverage,Acme Term Loan,2024-09-30,2.0,pass\n"
        "Net Worth,Acme Term Loan,2024-09-30,12,\n"
    )

    result = run(cli_runner, temp_db, "import", path, "--as-of", "2024-12-31", "--dry-run")
    assert result.exit_code == 0
    assert "calculated_value  <- Ratio" in result.output
    assert "Summary:" in result.output
    assert "Total rows: 3" in result.output
    assert "Valid: 2" in result.output
    assert "Stated result 'pass' differs from predicted result 'fail'" in result.output
    assert "No covenant found matching 'Net Worth'" in result.output
    assert "Dry run: nothing was saved." in result.output

    result = run(cli_runner, temp_db, "import", path, "--as-of", "2024-12-31")
    assert result.exit_code == 0
    assert "Import complete:" in result.output
    assert "Imported: 2 tests" in result.output
    assert "Row 4: No covenant found matching 'Net Worth'" in result.output

    result = run(cli_runner, temp_db, "covenant", "show", "COV-ICR", "--as-of", "2024-12-31")
    assert "2024-09-30" in result.output
    assert "fail" in result.output


def test_import_threshold_basis_option(cli_runner, temp_db, cli_covenants, write_csv):
    """The threshold basis option switches which threshold rows are scored against."""
    path = write_csv("Covenant ID,Test Date,Value\nCOV-LEV,2024-03-31,4.9\n")

    current = run(cli_runner, temp_db, "import", path, "--as-of", "2024-12-31", "--dry-run")
    historical = run(
        cli_runner,
        temp_db,
        "import",
        path,
        "--as-of",
        "2024-12-31",
        "--threshold-basis",
        "test_date",
        "--dry-run",
    )

    assert current.exit_code == 0
    assert historical.exit_code == 0
    assert "Predicted fail: 1" in current.output
    assert "Predicted pass: 1" in historical.output


def test_import_with_mapping_override(cli_runner, temp_db, cli_covenants, write_csv):
    """--map points a field at an undetected column."""
    path = write_csv("Covenant,Date,Kennzahl\nInterest Coverage,2024-09-30,3.0\n")

    result = run(cli_runner, temp_db, "import", path, "--as-of", "2024-12-31", "--dry-run")
    assert result.exit_code == 1
    assert "missing required fields: calculated_value" in result.output

    result = run(
        cli_runner,
        temp_db,
        "import",
        path,
        "--as-of",
        "2024-12-31",
        "--map",
        "calculated_value=Kennzahl",
        "--dry-run",
    )
    assert result.exit_code == 0
    assert "Valid: 1" in result.output


def test_import_rejects_malformed_map(cli_runner, temp_db, write_csv):
    """Test that --map needs field=Header."""
    path = write_csv("Covenant,Date,Value\nLeverage,2024-09-30,3.1\n")
    result = run(cli_runner, temp_db, "import", path, "--map", "calculated_value")
    assert result.exit_code == 1
    assert "expected field=Header" in result.output
