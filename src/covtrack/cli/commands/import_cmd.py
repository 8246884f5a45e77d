"""Covenant test import command."""

import click
from covtrack.cli.date_options import parse_date_option
from covtrack.cli.error_handling import echo_row_messages, handle_domain_error
from covtrack.cli.facility_resolution import resolve_facility_or_exit
from covtrack.domain.covenant_import import CovenantImportService
from covtrack.domain.covenant_validator import ThresholdBasis
from covtrack.domain.entities import MAPPING_FIELDS
from covtrack.domain.facility import FacilityService


def parse_mapping_overrides(ctx: click.Context, values: tuple[str, ...]) -> dict[str, str | None]:
    """Parse --map field=Header options (an empty header unmaps the field)."""
    overrides: dict[str, str | None] = {}
    for value in values:
        field_name, sep, header = value.partition("=")
        if not sep:
            click.echo(f"Error: Invalid --map '{value}' (expected field=Header)", err=True)
            ctx.exit(1)
        overrides[field_name.strip()] = header.strip() or None
    return overrides


def _echo_mapping(mapping) -> None:
    click.echo("\nColumn mapping:")
    for field_name, header in mapping.as_dict().items():
        click.echo(f"  {field_name:<17} <- {header if header else '(unmapped)'}")


def _echo_rows(tests) -> None:
    click.echo("\nRows:")
    click.echo("-" * 100)
    for item in tests:
        validation = item.validation
        status = "OK" if validation.is_valid else "INVALID"
        covenant = validation.matched_covenant.name if validation.matched_covenant else "-"
        predicted = validation.predicted_result.value if validation.predicted_result else "-"
        headroom = (
            f"{validation.calculated_headroom}%"
            if validation.calculated_headroom is not None
            else "-"
        )
        click.echo(
            f"Row {item.test.row_index:<4} {status:<8} {covenant:<30} {item.test.test_date:<12} "
            f"{predicted:<5} {headroom}"
        )
        for error in validation.errors:
            click.echo(f"    error: {error}")
        for warning in validation.warnings:
            click.echo(f"    warning: {warning}")


def _echo_summary(summary) -> None:
    click.echo("\nSummary:")
    click.echo(f"  Total rows: {summary.total}")
    click.echo(f"  Valid: {summary.valid}")
    click.echo(f"  Invalid: {summary.invalid}")
    click.echo(f"  With warnings: {summary.warnings}")
    click.echo(f"  Predicted pass: {summary.passing_tests}")
    click.echo(f"  Predicted fail: {summary.failing_tests}")
    if summary.facilities:
        click.echo(f"  Facilities: {', '.join(summary.facilities)}")
    if summary.covenants:
        click.echo(f"  Covenants: {', '.join(summary.covenants)}")


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.option(
    "--map",
    "mappings",
    multiple=True,
    help=f"Override a detected column as field=Header. Fields: {', '.join(MAPPING_FIELDS)}",
)
@click.option("--facility", help="Only match covenants of this facility (name or ID)")
@click.option("--as-of", help="Validation date (default: today)")
@click.option(
    "--threshold-basis",
    type=click.Choice([b.value for b in ThresholdBasis]),
    default=ThresholdBasis.CURRENT.value,
    show_default=True,
    help="Score rows against today's threshold or the one in force on each test date",
)
@click.option("--dry-run", is_flag=True, help="Validate and show results without saving")
@click.pass_context
def import_tests(
    ctx,
    csv_file: str,
    mappings: tuple[str, ...],
    facility: str | None,
    as_of: str | None,
    threshold_basis: str,
    dry_run: bool,
):
    """Import covenant test results from a CSV file.

    Columns are detected from the header row; use --map to correct them.
    """
    db = ctx.obj["db"]
    service = CovenantImportService(db)
    overrides = parse_mapping_overrides(ctx, mappings)
    facility_id = None
    if facility:
        facility_id = resolve_facility_or_exit(ctx, FacilityService(db), facility)
    reference = parse_date_option(ctx, as_of, "--as-of")
    basis = ThresholdBasis(threshold_basis)

    try:
        if dry_run:
            preview = service.preview(
                csv_file,
                overrides=overrides,
                as_of=reference,
                threshold_basis=basis,
                facility_id=facility_id,
            )
            _echo_mapping(preview.mapping)
            _echo_rows(preview.tests)
            _echo_summary(preview.summary)
            click.echo("\nDry run: nothing was saved.")
            return

        result = service.import_tests(
            csv_file,
            overrides=overrides,
            as_of=reference,
            threshold_basis=basis,
            facility_id=facility_id,
        )
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result['imported']} tests")
    click.echo(f"  Skipped: {result['skipped']} without an effective threshold")
    echo_row_messages("Warnings", result["warnings"])
    echo_row_messages("Errors", result["errors"], err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_tests)
