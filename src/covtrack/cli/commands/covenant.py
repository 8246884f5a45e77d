"""Covenant management commands."""

from datetime import date

import click
from covtrack.cli.date_options import parse_date_option
from covtrack.cli.error_handling import handle_domain_error
from covtrack.cli.facility_resolution import resolve_facility_or_exit
from covtrack.domain.covenant import CovenantService
from covtrack.domain.entities import COVENANT_TYPES, ThresholdStep
from covtrack.domain.facility import FacilityService
from covtrack.utils.amount_parser import parse_amount
from covtrack.utils.date_parser import parse_date


def parse_threshold_step(value: str) -> ThresholdStep:
    """Parse a "YYYY-MM-DD=VALUE" threshold option.

    Raises:
        ValueError: If the option is malformed
    """
    effective_from, sep, threshold = value.partition("=")
    if not sep:
        raise ValueError(f"Threshold '{value}' must look like YYYY-MM-DD=VALUE")
    return ThresholdStep(
        effective_from=parse_date(effective_from),
        threshold_value=parse_amount(threshold),
    )


def _format_value(value) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


@click.group()
def covenant_group():
    """Manage covenants and covenant tests."""
    pass


@covenant_group.command("add")
@click.argument("facility", metavar="FACILITY")
@click.argument("name", metavar="NAME")
@click.option(
    "--threshold-type",
    type=click.Choice(["maximum", "minimum"]),
    default="maximum",
    show_default=True,
    help="Whether the value must stay below (maximum) or above (minimum) the threshold",
)
@click.option(
    "--threshold",
    "thresholds",
    multiple=True,
    required=True,
    help="Threshold step as YYYY-MM-DD=VALUE (repeat for step-downs)",
)
@click.option(
    "--covenant-type",
    type=click.Choice(COVENANT_TYPES),
    default="other",
    show_default=True,
)
@click.option("--id", "covenant_id", help="Explicit covenant ID (generated if omitted)")
@click.pass_context
def add_covenant(
    ctx,
    facility: str,
    name: str,
    threshold_type: str,
    thresholds: tuple[str, ...],
    covenant_type: str,
    covenant_id: str | None,
):
    """Add a covenant to a facility.

    FACILITY can be a facility name or ID.

    Examples:
        covtrack covenant add "Term Loan B" "Leverage Ratio" --threshold 2024-01-01=5.0 --threshold 2024-06-30=4.75
    """
    db = ctx.obj["db"]
    facility_id = resolve_facility_or_exit(ctx, FacilityService(db), facility)

    try:
        schedule = [parse_threshold_step(t) for t in thresholds]
        new_id = CovenantService(db).create_covenant(
            facility_id=facility_id,
            name=name,
            threshold_type=threshold_type,
            threshold_schedule=schedule,
            covenant_type=covenant_type,
            covenant_id=covenant_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created covenant '{name}' (ID: {new_id})")


@covenant_group.command("list")
@click.option("--facility", help="Filter by facility name or ID")
@click.option("--as-of", help="Show thresholds in force on this date (default: today)")
@click.pass_context
def list_covenants(ctx, facility: str | None, as_of: str | None):
    """List active covenants with their current thresholds."""
    db = ctx.obj["db"]
    facility_id = None
    if facility:
        facility_id = resolve_facility_or_exit(ctx, FacilityService(db), facility)
    reference = parse_date_option(ctx, as_of, "--as-of") or date.today()

    service = CovenantService(db)
    covenants = service.list_covenants(facility_id=facility_id)
    if not covenants:
        click.echo("No covenants found.")
        return

    click.echo("\nCovenants:")
    click.echo("-" * 100)
    for cov in covenants:
        threshold = service.current_threshold(cov.id, reference)
        click.echo(
            f"{cov.id:36s} | {cov.name:25s} | {cov.facility_name or '':20s} | "
            f"{cov.threshold_type.value:7s} {_format_value(threshold)}"
        )


@covenant_group.command("show")
@click.argument("covenant_id")
@click.option("--as-of", help="Resolve the threshold on this date (default: today)")
@click.pass_context
def show_covenant(ctx, covenant_id: str, as_of: str | None):
    """Show a covenant, its threshold schedule and recent tests."""
    db = ctx.obj["db"]
    reference = parse_date_option(ctx, as_of, "--as-of") or date.today()
    service = CovenantService(db)

    covenant = service.get_covenant(covenant_id)
    if covenant is None:
        click.echo(f"Error: Covenant '{covenant_id}' not found", err=True)
        ctx.exit(1)

    threshold = service.current_threshold(covenant.id, reference)
    click.echo(f"\nCovenant: {covenant.name} (ID: {covenant.id})")
    click.echo(f"  Facility: {covenant.facility_name}")
    click.echo(f"  Type: {covenant.covenant_type}")
    click.echo(f"  Threshold type: {covenant.threshold_type.value}")
    if threshold is None:
        click.echo(f"  Current threshold: not yet effective on {reference}")
    else:
        click.echo(f"  Current threshold: {_format_value(threshold)} (as of {reference})")

    click.echo("  Schedule:")
    for step in sorted(covenant.threshold_schedule, key=lambda s: s.effective_from):
        click.echo(f"    from {step.effective_from}: {_format_value(step.threshold_value)}")

    tests = service.list_tests(covenant.id)[:8]
    if tests:
        click.echo("  Recent tests:")
        for test in tests:
            click.echo(
                f"    {test.test_date}  ratio {_format_value(test.calculated_ratio)}  "
                f"threshold {_format_value(test.threshold_value)}  "
                f"{test.test_result.value:<5}  headroom {_format_value(test.headroom_percentage)}%"
            )


@covenant_group.command("test")
@click.argument("covenant_id")
@click.option("--date", "test_date", required=True, help="Test date")
@click.option("--ratio", help="Calculated ratio or amount")
@click.option("--numerator", help="Numerator (used with --denominator when --ratio is omitted)")
@click.option("--denominator", help="Denominator")
@click.option("--threshold", help="Threshold override (defaults to the one in force on the test date)")
@click.option("--notes", help="Notes")
@click.pass_context
def record_test(
    ctx,
    covenant_id: str,
    test_date: str,
    ratio: str | None,
    numerator: str | None,
    denominator: str | None,
    threshold: str | None,
    notes: str | None,
):
    """Record a covenant test result."""
    db = ctx.obj["db"]
    parsed_date = parse_date_option(ctx, test_date, "--date")

    try:
        test_id = CovenantService(db).submit_test(
            covenant_id=covenant_id,
            test_date=parsed_date,
            calculated_ratio=parse_amount(ratio) if ratio else None,
            numerator_value=parse_amount(numerator) if numerator else None,
            denominator_value=parse_amount(denominator) if denominator else None,
            threshold_value=parse_amount(threshold) if threshold else None,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    test = next(t for t in CovenantService(db).list_tests(covenant_id) if t.id == test_id)
    click.echo(f"Recorded test {test_id}: {test.test_result.value.upper()}")
    if test.headroom_percentage is not None:
        click.echo(f"  Headroom: {_format_value(test.headroom_percentage)}%")
    if test.breach_amount is not None:
        click.echo(f"  Breach amount: {_format_value(test.breach_amount)}")


def register_commands(cli):
    """Register covenant commands with main CLI."""
    cli.add_command(covenant_group, name="covenant")
