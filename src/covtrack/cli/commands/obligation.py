"""Reporting obligation commands."""

import click
from covtrack.cli.error_handling import handle_domain_error
from covtrack.cli.facility_resolution import resolve_facility_or_exit
from covtrack.domain.entities import Frequency
from covtrack.domain.facility import FacilityService
from covtrack.domain.obligation import ObligationService
from covtrack.cli.date_options import parse_as_of


@click.group()
def obligation_group():
    """Manage reporting obligations."""
    pass


@obligation_group.command("add")
@click.argument("facility", metavar="FACILITY")
@click.argument("name", metavar="NAME")
@click.option(
    "--frequency",
    required=True,
    help=f"Reporting frequency ({', '.join(f.value for f in Frequency)})",
)
@click.option("--deadline-days", type=int, default=90, show_default=True, help="Days after period end")
@click.option("--grace-days", type=int, default=0, show_default=True, help="Grace period after deadline")
@click.option("--type", "obligation_type", default="other", show_default=True, help="Obligation type")
@click.option("--as-of", help="Generate events as if today were this date")
@click.pass_context
def add_obligation(
    ctx,
    facility: str,
    name: str,
    frequency: str,
    deadline_days: int,
    grace_days: int,
    obligation_type: str,
    as_of: str | None,
):
    """Add an obligation to a facility and generate its events.

    FACILITY can be a facility name or ID.

    Examples:
        covtrack obligation add "Term Loan B" "Quarterly financials" --frequency quarterly --deadline-days 45
    """
    db = ctx.obj["db"]
    facility_id = resolve_facility_or_exit(ctx, FacilityService(db), facility)
    now = parse_as_of(ctx, as_of)
    service = ObligationService(db)

    try:
        obligation_id, events = service.create_obligation(
            facility_id=facility_id,
            name=name,
            frequency=frequency,
            deadline_days=deadline_days,
            grace_period_days=grace_days,
            obligation_type=obligation_type,
            now=now,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created obligation '{name}' (ID: {obligation_id})")
    if events:
        click.echo(f"Generated {len(events)} compliance event(s)")
    else:
        click.echo("No compliance events generated")


@obligation_group.command("list")
@click.option("--facility", help="Filter by facility name or ID")
@click.pass_context
def list_obligations(ctx, facility: str | None):
    """List obligations."""
    db = ctx.obj["db"]
    facility_id = None
    if facility:
        facility_id = resolve_facility_or_exit(ctx, FacilityService(db), facility)

    obligations = ObligationService(db).list_obligations(facility_id=facility_id)
    if not obligations:
        click.echo("No obligations found.")
        return

    click.echo("\nObligations:")
    click.echo("-" * 80)
    for ob in obligations:
        click.echo(
            f"ID: {ob.id:3d} | {ob.name:30s} | {ob.frequency:12s} | "
            f"Deadline: +{ob.deadline_days}d | Grace: +{ob.grace_period_days}d"
        )


def register_commands(cli):
    """Register obligation commands with main CLI."""
    cli.add_command(obligation_group, name="obligation")
