"""Compliance calendar commands."""

import click
from covtrack.cli.date_options import parse_as_of
from covtrack.cli.error_handling import handle_domain_error
from covtrack.cli.facility_resolution import resolve_facility_or_exit
from covtrack.domain.facility import FacilityService
from covtrack.domain.obligation import ObligationService


@click.group()
def events_group():
    """View and regenerate compliance events."""
    pass


@events_group.command("list")
@click.option("--obligation", type=int, help="Obligation ID")
@click.option("--facility", help="Facility name or ID")
@click.pass_context
def list_events(ctx, obligation: int | None, facility: str | None):
    """List compliance events ordered by deadline."""
    db = ctx.obj["db"]
    facility_id = None
    if facility:
        facility_id = resolve_facility_or_exit(ctx, FacilityService(db), facility)

    events = ObligationService(db).list_events(obligation_id=obligation, facility_id=facility_id)
    if not events:
        click.echo("No compliance events found.")
        return

    click.echo(f"\nFound {len(events)} event(s):")
    click.echo("-" * 90)
    click.echo(
        f"{'ID':<6} {'Obligation':<11} {'Period':<24} {'Deadline':<12} {'Grace':<12} {'Status':<10}"
    )
    click.echo("-" * 90)
    for event in events:
        period = f"{event.reference_period_start}..{event.reference_period_end}"
        click.echo(
            f"{event.id:<6} {event.obligation_id:<11} {period:<24} {str(event.deadline_date):<12} "
            f"{str(event.grace_deadline_date):<12} {event.status.value:<10}"
        )


@events_group.command("regenerate")
@click.argument("obligation_id", type=int)
@click.option("--as-of", help="Generate events as if today were this date")
@click.pass_context
def regenerate_events(ctx, obligation_id: int, as_of: str | None):
    """Regenerate the next year of events for an obligation.

    Existing events for the same reporting period are updated, not duplicated.
    """
    db = ctx.obj["db"]
    now = parse_as_of(ctx, as_of)

    try:
        events = ObligationService(db).generate_obligation_events(obligation_id, now=now)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Generated {len(events)} compliance event(s) for obligation {obligation_id}")


def register_commands(cli):
    """Register event commands with main CLI."""
    cli.add_command(events_group, name="events")
