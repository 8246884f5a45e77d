"""Facility management commands."""

import click
from covtrack.cli.error_handling import handle_domain_error
from covtrack.domain.facility import FacilityService


@click.group()
def facility_group():
    """Manage credit facilities."""
    pass


@facility_group.command("add")
@click.argument("name", metavar="FACILITY_NAME")
@click.option("--borrower", help="Borrower name (defaults to facility name if not provided)")
@click.pass_context
def add_facility(ctx, name: str, borrower: str | None):
    """Add a new facility.

    Examples:
        covtrack facility add "Term Loan B" --borrower "Acme Corp"
    """
    db = ctx.obj["db"]
    service = FacilityService(db)

    borrower_name = borrower if borrower is not None else name

    try:
        facility_id = service.create_facility(facility_name=name, borrower_name=borrower_name)
        click.echo(f"Created facility '{name}' (ID: {facility_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@facility_group.command("list")
@click.pass_context
def list_facilities(ctx):
    """List all facilities."""
    db = ctx.obj["db"]
    service = FacilityService(db)

    facilities = service.list_facilities()
    if not facilities:
        click.echo("No facilities found.")
        return

    click.echo("\nFacilities:")
    click.echo("-" * 60)
    for fac in facilities:
        click.echo(f"ID: {fac.id:3d} | {fac.facility_name:25s} | Borrower: {fac.borrower_name}")


def register_commands(cli):
    """Register facility commands with main CLI."""
    cli.add_command(facility_group, name="facility")
