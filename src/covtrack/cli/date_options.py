"""CLI helpers for date options."""

from datetime import date, datetime

import click

from covtrack.utils.date_parser import parse_date


def parse_date_option(ctx: click.Context, value: str | None, option_name: str) -> date | None:
    """Parse a date option, or exit with a CLI error."""
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {option_name} date: {e}", err=True)
        ctx.exit(1)


def parse_as_of(ctx: click.Context, as_of: str | None) -> datetime | None:
    """Parse an --as-of option into a generation instant (midnight)."""
    as_of_date = parse_date_option(ctx, as_of, "--as-of")
    if as_of_date is None:
        return None
    return datetime.combine(as_of_date, datetime.min.time())
