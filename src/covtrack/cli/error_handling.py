"""CLI error and message rendering helpers."""

from typing import Iterable

import click

from covtrack.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | FileNotFoundError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def echo_row_messages(label: str, messages: Iterable[str], err: bool = False) -> None:
    """Print a counted block of per-row import messages, if there are any."""
    messages = list(messages)
    if not messages:
        return
    click.echo(f"  {label}: {len(messages)}", err=err)
    for message in messages:
        click.echo(f"    {message}", err=err)
