"""CLI helpers for facility resolution."""

from __future__ import annotations

import click
from covtrack.domain.facility import FacilityService
from covtrack.cli.error_handling import handle_domain_error


def resolve_facility_or_exit(
    ctx: click.Context, facility_service: FacilityService, facility: str | int
) -> int:
    """Resolve facility name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return facility_service.resolve_facility(facility)
    except ValueError as exc:
        handle_domain_error(ctx, exc)
