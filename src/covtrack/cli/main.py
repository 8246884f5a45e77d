"""Main CLI entry point."""

import logging

import click
from covtrack.database.factories import create_sqlite_database

# Import and register all commands at module level
from covtrack.cli.commands import (
    covenant,
    events,
    facility,
    import_cmd,
    obligation,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides COVTRACK_DB_PATH environment variable)",
    envvar="COVTRACK_DB_PATH",
)
@click.option("--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Covtrack - Loan covenant compliance tracker.

    Track reporting obligations and covenant thresholds for credit facilities,
    and import covenant test results from spreadsheets.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
facility.register_commands(cli)
obligation.register_commands(cli)
events.register_commands(cli)
covenant.register_commands(cli)
import_cmd.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
