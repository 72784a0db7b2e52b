"""Main CLI entry point."""

import logging

import click

from fincore.database.factories import create_sqlite_database

# Import and register all commands at module level
from fincore.cli.commands import (
    account,
    category,
    period,
    report,
    template,
    transaction,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINCORE_DB_PATH environment variable)",
    envvar="FINCORE_DB_PATH",
)
@click.option(
    "--company",
    default="default",
    show_default=True,
    envvar="FINCORE_COMPANY",
    help="Company id the command works on (FINCORE_COMPANY)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FINCORE_LOG_LEVEL",
    help="Logging verbosity (FINCORE_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx, db_path: str | None, company: str, log_level: str):
    """fincore - financial periods, statements and payments.

    Resolve reporting periods, record transactions backed by single or
    split payments, and evaluate statement templates over a period.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["company_id"] = company

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
period.register_commands(cli)
category.register_commands(cli)
account.register_commands(cli)
template.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
