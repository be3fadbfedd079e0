"""Main CLI entry point."""

import click

from switchbooks.config.logging import configure_logging
from switchbooks.config.settings import COMPANY_ENV, DB_PATH_ENV, LOG_LEVEL_ENV, LOG_LEVELS
from switchbooks.database.factories import create_sqlite_database

# Import and register all commands at module level
from switchbooks.cli.commands import (
    add,
    assistant,
    automation,
    category,
    company,
    init_categories,
    ledger,
    payee,
    view,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--company",
    help=f"Company name or ID to work on (overrides {COMPANY_ENV} environment variable)",
    envvar=COMPANY_ENV,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help=f"Log level for diagnostics on stderr (overrides {LOG_LEVEL_ENV})",
    envvar=LOG_LEVEL_ENV,
)
@click.pass_context
def cli(ctx, db_path: str | None, company: str | None, log_level: str | None):
    """Switchbooks - double-entry bookkeeping for small businesses.

    Import bank transactions, categorize them against a chart of accounts,
    and post them as balanced journal entries.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(level=log_level.upper() if log_level else None)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["company"] = company
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
category.register_commands(cli)
init_categories.register_commands(cli)
payee.register_commands(cli)
add.register_commands(cli)
view.register_commands(cli)
ledger.register_commands(cli)
automation.register_commands(cli)
assistant.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
