"""Transaction viewing commands."""

import click

from switchbooks.cli.commands.category import resolve_category_id
from switchbooks.cli.error_handling import require_company_id
from switchbooks.domain.category import CategoryService
from switchbooks.domain.entities import TransactionStatus
from switchbooks.domain.payee import PayeeService
from switchbooks.domain.transaction import TransactionService
from switchbooks.utils.date_parser import get_date_range, parse_date

PERIODS = ("this-month", "last-month", "this-year", "last-year")


@click.command("view")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of dates")
@click.option("--account", help="Bank or card account (ID, path or name)")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus]),
    help="Only imported or only posted transactions",
)
@click.pass_context
def view_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    status: str | None,
):
    """View transactions with optional filters."""
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    service = TransactionService(db)
    category_service = CategoryService(db)
    payee_service = PayeeService(db)

    if period and (start_date or end_date):
        click.echo("Error: --period cannot be combined with --start-date or --end-date.", err=True)
        ctx.exit(1)

    start = end = None
    try:
        if period:
            start, end = get_date_range(period)
        if start_date:
            start = parse_date(start_date)
        if end_date:
            end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    account_id = resolve_category_id(ctx, category_service, company_id, account) if account else None
    transactions = service.list_transactions(
        company_id,
        status=TransactionStatus(status) if status else None,
        bank_account_id=account_id,
        start_date=start,
        end_date=end,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    payees = {p.id: p.name for p in payee_service.list_payees(company_id)}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 120)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Amount':>12}  {'Status':<9} {'Account':<20} "
        f"{'Category':<28} {'Payee':<16} {'Description':<20}"
    )
    click.echo("-" * 120)

    for txn in transactions:
        account_name = category_service.format_category_path(txn.bank_account_id)
        category_name = (
            category_service.format_category_path(txn.category_id) if txn.category_id else ""
        )
        payee_name = payees.get(txn.payee_id, "") if txn.payee_id else ""
        amount_str = f"{txn.amount:,.2f}"
        description = (txn.description or "")[:20]

        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {amount_str:>12}  {txn.status.value:<9} "
            f"{account_name[:20]:<20} {category_name[:28]:<28} {payee_name[:16]:<16} {description:<20}"
        )


def register_commands(cli):
    """Register view command with main CLI."""
    cli.add_command(view_transactions)
