"""Add transaction command."""

import click

from switchbooks.cli.commands.category import resolve_category_id
from switchbooks.cli.commands.payee import resolve_payee_id
from switchbooks.cli.error_handling import handle_domain_error, require_company_id
from switchbooks.domain.category import CategoryService
from switchbooks.domain.errors import DomainError
from switchbooks.domain.payee import PayeeService
from switchbooks.domain.transaction import TransactionService
from switchbooks.utils.amount_parser import parse_amount
from switchbooks.utils.date_parser import parse_date


@click.command("add")
@click.option("--account", required=True, help="Bank or card account (ID, path or name)")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option(
    "--amount", required=True, help="Amount as on the statement (e.g., -50.00 for money out)"
)
@click.option("--description", help="Transaction description")
@click.option("--category", help="Pre-select a category (ID, path or name)")
@click.option("--payee", help="Pre-select a payee (ID or name)")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    description: str | None,
    category: str | None,
    payee: str | None,
):
    """Add an imported bank transaction manually.

    Examples:
        switchbooks add --account Checking --date 2024-01-15 --amount -50.00 --description "Office Depot"
        switchbooks add --account 3 --date today --amount 1200 --category Sales
    """
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    transaction_service = TransactionService(db)
    category_service = CategoryService(db)

    account_id = resolve_category_id(ctx, category_service, company_id, account)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    category_id = (
        resolve_category_id(ctx, category_service, company_id, category) if category else None
    )
    payee_id = resolve_payee_id(ctx, PayeeService(db), company_id, payee) if payee else None

    try:
        transaction_id = transaction_service.add_transaction(
            company_id=company_id,
            bank_account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            description=description,
        )
        if category_id is not None or payee_id is not None:
            transaction_service.set_selection(transaction_id, category_id, payee_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added transaction {transaction_id}: {txn_date} {txn_amount:,.2f}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
