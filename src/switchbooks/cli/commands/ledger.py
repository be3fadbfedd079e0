"""Posting commands: post, undo, journal and manual journal entries."""

import click

from switchbooks.cli.commands.category import resolve_category_id
from switchbooks.cli.commands.payee import resolve_payee_id
from switchbooks.cli.error_handling import handle_domain_error, require_company_id
from switchbooks.domain.category import CategoryService
from switchbooks.domain.entities import EntrySide, JournalLineDraft, Transaction
from switchbooks.domain.errors import DomainError, NotFoundError, transaction_not_found
from switchbooks.domain.ledger import LedgerService, Split
from switchbooks.domain.payee import PayeeService
from switchbooks.domain.transaction import TransactionService
from switchbooks.utils.amount_parser import parse_amount
from switchbooks.utils.date_parser import parse_date


def parse_split(ctx, service: CategoryService, company_id: int, value: str) -> Split:
    """Parse a 'CATEGORY=AMOUNT' split option."""
    category, sep, amount = value.rpartition("=")
    if not sep or not category.strip():
        click.echo(f"Error: Invalid split '{value}'. Use CATEGORY=AMOUNT.", err=True)
        ctx.exit(1)
    try:
        split_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid split amount: {e}", err=True)
        ctx.exit(1)
    return Split(resolve_category_id(ctx, service, company_id, category.strip()), split_amount)


def require_company_transaction(ctx, db, company_id: int, transaction_id: int) -> Transaction:
    """Load a transaction of the selected company, or exit with a CLI error."""
    try:
        txn = TransactionService(db).require_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if txn.company_id != company_id:
        handle_domain_error(ctx, NotFoundError(transaction_not_found(transaction_id)))
    return txn


@click.command("post")
@click.argument("transaction_id", type=int)
@click.option("--category", help="Category (ID, path or name); defaults to the pre-selection")
@click.option("--payee", help="Payee (ID or name); defaults to the pre-selection")
@click.option(
    "--split",
    "splits",
    multiple=True,
    help="Split share as CATEGORY=AMOUNT (repeat for each category)",
)
@click.pass_context
def post_transaction(ctx, transaction_id: int, category: str | None, payee: str | None, splits):
    """Post an imported transaction to the ledger.

    Examples:
        switchbooks post 12 --category "Operating Expenses > Supplies"
        switchbooks post 13 --split Software=30 --split Supplies=20
    """
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    category_service = CategoryService(db)
    ledger = LedgerService(db)
    txn = require_company_transaction(ctx, db, company_id, transaction_id)

    payee_id = (
        resolve_payee_id(ctx, PayeeService(db), company_id, payee) if payee else txn.payee_id
    )

    try:
        if splits:
            if category:
                click.echo("Error: --category cannot be combined with --split.", err=True)
                ctx.exit(1)
            split_list = [parse_split(ctx, category_service, company_id, s) for s in splits]
            line_ids = ledger.post_split_transaction(transaction_id, split_list, payee_id)
        else:
            if category:
                category_id = resolve_category_id(ctx, category_service, company_id, category)
            elif txn.category_id is not None:
                category_id = txn.category_id
            else:
                click.echo(
                    f"Error: Transaction {transaction_id} has no category; use --category.",
                    err=True,
                )
                ctx.exit(1)
            line_ids = ledger.post_transaction(transaction_id, category_id, payee_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Posted transaction {transaction_id} ({len(line_ids)} journal lines)")


@click.command("undo")
@click.argument("transaction_id", type=int)
@click.pass_context
def undo_transaction(ctx, transaction_id: int):
    """Return a posted transaction to imported, removing its journal lines."""
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    require_company_transaction(ctx, db, company_id, transaction_id)
    try:
        removed = LedgerService(db).undo_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Undid transaction {transaction_id} ({removed} journal lines removed)")


@click.group("journal", invoke_without_command=True)
@click.option("--transaction", "transaction_id", type=int, help="Only this transaction")
@click.option("--balances", is_flag=True, help="Show debit/credit totals per account instead")
@click.pass_context
def journal_group(ctx, transaction_id: int | None, balances: bool):
    """Show journal lines or per-account balances, or manage manual entries."""
    if ctx.invoked_subcommand is not None:
        return
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    ledger = LedgerService(db)
    category_service = CategoryService(db)

    if balances:
        totals = ledger.account_balances(company_id)
        if not totals:
            click.echo("No journal lines found.")
            return
        click.echo(f"\n{'Account':<40} {'Debits':>14} {'Credits':>14}")
        click.echo("-" * 70)
        for account_id, (debit, credit) in sorted(totals.items()):
            name = category_service.format_category_path(account_id)
            click.echo(f"{name[:40]:<40} {debit:>14,.2f} {credit:>14,.2f}")
        return

    try:
        if transaction_id is not None:
            lines = ledger.get_journal_lines(transaction_id)
        else:
            lines = ledger.list_journal_lines(company_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not lines:
        click.echo("No journal lines found.")
        return

    click.echo(f"\n{'Txn':<6} {'Date':<12} {'Account':<40} {'Debit':>12} {'Credit':>12}")
    click.echo("-" * 86)
    for line in lines:
        name = category_service.format_category_path(line.account_id)
        debit = f"{line.amount:,.2f}" if line.side is EntrySide.DEBIT else ""
        credit = f"{line.amount:,.2f}" if line.side is EntrySide.CREDIT else ""
        click.echo(
            f"{line.transaction_id:<6} {str(line.date):<12} {name[:40]:<40} {debit:>12} {credit:>12}"
        )


@journal_group.command("add")
@click.option(
    "--date", required=True, help="Entry date (YYYY-MM-DD or relative like 'today')"
)
@click.option("--debit", "debits", multiple=True, help="Debit line as CATEGORY=AMOUNT (repeatable)")
@click.option(
    "--credit", "credits", multiple=True, help="Credit line as CATEGORY=AMOUNT (repeatable)"
)
@click.option("--reference", help="Entry reference; generated as MJE-<n> when omitted")
@click.option("--description", help="Memo stored on every line")
@click.option("--payee", help="Payee (ID or name)")
@click.pass_context
def add_manual_entry(
    ctx,
    date: str,
    debits,
    credits,
    reference: str | None,
    description: str | None,
    payee: str | None,
):
    """Record a manual journal entry; debits must equal credits.

    Examples:
        switchbooks journal add --date 2024-12-31 --debit Depreciation=250 --credit Equipment=250
        switchbooks journal add --date today --debit Checking=5000 --credit "Owner's Equity"=5000
    """
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    category_service = CategoryService(db)

    try:
        entry_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    lines = [
        JournalLineDraft(split.category_id, side, split.amount)
        for side, values in ((EntrySide.DEBIT, debits), (EntrySide.CREDIT, credits))
        for split in (parse_split(ctx, category_service, company_id, v) for v in values)
    ]
    payee_id = resolve_payee_id(ctx, PayeeService(db), company_id, payee) if payee else None

    try:
        entry_reference = LedgerService(db).create_manual_entry(
            company_id,
            entry_date,
            lines,
            reference=reference,
            description=description,
            payee_id=payee_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded manual journal entry {entry_reference} ({len(lines)} lines)")


@journal_group.command("entries")
@click.pass_context
def list_manual_entries(ctx):
    """List manual journal entries, newest first."""
    db = ctx.obj["db"]
    company_id = require_company_id(ctx)
    entries = LedgerService(db).list_manual_entries(company_id)
    if not entries:
        click.echo("No manual journal entries found.")
        return

    category_service = CategoryService(db)
    click.echo(f"\n{'Reference':<14} {'Date':<12} {'Account':<40} {'Debit':>12} {'Credit':>12}")
    click.echo("-" * 94)
    for entry in entries:
        for line in entry.lines:
            name = category_service.format_category_path(line.account_id)
            debit = f"{line.amount:,.2f}" if line.side is EntrySide.DEBIT else ""
            credit = f"{line.amount:,.2f}" if line.side is EntrySide.CREDIT else ""
            click.echo(
                f"{entry.reference[:14]:<14} {str(entry.date):<12} {name[:40]:<40} "
                f"{debit:>12} {credit:>12}"
            )


@journal_group.command("delete")
@click.argument("reference")
@click.pass_context
def delete_manual_entry(ctx, reference: str):
    """Delete a manual journal entry by reference."""
    company_id = require_company_id(ctx)
    try:
        removed = LedgerService(ctx.obj["db"]).delete_manual_entry(company_id, reference)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted manual journal entry {reference} ({removed} lines removed)")


def register_commands(cli):
    """Register posting commands with main CLI."""
    cli.add_command(post_transaction)
    cli.add_command(undo_transaction)
    cli.add_command(journal_group)
