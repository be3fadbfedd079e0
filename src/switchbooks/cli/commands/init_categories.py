"""Initialize a company's default chart of accounts."""

import click

from switchbooks.cli.error_handling import require_company_id
from switchbooks.domain.category import CategoryService
from switchbooks.domain.entities import AccountType
from switchbooks.domain.errors import DomainError
from switchbooks.domain.payee import PayeeService


# (name, account type, parent name); parents are listed before their children
INITIAL_CATEGORIES = [
    ("Sales", AccountType.REVENUE, None),
    ("Discounts", AccountType.REVENUE, "Sales"),
    ("Merchandise", AccountType.COGS, None),
    ("Travel", AccountType.EXPENSE, None),
    ("Operating Expenses", AccountType.EXPENSE, None),
    ("Payroll Expenses", AccountType.EXPENSE, None),
    ("Meals & Entertainment", AccountType.EXPENSE, None),
    ("Airfare", AccountType.EXPENSE, "Travel"),
    ("Lodging", AccountType.EXPENSE, "Travel"),
    ("Software", AccountType.EXPENSE, "Operating Expenses"),
    ("Supplies", AccountType.EXPENSE, "Operating Expenses"),
    ("Bank Charges", AccountType.EXPENSE, "Operating Expenses"),
    ("Payroll Wages", AccountType.EXPENSE, "Payroll Expenses"),
    ("Payroll Taxes", AccountType.EXPENSE, "Payroll Expenses"),
    ("Current Assets", AccountType.ASSET, None),
    ("Fixed Assets", AccountType.ASSET, None),
    ("Equipment", AccountType.ASSET, "Fixed Assets"),
    ("Current Liabilities", AccountType.LIABILITY, None),
    ("Owner's Equity", AccountType.EQUITY, None),
    ("Owner's Investment", AccountType.EQUITY, "Owner's Equity"),
    ("Owner's Distribution", AccountType.EQUITY, "Owner's Equity"),
]

INITIAL_PAYEES = [
    "Amazon",
    "Costco",
    "Home Depot",
    "Apple",
    "Microsoft",
    "Adobe",
    "Stripe",
    "PayPal",
    "Gusto",
    "Uber",
    "Delta Airlines",
    "Starbucks",
]


@click.command("init-categories")
@click.option("--with-payees", is_flag=True, help="Also create a starter list of payees")
@click.pass_context
def init_categories(ctx, with_payees: bool):
    """Create the default chart of accounts for the selected company."""
    company_id = require_company_id(ctx)
    db = ctx.obj["db"]
    service = CategoryService(db)

    if service.list_categories(company_id):
        click.echo("Categories already exist for this company.")
        return

    click.echo("Creating default chart of accounts...")

    created = 0
    errors = 0
    ids: dict[str, int] = {}
    for name, account_type, parent_name in INITIAL_CATEGORIES:
        try:
            ids[name] = service.create_category(
                company_id,
                name,
                account_type,
                parent_id=ids.get(parent_name) if parent_name else None,
            )
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create category '{name}': {e}", err=True)
            errors += 1

    if with_payees:
        payee_service = PayeeService(db)
        payees_created = 0
        for name in INITIAL_PAYEES:
            try:
                payee_service.create_payee(company_id, name)
                payees_created += 1
            except DomainError as e:
                click.echo(f"Warning: Could not create payee '{name}': {e}", err=True)
                errors += 1
        click.echo(f"Created {payees_created} payees.")

    if errors == 0:
        click.echo(f"Successfully created {created} categories.")
    else:
        click.echo(f"Created {created} categories with {errors} errors.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
