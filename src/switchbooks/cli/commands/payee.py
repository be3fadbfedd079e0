"""Payee management commands."""

import click

from switchbooks.cli.error_handling import handle_domain_error, require_company_id
from switchbooks.domain.errors import DomainError, NotFoundError
from switchbooks.domain.payee import PayeeService


def resolve_payee_id(ctx, service: PayeeService, company_id: int, reference: str) -> int:
    """Resolve a payee ID or name, or exit with a CLI error."""
    if reference.strip().isdigit():
        payee = service.get_payee(int(reference))
        if payee is not None and payee.company_id == company_id:
            return payee.id
    payee = service.find_payee(company_id, reference)
    if payee is None:
        handle_domain_error(ctx, NotFoundError(f"Payee '{reference}' not found"))
    return payee.id


@click.group()
def payee_group():
    """Manage payees."""
    pass


@payee_group.command("list")
@click.pass_context
def list_payees(ctx):
    """List all payees."""
    company_id = require_company_id(ctx)
    payees = PayeeService(ctx.obj["db"]).list_payees(company_id)
    if not payees:
        click.echo("No payees found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<40}")
    click.echo("-" * 46)
    for payee in payees:
        click.echo(f"{payee.id:<6} {payee.name:<40}")


@payee_group.command("create")
@click.argument("name")
@click.pass_context
def create_payee(ctx, name: str):
    """Create a new payee."""
    company_id = require_company_id(ctx)
    try:
        payee_id = PayeeService(ctx.obj["db"]).create_payee(company_id, name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created payee '{name.strip()}' (ID: {payee_id})")


@payee_group.command("rename")
@click.argument("payee")
@click.argument("new_name")
@click.pass_context
def rename_payee(ctx, payee: str, new_name: str):
    """Rename a payee (ID or name)."""
    company_id = require_company_id(ctx)
    service = PayeeService(ctx.obj["db"])
    payee_id = resolve_payee_id(ctx, service, company_id, payee)
    try:
        service.rename_payee(payee_id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed payee {payee_id} to '{new_name.strip()}'")


@payee_group.command("delete")
@click.argument("payee")
@click.pass_context
def delete_payee(ctx, payee: str):
    """Delete a payee. Transactions keep their amounts but lose the payee."""
    company_id = require_company_id(ctx)
    service = PayeeService(ctx.obj["db"])
    payee_id = resolve_payee_id(ctx, service, company_id, payee)
    service.delete_payee(payee_id)
    click.echo(f"Deleted payee {payee_id}")


def register_commands(cli):
    """Register payee commands with main CLI."""
    cli.add_command(payee_group, name="payee")
