"""Company management commands."""

import click

from switchbooks.cli.error_handling import handle_domain_error
from switchbooks.domain.company import CompanyService
from switchbooks.domain.errors import DomainError


@click.group()
def company_group():
    """Manage companies."""
    pass


@company_group.command("create")
@click.argument("name")
@click.pass_context
def create_company(ctx, name: str):
    """Create a new company."""
    service = CompanyService(ctx.obj["db"])
    try:
        company_id = service.create_company(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created company '{name.strip()}' (ID: {company_id})")


@company_group.command("list")
@click.pass_context
def list_companies(ctx):
    """List all companies."""
    service = CompanyService(ctx.obj["db"])
    companies = service.list_companies()
    if not companies:
        click.echo("No companies found. Run 'company create NAME' to add one.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<40}")
    click.echo("-" * 46)
    for company in companies:
        click.echo(f"{company.id:<6} {company.name:<40}")


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
