"""CLI error handling and company resolution helpers."""

from typing import Optional

import click

from switchbooks.domain.company import CompanyService
from switchbooks.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def resolve_company_id(ctx: click.Context) -> Optional[int]:
    """Resolve the company selected with --company.

    Without --company, a database holding exactly one company uses it.

    Returns:
        Company ID, or None when no company can be determined
    """
    service = CompanyService(ctx.obj["db"])
    identifier = ctx.obj.get("company")
    if identifier:
        try:
            return service.resolve_company(identifier).id
        except DomainError:
            return None
    companies = service.list_companies()
    if len(companies) == 1:
        return companies[0].id
    return None


def require_company_id(ctx: click.Context) -> int:
    """Resolve the selected company, or exit with a CLI error."""
    service = CompanyService(ctx.obj["db"])
    identifier = ctx.obj.get("company")
    if identifier:
        try:
            return service.resolve_company(identifier).id
        except DomainError as e:
            handle_domain_error(ctx, e)
    companies = service.list_companies()
    if len(companies) == 1:
        return companies[0].id
    if not companies:
        click.echo("Error: No company found. Run 'company create NAME' first.", err=True)
    else:
        click.echo(
            "Error: Several companies exist; select one with --company or SWITCHBOOKS_COMPANY.",
            err=True,
        )
    ctx.exit(1)
