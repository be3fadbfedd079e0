"""Chart of accounts commands."""

import click

from switchbooks.cli.error_handling import handle_domain_error, require_company_id
from switchbooks.domain.category import CategoryService
from switchbooks.domain.entities import AccountType
from switchbooks.domain.errors import DomainError, NotFoundError, category_path_not_found


def print_category_tree(categories: list[dict], indent: int = 0) -> None:
    """Recursively print category tree."""
    for cat in categories:
        prefix = "  " * indent
        click.echo(f"{prefix}{cat['name']} [{cat['account_type'].value}] (ID: {cat['id']})")
        if cat.get("children"):
            print_category_tree(cat["children"], indent + 1)


def resolve_category_id(ctx, service: CategoryService, company_id: int, reference: str) -> int:
    """Resolve a category ID, path or name, or exit with a CLI error."""
    if reference.strip().isdigit():
        category = service.get_category(int(reference))
        if category is not None and category.company_id == company_id:
            return category.id
    category = service.find_category(company_id, reference)
    if category is None:
        handle_domain_error(ctx, NotFoundError(category_path_not_found(reference)))
    return category.id


@click.group()
def category_group():
    """Manage the chart of accounts."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories in tree format."""
    company_id = require_company_id(ctx)
    service = CategoryService(ctx.obj["db"])

    tree = service.get_category_tree(company_id)
    if not tree:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo("\nChart of accounts:")
    print_category_tree(tree)


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(AccountType.values(), case_sensitive=False),
    required=True,
    help="Account type",
)
@click.option("--parent", help="Parent category path (e.g., 'Operating Expenses')")
@click.pass_context
def create_category(ctx, name: str, account_type: str, parent: str | None):
    """Create a new category."""
    company_id = require_company_id(ctx)
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(
            company_id, name, account_type, parent_path=parent
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{name.strip()}'{parent_str} (ID: {category_id})")


@category_group.command("rename")
@click.argument("category")
@click.argument("new_name")
@click.pass_context
def rename_category(ctx, category: str, new_name: str):
    """Rename a category (ID, path or name)."""
    company_id = require_company_id(ctx)
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_id(ctx, service, company_id, category)
    try:
        service.rename_category(category_id, new_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed category {category_id} to '{new_name.strip()}'")


@category_group.command("move")
@click.argument("category")
@click.option("--parent", help="New parent category (omit to move to the top level)")
@click.pass_context
def move_category(ctx, category: str, parent: str | None):
    """Move a category under a new parent."""
    company_id = require_company_id(ctx)
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_id(ctx, service, company_id, category)
    parent_id = resolve_category_id(ctx, service, company_id, parent) if parent else None
    try:
        service.move_category(category_id, parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Moved category to '{service.format_category_path(category_id)}'")


@category_group.command("delete")
@click.argument("category")
@click.pass_context
def delete_category(ctx, category: str):
    """Delete a category with no children, journal lines or bank transactions."""
    company_id = require_company_id(ctx)
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_id(ctx, service, company_id, category)
    try:
        service.delete_category(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category {category_id}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
