"""Automation rule commands."""

import click

from switchbooks.cli.error_handling import handle_domain_error, require_company_id
from switchbooks.domain.automation import AutomationService
from switchbooks.domain.entities import AutomationType, ConditionType
from switchbooks.domain.errors import DomainError, NotFoundError


@click.group()
def automation_group():
    """Manage automation rules that pre-fill imported transactions."""
    pass


@automation_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "automation_type",
    type=click.Choice([t.value for t in AutomationType]),
    required=True,
    help="What the rule assigns",
)
@click.option(
    "--condition",
    "condition_type",
    type=click.Choice([c.value for c in ConditionType]),
    default=ConditionType.CONTAINS.value,
    show_default=True,
    help="How the description is matched (case-insensitive)",
)
@click.option("--match", "condition_value", required=True, help="Text to look for")
@click.option(
    "--assign", "action_value", required=True, help="Category path/name or payee name to assign"
)
@click.option(
    "--auto-add", is_flag=True, help="Post matching transactions automatically (category rules only)"
)
@click.option("--disabled", is_flag=True, help="Create the rule disabled")
@click.pass_context
def create_rule(
    ctx,
    name: str,
    automation_type: str,
    condition_type: str,
    condition_value: str,
    action_value: str,
    auto_add: bool,
    disabled: bool,
):
    """Create an automation rule.

    Example:
        switchbooks automation create Coffee --type category --match STARBUCKS --assign Meals --auto-add
    """
    company_id = require_company_id(ctx)
    service = AutomationService(ctx.obj["db"])
    try:
        rule_id = service.create_rule(
            company_id,
            name,
            automation_type,
            condition_type,
            condition_value,
            action_value,
            auto_add=auto_add,
            enabled=not disabled,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created automation rule '{name.strip()}' (ID: {rule_id})")


@automation_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List automation rules in evaluation order."""
    company_id = require_company_id(ctx)
    rules = AutomationService(ctx.obj["db"]).list_rules(company_id)
    if not rules:
        click.echo("No automation rules found.")
        return

    click.echo(f"\n{'ID':<5} {'Name':<20} {'Type':<9} {'Condition':<30} {'Assign':<25} {'Flags':<12}")
    click.echo("-" * 104)
    for rule in rules:
        condition = f"{rule.condition_type.value} '{rule.condition_value}'"
        flags = []
        if rule.auto_add:
            flags.append("auto-add")
        if not rule.enabled:
            flags.append("disabled")
        click.echo(
            f"{rule.id:<5} {rule.name[:20]:<20} {rule.automation_type.value:<9} "
            f"{condition[:30]:<30} {rule.action_value[:25]:<25} {','.join(flags):<12}"
        )


def _require_rule(ctx, service: AutomationService, company_id: int, rule_id: int) -> None:
    rule = service.get_rule(rule_id)
    if rule is None or rule.company_id != company_id:
        handle_domain_error(ctx, NotFoundError(f"Automation rule {rule_id} not found"))


@automation_group.command("enable")
@click.argument("rule_id", type=int)
@click.pass_context
def enable_rule(ctx, rule_id: int):
    """Enable an automation rule."""
    company_id = require_company_id(ctx)
    service = AutomationService(ctx.obj["db"])
    _require_rule(ctx, service, company_id, rule_id)
    service.set_enabled(rule_id, True)
    click.echo(f"Enabled automation rule {rule_id}")


@automation_group.command("disable")
@click.argument("rule_id", type=int)
@click.pass_context
def disable_rule(ctx, rule_id: int):
    """Disable an automation rule."""
    company_id = require_company_id(ctx)
    service = AutomationService(ctx.obj["db"])
    _require_rule(ctx, service, company_id, rule_id)
    service.set_enabled(rule_id, False)
    click.echo(f"Disabled automation rule {rule_id}")


@automation_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete an automation rule."""
    company_id = require_company_id(ctx)
    service = AutomationService(ctx.obj["db"])
    _require_rule(ctx, service, company_id, rule_id)
    service.delete_rule(rule_id)
    click.echo(f"Deleted automation rule {rule_id}")


@automation_group.command("run")
@click.option("--account", type=int, help="Only transactions of this bank account ID")
@click.pass_context
def run_rules(ctx, account: int | None):
    """Apply automation rules to imported transactions."""
    company_id = require_company_id(ctx)
    result = AutomationService(ctx.obj["db"]).apply(company_id, bank_account_id=account)

    click.echo(
        f"Scanned {result.scanned} transaction(s): {len(result.prefilled)} pre-filled, "
        f"{len(result.posted)} posted."
    )
    for transaction_id, message in result.failures:
        click.echo(f"Warning: Transaction {transaction_id}: {message}", err=True)


def register_commands(cli):
    """Register automation commands with main CLI."""
    cli.add_command(automation_group, name="automation")
