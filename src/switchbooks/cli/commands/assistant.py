"""Commands that apply structured operations proposed by the assistant."""

import json

import click

from switchbooks.cli.error_handling import resolve_company_id
from switchbooks.operations.executor import OperationExecutor
from switchbooks.operations.types import is_batch_payload


def load_payload(ctx, payload_file) -> object:
    """Read a JSON payload, or exit with a CLI error."""
    try:
        return json.load(payload_file)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON payload: {e}", err=True)
        ctx.exit(1)


@click.group()
def assistant_group():
    """Validate and execute assistant operations (JSON payloads)."""
    pass


@assistant_group.command("execute")
@click.argument("payload_file", type=click.File("r"), default="-")
@click.pass_context
def execute_payload(ctx, payload_file):
    """Execute an operation or batch read from PAYLOAD_FILE (default: stdin).

    Prints the JSON result and exits with status 1 when it did not succeed.

    Example:
        echo '{"action": "create_payee", "params": {"name": "Acme"}}' | switchbooks assistant execute
    """
    payload = load_payload(ctx, payload_file)
    executor = OperationExecutor(ctx.obj["db"], resolve_company_id(ctx))

    if is_batch_payload(payload):
        result = executor.execute_batch(payload)
    else:
        result = executor.execute(payload)

    click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        ctx.exit(1)


@assistant_group.command("validate")
@click.argument("payload_file", type=click.File("r"), default="-")
@click.pass_context
def validate_payload(ctx, payload_file):
    """Validate an operation or batch from PAYLOAD_FILE without applying it."""
    payload = load_payload(ctx, payload_file)
    executor = OperationExecutor(ctx.obj["db"], resolve_company_id(ctx))

    if is_batch_payload(payload):
        result = executor.validate_batch(payload)
    else:
        result = executor.validate(payload)

    click.echo(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        ctx.exit(1)


def register_commands(cli):
    """Register assistant commands with main CLI."""
    cli.add_command(assistant_group, name="assistant")
