"""Integration tests for end-to-end workflows."""

import json

from switchbooks.cli.main import cli


def test_full_workflow(cli_runner, temp_db):
    """Test complete workflow: company → chart → add → automation → post → journal → undo."""
    base = ["--db-path", temp_db.database_path]

    # Step 1: Create the company
    result = cli_runner.invoke(cli, base + ["company", "create", "Acme Coffee Roasters"])
    assert result.exit_code == 0
    assert "Created company 'Acme Coffee Roasters'" in result.output

    # Step 2: Default chart of accounts plus a bank account
    result = cli_runner.invoke(cli, base + ["init-categories", "--with-payees"])
    assert result.exit_code == 0
    assert "Successfully created" in result.output

    result = cli_runner.invoke(
        cli, base + ["category", "create", "Checking", "--type", "Bank Account"]
    )
    assert result.exit_code == 0, result.output

    # Step 3: Add transactions
    result = cli_runner.invoke(
        cli,
        base
        + ["add", "--account", "Checking", "--date", "2024-03-05", "--amount", "-5.75"]
        + ["--description", "STARBUCKS #4521"],
    )
    assert result.exit_code == 0, result.output
    assert "Added transaction 1" in result.output

    result = cli_runner.invoke(
        cli,
        base
        + ["add", "--account", "Checking", "--date", "2024-03-06", "--amount", "1,200.00"]
        + ["--description", "STRIPE TRANSFER"],
    )
    assert result.exit_code == 0, result.output

    # Step 4: Automation pre-fills and posts the coffee purchase
    result = cli_runner.invoke(
        cli,
        base
        + ["automation", "create", "Coffee", "--type", "category", "--match", "starbucks"]
        + ["--assign", "Meals & Entertainment", "--auto-add"],
    )
    assert result.exit_code == 0, result.output

    result = cli_runner.invoke(cli, base + ["automation", "run"])
    assert result.exit_code == 0
    assert "1 posted" in result.output

    # Step 5: Post the deposit by hand
    result = cli_runner.invoke(
        cli, base + ["post", "2", "--category", "Sales", "--payee", "Stripe"]
    )
    assert result.exit_code == 0, result.output
    assert "Posted transaction 2 (2 journal lines)" in result.output

    # Step 6: Journal shows balanced lines
    result = cli_runner.invoke(cli, base + ["journal", "--balances"])
    assert result.exit_code == 0
    assert "Meals & Entertainment" in result.output
    assert "Sales" in result.output
    assert "1,200.00" in result.output

    # Step 7: Undo and confirm the transaction is back in the imported list
    result = cli_runner.invoke(cli, base + ["undo", "1"])
    assert result.exit_code == 0
    assert "2 journal lines removed" in result.output

    result = cli_runner.invoke(cli, base + ["view", "--status", "imported"])
    assert result.exit_code == 0
    assert "Found 1 transaction(s)" in result.output
    assert "STARBUCKS" in result.output


def test_assistant_workflow(cli_runner, temp_db):
    """Test reorganizing the chart through assistant payloads."""
    base = ["--db-path", temp_db.database_path]
    cli_runner.invoke(cli, base + ["company", "create", "Acme Coffee Roasters"])
    cli_runner.invoke(cli, base + ["init-categories"])

    payload = {
        "action": "batch_execute",
        "operations": [
            {
                "action": "create_category",
                "params": {"name": "Marketing", "type": "Expense"},
            },
            {
                "action": "create_category",
                "params": {"name": "Ads", "type": "Expense", "parent_name": "Marketing"},
            },
            {
                "action": "move_category",
                "params": {"categoryName": "Software", "newParentName": "Travel"},
            },
        ],
    }
    result = cli_runner.invoke(
        cli, base + ["assistant", "execute"], input=json.dumps(payload)
    )
    assert result.exit_code == 0, result.output
    body = json.loads(result.stdout)
    assert body["success"] is True
    assert body["completedOperations"] == 3

    result = cli_runner.invoke(cli, base + ["category", "list"])
    assert "Marketing [Expense]" in result.output
    assert "    Ads [Expense]" not in result.output
    assert "  Ads [Expense]" in result.output
    assert "  Software [Expense]" in result.output
