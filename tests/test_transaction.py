"""Tests for transactions and the posting commands."""

import pytest
from datetime import date
from decimal import Decimal

from switchbooks.cli.main import cli
from switchbooks.domain.entities import TransactionStatus
from switchbooks.domain.errors import NotFoundError, ValidationError


class TestTransactionService:
    """Tests for TransactionService."""

    def test_add_transaction(self, transaction_service, company_id, chart):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 1, 15), Decimal("-50.00"), "OFFICE DEPOT"
        )

        txn = transaction_service.get_transaction(txn_id)
        assert txn.amount == Decimal("-50.00")
        assert txn.status is TransactionStatus.IMPORTED
        assert txn.category_id is None
        assert not txn.is_posted

    def test_zero_amount_rejected(self, transaction_service, company_id, chart):
        with pytest.raises(ValidationError):
            transaction_service.add_transaction(
                company_id, chart["Checking"], date(2024, 1, 15), Decimal("0"), "NOTHING"
            )

    def test_non_bank_account_rejected(self, transaction_service, company_id, chart):
        with pytest.raises(ValidationError, match="Bank Account"):
            transaction_service.add_transaction(
                company_id, chart["Meals"], date(2024, 1, 15), Decimal("-5.00"), "COFFEE"
            )

    def test_asset_account_allowed(self, transaction_service, company_id, chart):
        assert transaction_service.add_transaction(
            company_id, chart["Equipment"], date(2024, 1, 15), Decimal("-5.00"), "PETTY CASH"
        )

    def test_missing_account(self, transaction_service, company_id):
        with pytest.raises(NotFoundError):
            transaction_service.add_transaction(
                company_id, 9999, date(2024, 1, 15), Decimal("-5.00"), "COFFEE"
            )

    def test_list_filters(self, transaction_service, ledger_service, company_id, chart):
        first = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 1, 10), Decimal("-5.00"), "A"
        )
        second = transaction_service.add_transaction(
            company_id, chart["Visa"], date(2024, 2, 10), Decimal("-6.00"), "B"
        )
        third = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 10), Decimal("7.00"), "C"
        )
        ledger_service.post_transaction(third, chart["Sales"])

        def ids(**filters):
            return [t.id for t in transaction_service.list_transactions(company_id, **filters)]

        assert ids() == [first, second, third]
        assert ids(bank_account_id=chart["Checking"]) == [first, third]
        assert ids(status=TransactionStatus.POSTED) == [third]
        assert ids(status=TransactionStatus.IMPORTED) == [first, second]
        assert ids(start_date=date(2024, 2, 1), end_date=date(2024, 2, 29)) == [second]

    def test_set_selection_on_posted_rejected(
        self, transaction_service, ledger_service, company_id, chart
    ):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 1, 10), Decimal("-5.00"), "A"
        )
        ledger_service.post_transaction(txn_id, chart["Meals"])

        with pytest.raises(ValidationError, match="already posted"):
            transaction_service.set_selection(txn_id, chart["Software"], None)

    def test_set_selection_missing_category(self, transaction_service, company_id, chart):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 1, 10), Decimal("-5.00"), "A"
        )
        with pytest.raises(NotFoundError):
            transaction_service.set_selection(txn_id, 9999, None)


class TestTransactionCommands:
    """Tests for add, view, post, undo and journal."""

    def invoke(self, cli_runner, temp_db, *args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    def test_add_and_view(self, cli_runner, temp_db, chart):
        result = self.invoke(
            cli_runner,
            temp_db,
            "add",
            "--account",
            "Checking",
            "--date",
            "2024-01-15",
            "--amount",
            "(1,234.50)",
            "--description",
            "EQUIPMENT PURCHASE",
            "--category",
            "Equipment",
        )
        assert result.exit_code == 0, result.output
        assert "Added transaction" in result.output
        assert "-1,234.50" in result.output

        result = self.invoke(cli_runner, temp_db, "view", "--status", "imported")
        assert result.exit_code == 0
        assert "Found 1 transaction(s)" in result.output
        assert "EQUIPMENT PURCHASE" in result.output
        assert "Equipment" in result.output

    def test_add_invalid_amount(self, cli_runner, temp_db, chart):
        result = self.invoke(
            cli_runner,
            temp_db,
            "add",
            "--account",
            "Checking",
            "--date",
            "2024-01-15",
            "--amount",
            "lots",
        )
        assert result.exit_code == 1
        assert "Invalid amount format" in result.output

    def test_add_to_unknown_account(self, cli_runner, temp_db, chart):
        result = self.invoke(
            cli_runner,
            temp_db,
            "add",
            "--account",
            "Savings",
            "--date",
            "2024-01-15",
            "--amount",
            "-5",
        )
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_view_empty(self, cli_runner, temp_db, chart):
        result = self.invoke(cli_runner, temp_db, "view")
        assert result.exit_code == 0
        assert "No transactions found." in result.output

    def test_view_period_and_dates_conflict(self, cli_runner, temp_db, chart):
        result = self.invoke(
            cli_runner, temp_db, "view", "--period", "this-month", "--start-date", "2024-01-01"
        )
        assert result.exit_code == 1

    def test_post_undo_journal(self, cli_runner, temp_db, transaction_service, company_id, chart):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 5), Decimal("-5.75"), "STARBUCKS #4521"
        )

        result = self.invoke(cli_runner, temp_db, "post", str(txn_id), "--category", "Meals")
        assert result.exit_code == 0, result.output
        assert f"Posted transaction {txn_id} (2 journal lines)" in result.output

        result = self.invoke(cli_runner, temp_db, "journal", "--transaction", str(txn_id))
        assert result.exit_code == 0
        assert "Meals" in result.output
        assert "Checking" in result.output
        assert result.output.count("5.75") == 2

        result = self.invoke(cli_runner, temp_db, "journal", "--balances")
        assert result.exit_code == 0
        assert "Meals" in result.output

        result = self.invoke(cli_runner, temp_db, "post", str(txn_id), "--category", "Meals")
        assert result.exit_code == 1
        assert "already posted" in result.output

        result = self.invoke(cli_runner, temp_db, "undo", str(txn_id))
        assert result.exit_code == 0
        assert "2 journal lines removed" in result.output

        result = self.invoke(cli_runner, temp_db, "journal")
        assert "No journal lines found." in result.output

        # The category chosen before is kept, so a bare post works
        result = self.invoke(cli_runner, temp_db, "post", str(txn_id))
        assert result.exit_code == 0, result.output

    def test_post_split(self, cli_runner, temp_db, transaction_service, company_id, chart):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 9), Decimal("-50.00"), "OFFICE DEPOT"
        )

        result = self.invoke(
            cli_runner,
            temp_db,
            "post",
            str(txn_id),
            "--split",
            "Software=30",
            "--split",
            "Operating Expenses > Office Supplies=20",
        )

        assert result.exit_code == 0, result.output
        assert "(3 journal lines)" in result.output

    def test_post_without_category(self, cli_runner, temp_db, transaction_service, company_id, chart):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 9), Decimal("-50.00"), "OFFICE DEPOT"
        )

        result = self.invoke(cli_runner, temp_db, "post", str(txn_id))

        assert result.exit_code == 1
        assert "has no category" in result.output

    def test_undo_imported(self, cli_runner, temp_db, transaction_service, company_id, chart):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 9), Decimal("-50.00"), "OFFICE DEPOT"
        )

        result = self.invoke(cli_runner, temp_db, "undo", str(txn_id))

        assert result.exit_code == 1
        assert "not posted" in result.output

    def test_other_company_transaction_is_not_found(
        self, cli_runner, temp_db, company_service, category_service, transaction_service,
        ledger_service, chart,
    ):
        other = company_service.create_company("Other Co")
        bank = category_service.create_category(other, "Other Checking", "Bank Account")
        rent = category_service.create_category(other, "Rent", "Expense")
        txn_id = transaction_service.add_transaction(
            other, bank, date(2024, 3, 9), Decimal("-900.00"), "LANDLORD"
        )
        ledger_service.post_transaction(txn_id, rent)

        result = self.invoke(
            cli_runner, temp_db, "--company", "Acme Coffee Roasters", "undo", str(txn_id)
        )
        assert result.exit_code == 1
        assert f"Transaction {txn_id} not found" in result.output

        result = self.invoke(
            cli_runner, temp_db, "--company", "Acme Coffee Roasters", "post", str(txn_id),
            "--category", "Meals",
        )
        assert result.exit_code == 1
        assert f"Transaction {txn_id} not found" in result.output

        assert len(ledger_service.get_journal_lines(txn_id)) == 2

    def test_manual_journal_entry(self, cli_runner, temp_db, chart, payees):
        result = self.invoke(
            cli_runner,
            temp_db,
            "journal",
            "add",
            "--date",
            "2024-12-31",
            "--debit",
            "Operating Expenses=250",
            "--credit",
            "Equipment=250",
            "--reference",
            "DEP-2024",
            "--payee",
            "Office Depot",
        )
        assert result.exit_code == 0, result.output
        assert "Recorded manual journal entry DEP-2024 (2 lines)" in result.output

        result = self.invoke(cli_runner, temp_db, "journal", "entries")
        assert result.exit_code == 0
        assert "DEP-2024" in result.output
        assert result.output.count("250.00") == 2

        result = self.invoke(cli_runner, temp_db, "journal", "--balances")
        assert "Equipment" in result.output

        result = self.invoke(
            cli_runner,
            temp_db,
            "journal",
            "add",
            "--date",
            "2024-12-31",
            "--debit",
            "Operating Expenses=250",
            "--credit",
            "Equipment=200",
        )
        assert result.exit_code == 1
        assert "do not equal" in result.output

        result = self.invoke(cli_runner, temp_db, "journal", "delete", "DEP-2024")
        assert result.exit_code == 0
        assert "2 lines removed" in result.output

        result = self.invoke(cli_runner, temp_db, "journal", "entries")
        assert "No manual journal entries found." in result.output
