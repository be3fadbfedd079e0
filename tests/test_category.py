"""Tests for the chart of accounts."""

import pytest
from datetime import date
from decimal import Decimal

from switchbooks.cli.main import cli
from switchbooks.domain.entities import AccountType
from switchbooks.domain.errors import (
    CircularDependencyError,
    ConflictError,
    DependencyError,
    NotFoundError,
    TypeMismatchError,
    ValidationError,
)


class TestCategoryService:
    """Tests for CategoryService."""

    def test_create_root(self, category_service, company_id):
        category_id = category_service.create_category(company_id, " Rent ", "expense")

        category = category_service.get_category(category_id)
        assert category.name == "Rent"
        assert category.account_type is AccountType.EXPENSE
        assert category.parent_id is None

    def test_create_child_by_path(self, category_service, company_id, chart):
        category_id = category_service.create_category(
            company_id, "Printing", AccountType.EXPENSE, parent_path="Operating Expenses"
        )

        assert category_service.format_category_path(category_id) == "Operating Expenses > Printing"

    def test_create_invalid_type(self, category_service, company_id):
        with pytest.raises(ValidationError, match="Invalid account type"):
            category_service.create_category(company_id, "Rent", "Income")

    def test_create_blank_name(self, category_service, company_id):
        with pytest.raises(ValidationError):
            category_service.create_category(company_id, "   ", "Expense")

    def test_create_missing_parent(self, category_service, company_id):
        with pytest.raises(NotFoundError):
            category_service.create_category(
                company_id, "Printing", "Expense", parent_path="Nowhere"
            )

    def test_create_under_other_type(self, category_service, company_id, chart):
        with pytest.raises(TypeMismatchError):
            category_service.create_category(
                company_id, "Consulting", "Revenue", parent_id=chart["Operating Expenses"]
            )

    def test_duplicate_in_scope(self, category_service, company_id, chart):
        with pytest.raises(ConflictError):
            category_service.create_category(company_id, "MEALS", "Expense")

    def test_same_name_other_scope(self, category_service, company_id, chart):
        """Names only need to be unique per type and parent."""
        category_service.create_category(company_id, "Meals", "Revenue")
        category_service.create_category(
            company_id, "Meals", "Expense", parent_id=chart["Operating Expenses"]
        )

    def test_same_name_other_company(self, category_service, company_service, chart):
        other = company_service.create_company("Other Co")
        category_service.create_category(other, "Meals", "Expense")

    def test_find_category(self, category_service, company_id, chart):
        assert category_service.find_category(company_id, "Operating Expenses > Software").id == (
            chart["Software"]
        )
        assert category_service.find_category(company_id, "software").id == chart["Software"]
        assert category_service.find_category(company_id, "Hardware") is None

    def test_get_category_tree(self, category_service, company_id, chart):
        tree = category_service.get_category_tree(company_id)

        opex = next(node for node in tree if node["name"] == "Operating Expenses")
        assert sorted(child["name"] for child in opex["children"]) == ["Office Supplies", "Software"]

    def test_rename(self, category_service, chart):
        category_service.rename_category(chart["Meals"], "Meals & Entertainment")
        assert category_service.get_category(chart["Meals"]).name == "Meals & Entertainment"

    def test_rename_to_sibling_name(self, category_service, chart):
        with pytest.raises(ConflictError):
            category_service.rename_category(chart["Software"], "office supplies")

    def test_update_type_of_leaf_root(self, category_service, chart):
        category_service.update_category(chart["Meals"], account_type="COGS")
        assert category_service.get_category(chart["Meals"]).account_type is AccountType.COGS

    def test_update_type_of_child_rejected(self, category_service, chart):
        with pytest.raises(TypeMismatchError):
            category_service.update_category(chart["Software"], account_type="Asset")

    def test_move(self, category_service, chart):
        category_service.move_category(chart["Meals"], chart["Operating Expenses"])
        assert category_service.format_category_path(chart["Meals"]) == (
            "Operating Expenses > Meals"
        )

        category_service.move_category(chart["Meals"], None)
        assert category_service.get_category(chart["Meals"]).parent_id is None

    def test_move_under_descendant(self, category_service, company_id, chart):
        cloud = category_service.create_category(
            company_id, "Cloud", "Expense", parent_id=chart["Software"]
        )
        with pytest.raises(CircularDependencyError):
            category_service.move_category(chart["Operating Expenses"], cloud)
        with pytest.raises(CircularDependencyError):
            category_service.move_category(chart["Software"], chart["Software"])

    def test_move_across_types(self, category_service, chart):
        with pytest.raises(TypeMismatchError):
            category_service.move_category(chart["Meals"], chart["Sales"])

    def test_move_missing_parent(self, category_service, chart):
        with pytest.raises(NotFoundError):
            category_service.move_category(chart["Meals"], 9999)

    def test_is_descendant_or_self(self, category_service, company_id, chart):
        assert category_service.is_descendant_or_self(
            company_id, chart["Software"], chart["Operating Expenses"]
        )
        assert category_service.is_descendant_or_self(company_id, chart["Meals"], chart["Meals"])
        assert not category_service.is_descendant_or_self(
            company_id, chart["Operating Expenses"], chart["Software"]
        )

    def test_delete_leaf(self, category_service, chart):
        category_service.delete_category(chart["Equipment"])
        assert category_service.get_category(chart["Equipment"]) is None

    def test_delete_with_children(self, category_service, chart):
        with pytest.raises(DependencyError, match="2 child categories"):
            category_service.delete_category(chart["Operating Expenses"])

    def test_delete_bank_account_with_transactions(
        self, category_service, transaction_service, company_id, chart
    ):
        transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 1, 2), Decimal("-10.00"), "FEE"
        )
        with pytest.raises(DependencyError, match="1 bank transaction"):
            category_service.delete_category(chart["Checking"])

    def test_delete_clears_preselection(
        self, category_service, transaction_service, company_id, chart
    ):
        txn_id = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 1, 2), Decimal("-10.00"), "FEE"
        )
        transaction_service.set_selection(txn_id, chart["Equipment"], None)

        category_service.delete_category(chart["Equipment"])

        assert transaction_service.get_transaction(txn_id).category_id is None

    def test_delete_missing(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.delete_category(9999)


class TestCategoryCommands:
    """Tests for category CLI commands."""

    def test_init_categories(self, cli_runner, temp_db, company_id):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-categories"])

        assert result.exit_code == 0
        assert "Successfully created" in result.output

    def test_init_categories_with_payees(self, cli_runner, temp_db, company_id):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "init-categories", "--with-payees"]
        )

        assert result.exit_code == 0
        assert "payees" in result.output

    def test_init_categories_twice(self, cli_runner, temp_db, company_id):
        args = ["--db-path", temp_db.database_path, "init-categories"]
        assert cli_runner.invoke(cli, args).exit_code == 0

        result = cli_runner.invoke(cli, args)

        assert "already exist" in result.output.lower()

    def test_init_categories_without_company(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-categories"])

        assert result.exit_code == 1
        assert "No company found" in result.output

    def test_list(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])

        assert result.exit_code == 0
        assert "Operating Expenses [Expense]" in result.output
        assert "  Software [Expense]" in result.output

    def test_create_child(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path",
                temp_db.database_path,
                "category",
                "create",
                "Printing",
                "--type",
                "Expense",
                "--parent",
                "Operating Expenses",
            ],
        )

        assert result.exit_code == 0
        assert "Created category 'Printing' under 'Operating Expenses'" in result.output

    def test_create_invalid_parent(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path",
                temp_db.database_path,
                "category",
                "create",
                "Printing",
                "--type",
                "Expense",
                "--parent",
                "Nowhere",
            ],
        )

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_move_circular(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path",
                temp_db.database_path,
                "category",
                "move",
                "Operating Expenses",
                "--parent",
                "Operating Expenses > Software",
            ],
        )

        assert result.exit_code == 1
        assert "descendants" in result.output

    def test_delete(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "category", "delete", "Equipment"]
        )

        assert result.exit_code == 0
        assert f"Deleted category {chart['Equipment']}" in result.output
