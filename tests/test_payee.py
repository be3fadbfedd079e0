"""Tests for payees."""

import pytest
from datetime import date
from decimal import Decimal

from switchbooks.cli.main import cli
from switchbooks.domain.errors import ConflictError, NotFoundError, ValidationError


def test_create_payee(payee_service, company_id):
    payee_id = payee_service.create_payee(company_id, "  Adobe ")
    assert payee_service.get_payee(payee_id).name == "Adobe"


def test_create_duplicate_ignores_case(payee_service, company_id, payees):
    with pytest.raises(ConflictError):
        payee_service.create_payee(company_id, "starbucks")


def test_create_blank(payee_service, company_id):
    with pytest.raises(ValidationError):
        payee_service.create_payee(company_id, " ")


def test_create_too_long(payee_service, company_id):
    with pytest.raises(ValidationError):
        payee_service.create_payee(company_id, "x" * 256)


def test_same_name_in_other_company(payee_service, company_service, payees):
    other = company_service.create_company("Other Co")
    assert payee_service.create_payee(other, "Starbucks")


def test_list_payees_sorted(payee_service, company_id, payees):
    assert [p.name for p in payee_service.list_payees(company_id)] == [
        "Office Depot",
        "Starbucks",
        "Stripe",
    ]


def test_rename(payee_service, payees):
    payee_service.rename_payee(payees["Stripe"], "Stripe Inc")
    assert payee_service.get_payee(payees["Stripe"]).name == "Stripe Inc"


def test_rename_keeps_own_name_with_new_case(payee_service, payees):
    payee_service.rename_payee(payees["Stripe"], "STRIPE")
    assert payee_service.get_payee(payees["Stripe"]).name == "STRIPE"


def test_rename_to_existing(payee_service, payees):
    with pytest.raises(ConflictError):
        payee_service.rename_payee(payees["Stripe"], "Starbucks")


def test_rename_missing(payee_service):
    with pytest.raises(NotFoundError):
        payee_service.rename_payee(9999, "Anything")


def test_delete_clears_transaction_payee(
    payee_service, transaction_service, company_id, chart, payees
):
    txn_id = transaction_service.add_transaction(
        company_id, chart["Checking"], date(2024, 2, 1), Decimal("-5.00"), "STARBUCKS"
    )
    transaction_service.set_selection(txn_id, None, payees["Starbucks"])

    payee_service.delete_payee(payees["Starbucks"])

    assert payee_service.get_payee(payees["Starbucks"]) is None
    txn = transaction_service.get_transaction(txn_id)
    assert txn.payee_id is None
    assert txn.amount == Decimal("-5.00")


def test_cli_payee_lifecycle(cli_runner, temp_db, company_id):
    base = ["--db-path", temp_db.database_path, "payee"]

    result = cli_runner.invoke(cli, base + ["create", "Adobe"])
    assert result.exit_code == 0
    assert "Created payee 'Adobe'" in result.output

    result = cli_runner.invoke(cli, base + ["rename", "adobe", "Adobe Inc"])
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, base + ["list"])
    assert "Adobe Inc" in result.output

    result = cli_runner.invoke(cli, base + ["delete", "Adobe Inc"])
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, base + ["list"])
    assert "No payees found." in result.output


def test_cli_payee_duplicate(cli_runner, temp_db, payees):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "payee", "create", "Stripe"]
    )

    assert result.exit_code == 1
    assert "already exists" in result.output
