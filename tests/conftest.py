"""Shared pytest fixtures for switchbooks tests."""

import tempfile
import os
import pytest

from switchbooks.config.logging import configure_logging
from switchbooks.database.factories import create_sqlite_database
from switchbooks.domain.automation import AutomationService
from switchbooks.domain.category import CategoryService
from switchbooks.domain.company import CompanyService
from switchbooks.domain.entities import AccountType
from switchbooks.domain.ledger import LedgerService
from switchbooks.domain.payee import PayeeService
from switchbooks.domain.transaction import TransactionService


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep structured logs at WARNING on stderr during tests."""
    configure_logging(level="WARNING", format="console")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that drive the CLI
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def company_service(temp_db):
    """Create a CompanyService with a temporary database."""
    return CompanyService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def payee_service(temp_db):
    """Create a PayeeService with a temporary database."""
    return PayeeService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def automation_service(temp_db):
    """Create an AutomationService with a temporary database."""
    return AutomationService(temp_db)


@pytest.fixture
def company_id(company_service):
    """Create the company most tests work in."""
    return company_service.create_company("Acme Coffee Roasters")


@pytest.fixture
def chart(category_service, company_id):
    """Create a small chart of accounts and return category IDs by name."""
    ids = {}
    ids["Checking"] = category_service.create_category(
        company_id, "Checking", AccountType.BANK_ACCOUNT
    )
    ids["Visa"] = category_service.create_category(company_id, "Visa", AccountType.CREDIT_CARD)
    ids["Sales"] = category_service.create_category(company_id, "Sales", AccountType.REVENUE)
    ids["Owner's Equity"] = category_service.create_category(
        company_id, "Owner's Equity", AccountType.EQUITY
    )
    ids["Merchandise"] = category_service.create_category(
        company_id, "Merchandise", AccountType.COGS
    )
    ids["Operating Expenses"] = category_service.create_category(
        company_id, "Operating Expenses", AccountType.EXPENSE
    )
    ids["Office Supplies"] = category_service.create_category(
        company_id, "Office Supplies", AccountType.EXPENSE, parent_id=ids["Operating Expenses"]
    )
    ids["Software"] = category_service.create_category(
        company_id, "Software", AccountType.EXPENSE, parent_id=ids["Operating Expenses"]
    )
    ids["Meals"] = category_service.create_category(company_id, "Meals", AccountType.EXPENSE)
    ids["Equipment"] = category_service.create_category(
        company_id, "Equipment", AccountType.ASSET
    )
    return ids


@pytest.fixture
def payees(payee_service, company_id):
    """Create a few payees and return their IDs by name."""
    return {
        name: payee_service.create_payee(company_id, name)
        for name in ("Starbucks", "Office Depot", "Stripe")
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
