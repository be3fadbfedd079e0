"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the string columns that
back the domain enums, so schema changes stay inside the database package.
"""

from decimal import Decimal

from switchbooks.domain import entities as domain
from switchbooks.database.models import (
    Company as ORMCompany,
    Category as ORMCategory,
    Payee as ORMPayee,
    Transaction as ORMTransaction,
    JournalLine as ORMJournalLine,
    ManualJournalLine as ORMManualJournalLine,
    AutomationRule as ORMAutomationRule,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        created_at=orm_company.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        company_id=orm_category.company_id,
        name=orm_category.name,
        account_type=domain.AccountType(orm_category.account_type),
        parent_id=orm_category.parent_id,
        created_at=orm_category.created_at,
    )


def payee_to_domain(orm_payee: ORMPayee) -> domain.Payee:
    """Convert SQLAlchemy Payee model to domain Payee entity."""
    return domain.Payee(
        id=orm_payee.id,
        company_id=orm_payee.company_id,
        name=orm_payee.name,
        created_at=orm_payee.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        bank_account_id=orm_transaction.bank_account_id,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        payee_id=orm_transaction.payee_id,
        status=domain.TransactionStatus(orm_transaction.status),
        imported_at=orm_transaction.imported_at,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        id=orm_line.id,
        company_id=orm_line.company_id,
        transaction_id=orm_line.transaction_id,
        account_id=orm_line.account_id,
        side=domain.EntrySide(orm_line.side),
        amount=Decimal(orm_line.amount),
        date=orm_line.date,
        description=orm_line.description,
    )


def manual_journal_line_to_domain(orm_line: ORMManualJournalLine) -> domain.ManualJournalLine:
    """Convert SQLAlchemy ManualJournalLine model to domain ManualJournalLine entity."""
    return domain.ManualJournalLine(
        id=orm_line.id,
        company_id=orm_line.company_id,
        reference=orm_line.reference,
        account_id=orm_line.account_id,
        side=domain.EntrySide(orm_line.side),
        amount=Decimal(orm_line.amount),
        date=orm_line.date,
        description=orm_line.description,
        payee_id=orm_line.payee_id,
        created_at=orm_line.created_at,
    )


def automation_rule_to_domain(orm_rule: ORMAutomationRule) -> domain.AutomationRule:
    """Convert SQLAlchemy AutomationRule model to domain AutomationRule entity."""
    return domain.AutomationRule(
        id=orm_rule.id,
        company_id=orm_rule.company_id,
        name=orm_rule.name,
        automation_type=domain.AutomationType(orm_rule.automation_type),
        condition_type=domain.ConditionType(orm_rule.condition_type),
        condition_value=orm_rule.condition_value,
        action_value=orm_rule.action_value,
        auto_add=orm_rule.auto_add,
        enabled=orm_rule.enabled,
        created_at=orm_rule.created_at,
    )
