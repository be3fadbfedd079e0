"""Domain model entities for switchbooks.

These are pure data classes representing business concepts, independent of
database schema. The database layer converts ORM rows into these entities so
the posting engine and the operation pipeline never touch SQLAlchemy objects.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Chart-of-accounts account type."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    COGS = "COGS"
    EXPENSE = "Expense"
    BANK_ACCOUNT = "Bank Account"
    CREDIT_CARD = "Credit Card"

    @classmethod
    def values(cls) -> list[str]:
        """Return the account type labels in declaration order."""
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: "str | AccountType") -> "AccountType":
        """Parse an account type label, ignoring case and surrounding spaces.

        Raises:
            ValueError: If the label is not a known account type
        """
        if isinstance(value, AccountType):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid account type {value!r}")
        normalized = value.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(
            f"Invalid account type '{value}'. Valid types: {', '.join(cls.values())}"
        )


# Account types a transaction can be imported into
BANK_ACCOUNT_TYPES = frozenset(
    {
        AccountType.ASSET,
        AccountType.LIABILITY,
        AccountType.BANK_ACCOUNT,
        AccountType.CREDIT_CARD,
    }
)


class TransactionStatus(str, Enum):
    """Lifecycle status of a transaction."""

    IMPORTED = "imported"
    POSTED = "posted"


class EntrySide(str, Enum):
    """Side of a journal line."""

    DEBIT = "debit"
    CREDIT = "credit"


class AutomationType(str, Enum):
    """Which assignment an automation rule pre-fills."""

    PAYEE = "payee"
    CATEGORY = "category"


class ConditionType(str, Enum):
    """How an automation rule matches a transaction description."""

    CONTAINS = "contains"
    IS_EXACTLY = "is_exactly"


@dataclass(frozen=True)
class Company:
    """Company (tenant) domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Chart-of-accounts node with hierarchical structure."""

    id: int
    company_id: int
    name: str
    account_type: AccountType
    parent_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class Payee:
    """Payee domain entity."""

    id: int
    company_id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Bank transaction domain entity."""

    id: int
    company_id: int
    bank_account_id: int
    date: date
    amount: Decimal
    description: Optional[str]
    category_id: Optional[int]
    payee_id: Optional[int]
    status: TransactionStatus
    imported_at: datetime

    @property
    def is_posted(self) -> bool:
        return self.status is TransactionStatus.POSTED


@dataclass(frozen=True)
class JournalLine:
    """One side of a posted transaction."""

    id: int
    company_id: int
    transaction_id: int
    account_id: int
    side: EntrySide
    amount: Decimal
    date: date
    description: Optional[str]


@dataclass(frozen=True)
class JournalLineDraft:
    """Journal line that has not been persisted yet."""

    account_id: int
    side: EntrySide
    amount: Decimal


@dataclass(frozen=True)
class ManualJournalLine:
    """One line of a manual journal entry, grouped by reference."""

    id: int
    company_id: int
    reference: str
    account_id: int
    side: EntrySide
    amount: Decimal
    date: date
    description: Optional[str]
    payee_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class ManualJournalEntry:
    """Balanced group of manual journal lines sharing a reference."""

    reference: str
    date: date
    description: Optional[str]
    payee_id: Optional[int]
    lines: tuple[ManualJournalLine, ...]

    @property
    def total(self) -> Decimal:
        return sum(
            (line.amount for line in self.lines if line.side is EntrySide.DEBIT), Decimal("0")
        )


@dataclass(frozen=True)
class AutomationRule:
    """Stored condition -> action mapping applied to imported transactions."""

    id: int
    company_id: int
    name: str
    automation_type: AutomationType
    condition_type: ConditionType
    condition_value: str
    action_value: str
    auto_add: bool
    enabled: bool
    created_at: datetime
