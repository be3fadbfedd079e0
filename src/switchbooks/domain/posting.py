"""Posting rules: which side of a bank transaction is debited or credited."""

from typing import NamedTuple

from switchbooks.domain.entities import AccountType

# Category types whose postings debit the bank/card account
BANK_DEBITED_CATEGORY_TYPES = frozenset({AccountType.REVENUE, AccountType.EQUITY})


class PostingSides(NamedTuple):
    """Accounts on each side of a simple two-line posting."""

    debit_account_id: int
    credit_account_id: int


def resolve_sides(
    bank_account_type: AccountType,
    category_type: AccountType,
    category_id: int,
    bank_account_category_id: int,
) -> PostingSides:
    """Decide which account is debited and which is credited.

    Revenue and Equity categories debit the bank/card account and credit the
    category. Every other category type (Expense, COGS, Asset, Liability, ...)
    debits the category and credits the bank/card account.

    The same table applies to every bank-account type: Asset-like bank
    accounts and Liability-like credit cards are not mirrored. Any account
    type that is not a recognised bank type is treated as an asset.

    Args:
        bank_account_type: Account type of the bank/card account
        category_type: Account type of the chosen category
        category_id: Category account ID
        bank_account_category_id: Bank/card account ID in the chart of accounts

    Returns:
        PostingSides with the debit and credit account IDs
    """
    # bank_account_type does not change the outcome; see the docstring
    AccountType.parse(bank_account_type)
    if AccountType.parse(category_type) in BANK_DEBITED_CATEGORY_TYPES:
        return PostingSides(
            debit_account_id=bank_account_category_id,
            credit_account_id=category_id,
        )
    return PostingSides(
        debit_account_id=category_id,
        credit_account_id=bank_account_category_id,
    )
