"""Ledger writer: turns categorized transactions into balanced journal lines."""

from datetime import date
from decimal import Decimal
from itertools import chain
from typing import Iterable, NamedTuple, Optional

from switchbooks.config.logging import get_logger
from switchbooks.database.base import Database
from switchbooks.domain.entities import (
    Category,
    EntrySide,
    JournalLine,
    JournalLineDraft,
    ManualJournalEntry,
    ManualJournalLine,
    Transaction,
)
from switchbooks.domain.errors import (
    ConflictError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
    category_not_found,
    manual_entry_not_found,
    payee_not_found,
    transaction_not_found,
)
from switchbooks.domain.posting import resolve_sides
from switchbooks.utils.amount_parser import quantize_amount

logger = get_logger(__name__)


class Split(NamedTuple):
    """One category share of a split posting."""

    category_id: int
    amount: Decimal


def check_balance(lines: Iterable["JournalLineDraft | JournalLine"]) -> Decimal:
    """Verify that debits equal credits.

    Args:
        lines: Journal lines (drafts or persisted) of one entry

    Returns:
        The balanced total

    Raises:
        UnbalancedEntryError: If there are no lines, an amount is not positive,
            or total debits differ from total credits
    """
    debits = Decimal("0")
    credits = Decimal("0")
    count = 0
    for line in lines:
        count += 1
        if line.amount <= 0:
            raise UnbalancedEntryError(f"Journal line amount must be positive, got {line.amount}")
        if line.side is EntrySide.DEBIT:
            debits += line.amount
        else:
            credits += line.amount
    if count == 0:
        raise UnbalancedEntryError("A journal entry needs at least two lines")
    if debits != credits:
        raise UnbalancedEntryError(f"Debits ({debits}) do not equal credits ({credits})")
    return debits


class LedgerService:
    """Service for posting transactions to the general ledger."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def post_transaction(
        self,
        transaction_id: int,
        category_id: int,
        payee_id: Optional[int] = None,
    ) -> list[int]:
        """Post an imported transaction to a single category.

        Writes one debit and one credit line for the absolute amount, records
        the category and payee, and marks the transaction posted. Either all
        of this is persisted or none of it.

        Args:
            transaction_id: Transaction ID
            category_id: Category to post against
            payee_id: Optional payee ID

        Returns:
            IDs of the two journal lines

        Raises:
            NotFoundError: If the transaction, category, bank account or payee doesn't exist
            ValidationError: If the transaction is already posted or has a zero amount
            UnbalancedEntryError: If the generated lines don't balance
        """
        txn = self._require_postable(transaction_id)
        bank_account = self._require_bank_account(txn)
        category = self._require_target(txn, category_id, bank_account)
        self._check_payee(txn, payee_id)

        amount = self._posting_amount(txn)
        sides = resolve_sides(
            bank_account.account_type, category.account_type, category.id, bank_account.id
        )
        lines = [
            JournalLineDraft(account_id=sides.debit_account_id, side=EntrySide.DEBIT, amount=amount),
            JournalLineDraft(
                account_id=sides.credit_account_id, side=EntrySide.CREDIT, amount=amount
            ),
        ]
        check_balance(lines)

        line_ids = self.db.post_transaction(txn.id, category.id, payee_id, lines)
        logger.info(
            "transaction_posted",
            transaction_id=txn.id,
            category_id=category.id,
            amount=str(amount),
        )
        return line_ids

    def post_split_transaction(
        self,
        transaction_id: int,
        splits: Iterable["Split | tuple[int, Decimal]"],
        payee_id: Optional[int] = None,
    ) -> list[int]:
        """Post an imported transaction across several categories.

        One anchor line on the bank account carries the full amount; each
        split gets a line on the opposite side. Every split category must put
        the bank account on the same side.

        Args:
            transaction_id: Transaction ID
            splits: (category_id, amount) pairs with positive amounts summing
                to the absolute transaction amount
            payee_id: Optional payee ID

        Returns:
            IDs of the journal lines, anchor line first

        Raises:
            NotFoundError: If the transaction, a category, the bank account or payee doesn't exist
            ValidationError: If the splits are empty, don't sum to the amount,
                or mix categories that debit and credit the bank account
            UnbalancedEntryError: If the generated lines don't balance
        """
        txn = self._require_postable(transaction_id)
        bank_account = self._require_bank_account(txn)
        self._check_payee(txn, payee_id)
        amount = self._posting_amount(txn)

        split_list = [Split(int(cat_id), quantize_amount(Decimal(value))) for cat_id, value in splits]
        if not split_list:
            raise ValidationError("A split posting needs at least one split")

        bank_side = self._bank_side(
            bank_account, self._require_target(txn, split_list[0].category_id, bank_account)
        )
        split_lines = []
        total = Decimal("0")
        for split in split_list:
            if split.amount <= 0:
                raise ValidationError(f"Split amounts must be positive, got {split.amount}")
            category = self._require_target(txn, split.category_id, bank_account)
            side = self._bank_side(bank_account, category)
            if side is not bank_side:
                raise ValidationError(
                    "Split categories must all move money in the same direction "
                    f"('{category.name}' does not)"
                )
            category_side = EntrySide.CREDIT if side is EntrySide.DEBIT else EntrySide.DEBIT
            split_lines.append(
                JournalLineDraft(account_id=category.id, side=category_side, amount=split.amount)
            )
            total += split.amount

        if total != amount:
            raise ValidationError(f"Split amounts total {total} but the transaction is {amount}")

        lines = [JournalLineDraft(account_id=bank_account.id, side=bank_side, amount=amount)]
        lines.extend(split_lines)
        check_balance(lines)

        line_ids = self.db.post_transaction(txn.id, txn.category_id, payee_id, lines)
        logger.info(
            "transaction_split_posted",
            transaction_id=txn.id,
            splits=len(split_lines),
            amount=str(amount),
        )
        return line_ids

    def undo_transaction(self, transaction_id: int) -> int:
        """Return a posted transaction to imported.

        All of its journal lines are removed. The category and payee
        pre-selection is kept so the transaction can be re-posted.

        Args:
            transaction_id: Transaction ID

        Returns:
            Number of journal lines removed

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the transaction is not posted
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if not txn.is_posted:
            raise ValidationError(f"Transaction {transaction_id} is not posted")

        removed = self.db.unpost_transaction(transaction_id)
        logger.info("transaction_unposted", transaction_id=transaction_id, lines_removed=removed)
        return removed

    def get_journal_lines(self, transaction_id: int) -> list[JournalLine]:
        """Get the journal lines of a transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return self.db.get_journal_lines(transaction_id)

    def list_journal_lines(self, company_id: int) -> list[JournalLine]:
        return self.db.list_journal_lines(company_id)

    def account_balances(self, company_id: int) -> dict[int, tuple[Decimal, Decimal]]:
        """Total debits and credits per account.

        Returns:
            Mapping of account ID to (debit total, credit total)
        """
        totals: dict[int, tuple[Decimal, Decimal]] = {}
        lines = chain(
            self.db.list_journal_lines(company_id), self.db.list_manual_journal_lines(company_id)
        )
        for line in lines:
            debit, credit = totals.get(line.account_id, (Decimal("0"), Decimal("0")))
            if line.side is EntrySide.DEBIT:
                debit += line.amount
            else:
                credit += line.amount
            totals[line.account_id] = (debit, credit)
        return totals

    def create_manual_entry(
        self,
        company_id: int,
        date: date,
        lines: Iterable[JournalLineDraft],
        reference: Optional[str] = None,
        description: Optional[str] = None,
        payee_id: Optional[int] = None,
    ) -> str:
        """Record a journal entry that is not backed by a bank transaction.

        Used for adjustments such as depreciation, accruals or owner
        contributions. The lines are written together or not at all.

        Args:
            company_id: Company ID
            date: Entry date
            lines: Debit and credit lines; amounts are rounded to cents
            reference: Reference shared by the lines; generated as MJE-<n> when blank
            description: Optional memo stored on every line
            payee_id: Optional payee ID

        Returns:
            The reference of the new entry

        Raises:
            NotFoundError: If an account or the payee doesn't belong to the company
            ValidationError: If fewer than two lines are given
            ConflictError: If the reference is already used
            UnbalancedEntryError: If debits don't equal credits
        """
        drafts = [
            JournalLineDraft(
                account_id=line.account_id,
                side=EntrySide(line.side),
                amount=quantize_amount(Decimal(line.amount)),
            )
            for line in lines
        ]
        if len(drafts) < 2:
            raise ValidationError("A manual journal entry needs at least two lines")
        for draft in drafts:
            category = self.db.get_category(draft.account_id)
            if category is None or category.company_id != company_id:
                raise NotFoundError(category_not_found(draft.account_id))
        if payee_id is not None:
            payee = self.db.get_payee(payee_id)
            if payee is None or payee.company_id != company_id:
                raise NotFoundError(payee_not_found(payee_id))
        total = check_balance(drafts)

        taken = {line.reference for line in self.db.list_manual_journal_lines(company_id)}
        reference = (reference or "").strip()
        if not reference:
            number = len(taken) + 1
            while f"MJE-{number}" in taken:
                number += 1
            reference = f"MJE-{number}"
        elif reference in taken:
            raise ConflictError(f"Manual journal entry '{reference}' already exists")

        description = description.strip() if description and description.strip() else None
        self.db.create_manual_journal_lines(
            company_id, reference, date, drafts, description=description, payee_id=payee_id
        )
        logger.info(
            "manual_entry_created",
            company_id=company_id,
            reference=reference,
            lines=len(drafts),
            amount=str(total),
        )
        return reference

    def list_manual_entries(self, company_id: int) -> list[ManualJournalEntry]:
        """List manual journal entries, newest first."""
        grouped: dict[str, list[ManualJournalLine]] = {}
        for line in self.db.list_manual_journal_lines(company_id):
            grouped.setdefault(line.reference, []).append(line)
        entries = [self._manual_entry(lines) for lines in grouped.values()]
        return sorted(entries, key=lambda e: (e.date, e.lines[0].id), reverse=True)

    def get_manual_entry(self, company_id: int, reference: str) -> ManualJournalEntry:
        """Get one manual journal entry.

        Raises:
            NotFoundError: If no entry has this reference
        """
        lines = self.db.list_manual_journal_lines(company_id, reference=reference)
        if not lines:
            raise NotFoundError(manual_entry_not_found(reference))
        return self._manual_entry(lines)

    def delete_manual_entry(self, company_id: int, reference: str) -> int:
        """Delete a manual journal entry.

        Returns:
            Number of lines removed

        Raises:
            NotFoundError: If no entry has this reference
        """
        removed = self.db.delete_manual_journal_lines(company_id, reference)
        if removed == 0:
            raise NotFoundError(manual_entry_not_found(reference))
        logger.info(
            "manual_entry_deleted", company_id=company_id, reference=reference, lines_removed=removed
        )
        return removed

    @staticmethod
    def _manual_entry(lines: list[ManualJournalLine]) -> ManualJournalEntry:
        first = lines[0]
        return ManualJournalEntry(
            reference=first.reference,
            date=first.date,
            description=first.description,
            payee_id=first.payee_id,
            lines=tuple(lines),
        )

    def _require_postable(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.is_posted:
            raise ValidationError(f"Transaction {transaction_id} is already posted")
        return txn

    def _require_bank_account(self, txn: Transaction) -> Category:
        bank_account = self.db.get_category(txn.bank_account_id)
        if bank_account is None:
            raise NotFoundError(category_not_found(txn.bank_account_id))
        return bank_account

    def _require_target(self, txn: Transaction, category_id: int, bank_account: Category) -> Category:
        category = self.db.get_category(category_id)
        if category is None or category.company_id != txn.company_id:
            raise NotFoundError(category_not_found(category_id))
        if category.id == bank_account.id:
            raise ValidationError(
                f"Cannot post transaction {txn.id} to its own bank account '{category.name}'"
            )
        return category

    def _check_payee(self, txn: Transaction, payee_id: Optional[int]) -> None:
        if payee_id is None:
            return
        payee = self.db.get_payee(payee_id)
        if payee is None or payee.company_id != txn.company_id:
            raise NotFoundError(payee_not_found(payee_id))

    @staticmethod
    def _bank_side(bank_account: Category, category: Category) -> EntrySide:
        """Side the bank account takes when posting against the category."""
        sides = resolve_sides(
            bank_account.account_type, category.account_type, category.id, bank_account.id
        )
        return EntrySide.DEBIT if sides.debit_account_id == bank_account.id else EntrySide.CREDIT

    @staticmethod
    def _posting_amount(txn: Transaction) -> Decimal:
        amount = quantize_amount(abs(txn.amount))
        if amount == 0:
            raise ValidationError(f"Transaction {txn.id} has a zero amount and cannot be posted")
        return amount
