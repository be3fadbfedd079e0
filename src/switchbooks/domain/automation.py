"""Automation rules: pre-fill and auto-post imported transactions."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from switchbooks.config.logging import get_logger
from switchbooks.database.base import Database
from switchbooks.domain.category import CategoryService
from switchbooks.domain.entities import (
    AutomationRule,
    AutomationType,
    ConditionType,
    TransactionStatus,
)
from switchbooks.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    category_path_not_found,
)
from switchbooks.domain.ledger import LedgerService
from switchbooks.domain.payee import PayeeService

logger = get_logger(__name__)


@dataclass(frozen=True)
class AutomationMatch:
    """First matching rule on each axis (None when nothing matched)."""

    category_rule: Optional[AutomationRule] = None
    payee_rule: Optional[AutomationRule] = None

    @property
    def matched(self) -> bool:
        return self.category_rule is not None or self.payee_rule is not None

    @property
    def auto_add(self) -> bool:
        return self.category_rule is not None and self.category_rule.auto_add


@dataclass
class AutomationRunResult:
    """Outcome of applying automation rules to a company's imported transactions."""

    scanned: int = 0
    prefilled: list[int] = field(default_factory=list)
    posted: list[int] = field(default_factory=list)
    failures: list[tuple[int, str]] = field(default_factory=list)


def rule_matches(rule: AutomationRule, description: Optional[str]) -> bool:
    """Check one rule's condition against a description, ignoring case."""
    text = (description or "").lower()
    wanted = rule.condition_value.lower()
    if not wanted:
        return False
    if rule.condition_type is ConditionType.IS_EXACTLY:
        return text.strip() == wanted.strip()
    return wanted in text


def match_rules(description: Optional[str], rules: Iterable[AutomationRule]) -> AutomationMatch:
    """Find the first enabled rule that matches, independently per axis.

    Args:
        description: Transaction description
        rules: Rules in evaluation order

    Returns:
        AutomationMatch with the winning category and payee rules
    """
    category_rule: Optional[AutomationRule] = None
    payee_rule: Optional[AutomationRule] = None
    for rule in rules:
        if not rule.enabled:
            continue
        if rule.automation_type is AutomationType.CATEGORY:
            if category_rule is None and rule_matches(rule, description):
                category_rule = rule
        elif payee_rule is None and rule_matches(rule, description):
            payee_rule = rule
        if category_rule is not None and payee_rule is not None:
            break
    return AutomationMatch(category_rule=category_rule, payee_rule=payee_rule)


class AutomationService:
    """Service for managing and applying automation rules."""

    def __init__(self, db: Database):
        """Initialize automation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.categories = CategoryService(db)
        self.payees = PayeeService(db)
        self.ledger = LedgerService(db)

    def create_rule(
        self,
        company_id: int,
        name: str,
        automation_type: "AutomationType | str",
        condition_type: "ConditionType | str",
        condition_value: str,
        action_value: str,
        auto_add: bool = False,
        enabled: bool = True,
    ) -> int:
        """Create an automation rule.

        Args:
            company_id: Owning company ID
            name: Rule name
            automation_type: "category" or "payee"
            condition_type: "contains" or "is_exactly"
            condition_value: Text matched against transaction descriptions
            action_value: Category path/name or payee name to assign
            auto_add: Post matching transactions without confirmation
            enabled: Whether the rule takes part in matching

        Returns:
            Rule ID

        Raises:
            ValidationError: If a field is blank, a type is unknown, or auto_add
                is set on a payee rule
            NotFoundError: If the action value doesn't name an existing category or payee
        """
        name = (name or "").strip()
        condition_value = (condition_value or "").strip()
        action_value = (action_value or "").strip()
        if not name:
            raise ValidationError("Rule name is required")
        if not condition_value:
            raise ValidationError("Rule condition value is required")
        if not action_value:
            raise ValidationError("Rule action value is required")
        try:
            automation_type = AutomationType(str(automation_type).lower())
            condition_type = ConditionType(str(condition_type).lower())
        except ValueError as e:
            raise ValidationError(f"Invalid automation rule: {e}") from e
        if auto_add and automation_type is not AutomationType.CATEGORY:
            raise ValidationError("Only category rules can auto-add transactions")

        if automation_type is AutomationType.CATEGORY:
            if self.categories.find_category(company_id, action_value) is None:
                raise NotFoundError(category_path_not_found(action_value))
        elif self.payees.find_payee(company_id, action_value) is None:
            raise NotFoundError(f"Payee '{action_value}' not found")

        return self.db.create_automation_rule(
            company_id=company_id,
            name=name,
            automation_type=automation_type,
            condition_type=condition_type,
            condition_value=condition_value,
            action_value=action_value,
            auto_add=auto_add,
            enabled=enabled,
        )

    def get_rule(self, rule_id: int) -> Optional[AutomationRule]:
        return self.db.get_automation_rule(rule_id)

    def list_rules(
        self, company_id: int, automation_type: Optional[AutomationType] = None
    ) -> list[AutomationRule]:
        return self.db.list_automation_rules(company_id, automation_type=automation_type)

    def set_enabled(self, rule_id: int, enabled: bool) -> None:
        self.db.set_automation_rule_enabled(rule_id, enabled)

    def delete_rule(self, rule_id: int) -> None:
        self.db.delete_automation_rule(rule_id)

    def apply(self, company_id: int, bank_account_id: Optional[int] = None) -> AutomationRunResult:
        """Apply enabled rules to imported transactions.

        Only empty selections are filled: a transaction that already has a
        category keeps it, and likewise for the payee. When the matched
        category rule has auto_add and supplied the category, the
        transaction is posted through the ledger. A failure on one
        transaction is recorded and the scan continues.

        Args:
            company_id: Owning company ID
            bank_account_id: Optional bank account filter

        Returns:
            AutomationRunResult describing what happened
        """
        rules = self.db.list_automation_rules(company_id)
        result = AutomationRunResult()
        transactions = self.db.list_transactions(
            company_id, status=TransactionStatus.IMPORTED, bank_account_id=bank_account_id
        )

        for txn in transactions:
            result.scanned += 1
            match = match_rules(txn.description, rules)
            if not match.matched:
                continue
            try:
                category_id = txn.category_id
                payee_id = txn.payee_id
                category_from_rule = False
                if category_id is None and match.category_rule is not None:
                    category = self.categories.find_category(
                        company_id, match.category_rule.action_value
                    )
                    if category is None:
                        raise NotFoundError(
                            category_path_not_found(match.category_rule.action_value)
                        )
                    category_id = category.id
                    category_from_rule = True
                if payee_id is None and match.payee_rule is not None:
                    payee = self.payees.find_payee(company_id, match.payee_rule.action_value)
                    if payee is None:
                        raise NotFoundError(f"Payee '{match.payee_rule.action_value}' not found")
                    payee_id = payee.id

                if (category_id, payee_id) != (txn.category_id, txn.payee_id):
                    self.db.update_transaction_selection(txn.id, category_id, payee_id)
                    result.prefilled.append(txn.id)

                if match.auto_add and category_from_rule:
                    self.ledger.post_transaction(txn.id, category_id, payee_id)
                    result.posted.append(txn.id)
            except (DomainError, SQLAlchemyError) as e:
                logger.warning("automation_apply_failed", transaction_id=txn.id, error=str(e))
                result.failures.append((txn.id, str(e)))

        logger.info(
            "automation_applied",
            company_id=company_id,
            scanned=result.scanned,
            prefilled=len(result.prefilled),
            posted=len(result.posted),
            failed=len(result.failures),
        )
        return result
