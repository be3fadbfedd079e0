"""Tests for automation rules."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from switchbooks.domain.automation import AutomationMatch, match_rules, rule_matches
from switchbooks.domain.entities import (
    AutomationRule,
    AutomationType,
    ConditionType,
    EntrySide,
    TransactionStatus,
)
from switchbooks.domain.errors import NotFoundError, ValidationError


def make_rule(
    id,
    automation_type=AutomationType.CATEGORY,
    condition_type=ConditionType.CONTAINS,
    condition_value="starbucks",
    action_value="Meals",
    auto_add=False,
    enabled=True,
):
    return AutomationRule(
        id=id,
        company_id=1,
        name=f"Rule {id}",
        automation_type=automation_type,
        condition_type=condition_type,
        condition_value=condition_value,
        action_value=action_value,
        auto_add=auto_add,
        enabled=enabled,
        created_at=datetime.now(UTC),
    )


class TestMatching:
    """Tests for pure rule matching."""

    def test_contains_ignores_case(self):
        assert rule_matches(make_rule(1), "STARBUCKS #4521 SEATTLE")

    def test_contains_miss(self):
        assert not rule_matches(make_rule(1), "PEET'S COFFEE")

    def test_is_exactly(self):
        rule = make_rule(1, condition_type=ConditionType.IS_EXACTLY, condition_value="Stripe Payout")
        assert rule_matches(rule, "STRIPE PAYOUT")
        assert rule_matches(rule, "  stripe payout ")
        assert not rule_matches(rule, "STRIPE PAYOUT 123")

    def test_missing_description(self):
        assert not rule_matches(make_rule(1), None)

    def test_first_rule_wins_per_axis(self):
        rules = [
            make_rule(1, action_value="Meals"),
            make_rule(2, action_value="Travel"),
            make_rule(3, automation_type=AutomationType.PAYEE, action_value="Starbucks"),
        ]

        match = match_rules("STARBUCKS #4521", rules)

        assert match.category_rule.id == 1
        assert match.payee_rule.id == 3

    def test_disabled_rules_are_skipped(self):
        rules = [make_rule(1, enabled=False), make_rule(2, action_value="Travel")]

        match = match_rules("STARBUCKS", rules)

        assert match.category_rule.id == 2
        assert match.payee_rule is None

    def test_no_match(self):
        match = match_rules("UBER TRIP", [make_rule(1)])
        assert match == AutomationMatch()
        assert not match.matched
        assert not match.auto_add

    def test_auto_add_ignores_payee_rule(self):
        match = AutomationMatch(
            category_rule=make_rule(1),
            payee_rule=make_rule(2, automation_type=AutomationType.PAYEE, auto_add=True),
        )
        assert not match.auto_add

    def test_auto_add_from_category_rule(self):
        match = AutomationMatch(
            category_rule=make_rule(1, auto_add=True),
            payee_rule=make_rule(2, automation_type=AutomationType.PAYEE),
        )
        assert match.auto_add


class TestCreateRule:
    """Tests for creating rules."""

    def test_create(self, automation_service, company_id, chart):
        rule_id = automation_service.create_rule(
            company_id, " Coffee ", "category", "contains", "STARBUCKS", "Meals", auto_add=True
        )

        rule = automation_service.get_rule(rule_id)
        assert rule.name == "Coffee"
        assert rule.automation_type is AutomationType.CATEGORY
        assert rule.condition_type is ConditionType.CONTAINS
        assert rule.auto_add is True
        assert rule.enabled is True

    def test_create_with_path(self, automation_service, company_id, chart):
        rule_id = automation_service.create_rule(
            company_id, "Adobe", "category", "contains", "ADOBE", "Operating Expenses > Software"
        )
        assert automation_service.get_rule(rule_id).action_value == "Operating Expenses > Software"

    def test_unknown_category(self, automation_service, company_id, chart):
        with pytest.raises(NotFoundError):
            automation_service.create_rule(
                company_id, "Coffee", "category", "contains", "STARBUCKS", "Coffee Breaks"
            )

    def test_unknown_payee(self, automation_service, company_id, payees):
        with pytest.raises(NotFoundError):
            automation_service.create_rule(
                company_id, "Coffee", "payee", "contains", "STARBUCKS", "Peet's"
            )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": ""},
            {"condition_value": "  "},
            {"action_value": ""},
            {"automation_type": "vendor"},
            {"condition_type": "starts_with"},
        ],
    )
    def test_invalid_fields(self, automation_service, company_id, chart, kwargs):
        values = {
            "name": "Coffee",
            "automation_type": "category",
            "condition_type": "contains",
            "condition_value": "STARBUCKS",
            "action_value": "Meals",
        }
        values.update(kwargs)
        with pytest.raises(ValidationError):
            automation_service.create_rule(company_id, **values)

    def test_payee_rule_cannot_auto_add(self, automation_service, company_id, payees):
        with pytest.raises(ValidationError, match="Only category rules"):
            automation_service.create_rule(
                company_id, "Coffee payee", "payee", "contains", "STARBUCKS", "Starbucks",
                auto_add=True,
            )
        assert automation_service.list_rules(company_id) == []

    def test_enable_disable_delete(self, automation_service, company_id, chart):
        rule_id = automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals"
        )

        automation_service.set_enabled(rule_id, False)
        assert automation_service.get_rule(rule_id).enabled is False

        automation_service.delete_rule(rule_id)
        assert automation_service.get_rule(rule_id) is None
        assert automation_service.list_rules(company_id) == []


class TestApply:
    """Tests for applying rules to imported transactions."""

    @pytest.fixture
    def coffee_txn(self, transaction_service, company_id, chart):
        return transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 5), Decimal("-5.75"), "STARBUCKS #4521"
        )

    def test_auto_add_posts_transaction(
        self, automation_service, transaction_service, ledger_service, company_id, chart, payees,
        coffee_txn,
    ):
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "starbucks", "Meals", auto_add=True
        )
        automation_service.create_rule(
            company_id, "Coffee payee", "payee", "contains", "STARBUCKS", "Starbucks"
        )

        result = automation_service.apply(company_id)

        assert result.scanned == 1
        assert result.prefilled == [coffee_txn]
        assert result.posted == [coffee_txn]
        assert result.failures == []

        txn = transaction_service.get_transaction(coffee_txn)
        assert txn.status is TransactionStatus.POSTED
        assert txn.category_id == chart["Meals"]
        assert txn.payee_id == payees["Starbucks"]

        lines = ledger_service.get_journal_lines(coffee_txn)
        debit = next(line for line in lines if line.side is EntrySide.DEBIT)
        credit = next(line for line in lines if line.side is EntrySide.CREDIT)
        assert debit.account_id == chart["Meals"]
        assert credit.account_id == chart["Checking"]
        assert debit.amount == credit.amount == Decimal("5.75")

    def test_prefill_without_auto_add(
        self, automation_service, transaction_service, company_id, chart, coffee_txn
    ):
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals"
        )

        result = automation_service.apply(company_id)

        assert result.prefilled == [coffee_txn]
        assert result.posted == []
        txn = transaction_service.get_transaction(coffee_txn)
        assert txn.status is TransactionStatus.IMPORTED
        assert txn.category_id == chart["Meals"]

    def test_existing_selection_is_kept(
        self, automation_service, transaction_service, company_id, chart, coffee_txn
    ):
        transaction_service.set_selection(coffee_txn, chart["Office Supplies"], None)
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals", auto_add=True
        )

        result = automation_service.apply(company_id)

        # The category was not supplied by the auto-add rule, so nothing is posted
        assert result.prefilled == []
        assert result.posted == []
        txn = transaction_service.get_transaction(coffee_txn)
        assert txn.status is TransactionStatus.IMPORTED
        assert txn.category_id == chart["Office Supplies"]

    def test_payee_auto_add_flag_does_not_post(
        self, temp_db, automation_service, transaction_service, company_id, chart, payees,
        coffee_txn,
    ):
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals"
        )
        # Stored directly: create_rule refuses auto_add on payee rules
        temp_db.create_automation_rule(
            company_id=company_id,
            name="Coffee payee",
            automation_type=AutomationType.PAYEE,
            condition_type=ConditionType.CONTAINS,
            condition_value="STARBUCKS",
            action_value="Starbucks",
            auto_add=True,
        )

        result = automation_service.apply(company_id)

        assert result.prefilled == [coffee_txn]
        assert result.posted == []
        txn = transaction_service.get_transaction(coffee_txn)
        assert txn.status is TransactionStatus.IMPORTED
        assert txn.category_id == chart["Meals"]
        assert txn.payee_id == payees["Starbucks"]

    def test_posted_transactions_are_not_scanned(
        self, automation_service, ledger_service, company_id, chart, coffee_txn
    ):
        ledger_service.post_transaction(coffee_txn, chart["Office Supplies"])
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals", auto_add=True
        )

        result = automation_service.apply(company_id)

        assert result.scanned == 0

    def test_failure_is_recorded_and_scan_continues(
        self, automation_service, transaction_service, category_service, company_id, chart,
        coffee_txn,
    ):
        second = transaction_service.add_transaction(
            company_id, chart["Checking"], date(2024, 3, 6), Decimal("-4.50"), "STARBUCKS #9"
        )
        # The first transaction matches a rule whose category is deleted afterwards
        automation_service.create_rule(
            company_id, "Software", "category", "is_exactly", "STARBUCKS #4521", "Software"
        )
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals", auto_add=True
        )
        category_service.delete_category(chart["Software"])

        result = automation_service.apply(company_id)

        assert [txn_id for txn_id, _ in result.failures] == [coffee_txn]
        assert result.posted == [second]
        assert not transaction_service.get_transaction(coffee_txn).is_posted

    def test_bank_account_filter(
        self, automation_service, transaction_service, company_id, chart, coffee_txn
    ):
        card_txn = transaction_service.add_transaction(
            company_id, chart["Visa"], date(2024, 3, 6), Decimal("-4.50"), "STARBUCKS #9"
        )
        automation_service.create_rule(
            company_id, "Coffee", "category", "contains", "STARBUCKS", "Meals"
        )

        result = automation_service.apply(company_id, bank_account_id=chart["Visa"])

        assert result.scanned == 1
        assert result.prefilled == [card_txn]
        assert transaction_service.get_transaction(coffee_txn).category_id is None
