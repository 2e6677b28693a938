"""Tests for request validation."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from home_ledger.models.ledger import (
    Currency,
    TransactionRequest,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from home_ledger.validation import TransactionValidator


@pytest.fixture
def validator() -> TransactionValidator:
    return TransactionValidator()


class TestValidateRequest:
    """Tests for create/edit requests."""

    def test_valid_income(self, validator):
        result = validator.validate_request(TransactionRequest(
            type=TransactionType.INCOME,
            amount=Decimal("10"),
            description="Gift",
            date="2024-06-01",
        ))
        assert result.is_valid
        assert result.issues == []

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_rejects_bad_amounts(self, validator, amount):
        result = validator.validate_request(TransactionRequest(
            type=TransactionType.INCOME,
            amount=amount,
            description="Gift",
            date="2024-06-01",
        ))
        assert not result.is_valid
        assert result.issues[0].field == "amount"

    def test_transfer_needs_both_accounts(self, validator):
        result = validator.validate_request(TransactionRequest(
            type=TransactionType.TRANSFER,
            amount=Decimal("10"),
            description="Move",
            date="2024-06-01",
            from_account_id="safe-yer",
        ))
        assert [issue.field for issue in result.issues] == ["to_account_id"]


class TestValidateSettlement:
    """Tests for settlement checks."""

    def test_overpayment(self, validator):
        result = validator.validate_settlement(
            Decimal("101"), Decimal("100"), Currency.YER, Currency.YER
        )
        assert not result.is_valid
        assert "remaining" in result.issues[0].message

    def test_exact_remaining_is_allowed(self, validator):
        result = validator.validate_settlement(
            Decimal("100"), Decimal("100"), Currency.YER, Currency.YER
        )
        assert result.is_valid

    def test_currency_mismatch(self, validator):
        result = validator.validate_settlement(
            Decimal("1"), Decimal("100"), Currency.USD, Currency.YER
        )
        assert result.issues[0].issue_type == "mismatch"


class TestValidateExchangeAndGoal:
    """Tests for exchange and goal checks."""

    def test_exchange_reports_all_amounts(self, validator):
        result = validator.validate_exchange(
            Decimal("0"), Currency.YER, Currency.USD, Decimal("0"), Decimal("0")
        )
        assert {issue.field for issue in result.issues} == {
            "amount_to_sell",
            "rate",
            "amount_to_receive",
        }

    def test_goal_target_date_in_future(self, validator):
        now = datetime(2024, 6, 15, tzinfo=timezone.utc)
        assert validator.validate_goal("Car", Decimal("1"), now + timedelta(days=1), now).is_valid
        assert not validator.validate_goal("Car", Decimal("1"), now, now).is_valid


class TestUserFriendlySummary:
    """Tests for the summary text shown to the user."""

    def test_all_passed(self, validator):
        assert validator.get_user_friendly_summary(ValidationResult(is_valid=True)) == (
            "All checks passed."
        )

    def test_lists_errors_and_fixes(self, validator):
        result = ValidationResult(
            is_valid=False,
            issues=[ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                suggested_fix="Enter an amount greater than zero",
            )],
        )
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following:" in summary
        assert "Amount is required" in summary
        assert "Enter an amount greater than zero" in summary
