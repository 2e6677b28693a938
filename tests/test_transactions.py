"""Tests for the transaction ledger operations."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from home_ledger.ledger.errors import (
    AccountNotFound,
    InsufficientBalance,
    TransactionNotFound,
    ValidationError,
)
from home_ledger.ledger.summary import compute_summary
from home_ledger.ledger.transactions import is_internal_transfer
from home_ledger.models.ledger import (
    Currency,
    IncomeSource,
    TransactionRequest,
    TransactionType,
)


def _request(**overrides) -> TransactionRequest:
    fields = dict(
        amount=Decimal("1000"),
        currency=Currency.YER,
        type=TransactionType.INCOME,
        description="Bonus",
        date="2024-06-01",
    )
    fields.update(overrides)
    return TransactionRequest(**fields)


class TestCreate:
    """Tests for creating records of each type."""

    def test_income_goes_to_currency_safe(self, store, ledger):
        """Test that INCOME lands in safe-{currency}."""
        updated = ledger.upsert_transaction(store, _request(currency=Currency.USD))

        created = updated.get("safe-usd").transactions[0]
        assert created.id == "new-1"
        assert created.type == TransactionType.INCOME
        assert created.date == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert updated.balance_of("safe-usd") == Decimal("1450")

    def test_debts_go_to_deferred_account(self, store, ledger):
        """Test that LIABILITY and RECEIVABLE land in the deferred account."""
        updated = ledger.upsert_transaction(store, _request(
            type=TransactionType.RECEIVABLE,
            currency=Currency.SAR,
            description="Lent to neighbour",
        ))
        deferred = updated.get("acc-deferred-sar")
        assert [t.id for t in deferred.transactions] == ["new-1"]
        # Debts never move cash
        assert updated.balance_of("acc-deferred-sar") == Decimal("0")

    def test_debt_backed_income_records_liability(self, store, ledger):
        """Test that borrowed income also creates a matching LIABILITY."""
        updated = ledger.upsert_transaction(store, _request(
            amount=Decimal("10000"),
            description="Loan from brother",
            income_source=IncomeSource.DEBT,
        ))

        income = updated.get("safe-yer").transactions[0]
        assert income.id == "new-1"
        assert income.type == TransactionType.INCOME

        liability = updated.get("acc-deferred-yer").transactions[0]
        assert liability.id == "new-2"
        assert liability.type == TransactionType.LIABILITY
        assert liability.amount == Decimal("10000")
        assert liability.description == "Debt-backed income: Loan from brother"
        assert liability.date == income.date

    def test_expense_needs_enough_balance(self, store, ledger):
        """Test that an expense above the source balance is rejected."""
        with pytest.raises(InsufficientBalance) as exc_info:
            ledger.upsert_transaction(store, _request(
                type=TransactionType.EXPENSE,
                currency=Currency.SAR,
                amount=Decimal("1001"),
                source_account_id="safe-sar",
            ))
        assert exc_info.value.available == Decimal("1000")
        assert exc_info.value.requested == Decimal("1001")

    def test_expense_currency_must_match_account(self, store, ledger):
        """Test that a YER expense cannot be paid from a USD safe."""
        with pytest.raises(ValidationError, match="holds USD"):
            ledger.upsert_transaction(store, _request(
                type=TransactionType.EXPENSE,
                amount=Decimal("10"),
                source_account_id="safe-usd",
            ))

    def test_unknown_source_account(self, store, ledger):
        """Test that an unknown account id fails with AccountNotFound."""
        with pytest.raises(AccountNotFound):
            ledger.upsert_transaction(store, _request(
                type=TransactionType.EXPENSE,
                source_account_id="safe-eur",
            ))

    def test_invalid_request_reports_every_issue(self, store, ledger):
        """Test that all input problems are reported together."""
        request = TransactionRequest(type=TransactionType.EXPENSE)
        with pytest.raises(ValidationError) as exc_info:
            ledger.upsert_transaction(store, request)

        fields = {issue.field for issue in exc_info.value.issues}
        assert fields == {"amount", "description", "date", "source_account_id"}

    def test_input_store_is_not_modified(self, store, ledger):
        """Test that operations return a new snapshot."""
        before = store.to_storage()
        ledger.upsert_transaction(store, _request())
        assert store.to_storage() == before


class TestEdit:
    """Tests for editing existing records."""

    def _edit_groceries(self, store, ledger, amount, description="Groceries"):
        return ledger.upsert_transaction(store, _request(
            id="trans-5",
            type=TransactionType.EXPENSE,
            amount=Decimal(amount),
            description=description,
            date="2024-05-26",
            source_account_id="safe-yer",
        ))

    def test_amount_change_appends_history(self, store, ledger, now):
        """Test that a changed amount is recorded in the history."""
        updated = self._edit_groceries(store, ledger, "20000")

        _, edited = updated.find_transaction("trans-5")
        assert edited.amount == Decimal("20000")
        assert len(edited.history) == 1
        assert edited.history[0].previous_amount == Decimal("15000")
        assert edited.history[0].modified_at == now
        assert updated.balance_of("safe-yer") == Decimal("278000")

    def test_history_accumulates_oldest_first(self, store, ledger):
        """Test that every amount change adds one entry."""
        updated = self._edit_groceries(store, ledger, "20000")
        updated = self._edit_groceries(updated, ledger, "18000")

        _, edited = updated.find_transaction("trans-5")
        assert [h.previous_amount for h in edited.history] == [
            Decimal("15000"),
            Decimal("20000"),
        ]

    def test_description_only_edit_keeps_history(self, store, ledger):
        """Test that an unchanged amount adds no history entry."""
        updated = self._edit_groceries(store, ledger, "15000", description="Weekly groceries")

        _, edited = updated.find_transaction("trans-5")
        assert edited.description == "Weekly groceries"
        assert edited.history == ()

    def test_edit_credits_back_original_amount(self, store, ledger):
        """Test that the edited expense is checked against balance + old amount."""
        updated = ledger.upsert_transaction(store, _request(
            id="trans-8",
            type=TransactionType.EXPENSE,
            currency=Currency.USD,
            amount=Decimal("500"),
            description="Internet bill",
            source_account_id="safe-usd",
        ))
        assert updated.balance_of("safe-usd") == Decimal("0")

        with pytest.raises(InsufficientBalance):
            ledger.upsert_transaction(store, _request(
                id="trans-8",
                type=TransactionType.EXPENSE,
                currency=Currency.USD,
                amount=Decimal("500.01"),
                description="Internet bill",
                source_account_id="safe-usd",
            ))

    def test_edit_unknown_transaction(self, store, ledger):
        """Test that editing a missing id fails."""
        with pytest.raises(TransactionNotFound):
            ledger.upsert_transaction(store, _request(id="missing"))

    def test_editing_debt_keeps_its_settlements(self, store, ledger):
        """Test that settlements survive an edit of the debt they pay down."""
        settled = ledger.settle_debt(store, "trans-2", Decimal("20000"), "safe-yer")
        edited = ledger.upsert_transaction(settled, _request(
            id="trans-2",
            type=TransactionType.LIABILITY,
            amount=Decimal("25000"),
            description="Owed to the grocer",
        ))

        assert sum(
            1 for _, t in edited.all_transactions() if t.settles_transaction_id == "trans-2"
        ) == 2
        assert edited.balance_of("safe-yer") == Decimal("263000")

    def test_settlement_records_cannot_be_edited(self, store, ledger):
        """Test that a settlement leg is rejected as an edit target."""
        settled = ledger.settle_debt(store, "trans-2", Decimal("1000"), "safe-yer")
        cash_leg = settled.get("safe-yer").transactions[0]

        with pytest.raises(ValidationError, match="Settlement records"):
            ledger.upsert_transaction(settled, _request(
                id=cash_leg.id,
                type=TransactionType.EXPENSE,
                source_account_id="safe-yer",
            ))


class TestTransfer:
    """Tests for transfers between accounts."""

    def test_transfer_is_stored_as_two_legs(self, store, ledger):
        """Test the EXPENSE + INCOME decomposition."""
        updated = ledger.upsert_transaction(store, _request(
            type=TransactionType.TRANSFER,
            amount=Decimal("100000"),
            description="Move to bank",
            from_account_id="safe-yer",
            to_account_id="acc-bank-yer",
        ))

        out_leg = updated.get("safe-yer").transactions[0]
        in_leg = updated.get("acc-bank-yer").transactions[0]
        assert out_leg.type == TransactionType.EXPENSE
        assert in_leg.type == TransactionType.INCOME
        assert out_leg.id != in_leg.id
        assert out_leg.description == "Transfer to Bank account (ر.ي.): Move to bank"
        assert in_leg.description == "Transfer from Home safe (ر.ي.): Move to bank"
        assert is_internal_transfer(out_leg) and is_internal_transfer(in_leg)

        assert updated.balance_of("safe-yer") == Decimal("183000")
        assert updated.balance_of("acc-bank-yer") == Decimal("600000")

    def test_transfer_does_not_change_income_totals(self, store, ledger, rates):
        """Test that transfer legs are left out of income and expenses."""
        updated = ledger.upsert_transaction(store, _request(
            type=TransactionType.TRANSFER,
            amount=Decimal("100000"),
            description="Move to bank",
            from_account_id="safe-yer",
            to_account_id="acc-bank-yer",
        ))
        before = compute_summary(store.accounts, rates)
        after = compute_summary(updated.accounts, rates)
        assert after.total_income == before.total_income
        assert after.total_expenses == before.total_expenses
        assert after.net_balance == before.net_balance

    def test_income_leg_id_is_paired(self, store, ledger):
        """Test that the INCOME leg id is derived from the EXPENSE leg id."""
        updated = ledger.upsert_transaction(store, _request(
            type=TransactionType.TRANSFER,
            from_account_id="safe-yer",
            to_account_id="acc-bank-yer",
        ))
        assert updated.get("safe-yer").transactions[0].id == "new-1"
        assert updated.get("acc-bank-yer").transactions[0].id == "new-1-in"

    def test_edit_replaces_both_legs(self, store, ledger):
        """Test that editing a transfer leaves one leg per account."""
        created = ledger.upsert_transaction(store, _request(
            type=TransactionType.TRANSFER,
            amount=Decimal("100000"),
            from_account_id="safe-yer",
            to_account_id="acc-bank-yer",
        ))
        edited = ledger.upsert_transaction(created, _request(
            id="new-1",
            type=TransactionType.TRANSFER,
            amount=Decimal("50000"),
            from_account_id="safe-yer",
            to_account_id="acc-bank-yer",
        ))

        assert [t.id for t in edited.get("acc-bank-yer").transactions].count("new-1-in") == 1
        assert [t.id for t in edited.get("safe-yer").transactions].count("new-1") == 1
        assert edited.balance_of("safe-yer") == Decimal("233000")
        assert edited.balance_of("acc-bank-yer") == Decimal("550000")

    def test_transfer_currency_mismatch(self, store, ledger):
        """Test that both accounts must hold the transfer currency."""
        with pytest.raises(ValidationError):
            ledger.upsert_transaction(store, _request(
                type=TransactionType.TRANSFER,
                from_account_id="safe-yer",
                to_account_id="safe-usd",
            ))

    def test_transfer_to_same_account(self, store, ledger):
        """Test that a transfer needs two different accounts."""
        with pytest.raises(ValidationError, match="two different accounts"):
            ledger.upsert_transaction(store, _request(
                type=TransactionType.TRANSFER,
                from_account_id="safe-yer",
                to_account_id="safe-yer",
            ))

    def test_transfer_needs_funds(self, store, ledger):
        """Test that a transfer above the source balance fails."""
        with pytest.raises(InsufficientBalance):
            ledger.upsert_transaction(store, _request(
                type=TransactionType.TRANSFER,
                amount=Decimal("283000.01"),
                from_account_id="safe-yer",
                to_account_id="acc-bank-yer",
            ))


class TestDelete:
    """Tests for deletion."""

    def test_delete_removes_record(self, store, ledger):
        """Test deleting a plain expense."""
        updated = ledger.delete_transaction(store, "trans-6")
        assert updated.find_transaction("trans-6") is None
        assert updated.balance_of("safe-yer") == Decimal("285000")

    def test_delete_cascades_to_settlements(self, store, ledger):
        """Test that deleting a debt removes every settlement of it."""
        settled = ledger.settle_debt(store, "trans-2", Decimal("20000"), "safe-yer")
        updated = ledger.delete_transaction(settled, "trans-2")

        assert updated.find_transaction("trans-2") is None
        assert not any(
            t.settles_transaction_id == "trans-2" for _, t in updated.all_transactions()
        )
        assert updated.balance_of("safe-yer") == Decimal("283000")

    def test_delete_transfer_removes_both_legs(self, store, ledger):
        """Test that deleting the EXPENSE leg removes the paired INCOME leg."""
        created = ledger.upsert_transaction(store, _request(
            type=TransactionType.TRANSFER,
            amount=Decimal("100000"),
            from_account_id="safe-yer",
            to_account_id="acc-bank-yer",
        ))
        updated = ledger.delete_transaction(created, "new-1")

        assert updated.find_transaction("new-1-in") is None
        assert updated.balance_of("safe-yer") == Decimal("283000")
        assert updated.balance_of("acc-bank-yer") == Decimal("500000")

    def test_delete_unknown(self, store, ledger):
        """Test deleting a missing id."""
        with pytest.raises(TransactionNotFound):
            ledger.delete_transaction(store, "missing")


class TestExchangeAndSavings:
    """Tests for currency exchange and savings transfers."""

    def test_exchange_moves_between_safes(self, store, ledger, now):
        """Test selling 55000 YER for 100 USD."""
        updated = ledger.exchange_currencies(
            store,
            amount_to_sell=Decimal("55000"),
            from_currency=Currency.YER,
            to_currency=Currency.USD,
            rate=Decimal("550"),
            amount_to_receive=Decimal("100"),
        )

        sold = updated.get("safe-yer").transactions[0]
        bought = updated.get("safe-usd").transactions[0]
        assert sold.type == TransactionType.EXPENSE
        assert sold.description == "Exchange to 100 $ at rate 550"
        assert bought.type == TransactionType.INCOME
        assert bought.amount == Decimal("100")
        assert sold.date == bought.date == now

        assert updated.balance_of("safe-yer") == Decimal("228000")
        assert updated.balance_of("safe-usd") == Decimal("550")

    def test_exchange_needs_funds(self, store, ledger):
        """Test selling more than the safe holds."""
        with pytest.raises(InsufficientBalance):
            ledger.exchange_currencies(
                store,
                amount_to_sell=Decimal("451"),
                from_currency=Currency.USD,
                to_currency=Currency.YER,
                rate=Decimal("550"),
                amount_to_receive=Decimal("248050"),
            )

    def test_exchange_rejects_same_currency(self, store, ledger):
        """Test exchanging a currency for itself."""
        with pytest.raises(ValidationError, match="for itself"):
            ledger.exchange_currencies(
                store,
                amount_to_sell=Decimal("10"),
                from_currency=Currency.USD,
                to_currency=Currency.USD,
                rate=Decimal("1"),
                amount_to_receive=Decimal("10"),
            )

    def test_transfer_to_savings(self, store, ledger, now):
        """Test moving cash from the safe to the same-currency bank."""
        updated = ledger.transfer_to_savings(store, Decimal("50000"), Currency.YER)

        assert updated.balance_of("safe-yer") == Decimal("233000")
        assert updated.balance_of("acc-bank-yer") == Decimal("550000")
        out_leg = updated.get("safe-yer").transactions[0]
        assert out_leg.description.endswith(": Savings transfer")
        assert out_leg.date == now
