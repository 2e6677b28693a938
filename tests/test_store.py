"""Tests for the account store and balance helpers."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from home_ledger.ledger.errors import AccountNotFound
from home_ledger.ledger.store import (
    AccountStore,
    account_balance,
    deferred_net_balance,
    sort_newest_first,
    total_by_type,
)
from home_ledger.models.ledger import (
    Account,
    AccountRole,
    Currency,
    Transaction,
    TransactionType,
)


def _txn(id_, amount, type_, day, currency=Currency.YER) -> Transaction:
    return Transaction(
        id=id_,
        amount=Decimal(amount),
        currency=currency,
        type=type_,
        description=f"Record {id_}",
        date=datetime(2024, 5, day, tzinfo=timezone.utc),
    )


class TestBalances:
    """Tests for balance computations."""

    def test_balance_is_income_minus_expense(self, store):
        """Test the default safe-yer balance (300000 - 15000 - 2000)."""
        assert store.balance_of("safe-yer") == Decimal("283000")

    def test_balance_ignores_ordering(self):
        """Test that the balance does not depend on transaction order."""
        transactions = [
            _txn("a", "100", TransactionType.INCOME, 1),
            _txn("b", "30", TransactionType.EXPENSE, 2),
            _txn("c", "5", TransactionType.LIABILITY, 3),
        ]
        assert account_balance(transactions) == Decimal("70")
        assert account_balance(reversed(transactions)) == Decimal("70")

    def test_deferred_net_balance(self, store):
        """Test receivables minus liabilities of the deferred account."""
        deferred = store.get("acc-deferred-yer")
        assert total_by_type(deferred.transactions, TransactionType.RECEIVABLE) == Decimal("50000")
        assert deferred_net_balance(deferred.transactions) == Decimal("25000")


class TestSorting:
    """Tests for newest-first ordering."""

    def test_sort_is_descending_and_stable(self):
        """Test that equal dates keep their relative order."""
        first = _txn("first", "1", TransactionType.INCOME, 10)
        second = _txn("second", "2", TransactionType.INCOME, 10)
        older = _txn("older", "3", TransactionType.INCOME, 1)
        newer = _txn("newer", "4", TransactionType.INCOME, 20)

        ordered = sort_newest_first([first, older, second, newer])
        assert [t.id for t in ordered] == ["newer", "first", "second", "older"]


class TestAccountStore:
    """Tests for AccountStore lookups and copy-on-write."""

    def test_default_store_has_nine_accounts(self, store):
        """Test the first-run account set."""
        assert len(store.accounts) == 9
        assert len(store.filter_by_role_prefix("safe-")) == 3
        assert len(store.filter_by_roles(AccountRole.SAFE, AccountRole.BANK)) == 6

    def test_lookups(self, store):
        """Test find_by_id, find_by_role and find_transaction."""
        assert store.find_by_id("missing") is None
        assert store.find_by_role(AccountRole.BANK, Currency.YER).id == "acc-bank-yer"

        account, t = store.find_transaction("trans-2")
        assert account.id == "acc-deferred-yer"
        assert t.type == TransactionType.LIABILITY
        assert store.find_transaction("nope") is None

    def test_get_raises_account_not_found(self, store):
        """Test that get() fails loudly for unknown ids."""
        with pytest.raises(AccountNotFound, match="acc-bank-eur"):
            store.get("acc-bank-eur")

    def test_rejects_duplicate_account_ids(self):
        """Test that account ids must be unique."""
        account = Account(id="safe-yer", name="Safe", currency=Currency.YER)
        with pytest.raises(ValueError, match="Duplicate"):
            AccountStore(accounts=(account, account))

    def test_replace_transactions_shares_untouched_accounts(self, store):
        """Test that only changed accounts are new objects."""
        safe = store.get("safe-yer")
        extra = _txn("x", "10", TransactionType.INCOME, 30)

        updated = store.replace_transactions({"safe-yer": list(safe.transactions) + [extra]})

        assert updated is not store
        assert updated.get("safe-yer") is not safe
        assert updated.get("safe-yer").transactions[0].id == "x"
        assert updated.get("safe-usd") is store.get("safe-usd")
        # The original snapshot is untouched
        assert store.balance_of("safe-yer") == Decimal("283000")

    def test_replace_transactions_unknown_account(self, store):
        """Test that replacing an unknown account fails."""
        with pytest.raises(AccountNotFound):
            store.replace_transactions({"safe-eur": []})

    def test_storage_round_trip(self, store):
        """Test that the persisted layout loads back to an equal store."""
        assert AccountStore.from_storage(store.to_storage()) == store
