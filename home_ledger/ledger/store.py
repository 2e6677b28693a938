"""
Account Store

An immutable snapshot of every account and its transactions.

DESIGN DECISION: The store is never changed in place. Ledger operations
call replace_transactions(), which returns a new snapshot that shares
every untouched Account object with the old one. A reader holding the old
snapshot keeps seeing it whole.
"""

from decimal import Decimal
from typing import Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from home_ledger.ledger.errors import AccountNotFound
from home_ledger.models.ledger import (
    Account,
    AccountRole,
    Currency,
    Transaction,
    TransactionType,
    account_id,
)


def account_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of INCOME minus sum of EXPENSE, in the account's currency."""
    balance = Decimal("0")
    for t in transactions:
        if t.type == TransactionType.INCOME:
            balance += t.amount
        elif t.type == TransactionType.EXPENSE:
            balance -= t.amount
    return balance


def total_by_type(transactions: Iterable[Transaction], type_: TransactionType) -> Decimal:
    return sum((t.amount for t in transactions if t.type == type_), Decimal("0"))


def deferred_net_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Receivables minus liabilities of a deferred account."""
    transactions = list(transactions)
    return (
        total_by_type(transactions, TransactionType.RECEIVABLE)
        - total_by_type(transactions, TransactionType.LIABILITY)
    )


def sort_newest_first(transactions: Iterable[Transaction]) -> tuple[Transaction, ...]:
    """Descending by date; equal dates keep their current relative order."""
    return tuple(sorted(transactions, key=lambda t: t.date, reverse=True))


class AccountStore(BaseModel):
    """Snapshot of all accounts."""
    model_config = ConfigDict(frozen=True)

    accounts: tuple[Account, ...] = ()

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'AccountStore':
        seen = set()
        for account in self.accounts:
            if account.id in seen:
                raise ValueError(f"Duplicate account id: {account.id}")
            seen.add(account.id)
        return self

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_by_id(self, id_: str) -> Optional[Account]:
        for account in self.accounts:
            if account.id == id_:
                return account
        return None

    def get(self, id_: str) -> Account:
        """Like find_by_id, but raises AccountNotFound."""
        account = self.find_by_id(id_)
        if account is None:
            raise AccountNotFound(id_)
        return account

    def filter_by_role_prefix(self, prefix: str) -> list[Account]:
        return [account for account in self.accounts if account.id.startswith(prefix)]

    def filter_by_roles(self, *roles: AccountRole) -> list[Account]:
        return [account for account in self.accounts if account.role in roles]

    def find_by_role(self, role: AccountRole, currency: Currency) -> Optional[Account]:
        return self.find_by_id(account_id(role, currency))

    def get_by_role(self, role: AccountRole, currency: Currency) -> Account:
        return self.get(account_id(role, currency))

    def all_transactions(self) -> Iterator[tuple[Account, Transaction]]:
        for account in self.accounts:
            for t in account.transactions:
                yield account, t

    def find_transaction(self, transaction_id: str) -> Optional[tuple[Account, Transaction]]:
        for account, t in self.all_transactions():
            if t.id == transaction_id:
                return account, t
        return None

    def balance_of(self, id_: str) -> Decimal:
        return account_balance(self.get(id_).transactions)

    # -------------------------------------------------------------------------
    # Copy-on-write
    # -------------------------------------------------------------------------

    def replace_transactions(
        self,
        changes: Mapping[str, Iterable[Transaction]],
    ) -> 'AccountStore':
        """
        Return a new snapshot where each account in `changes` holds the
        given transactions, re-sorted newest first.
        """
        for id_ in changes:
            self.get(id_)

        accounts = tuple(
            account.model_copy(
                update={"transactions": sort_newest_first(changes[account.id])}
            )
            if account.id in changes
            else account
            for account in self.accounts
        )
        return AccountStore(accounts=accounts)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_storage(self) -> list[dict]:
        return [account.to_storage() for account in self.accounts]

    @classmethod
    def from_storage(cls, raw: list) -> 'AccountStore':
        return cls(accounts=[Account.model_validate(item) for item in raw])
