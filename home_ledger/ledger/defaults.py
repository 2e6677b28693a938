"""
First-run data.

Nine accounts (deferred, safe and bank for every currency) with a few
sample transactions, plus the default exchange rates and savings alert
settings. Used whenever a persisted key has never been written.
"""

from decimal import Decimal
from typing import Optional

from home_ledger.config import LedgerSettings
from home_ledger.ledger.currency import ExchangeRates
from home_ledger.ledger.store import AccountStore, sort_newest_first
from home_ledger.models.ledger import (
    CURRENCY_DETAILS,
    Account,
    AccountRole,
    Currency,
    Transaction,
    TransactionType,
    account_id,
)

_ROLE_NAMES = {
    AccountRole.DEFERRED: "Deferred account",
    AccountRole.SAFE: "Home safe",
    AccountRole.BANK: "Bank account",
}

# (id, amount, type, description, ISO date) per account
_SAMPLE_TRANSACTIONS: dict[str, list[tuple[str, str, TransactionType, str, str]]] = {
    "acc-deferred-yer": [
        ("trans-1", "50000", TransactionType.RECEIVABLE, "Loan to Mr. Ahmed", "2024-05-20T10:00:00Z"),
        ("trans-2", "25000", TransactionType.LIABILITY, "Owed to Al-Badr stores", "2024-05-15T14:30:00Z"),
    ],
    "acc-deferred-usd": [
        ("trans-3", "100", TransactionType.LIABILITY, "Monthly car installment", "2024-05-01T09:00:00Z"),
    ],
    "safe-yer": [
        ("trans-4", "300000", TransactionType.INCOME, "May salary", "2024-05-25T08:00:00Z"),
        ("trans-5", "15000", TransactionType.EXPENSE, "Groceries", "2024-05-26T18:00:00Z"),
        ("trans-6", "2000", TransactionType.EXPENSE, "Coffee", "2024-05-27T11:00:00Z"),
    ],
    "safe-usd": [
        ("trans-7", "500", TransactionType.INCOME, "Money sent by a friend", "2024-05-22T16:00:00Z"),
        ("trans-8", "50", TransactionType.EXPENSE, "Internet bill", "2024-05-28T10:00:00Z"),
    ],
    "safe-sar": [
        ("trans-9", "1000", TransactionType.INCOME, "Gift", "2024-05-10T20:00:00Z"),
    ],
    "acc-bank-yer": [
        ("trans-10", "500000", TransactionType.INCOME, "Opening savings balance", "2024-05-01T00:00:00Z"),
    ],
}


def _account(role: AccountRole, currency: Currency) -> Account:
    id_ = account_id(role, currency)
    transactions = [
        Transaction(
            id=txn_id,
            amount=Decimal(amount),
            currency=currency,
            type=type_,
            description=description,
            date=date,
        )
        for txn_id, amount, type_, description, date in _SAMPLE_TRANSACTIONS.get(id_, [])
    ]
    return Account(
        id=id_,
        name=f"{_ROLE_NAMES[role]} ({CURRENCY_DETAILS[currency]['symbol']})",
        currency=currency,
        transactions=sort_newest_first(transactions),
    )


def default_accounts() -> AccountStore:
    return AccountStore(accounts=tuple(
        _account(role, currency)
        for role in (AccountRole.DEFERRED, AccountRole.SAFE, AccountRole.BANK)
        for currency in Currency
    ))


def default_exchange_rates(settings: Optional[LedgerSettings] = None) -> ExchangeRates:
    settings = settings or LedgerSettings()
    return {
        Currency.USD: settings.default_usd_rate,
        Currency.SAR: settings.default_sar_rate,
    }
