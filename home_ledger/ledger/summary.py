"""
Summary Aggregator

Folds every account's transactions into base-currency totals.

DESIGN DECISION: Summaries are recomputed from the transactions on every
read and never stored. The legs of internal transfers are left out of the
income and expense totals (moving cash between safes is neither), but they
still count in the per-account balances that make up net_balance.
"""

from decimal import Decimal
from typing import Iterable, Optional

from home_ledger.ledger.currency import ExchangeRates, convert
from home_ledger.ledger.store import account_balance, deferred_net_balance, sort_newest_first
from home_ledger.ledger.transactions import is_internal_transfer
from home_ledger.models.ledger import CASH_ROLES, Account, AccountRole, TransactionType
from home_ledger.models.reports import AccountOverview, LedgerSummary, SummaryLine


def cash_balance(accounts: Iterable[Account], rates: ExchangeRates) -> Decimal:
    """
    Converted balance of all safe and bank accounts.

    Alerts are evaluated against this figure, so callers must pass the
    real accounts, never a decoy projection.
    """
    return sum(
        (
            convert(account_balance(account.transactions), account.currency, rates)
            for account in accounts
            if account.role in CASH_ROLES
        ),
        Decimal("0"),
    )


def compute_summary(accounts: Iterable[Account], rates: ExchangeRates) -> LedgerSummary:
    accounts = list(accounts)
    totals = {type_: Decimal("0") for type_ in TransactionType}

    for account in accounts:
        for t in account.transactions:
            if is_internal_transfer(t):
                continue
            totals[t.type] += convert(t.amount, t.currency, rates)

    total_liabilities = totals[TransactionType.LIABILITY]
    total_receivables = totals[TransactionType.RECEIVABLE]
    net_deferred_balance = total_receivables - total_liabilities
    net_balance = cash_balance(accounts, rates)

    return LedgerSummary(
        total_income=totals[TransactionType.INCOME],
        total_expenses=totals[TransactionType.EXPENSE],
        total_liabilities=total_liabilities,
        total_receivables=total_receivables,
        net_deferred_balance=net_deferred_balance,
        net_balance=net_balance,
        projected_net_balance=net_balance - total_liabilities,
        total_sum=net_balance + net_deferred_balance,
    )


def summary_detail(
    accounts: Iterable[Account],
    type_: TransactionType,
) -> list[SummaryLine]:
    """Every transaction of one type with its account, newest first."""
    names = {}
    matching = []
    for account in accounts:
        for t in account.transactions:
            if t.type != type_ or is_internal_transfer(t):
                continue
            names[t.id] = (account.id, account.name)
            matching.append(t)

    return [
        SummaryLine(
            transaction=t,
            account_id=names[t.id][0],
            account_name=names[t.id][1],
        )
        for t in sort_newest_first(matching)
    ]


def account_overview(accounts: Iterable[Account]) -> list[AccountOverview]:
    overview = []
    for account in accounts:
        net_deferred: Optional[Decimal] = None
        if account.role == AccountRole.DEFERRED:
            net_deferred = deferred_net_balance(account.transactions)
        overview.append(AccountOverview(
            account_id=account.id,
            name=account.name,
            currency=account.currency,
            role=account.role,
            balance=account_balance(account.transactions),
            net_deferred_balance=net_deferred,
        ))
    return overview
