"""
Settlement Resolver

Settlement records point at the debt they pay down through
settles_transaction_id and may live in any account.

DESIGN DECISION: The debt -> settlements index is rebuilt from the
canonical transaction set on every query. Settlement records can be
deleted on their own, so a running total would drift.

Each settlement writes two linked records of the same amount: the cash
leg (INCOME/EXPENSE in the paying account) and its mirror
(LIABILITY/RECEIVABLE in the deferred account). A debt's settled amount
is the larger of the two sides, so a payment is counted once and still
counts if one of its legs was deleted on its own.
"""

from collections import defaultdict
from decimal import Decimal

from home_ledger.ledger.currency import ExchangeRates, convert
from home_ledger.ledger.store import AccountStore
from home_ledger.models.ledger import DEBT_TYPES, Transaction, TransactionType
from home_ledger.models.reports import SettlementStatus

SETTLEMENT_EPSILON = Decimal("0.001")


def settlement_index(store: AccountStore) -> dict[str, list[Transaction]]:
    """Map debt id -> settlement records referencing it, across all accounts."""
    index: dict[str, list[Transaction]] = defaultdict(list)
    for _, t in store.all_transactions():
        if t.settles_transaction_id:
            index[t.settles_transaction_id].append(t)
    return dict(index)


def _settled_total(records: list[Transaction]) -> Decimal:
    cash_side = sum((t.amount for t in records if t.type not in DEBT_TYPES), Decimal("0"))
    mirror_side = sum((t.amount for t in records if t.type in DEBT_TYPES), Decimal("0"))
    return max(cash_side, mirror_side)


def settled_amounts(store: AccountStore) -> dict[str, Decimal]:
    """Map debt id -> cumulative settled amount."""
    return {
        debt_id: _settled_total(records)
        for debt_id, records in settlement_index(store).items()
    }


def remaining_amount(debt: Transaction, store: AccountStore) -> Decimal:
    return debt.amount - settled_amounts(store).get(debt.id, Decimal("0"))


def settlement_status(
    debt: Transaction,
    store: AccountStore,
    epsilon: Decimal = SETTLEMENT_EPSILON,
) -> SettlementStatus:
    """Settled and remaining amounts of a debt."""
    records = settlement_index(store).get(debt.id, [])
    settled = _settled_total(records)
    remaining = debt.amount - settled
    return SettlementStatus(
        debt_id=debt.id,
        amount=debt.amount,
        settled=settled,
        remaining=remaining,
        is_fully_settled=remaining <= epsilon,
        settlement_ids=[t.id for t in records],
    )


def outstanding_liabilities(store: AccountStore, rates: ExchangeRates) -> Decimal:
    """Converted remaining amount of every primary LIABILITY."""
    settled = settled_amounts(store)
    total = Decimal("0")
    for _, t in store.all_transactions():
        if t.type == TransactionType.LIABILITY and t.is_primary_debt:
            remaining = t.amount - settled.get(t.id, Decimal("0"))
            total += convert(remaining, t.currency, rates)
    return total
