"""
Decoy Transform

Display-time obfuscation: every shown amount is scaled by a fixed factor.

IMPORTANT: The projection is for presentation only. Engine operations,
summaries used for alerting, and persistence always work on the real
accounts. Alerts are evaluated on real figures first and only their
displayed amounts are scaled afterwards.
"""

from decimal import Decimal
from typing import Sequence

from home_ledger.models.ledger import Account, Goal, Transaction
from home_ledger.models.reports import AlertState

DECOY_FACTOR = Decimal("0.20")


def _scale_transaction(t: Transaction, factor: Decimal) -> Transaction:
    return t.model_copy(update={
        "amount": t.amount * factor,
        "history": tuple(
            entry.model_copy(update={"previous_amount": entry.previous_amount * factor})
            for entry in t.history
        ),
    })


def project(
    accounts: Sequence[Account],
    goals: Sequence[Goal],
    active: bool,
    factor: Decimal = DECOY_FACTOR,
) -> tuple[Sequence[Account], Sequence[Goal]]:
    """
    Return the accounts and goals to display.

    Inactive: the very same objects. Active: copies in which every
    transaction amount, history previous_amount and goal target_amount
    is multiplied by factor. No other field changes.
    """
    if not active:
        return accounts, goals

    scaled_accounts = tuple(
        account.model_copy(update={
            "transactions": tuple(_scale_transaction(t, factor) for t in account.transactions)
        })
        for account in accounts
    )
    scaled_goals = tuple(
        goal.model_copy(update={"target_amount": goal.target_amount * factor})
        for goal in goals
    )
    return scaled_accounts, scaled_goals


def project_alerts(
    alerts: AlertState,
    active: bool,
    factor: Decimal = DECOY_FACTOR,
) -> AlertState:
    """Scale the amounts an alert shows. Which alerts are active never changes."""
    if not active:
        return alerts

    savings = alerts.savings
    if savings is not None:
        savings = savings.model_copy(
            update={"suggested_amount": savings.suggested_amount * factor}
        )
    debt = alerts.debt
    if debt is not None:
        debt = debt.model_copy(
            update={"outstanding_liabilities": debt.outstanding_liabilities * factor}
        )
    goals = [
        alert.model_copy(update={
            "goal": alert.goal.model_copy(
                update={"target_amount": alert.goal.target_amount * factor}
            ),
            "monthly_contribution": alert.monthly_contribution * factor,
        })
        for alert in alerts.goals
    ]
    return AlertState(savings=savings, debt=debt, goals=goals)
