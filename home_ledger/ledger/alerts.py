"""
Alert Evaluator

Derives the savings, debt and monthly goal alerts.

IMPORTANT: Alerts are always evaluated on the real accounts. When decoy
mode is on, only the amounts they display are scaled afterwards (see
decoy.project_alerts).
"""

from datetime import datetime
from decimal import ROUND_FLOOR, Decimal
from typing import Sequence

from home_ledger.ledger.currency import ExchangeRates
from home_ledger.ledger.goals import monthly_contribution
from home_ledger.ledger.settlements import outstanding_liabilities
from home_ledger.ledger.store import AccountStore
from home_ledger.ledger.summary import cash_balance
from home_ledger.models.ledger import Goal
from home_ledger.models.reports import (
    AlertDismissals,
    AlertState,
    DebtAlert,
    GoalAlert,
    SavingsAlert,
)


def dismissal_key(goal_id: str, when: datetime) -> str:
    """Key of a goal's dismissal for the calendar month of `when`."""
    return f"{goal_id}-{when.year}-{when.month}"


def suggested_savings(cash: Decimal, percentage: int) -> Decimal:
    return (cash * Decimal(percentage) / 100).to_integral_value(rounding=ROUND_FLOOR)


def evaluate_alerts(
    store: AccountStore,
    goals: Sequence[Goal],
    rates: ExchangeRates,
    savings_threshold: int,
    savings_percentage: int,
    dismissals: AlertDismissals,
    now: datetime,
) -> AlertState:
    cash = cash_balance(store.accounts, rates)

    savings = None
    if cash > savings_threshold and not dismissals.savings:
        savings = SavingsAlert(suggested_amount=suggested_savings(cash, savings_percentage))

    debt = None
    if cash > 0 and not dismissals.debt:
        outstanding = outstanding_liabilities(store, rates)
        if outstanding > 0:
            debt = DebtAlert(outstanding_liabilities=outstanding)

    goal_alerts = []
    for goal in goals:
        key = dismissal_key(goal.id, now)
        if key in dismissals.goal_keys:
            continue
        goal_alerts.append(GoalAlert(
            goal=goal,
            monthly_contribution=monthly_contribution(goal),
            dismissal_key=key,
        ))

    return AlertState(savings=savings, debt=debt, goals=goal_alerts)
