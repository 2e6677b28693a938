"""
Derived Report Models

Everything here is computed from the canonical transactions on every read
and never persisted: summaries, settlement status and alert state.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from home_ledger.models.ledger import AccountRole, Currency, Goal, Transaction


class LedgerSummary(BaseModel):
    """
    Aggregate figures in the base currency.

    Income and expense totals exclude the legs of internal transfers.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    total_liabilities: Decimal = Decimal("0")
    total_receivables: Decimal = Decimal("0")
    net_deferred_balance: Decimal = Field(
        default=Decimal("0"),
        description="Receivables minus liabilities"
    )
    net_balance: Decimal = Field(
        default=Decimal("0"),
        description="Converted balance of all safe and bank accounts"
    )
    projected_net_balance: Decimal = Field(
        default=Decimal("0"),
        description="Net balance after paying every liability"
    )
    total_sum: Decimal = Field(
        default=Decimal("0"),
        description="Net balance plus net deferred balance"
    )


class SummaryLine(BaseModel):
    """A transaction listed in a summary drill-down, with its account."""
    model_config = ConfigDict(frozen=True)

    transaction: Transaction
    account_id: str
    account_name: str


class AccountOverview(BaseModel):
    """Per-account figures in the account's own currency."""
    model_config = ConfigDict(frozen=True)

    account_id: str
    name: str
    currency: Currency
    role: AccountRole
    balance: Decimal
    net_deferred_balance: Optional[Decimal] = Field(
        default=None,
        description="Only set for deferred accounts"
    )


class SettlementStatus(BaseModel):
    """How much of a debt has been paid down."""
    model_config = ConfigDict(frozen=True)

    debt_id: str
    amount: Decimal
    settled: Decimal
    remaining: Decimal
    is_fully_settled: bool
    settlement_ids: list[str] = Field(default_factory=list)


# =============================================================================
# ALERTS
# =============================================================================

class SavingsAlert(BaseModel):
    """Cash on hand is above the savings threshold."""
    model_config = ConfigDict(frozen=True)

    suggested_amount: Decimal = Field(
        ...,
        ge=0,
        description="Suggested transfer to savings, in the base currency"
    )


class DebtAlert(BaseModel):
    """There is cash available and liabilities still outstanding."""
    model_config = ConfigDict(frozen=True)

    outstanding_liabilities: Decimal


class GoalAlert(BaseModel):
    """Monthly reminder for a saving goal."""
    model_config = ConfigDict(frozen=True)

    goal: Goal
    monthly_contribution: Decimal
    dismissal_key: str


class AlertState(BaseModel):
    """All alerts active right now."""
    model_config = ConfigDict(frozen=True)

    savings: Optional[SavingsAlert] = None
    debt: Optional[DebtAlert] = None
    goals: list[GoalAlert] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return (1 if self.savings else 0) + (1 if self.debt else 0) + len(self.goals)


class AlertDismissals(BaseModel):
    """
    Session-scoped alert dismissals.

    Goal dismissals are keyed "{goal_id}-{year}-{month}", so a goal comes
    back on its own when the month changes.
    """
    model_config = ConfigDict(frozen=True)

    savings: bool = False
    debt: bool = False
    goal_keys: frozenset[str] = frozenset()
