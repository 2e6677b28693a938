"""
Goal Tracker

CRUD over saving goals plus the monthly contribution each goal needs.
Goals are kept in an immutable tuple; every change returns a new one.
"""

from datetime import datetime
from decimal import ROUND_CEILING, Decimal
from typing import Callable, Optional, Sequence
from uuid import uuid4

from home_ledger.ledger.errors import GoalNotFound, ValidationError
from home_ledger.models.ledger import Goal
from home_ledger.validation import TransactionValidator


def new_goal_id() -> str:
    return f"goal-{uuid4().hex[:16]}"


def _month_difference(start: datetime, end: datetime) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def monthly_contribution(goal: Goal) -> Decimal:
    """
    Amount to put aside each month to reach the goal in time.

    Months are counted by calendar month between creation and target
    date; a goal due within its creation month needs the full target.
    """
    months = _month_difference(goal.created_at, goal.target_date)
    if months <= 0:
        return goal.target_amount
    return (goal.target_amount / months).to_integral_value(rounding=ROUND_CEILING)


def months_remaining(goal: Goal, now: datetime) -> int:
    return max(0, _month_difference(now, goal.target_date))


def _validate(
    description: str,
    target_amount: Optional[Decimal],
    target_date: Optional[datetime],
    now: datetime,
) -> None:
    result = TransactionValidator().validate_goal(description, target_amount, target_date, now)
    if not result.is_valid:
        raise ValidationError.from_issues(result.issues)


def _index_of(goals: Sequence[Goal], goal_id: str) -> int:
    for i, goal in enumerate(goals):
        if goal.id == goal_id:
            return i
    raise GoalNotFound(goal_id)


def create_goal(
    goals: Sequence[Goal],
    description: str,
    target_amount: Decimal,
    target_date: datetime,
    now: datetime,
    id_factory: Callable[[], str] = new_goal_id,
) -> tuple[tuple[Goal, ...], Goal]:
    """Add a goal. Returns the new goal tuple and the created goal."""
    _validate(description, target_amount, target_date, now)
    goal = Goal(
        id=id_factory(),
        description=description,
        target_amount=target_amount,
        target_date=target_date,
        created_at=now,
    )
    return tuple(goals) + (goal,), goal


def update_goal(
    goals: Sequence[Goal],
    goal_id: str,
    description: str,
    target_amount: Decimal,
    target_date: datetime,
    now: datetime,
) -> tuple[tuple[Goal, ...], Goal]:
    """Replace a goal's description, target and date; id and created_at are kept."""
    index = _index_of(goals, goal_id)
    _validate(description, target_amount, target_date, now)

    original = goals[index]
    updated = Goal(
        id=original.id,
        description=description,
        target_amount=target_amount,
        target_date=target_date,
        created_at=original.created_at,
    )
    result = list(goals)
    result[index] = updated
    return tuple(result), updated


def delete_goal(goals: Sequence[Goal], goal_id: str) -> tuple[Goal, ...]:
    index = _index_of(goals, goal_id)
    return tuple(goals[:index]) + tuple(goals[index + 1:])
