"""
Ledger Error Taxonomy

Every error here is recoverable and local: the operation that raised it
left the snapshot it was given untouched.
"""

from typing import Optional

from home_ledger.models.ledger import ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """
    The request broke an input rule (non-positive amount, missing
    description or date, mismatched currency, ...).
    """

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []

    @classmethod
    def from_issues(cls, issues: list[ValidationIssue]) -> "ValidationError":
        return cls("; ".join(issue.message for issue in issues), issues)


class InsufficientBalance(LedgerError):
    """An expense, transfer or exchange exceeds the source balance."""

    def __init__(self, account_name: str, available, requested):
        super().__init__(
            f"Insufficient balance in '{account_name}': "
            f"available {available}, requested {requested}"
        )
        self.account_name = account_name
        self.available = available
        self.requested = requested


class AccountNotFound(LedgerError):
    """No account matches the given or computed id."""

    def __init__(self, account_id: str):
        super().__init__(f"Account not found: {account_id}")
        self.account_id = account_id


class TransactionNotFound(LedgerError):
    """No transaction has the given id."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id


class GoalNotFound(LedgerError):
    """No goal has the given id."""

    def __init__(self, goal_id: str):
        super().__init__(f"Goal not found: {goal_id}")
        self.goal_id = goal_id


class MalformedBackup(LedgerError):
    """A restore document is missing required fields or cannot be parsed."""
    pass
