"""
Data Models Package

This package contains all Pydantic models used in Home Ledger.
All data flowing through the system must conform to these schemas.
"""

from home_ledger.models.ledger import (
    BASE_CURRENCY,
    CURRENCY_DETAILS,
    TRANSACTION_TYPE_LABELS,
    Account,
    AccountRole,
    Currency,
    Goal,
    IncomeSource,
    Transaction,
    TransactionHistoryEntry,
    TransactionRequest,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    account_id,
)
from home_ledger.models.reports import (
    AccountOverview,
    AlertDismissals,
    AlertState,
    DebtAlert,
    GoalAlert,
    LedgerSummary,
    SavingsAlert,
    SettlementStatus,
    SummaryLine,
)
from home_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "BASE_CURRENCY",
    "CURRENCY_DETAILS",
    "TRANSACTION_TYPE_LABELS",
    "Account",
    "AccountRole",
    "Currency",
    "Goal",
    "IncomeSource",
    "Transaction",
    "TransactionHistoryEntry",
    "TransactionRequest",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "account_id",
    # Report models
    "AccountOverview",
    "AlertDismissals",
    "AlertState",
    "DebtAlert",
    "GoalAlert",
    "LedgerSummary",
    "SavingsAlert",
    "SettlementStatus",
    "SummaryLine",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
