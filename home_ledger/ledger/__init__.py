"""
Ledger engine.

Pure, synchronous operations over immutable AccountStore snapshots.
"""

from home_ledger.ledger.alerts import dismissal_key, evaluate_alerts
from home_ledger.ledger.backup import BackupDocument, build_backup, parse_backup
from home_ledger.ledger.currency import (
    ExchangeRates,
    convert,
    preview_exchange,
    suggest_exchange_rate,
)
from home_ledger.ledger.decoy import DECOY_FACTOR, project, project_alerts
from home_ledger.ledger.defaults import default_accounts, default_exchange_rates
from home_ledger.ledger.errors import (
    AccountNotFound,
    GoalNotFound,
    InsufficientBalance,
    LedgerError,
    MalformedBackup,
    TransactionNotFound,
    ValidationError,
)
from home_ledger.ledger.goals import (
    create_goal,
    delete_goal,
    monthly_contribution,
    months_remaining,
    update_goal,
)
from home_ledger.ledger.settlements import (
    outstanding_liabilities,
    settled_amounts,
    settlement_index,
    settlement_status,
)
from home_ledger.ledger.statements import (
    StatementRenderer,
    StatementRow,
    filter_transactions,
    statement_rows,
)
from home_ledger.ledger.store import AccountStore, account_balance
from home_ledger.ledger.summary import (
    account_overview,
    cash_balance,
    compute_summary,
    summary_detail,
)
from home_ledger.ledger.transactions import TransactionLedger, is_internal_transfer

__all__ = [
    # Store
    "AccountStore",
    "account_balance",
    # Engine
    "TransactionLedger",
    "is_internal_transfer",
    "settled_amounts",
    "settlement_index",
    "settlement_status",
    "outstanding_liabilities",
    # Reads
    "compute_summary",
    "cash_balance",
    "summary_detail",
    "account_overview",
    "evaluate_alerts",
    "dismissal_key",
    "project",
    "project_alerts",
    "DECOY_FACTOR",
    # Currency
    "ExchangeRates",
    "convert",
    "suggest_exchange_rate",
    "preview_exchange",
    # Goals
    "create_goal",
    "update_goal",
    "delete_goal",
    "monthly_contribution",
    "months_remaining",
    # Data
    "default_accounts",
    "default_exchange_rates",
    "BackupDocument",
    "build_backup",
    "parse_backup",
    "StatementRenderer",
    "StatementRow",
    "filter_transactions",
    "statement_rows",
    # Errors
    "LedgerError",
    "ValidationError",
    "InsufficientBalance",
    "AccountNotFound",
    "TransactionNotFound",
    "GoalNotFound",
    "MalformedBackup",
]
