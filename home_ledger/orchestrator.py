"""
Main Orchestrator for Home Ledger

This module ties together all the components and owns the application
state: the current AccountStore snapshot, exchange rates, goals, savings
alert settings and the session state (unlocked, decoy mode, dismissed
alerts).

DESIGN DECISION: The service enforces the boundaries:
- Nothing runs until the session is unlocked
- The ledger engine only ever sees the real data; decoy mode is applied
  when building the display view
- A new snapshot replaces the current one only after it was persisted
- Every change and every rejected operation is audited

The engine functions it calls are synchronous and pure; only storage and
audit calls are awaited.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from home_ledger.audit import AuditLogger, create_correlation_id
from home_ledger.config import LedgerSettings, get_settings
from home_ledger.ledger import goals as goal_tracker
from home_ledger.ledger.alerts import dismissal_key, evaluate_alerts
from home_ledger.ledger.backup import build_backup, parse_backup
from home_ledger.ledger.decoy import project, project_alerts
from home_ledger.ledger.defaults import default_accounts, default_exchange_rates
from home_ledger.ledger.errors import LedgerError, TransactionNotFound, ValidationError
from home_ledger.ledger.settlements import settlement_status
from home_ledger.ledger.statements import (
    StatementRenderer,
    date_range_label,
    filter_transactions,
    statement_rows,
)
from home_ledger.ledger.store import AccountStore
from home_ledger.ledger.summary import account_overview, compute_summary, summary_detail
from home_ledger.ledger.transactions import TransactionLedger
from home_ledger.models.audit import AuditEventType
from home_ledger.models.ledger import (
    Account,
    Currency,
    Goal,
    TransactionRequest,
    TransactionType,
    ValidationIssue,
)
from home_ledger.models.reports import (
    AccountOverview,
    AlertDismissals,
    AlertState,
    LedgerSummary,
    SettlementStatus,
    SummaryLine,
)
from home_ledger.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStoreInterface,
    StorageError,
)

logger = structlog.get_logger(__name__)


# Persisted keys
ACCOUNTS_KEY = "accounts"
EXCHANGE_RATES_KEY = "exchangeRates"
GOALS_KEY = "goals"
SAVINGS_THRESHOLD_KEY = "savingsThreshold"
SAVINGS_PERCENTAGE_KEY = "savingsPercentage"
PASSWORD_HASH_KEY = "passwordHash"


class NotAuthenticatedError(LedgerError):
    """An operation was attempted before the session was unlocked."""

    def __init__(self):
        super().__init__("The ledger is locked")


class DisplayView(BaseModel):
    """What the presentation layer shows, decoy projection applied."""
    model_config = ConfigDict(frozen=True)

    accounts: tuple[Account, ...]
    goals: tuple[Goal, ...]
    summary: LedgerSummary
    alerts: AlertState
    decoy_active: bool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _rates_to_storage(rates) -> dict[str, str]:
    return {currency.value: str(rate) for currency, rate in rates.items()}


def _rates_from_storage(raw: Any) -> dict[Currency, Decimal]:
    if not isinstance(raw, dict):
        raise TypeError(f"expected an object of rates, got {type(raw).__name__}")
    known = {c.value for c in Currency}
    return {
        Currency(code): Decimal(str(rate))
        for code, rate in raw.items()
        if code in known and rate
    }


class LedgerService:
    """
    Coordinates the ledger engine, storage and audit log.

    Flow of every change:
    1. Check the session is unlocked
    2. Run the engine operation against the current snapshot
    3. Persist the changed keys
    4. Swap in the new snapshot
    5. Audit

    A rejected operation (LedgerError) is audited as a warning and
    re-raised; the current state is untouched.
    """

    def __init__(
        self,
        state_store: KeyValueStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
        ledger: Optional[TransactionLedger] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._kv = state_store
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().ledger
        self._clock = clock
        self._ledger = ledger or TransactionLedger(
            clock=clock,
            settlement_epsilon=self._settings.settlement_epsilon,
        )

        # Persisted state (defaults until load())
        self._store = default_accounts()
        self._rates = dict(default_exchange_rates(self._settings))
        self._goals: tuple[Goal, ...] = ()
        self._savings_threshold = self._settings.default_savings_threshold
        self._savings_percentage = self._settings.default_savings_percentage

        # Session state
        self._authenticated = False
        self._decoy_active = True
        self._dismissals = AlertDismissals()
        self._correlation_id = None

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def store(self) -> AccountStore:
        return self._store

    @property
    def exchange_rates(self) -> dict[Currency, Decimal]:
        return dict(self._rates)

    @property
    def goals(self) -> tuple[Goal, ...]:
        return self._goals

    @property
    def savings_threshold(self) -> int:
        return self._savings_threshold

    @property
    def savings_percentage(self) -> int:
        return self._savings_percentage

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    @property
    def decoy_active(self) -> bool:
        return self._decoy_active

    @property
    def dismissals(self) -> AlertDismissals:
        return self._dismissals

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def _load_key(self, key: str, parse: Callable[[Any], Any], default: Any) -> Any:
        try:
            raw = await self._kv.load(key)
        except StorageError as e:
            await self._log_storage_error("load", key, e)
            raise
        if raw is None:
            return default
        try:
            return parse(raw)
        except (PydanticValidationError, ValueError, TypeError, ArithmeticError) as e:
            await self._log_storage_error("load", key, e)
            raise StorageError(f"Stored value for '{key}' is invalid: {e}") from e

    async def load(self) -> None:
        """
        Load the persisted state. Keys never written keep their defaults.

        Raises:
            StorageError: If a key cannot be read or holds invalid data
        """
        store = await self._load_key(
            ACCOUNTS_KEY, AccountStore.from_storage, default_accounts()
        )
        rates = await self._load_key(
            EXCHANGE_RATES_KEY, _rates_from_storage, dict(default_exchange_rates(self._settings))
        )
        goals = await self._load_key(
            GOALS_KEY, lambda raw: tuple(Goal.model_validate(g) for g in raw), ()
        )
        threshold = await self._load_key(
            SAVINGS_THRESHOLD_KEY, int, self._settings.default_savings_threshold
        )
        percentage = await self._load_key(
            SAVINGS_PERCENTAGE_KEY, int, self._settings.default_savings_percentage
        )

        self._store = store
        self._rates = rates
        self._goals = goals
        self._savings_threshold = threshold
        self._savings_percentage = percentage
        logger.info(
            "ledger_state_loaded",
            accounts=len(self._store.accounts),
            goals=len(self._goals),
        )

    async def _persist(self, values: dict[str, Any]) -> None:
        """
        Write every key or none of them.

        When a write fails, the keys already written get their previous
        stored values back before the error is re-raised.
        """
        previous: dict[str, Any] = {}
        if len(values) > 1:
            for key in values:
                try:
                    previous[key] = await self._kv.load(key)
                except StorageError as e:
                    await self._log_storage_error("load", key, e)
                    raise

        written: list[str] = []
        for key, value in values.items():
            try:
                await self._kv.store(key, value)
            except StorageError as e:
                await self._log_storage_error("store", key, e)
                await self._roll_back(written, previous)
                raise
            written.append(key)

    async def _roll_back(self, keys: list[str], previous: dict[str, Any]) -> None:
        for key in reversed(keys):
            try:
                if previous[key] is None:
                    await self._kv.delete(key)
                else:
                    await self._kv.store(key, previous[key])
            except StorageError as e:
                await self._log_storage_error("rollback", key, e)

    async def _log_storage_error(self, operation: str, key: str, error: Exception) -> None:
        if self._audit_logger:
            await self._audit_logger.log_storage_error(
                operation=operation,
                key=key,
                error_message=str(error),
                correlation_id=self._correlation_id,
            )
        else:
            logger.error("storage_failed", operation=operation, key=key, error=str(error))

    async def has_password(self) -> bool:
        """Whether a password was ever set (setup vs. unlock screen)."""
        return await self._kv.load(PASSWORD_HASH_KEY) is not None

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def _require_unlocked(self) -> None:
        if not self._authenticated:
            raise NotAuthenticatedError()

    async def unlock(self, authenticated: bool) -> bool:
        """
        Open the session if the external auth check succeeded.

        Every fresh unlock starts in decoy mode with no alerts dismissed.
        """
        if not authenticated:
            if self._audit_logger:
                await self._audit_logger.log_operation_rejected(
                    operation="unlock",
                    error=NotAuthenticatedError(),
                )
            return False

        self._authenticated = True
        self._decoy_active = True
        self._dismissals = AlertDismissals()
        self._correlation_id = create_correlation_id()

        if self._audit_logger:
            await self._audit_logger.log_session_event(
                event_type=AuditEventType.SESSION_UNLOCKED,
                description="Session unlocked",
                correlation_id=self._correlation_id,
            )
        return True

    async def lock(self) -> None:
        correlation_id = self._correlation_id
        self._authenticated = False
        self._decoy_active = True
        self._dismissals = AlertDismissals()
        self._correlation_id = None

        if self._audit_logger:
            await self._audit_logger.log_session_event(
                event_type=AuditEventType.SESSION_LOCKED,
                description="Session locked",
                correlation_id=correlation_id,
            )

    async def toggle_decoy(self) -> bool:
        """Flip decoy mode. Returns the new state."""
        self._require_unlocked()
        self._decoy_active = not self._decoy_active

        if self._audit_logger:
            await self._audit_logger.log_session_event(
                event_type=AuditEventType.DECOY_TOGGLED,
                description=f"Decoy mode {'on' if self._decoy_active else 'off'}",
                details={"active": self._decoy_active},
                correlation_id=self._correlation_id,
            )
        return self._decoy_active

    # -------------------------------------------------------------------------
    # Ledger operations
    # -------------------------------------------------------------------------

    async def _rejected(self, operation: str, error: LedgerError) -> None:
        if self._audit_logger:
            await self._audit_logger.log_operation_rejected(
                operation=operation,
                error=error,
                correlation_id=self._correlation_id,
            )

    async def _apply(
        self,
        operation: str,
        change: Callable[[AccountStore], AccountStore],
    ) -> tuple[AccountStore, AccountStore]:
        """Run an engine operation, persist and swap. Returns (old, new)."""
        self._require_unlocked()
        old = self._store
        try:
            new = change(old)
        except LedgerError as e:
            await self._rejected(operation, e)
            raise

        await self._persist({ACCOUNTS_KEY: new.to_storage()})
        self._store = new
        return old, new

    @staticmethod
    def _added_ids(old: AccountStore, new: AccountStore) -> list[str]:
        before = {t.id for _, t in old.all_transactions()}
        return [t.id for _, t in new.all_transactions() if t.id not in before]

    async def upsert_transaction(self, request: TransactionRequest) -> AccountStore:
        """Create or edit a transaction (including transfers)."""
        old, new = await self._apply(
            "upsert_transaction",
            lambda store: self._ledger.upsert_transaction(store, request),
        )

        if self._audit_logger:
            added = self._added_ids(old, new)
            await self._audit_logger.log_transaction_recorded(
                transaction_id=request.id or (added[0] if added else ""),
                transaction_type=request.type.value,
                amount=request.amount,
                currency=request.currency.value,
                is_edit=request.is_edit,
                correlation_id=self._correlation_id,
            )
        return new

    async def delete_transaction(self, transaction_id: str) -> AccountStore:
        """Delete a transaction and its settlement records. Irreversible."""
        old, new = await self._apply(
            "delete_transaction",
            lambda store: self._ledger.delete_transaction(store, transaction_id),
        )

        if self._audit_logger:
            removed = (
                sum(1 for _ in old.all_transactions())
                - sum(1 for _ in new.all_transactions())
            )
            await self._audit_logger.log_transaction_deleted(
                transaction_id=transaction_id,
                removed_count=removed,
                correlation_id=self._correlation_id,
            )
        return new

    async def settle_debt(
        self,
        debt_transaction_id: str,
        amount_paid: Decimal,
        target_account_id: str,
    ) -> SettlementStatus:
        """Record a (partial) settlement. Returns the debt's new status."""
        _, new = await self._apply(
            "settle_debt",
            lambda store: self._ledger.settle_debt(
                store, debt_transaction_id, amount_paid, target_account_id
            ),
        )

        _, debt = new.find_transaction(debt_transaction_id)
        status = settlement_status(debt, new, self._settings.settlement_epsilon)

        if self._audit_logger:
            await self._audit_logger.log_debt_settled(
                debt_id=debt_transaction_id,
                amount_paid=amount_paid,
                remaining=status.remaining,
                target_account_id=target_account_id,
                correlation_id=self._correlation_id,
            )
        return status

    async def exchange_currencies(
        self,
        amount_to_sell: Decimal,
        from_currency: Currency,
        to_currency: Currency,
        rate: Decimal,
        amount_to_receive: Decimal,
    ) -> AccountStore:
        _, new = await self._apply(
            "exchange_currencies",
            lambda store: self._ledger.exchange_currencies(
                store, amount_to_sell, from_currency, to_currency, rate, amount_to_receive
            ),
        )

        if self._audit_logger:
            await self._audit_logger.log_currency_exchanged(
                from_currency=from_currency.value,
                to_currency=to_currency.value,
                amount_sold=amount_to_sell,
                amount_received=amount_to_receive,
                rate=rate,
                correlation_id=self._correlation_id,
            )
        return new

    async def transfer_to_savings(
        self,
        amount: Decimal,
        currency: Currency = Currency.YER,
    ) -> AccountStore:
        """Move cash from a safe to its bank account and dismiss the savings alert."""
        old, new = await self._apply(
            "transfer_to_savings",
            lambda store: self._ledger.transfer_to_savings(store, amount, currency),
        )
        self._dismissals = self._dismissals.model_copy(update={"savings": True})

        if self._audit_logger:
            added = self._added_ids(old, new)
            await self._audit_logger.log_transaction_recorded(
                transaction_id=added[0] if added else "",
                transaction_type=TransactionType.TRANSFER.value,
                amount=amount,
                currency=currency.value,
                is_edit=False,
                correlation_id=self._correlation_id,
            )
        return new

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def _apply_goals(
        self,
        operation: str,
        change: Callable[[tuple[Goal, ...]], tuple[tuple[Goal, ...], Optional[Goal]]],
    ) -> Optional[Goal]:
        self._require_unlocked()
        try:
            goals, goal = change(self._goals)
        except LedgerError as e:
            await self._rejected(operation, e)
            raise

        await self._persist({GOALS_KEY: [g.to_storage() for g in goals]})
        self._goals = goals
        return goal

    async def create_goal(
        self,
        description: str,
        target_amount: Decimal,
        target_date: datetime,
    ) -> Goal:
        goal = await self._apply_goals(
            "create_goal",
            lambda goals: goal_tracker.create_goal(
                goals, description, target_amount, target_date, now=self._clock()
            ),
        )
        if self._audit_logger:
            await self._audit_logger.log_goal_changed(
                goal_id=goal.id,
                action="created",
                description=goal.description,
                correlation_id=self._correlation_id,
            )
        return goal

    async def update_goal(
        self,
        goal_id: str,
        description: str,
        target_amount: Decimal,
        target_date: datetime,
    ) -> Goal:
        goal = await self._apply_goals(
            "update_goal",
            lambda goals: goal_tracker.update_goal(
                goals, goal_id, description, target_amount, target_date, now=self._clock()
            ),
        )
        if self._audit_logger:
            await self._audit_logger.log_goal_changed(
                goal_id=goal_id,
                action="updated",
                description=goal.description,
                correlation_id=self._correlation_id,
            )
        return goal

    async def delete_goal(self, goal_id: str) -> None:
        await self._apply_goals(
            "delete_goal",
            lambda goals: (goal_tracker.delete_goal(goals, goal_id), None),
        )
        if self._audit_logger:
            await self._audit_logger.log_goal_changed(
                goal_id=goal_id,
                action="deleted",
                correlation_id=self._correlation_id,
            )

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def update_settings(
        self,
        savings_threshold: Optional[int] = None,
        savings_percentage: Optional[int] = None,
        exchange_rates: Optional[dict[Currency, Decimal]] = None,
    ) -> None:
        """Change the savings alert settings and/or exchange rates."""
        self._require_unlocked()

        issues = []
        if savings_threshold is not None and savings_threshold <= 0:
            issues.append(ValidationIssue(
                field="savings_threshold",
                issue_type="invalid_value",
                message="The savings threshold must be greater than zero",
            ))
        if savings_percentage is not None and not 1 <= savings_percentage <= 100:
            issues.append(ValidationIssue(
                field="savings_percentage",
                issue_type="invalid_value",
                message="The savings percentage must be between 1 and 100",
            ))
        for currency, rate in (exchange_rates or {}).items():
            if rate is None or rate <= 0:
                issues.append(ValidationIssue(
                    field="exchange_rates",
                    issue_type="invalid_value",
                    message=f"The {Currency(currency).value} rate must be greater than zero",
                ))
        if issues:
            error = ValidationError.from_issues(issues)
            await self._rejected("update_settings", error)
            raise error

        changes: dict[str, Any] = {}
        if savings_threshold is not None:
            changes[SAVINGS_THRESHOLD_KEY] = savings_threshold
        if savings_percentage is not None:
            changes[SAVINGS_PERCENTAGE_KEY] = savings_percentage
        rates = None
        if exchange_rates is not None:
            rates = {**self._rates, **{Currency(c): Decimal(r) for c, r in exchange_rates.items()}}
            changes[EXCHANGE_RATES_KEY] = _rates_to_storage(rates)
        if not changes:
            return

        await self._persist(changes)
        if savings_threshold is not None:
            self._savings_threshold = savings_threshold
        if savings_percentage is not None:
            self._savings_percentage = savings_percentage
        if rates is not None:
            self._rates = rates

        if self._audit_logger:
            await self._audit_logger.log_settings_updated(
                changes=changes,
                correlation_id=self._correlation_id,
            )

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------

    async def _dismiss(self, update: dict, alert: str) -> None:
        self._require_unlocked()
        self._dismissals = self._dismissals.model_copy(update=update)
        if self._audit_logger:
            await self._audit_logger.log_session_event(
                event_type=AuditEventType.ALERT_DISMISSED,
                description=f"Alert dismissed: {alert}",
                details={"alert": alert},
                correlation_id=self._correlation_id,
            )

    async def dismiss_savings_alert(self) -> None:
        await self._dismiss({"savings": True}, "savings")

    async def dismiss_debt_alert(self) -> None:
        await self._dismiss({"debt": True}, "debt")

    async def dismiss_goal_alert(self, goal_id: str) -> None:
        """Hide a goal's reminder until the next calendar month."""
        key = dismissal_key(goal_id, self._clock())
        await self._dismiss({"goal_keys": self._dismissals.goal_keys | {key}}, key)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def summary(self) -> LedgerSummary:
        """Summary of the real figures."""
        self._require_unlocked()
        return compute_summary(self._store.accounts, self._rates)

    def alerts(self) -> AlertState:
        """Alerts evaluated on the real figures."""
        self._require_unlocked()
        return evaluate_alerts(
            self._store,
            self._goals,
            self._rates,
            self._savings_threshold,
            self._savings_percentage,
            self._dismissals,
            self._clock(),
        )

    def settlement_status(self, debt_transaction_id: str) -> SettlementStatus:
        self._require_unlocked()
        found = self._store.find_transaction(debt_transaction_id)
        if found is None:
            raise TransactionNotFound(debt_transaction_id)
        return settlement_status(found[1], self._store, self._settings.settlement_epsilon)

    def _displayed(self) -> tuple[Sequence[Account], Sequence[Goal]]:
        return project(
            self._store.accounts,
            self._goals,
            self._decoy_active,
            self._settings.decoy_factor,
        )

    def display_view(self) -> DisplayView:
        """
        Everything the presentation layer shows.

        Amounts are decoyed when decoy mode is on. Which alerts are shown
        is always decided on the real figures.
        """
        self._require_unlocked()
        accounts, goals = self._displayed()
        return DisplayView(
            accounts=tuple(accounts),
            goals=tuple(goals),
            summary=compute_summary(accounts, self._rates),
            alerts=project_alerts(self.alerts(), self._decoy_active, self._settings.decoy_factor),
            decoy_active=self._decoy_active,
        )

    def summary_detail(self, type_: TransactionType) -> list[SummaryLine]:
        self._require_unlocked()
        accounts, _ = self._displayed()
        return summary_detail(accounts, type_)

    def account_overview(self) -> list[AccountOverview]:
        self._require_unlocked()
        accounts, _ = self._displayed()
        return account_overview(accounts)

    def export_statement(
        self,
        account_id: str,
        renderer: StatementRenderer,
        type_: Optional[TransactionType] = None,
        text: str = "",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> bytes:
        """Render the displayed transactions of one account, filtered."""
        self._require_unlocked()
        self._store.get(account_id)
        accounts, _ = self._displayed()
        account = next(a for a in accounts if a.id == account_id)
        transactions = filter_transactions(account.transactions, type_, text, start, end)
        return renderer.render(
            statement_rows(transactions),
            account.name,
            date_range_label(start, end),
        )

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def export_backup(self) -> dict:
        """Backup document of the real data."""
        self._require_unlocked()
        return build_backup(
            self._store,
            self._goals,
            self._savings_threshold,
            self._savings_percentage,
            self._rates,
        )

    async def restore_backup(self, raw) -> None:
        """
        Replace all five persisted keys with a backup's contents.

        Raises:
            MalformedBackup: If the document is incomplete or invalid;
                nothing is changed
        """
        self._require_unlocked()
        try:
            document = parse_backup(raw)
        except LedgerError as e:
            await self._rejected("restore_backup", e)
            raise

        store = document.account_store()
        rates = dict(document.exchange_rates)
        await self._persist({
            ACCOUNTS_KEY: store.to_storage(),
            GOALS_KEY: [g.to_storage() for g in document.goals],
            SAVINGS_THRESHOLD_KEY: document.savings_threshold,
            SAVINGS_PERCENTAGE_KEY: document.savings_percentage,
            EXCHANGE_RATES_KEY: _rates_to_storage(rates),
        })
        self._store = store
        self._goals = tuple(document.goals)
        self._savings_threshold = document.savings_threshold
        self._savings_percentage = document.savings_percentage
        self._rates = rates

        if self._audit_logger:
            await self._audit_logger.log_backup_restored(
                account_count=len(store.accounts),
                transaction_count=sum(1 for _ in store.all_transactions()),
                goal_count=len(self._goals),
                correlation_id=self._correlation_id,
            )


def create_app_components(
    use_storage: bool = True,
) -> tuple[LedgerService, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured storage backend.
                    Set to False for testing without storage.

    Returns:
        (ledger_service, sheets_client)
    """
    settings = get_settings()
    sheets_client = None
    state_store: KeyValueStoreInterface = InMemoryKeyValueStore()
    audit_logger = AuditLogger()  # Local-only logging

    if use_storage and settings.storage.backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            state_store = GoogleSheetsKeyValueStore(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            state_store = InMemoryKeyValueStore()
            audit_logger = AuditLogger()

    service = LedgerService(
        state_store=state_store,
        audit_logger=audit_logger,
        settings=settings.ledger,
    )
    return service, sheets_client
