"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of balance changes
2. Debugging capability when operations are rejected
3. A record of restores and settings changes

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't break an operation if logging fails)
- Supports correlation IDs to trace the events of one session
"""

from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from home_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from home_ledger.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        # Always log locally
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        # Persist to storage if available
        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transaction_recorded(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        currency: str,
        is_edit: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a created, edited or transferred transaction."""
        await self.log(AuditEventBuilder.transaction_recorded(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            currency=currency,
            is_edit=is_edit,
            correlation_id=correlation_id,
        ))

    async def log_transaction_deleted(
        self,
        transaction_id: str,
        removed_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            removed_count=removed_count,
            correlation_id=correlation_id,
        ))

    async def log_debt_settled(
        self,
        debt_id: str,
        amount_paid: Decimal,
        remaining: Decimal,
        target_account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.debt_settled(
            debt_id=debt_id,
            amount_paid=amount_paid,
            remaining=remaining,
            target_account_id=target_account_id,
            correlation_id=correlation_id,
        ))

    async def log_currency_exchanged(
        self,
        from_currency: str,
        to_currency: str,
        amount_sold: Decimal,
        amount_received: Decimal,
        rate: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.currency_exchanged(
            from_currency=from_currency,
            to_currency=to_currency,
            amount_sold=amount_sold,
            amount_received=amount_received,
            rate=rate,
            correlation_id=correlation_id,
        ))

    async def log_operation_rejected(
        self,
        operation: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation the ledger refused."""
        await self.log(AuditEventBuilder.operation_rejected(
            operation=operation,
            error=error,
            correlation_id=correlation_id,
        ))

    async def log_goal_changed(
        self,
        goal_id: str,
        action: str,
        description: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.goal_changed(
            goal_id=goal_id,
            action=action,
            description=description,
            correlation_id=correlation_id,
        ))

    async def log_settings_updated(
        self,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.settings_updated(
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_backup_restored(
        self,
        account_count: int,
        transaction_count: int,
        goal_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.backup_restored(
            account_count=account_count,
            transaction_count=transaction_count,
            goal_count=goal_count,
            correlation_id=correlation_id,
        ))

    async def log_session_event(
        self,
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log unlock, lock, decoy toggle or alert dismissal."""
        await self.log(AuditEventBuilder.session_event(
            event_type=event_type,
            description=description,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_storage_error(
        self,
        operation: str,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            key=key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    The service creates one per unlocked session and passes it to every
    event of that session.
    """
    return uuid4()
