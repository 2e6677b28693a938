"""
Audit Models for Home Ledger

Every change to the ledger is logged for audit purposes.
This provides:
1. Traceability of every balance change
2. Debugging information when an operation is rejected
3. A record of restores and settings changes

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Audit events describe WHAT happened to which record; they are not a
second copy of the ledger and are never used to rebuild it.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger operation has its own event type.
    """
    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSFER_RECORDED = "transfer_recorded"
    DEBT_SETTLED = "debt_settled"
    CURRENCY_EXCHANGED = "currency_exchanged"
    OPERATION_REJECTED = "operation_rejected"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Settings and data
    SETTINGS_UPDATED = "settings_updated"
    BACKUP_RESTORED = "backup_restored"

    # Session
    SESSION_UNLOCKED = "session_unlocked"
    SESSION_LOCKED = "session_locked"
    DECOY_TOGGLED = "decoy_toggled"
    ALERT_DISMISSED = "alert_dismissed"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger change creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal', 'settings')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one session)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_recorded(txn_id, "EXPENSE", amount, "YER", False)
        event = AuditEventBuilder.operation_rejected("settle_debt", error)
    """

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        currency: str,
        is_edit: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        if transaction_type == "TRANSFER":
            event_type = AuditEventType.TRANSFER_RECORDED
        elif is_edit:
            event_type = AuditEventType.TRANSACTION_EDITED
        else:
            event_type = AuditEventType.TRANSACTION_CREATED
        return AuditEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{transaction_type} of {amount} {currency} {'edited' if is_edit else 'recorded'}",
            details={
                "type": transaction_type,
                "amount": str(amount),
                "currency": currency,
                "is_edit": is_edit,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        removed_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction deleted ({removed_count} records removed)",
            details={
                "removed_count": removed_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def debt_settled(
        debt_id: str,
        amount_paid: Decimal,
        remaining: Decimal,
        target_account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_SETTLED,
            entity_type="transaction",
            entity_id=debt_id,
            correlation_id=correlation_id,
            description=f"Debt settled by {amount_paid}, {remaining} remaining",
            details={
                "amount_paid": str(amount_paid),
                "remaining": str(remaining),
                "target_account_id": target_account_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def currency_exchanged(
        from_currency: str,
        to_currency: str,
        amount_sold: Decimal,
        amount_received: Decimal,
        rate: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_EXCHANGED,
            entity_type="exchange",
            correlation_id=correlation_id,
            description=f"Exchanged {amount_sold} {from_currency} for {amount_received} {to_currency}",
            details={
                "from_currency": from_currency,
                "to_currency": to_currency,
                "amount_sold": str(amount_sold),
                "amount_received": str(amount_received),
                "rate": str(rate),
            },
            is_user_action=True,
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        error: Exception,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        issues = [
            issue.model_dump() for issue in getattr(error, "issues", [])
        ]
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="operation",
            entity_id=operation,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {type(error).__name__}",
            details={"issues": issues} if issues else {},
            error_code=type(error).__name__,
            error_message=str(error),
            is_user_action=True,
        )

    @staticmethod
    def goal_changed(
        goal_id: str,
        action: str,
        description: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = {
            "created": AuditEventType.GOAL_CREATED,
            "updated": AuditEventType.GOAL_UPDATED,
            "deleted": AuditEventType.GOAL_DELETED,
        }[action]
        return AuditEvent(
            event_type=event_type,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Goal {action}" + (f": {description}" if description else ""),
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            correlation_id=correlation_id,
            description=f"Settings updated: {', '.join(sorted(changes))}",
            details={key: str(value) for key, value in changes.items()},
            is_user_action=True,
        )

    @staticmethod
    def backup_restored(
        account_count: int,
        transaction_count: int,
        goal_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_RESTORED,
            severity=AuditSeverity.WARNING,
            entity_type="backup",
            correlation_id=correlation_id,
            description="All ledger data replaced from a backup",
            details={
                "account_count": account_count,
                "transaction_count": transaction_count,
                "goal_count": goal_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def session_event(
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        """Unlock, lock, decoy toggle and alert dismissal events."""
        return AuditEvent(
            event_type=event_type,
            entity_type="session",
            correlation_id=correlation_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Storage {operation} failed for key '{key}'",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
