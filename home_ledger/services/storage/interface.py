"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for another backend later
2. Use in-memory storage for testing
3. Keep the ledger decoupled from storage implementation

The interface is intentionally simple - the ledger state is a handful of
independent keys (accounts, exchangeRates, goals, savingsThreshold,
savingsPercentage, passwordHash), each holding one JSON value.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from home_ledger.models.audit import AuditEvent


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for the persisted key-value state.

    Values are JSON-compatible (dicts, lists, strings, numbers).
    """

    @abstractmethod
    async def load(self, key: str) -> Optional[Any]:
        """
        Load the value stored under a key.

        Args:
            key: The state key

        Returns:
            The decoded value, or None if the key was never stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def store(self, key: str, value: Any) -> bool:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The state key
            value: JSON-compatible value

        Returns:
            True if stored successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a key.

        Args:
            key: The state key

        Returns:
            True if the key existed and was removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one unlocked session).

        Args:
            correlation_id: The correlation identifier

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'transaction', 'goal')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
