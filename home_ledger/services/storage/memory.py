"""
In-Memory Storage

Process-local implementations of the storage interfaces, used for tests
and for running without a configured backend. Values go through a JSON
round trip on write, so they behave like persisted values: later changes
to the caller's objects never leak into the store.
"""

import json
from typing import Any, Optional
from uuid import UUID

from home_ledger.models.audit import AuditEvent
from home_ledger.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStoreInterface,
    StorageError,
)


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Dict-backed key-value state."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def store(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
        except TypeError as e:
            raise StorageError(f"Value for '{key}' is not JSON serializable: {e}")
        return True

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return sorted(
            (e for e in self._events if e.correlation_id == correlation_id),
            key=lambda e: e.timestamp,
        )

    async def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return sorted(
            (
                e for e in self._events
                if e.entity_type == entity_type and e.entity_id == entity_id
            ),
            key=lambda e: e.timestamp,
        )

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]
