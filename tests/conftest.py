"""
Shared fixtures for Home Ledger tests.

No network: Google Sheets is replaced by an in-process fake spreadsheet.
"""

import itertools
from datetime import datetime, timezone
from decimal import Decimal

import gspread
import pytest

from home_ledger.audit import AuditLogger
from home_ledger.config import GoogleSheetsSettings, LedgerSettings
from home_ledger.ledger import TransactionLedger, default_accounts
from home_ledger.models.ledger import Currency
from home_ledger.orchestrator import LedgerService
from home_ledger.services.storage import (
    GoogleSheetsClient,
    InMemoryAuditStorage,
    InMemoryKeyValueStore,
)


FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the storage classes."""

    def __init__(self, title: str):
        self.title = title
        self.rows: list[list[str]] = []

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(cell) for cell in row])

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def update_cell(self, row, col, value):
        target = self.rows[row - 1]
        while len(target) < col:
            target.append("")
        target[col - 1] = str(value)

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSpreadsheet:
    def __init__(self):
        self.sheets: dict[str, FakeWorksheet] = {}

    def worksheet(self, title):
        if title not in self.sheets:
            raise gspread.WorksheetNotFound(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        self.sheets[title] = FakeWorksheet(title)
        return self.sheets[title]


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def rates() -> dict:
    return {Currency.USD: Decimal("550"), Currency.SAR: Decimal("140")}


@pytest.fixture
def store():
    """The first-run accounts with their sample transactions."""
    return default_accounts()


@pytest.fixture
def ledger() -> TransactionLedger:
    """Ledger with a fixed clock and predictable ids (new-1, new-2, ...)."""
    counter = itertools.count(1)
    return TransactionLedger(
        clock=lambda: FIXED_NOW,
        id_factory=lambda: f"new-{next(counter)}",
    )


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def fake_spreadsheet() -> FakeSpreadsheet:
    return FakeSpreadsheet()


@pytest.fixture
def sheets_client(fake_spreadsheet) -> GoogleSheetsClient:
    settings = GoogleSheetsSettings.model_construct(
        credentials_path="unused.json",
        spreadsheet_id="test-spreadsheet",
    )
    return GoogleSheetsClient(settings=settings, spreadsheet=fake_spreadsheet)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def service(kv_store, audit_storage, ledger_settings, ledger) -> LedgerService:
    """A locked service on first-run data; tests unlock it themselves."""
    return LedgerService(
        state_store=kv_store,
        audit_logger=AuditLogger(audit_storage),
        settings=ledger_settings,
        ledger=ledger,
        clock=lambda: FIXED_NOW,
    )
