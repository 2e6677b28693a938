"""
Statement Export Data

Filters an account's transactions and turns them into table rows
(date, description, type label, amount, currency symbol). Producing the
actual CSV or PDF is left to a StatementRenderer supplied by the caller.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional, Sequence

from home_ledger.ledger.store import sort_newest_first
from home_ledger.models.ledger import (
    CURRENCY_DETAILS,
    TRANSACTION_TYPE_LABELS,
    Transaction,
    TransactionType,
)

STATEMENT_HEADERS = ("Date", "Description", "Type", "Amount", "Currency")


class StatementRow(NamedTuple):
    date: date
    description: str
    type_label: str
    amount: Decimal
    currency_symbol: str


def _as_day(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def filter_transactions(
    transactions: Iterable[Transaction],
    type_: Optional[TransactionType] = None,
    text: str = "",
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[Transaction]:
    """
    Filter a transaction list the way the statement view does.

    Args:
        type_: Keep only this type (None keeps all)
        text: Case-insensitive substring of the description
        start: First calendar day to include
        end: Last calendar day to include

    Returns:
        Matching transactions, newest first
    """
    needle = text.strip().casefold()
    start, end = _as_day(start), _as_day(end)

    matching = []
    for t in transactions:
        if type_ is not None and t.type != type_:
            continue
        if needle and needle not in t.description.casefold():
            continue
        day = t.date.date()
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        matching.append(t)
    return list(sort_newest_first(matching))


def statement_rows(transactions: Iterable[Transaction]) -> list[StatementRow]:
    return [
        StatementRow(
            date=t.date.date(),
            description=t.description,
            type_label=TRANSACTION_TYPE_LABELS[t.type],
            amount=t.amount,
            currency_symbol=CURRENCY_DETAILS[t.currency]["symbol"],
        )
        for t in transactions
    ]


def date_range_label(start: Optional[date], end: Optional[date]) -> str:
    start, end = _as_day(start), _as_day(end)
    if start and end:
        return f"{start.isoformat()} to {end.isoformat()}"
    if start:
        return f"From {start.isoformat()}"
    if end:
        return f"Until {end.isoformat()}"
    return "All dates"


class StatementRenderer(ABC):
    """
    Turns statement rows into a document (CSV, PDF, ...).

    Implementations live outside the ledger; the ledger only prepares
    already filtered and sorted rows.
    """

    @abstractmethod
    def render(
        self,
        rows: Sequence[StatementRow],
        account_name: str,
        date_range: str,
    ) -> bytes:
        """
        Render a statement.

        Args:
            rows: Table rows in display order
            account_name: Name shown in the statement title
            date_range: Human-readable period of the statement

        Returns:
            The document contents
        """
        pass
