"""
Backup and Restore

A backup is one JSON document holding the five persisted keys:
{accounts, goals, savingsThreshold, savingsPercentage, exchangeRates}.

IMPORTANT: A restore replaces all five keys at once, so a document is
only accepted when every field is present and usable. Anything else is
rejected as MalformedBackup and the current state is kept.
"""

import json
from decimal import Decimal
from typing import Any, Mapping, Sequence, Union

from pydantic import Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from home_ledger.ledger.errors import MalformedBackup
from home_ledger.ledger.store import AccountStore
from home_ledger.models.ledger import Account, Amount, Currency, Goal, LedgerModel


class BackupDocument(LedgerModel):
    """Validated contents of a backup file."""

    accounts: tuple[Account, ...] = Field(..., min_length=1)
    goals: tuple[Goal, ...]
    savings_threshold: int = Field(..., gt=0)
    savings_percentage: int = Field(..., gt=0, le=100)
    exchange_rates: dict[Currency, Amount] = Field(..., min_length=1)

    @model_validator(mode='after')
    def validate_unique_accounts(self) -> 'BackupDocument':
        ids = [account.id for account in self.accounts]
        if len(ids) != len(set(ids)):
            raise ValueError("Backup contains duplicate account ids")
        return self

    def account_store(self) -> AccountStore:
        return AccountStore(accounts=self.accounts)


def build_backup(
    store: AccountStore,
    goals: Sequence[Goal],
    savings_threshold: int,
    savings_percentage: int,
    exchange_rates: Mapping[Currency, Decimal],
) -> dict:
    """Build the JSON-ready backup document of the current state."""
    return BackupDocument(
        accounts=store.accounts,
        goals=tuple(goals),
        savings_threshold=savings_threshold,
        savings_percentage=savings_percentage,
        exchange_rates=dict(exchange_rates),
    ).to_storage()


def parse_backup(raw: Union[str, bytes, Mapping[str, Any]]) -> BackupDocument:
    """
    Parse and validate a backup document.

    Accepts the raw file contents or an already decoded dict.

    Raises:
        MalformedBackup: If the content is not JSON or a field is missing,
            empty or invalid
    """
    try:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        if not isinstance(raw, Mapping):
            raise MalformedBackup("Backup must be a JSON object")
        return BackupDocument.model_validate(raw)
    except json.JSONDecodeError as e:
        raise MalformedBackup(f"Backup is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedBackup(f"Backup is not readable text: {e}") from e
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) if err["loc"] else "accounts" for err in e.errors()})
        raise MalformedBackup(f"Backup is missing or has invalid fields: {', '.join(fields)}") from e
