"""
Core Data Models for Home Ledger

These models define the strict schemas for everything the ledger stores.
They are designed to:
1. Enforce the record invariants at construction (positive amounts,
   known account roles, goal dates in order)
2. Be immutable, so a snapshot can be shared safely between readers
3. Serialize to the persisted camelCase JSON layout and back

DESIGN DECISION: Monetary values are Decimal. Scaling by the decoy factor
and summing settlements then stays exact, and the settlement tolerance is
only needed for values that came in as floats.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# FIELD TYPES
# =============================================================================

def _date_only_to_datetime(value: Any) -> Any:
    """Accept plain calendar dates ("2024-05-29") as midnight UTC."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and len(value.strip()) == 10:
        return datetime.fromisoformat(value.strip()).replace(tzinfo=timezone.utc)
    return value


def _ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[
    datetime,
    BeforeValidator(_date_only_to_datetime),
    AfterValidator(_ensure_aware),
]

Amount = Annotated[Decimal, Field(gt=0)]


class LedgerModel(BaseModel):
    """
    Base for persisted records.

    Frozen, and serialized with camelCase keys (settlesTransactionId,
    previousAmount, ...). Snake_case names are accepted on input too.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_storage(self) -> dict:
        """Convert to the JSON-ready dict written to the key-value store."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Supported currencies. YER is the base currency."""
    YER = "YER"
    USD = "USD"
    SAR = "SAR"


BASE_CURRENCY = Currency.YER

CURRENCY_DETAILS: dict[Currency, dict[str, str]] = {
    Currency.YER: {"symbol": "ر.ي.", "name": "Yemeni Rial"},
    Currency.USD: {"symbol": "$", "name": "US Dollar"},
    Currency.SAR: {"symbol": "ر.س.", "name": "Saudi Riyal"},
}


class TransactionType(str, Enum):
    """
    Transaction kinds.

    LIABILITY is money the user owes, RECEIVABLE is money owed to the user.
    TRANSFER is only ever a request type: it is stored as an EXPENSE in
    the source account plus an INCOME in the destination account.
    """
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    LIABILITY = "LIABILITY"
    RECEIVABLE = "RECEIVABLE"
    TRANSFER = "TRANSFER"


TRANSACTION_TYPE_LABELS: dict[TransactionType, str] = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
    TransactionType.LIABILITY: "Debt I owe",
    TransactionType.RECEIVABLE: "Debt owed to me",
    TransactionType.TRANSFER: "Transfer between accounts",
}

DEBT_TYPES = frozenset({TransactionType.LIABILITY, TransactionType.RECEIVABLE})


class AccountRole(str, Enum):
    """
    Account roles. The value is the account id prefix.

    Account ids are "<prefix><currency code in lower case>",
    e.g. "safe-usd", "acc-bank-sar", "acc-deferred-yer".
    """
    SAFE = "safe-"
    BANK = "acc-bank-"
    DEFERRED = "acc-deferred-"

    @classmethod
    def from_account_id(cls, account_id: str) -> Optional["AccountRole"]:
        for role in cls:
            if account_id.startswith(role.value):
                return role
        return None


CASH_ROLES = frozenset({AccountRole.SAFE, AccountRole.BANK})


def account_id(role: AccountRole, currency: Currency) -> str:
    """Build the canonical id of the account for a role and currency."""
    return f"{role.value}{currency.value.lower()}"


class IncomeSource(str, Enum):
    """Where an INCOME came from. Borrowed income also records the debt."""
    PROFIT = "profit"
    DEBT = "debt"


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class TransactionHistoryEntry(LedgerModel):
    """One amount change of an edited transaction."""

    previous_amount: Amount
    modified_at: Timestamp


class Transaction(LedgerModel):
    """
    A single ledger record.

    A record with settles_transaction_id set is a settlement record: it
    pays down (part of) the LIABILITY/RECEIVABLE with that id and is never
    edited directly. History only records amount changes, oldest first.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique transaction id"
    )
    amount: Amount
    currency: Currency
    type: TransactionType
    description: str = Field(
        ...,
        min_length=1,
        description="What the transaction was for"
    )
    date: Timestamp
    history: tuple[TransactionHistoryEntry, ...] = ()
    settles_transaction_id: Optional[str] = Field(
        default=None,
        description="Id of the debt this record settles"
    )

    @field_validator('type')
    @classmethod
    def reject_transfer(cls, v: TransactionType) -> TransactionType:
        """Transfers are stored as their two legs, never as one record."""
        if v == TransactionType.TRANSFER:
            raise ValueError("TRANSFER is not a storable transaction type")
        return v

    @field_validator('history', mode='before')
    @classmethod
    def default_history(cls, v: Any) -> Any:
        return () if v is None else v

    @property
    def is_settlement(self) -> bool:
        return self.settles_transaction_id is not None

    @property
    def is_primary_debt(self) -> bool:
        """A LIABILITY/RECEIVABLE that originates a debt (not a settlement)."""
        return self.type in DEBT_TYPES and not self.is_settlement


class Account(LedgerModel):
    """
    A money container: a home safe, a bank account or a deferred account.

    The role is derived from the id prefix; construction fails if the id
    does not follow the "<role prefix><currency>" convention.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Stable id encoding role and currency"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    currency: Currency
    transactions: tuple[Transaction, ...] = ()

    @model_validator(mode='after')
    def validate_id_convention(self) -> 'Account':
        role = AccountRole.from_account_id(self.id)
        if role is None:
            raise ValueError(
                f"Account id '{self.id}' does not start with a known role prefix"
            )
        if self.id != account_id(role, self.currency):
            raise ValueError(
                f"Account id '{self.id}' does not match its currency {self.currency.value}"
            )
        return self

    @property
    def role(self) -> AccountRole:
        return AccountRole.from_account_id(self.id)


class Goal(LedgerModel):
    """A saving goal, with its target expressed in the base currency."""

    id: str = Field(..., min_length=1)
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the user is saving for"
    )
    target_amount: Amount
    target_date: Timestamp
    created_at: Timestamp

    @model_validator(mode='after')
    def validate_dates(self) -> 'Goal':
        if self.target_date <= self.created_at:
            raise ValueError("Goal target date must be after its creation date")
        return self


# =============================================================================
# REQUEST MODELS
# =============================================================================

class TransactionRequest(BaseModel):
    """
    A create/edit request as submitted by the user.

    This is PROPOSED data: fields are deliberately lax so the validator can
    report every problem at once instead of failing on the first one.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: Optional[str] = Field(
        default=None,
        description="Set when editing an existing transaction"
    )
    amount: Optional[Decimal] = None
    currency: Currency = Currency.YER
    type: TransactionType
    description: str = ""
    date: Optional[Timestamp] = None
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    source_account_id: Optional[str] = None
    income_source: IncomeSource = IncomeSource.PROFIT

    @property
    def is_edit(self) -> bool:
        return bool(self.id)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating a request before it reaches the ledger."""

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
