"""
Transaction Ledger

The state-transition engine. Every operation takes the current
AccountStore and either returns a new snapshot or raises a LedgerError;
the store it was given is never modified.

Operations:
1. upsert_transaction - create or edit INCOME / EXPENSE / LIABILITY /
   RECEIVABLE records, and TRANSFERs (stored as two legs)
2. delete_transaction - remove a record and every settlement of it
3. settle_debt - pay down a LIABILITY/RECEIVABLE, partially or fully
4. exchange_currencies - sell one currency's safe for another's
5. transfer_to_savings - move cash from a safe to the same-currency bank
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, Optional
from uuid import uuid4

from home_ledger.ledger.errors import (
    InsufficientBalance,
    TransactionNotFound,
    ValidationError,
)
from home_ledger.ledger.settlements import SETTLEMENT_EPSILON, settlement_status
from home_ledger.ledger.store import AccountStore, account_balance
from home_ledger.models.ledger import (
    CURRENCY_DETAILS,
    Account,
    AccountRole,
    Currency,
    IncomeSource,
    Transaction,
    TransactionHistoryEntry,
    TransactionRequest,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from home_ledger.validation import TransactionValidator


# Descriptions of generated records. The transfer prefixes mark INCOME/EXPENSE
# legs that only mirror a transfer; the summary leaves them out of the
# income and expense totals.
TRANSFER_OUT_PREFIX = "Transfer to"
TRANSFER_IN_PREFIX = "Transfer from"
INTERNAL_TRANSFER_PREFIXES = (
    TRANSFER_OUT_PREFIX,
    TRANSFER_IN_PREFIX,
    "تحويل إلى",
    "تحويل من",
)
TRANSFER_IN_SUFFIX = "-in"
DEBT_INCOME_PREFIX = "Debt-backed income:"
SAVINGS_TRANSFER_DESCRIPTION = "Savings transfer"


def is_internal_transfer(transaction: Transaction) -> bool:
    """True for the INCOME/EXPENSE legs generated by a transfer."""
    return (
        transaction.type in (TransactionType.INCOME, TransactionType.EXPENSE)
        and transaction.description.startswith(INTERNAL_TRANSFER_PREFIXES)
    )


def new_transaction_id() -> str:
    return f"trans-{uuid4().hex[:16]}"


def transfer_pair_id(transaction_id: str) -> str:
    """Id of the INCOME leg paired with a transfer's EXPENSE leg."""
    return f"{transaction_id}{TRANSFER_IN_SUFFIX}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionLedger:
    """
    Applies ledger operations to AccountStore snapshots.

    The clock and id factory are injectable so that tests can pin
    timestamps and ids.
    """

    def __init__(
        self,
        validator: Optional[TransactionValidator] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = new_transaction_id,
        settlement_epsilon: Decimal = SETTLEMENT_EPSILON,
    ):
        self._validator = validator or TransactionValidator()
        self._clock = clock
        self._new_id = id_factory
        self._epsilon = settlement_epsilon

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _raise_if_invalid(result: ValidationResult) -> None:
        if not result.is_valid:
            raise ValidationError.from_issues(
                [issue for issue in result.issues if issue.severity == "error"]
            )

    @staticmethod
    def _require_currency(account: Account, currency: Currency, field: str) -> None:
        if account.currency != currency:
            raise ValidationError.from_issues([ValidationIssue(
                field=field,
                issue_type="mismatch",
                message=(
                    f"Account '{account.name}' holds {account.currency.value}, "
                    f"not {currency.value}"
                ),
            )])

    @staticmethod
    def _require_funds(account: Account, amount: Decimal) -> None:
        available = account_balance(account.transactions)
        if amount > available:
            raise InsufficientBalance(account.name, available, amount)

    @staticmethod
    def _append(
        store: AccountStore,
        additions: Iterable[tuple[str, Transaction]],
    ) -> AccountStore:
        changes: dict[str, list[Transaction]] = {}
        for target_id, transaction in additions:
            if target_id not in changes:
                changes[target_id] = list(store.get(target_id).transactions)
            changes[target_id].append(transaction)
        return store.replace_transactions(changes)

    @staticmethod
    def _without(
        store: AccountStore,
        ids: set[str],
        with_settlements: bool = True,
    ) -> AccountStore:
        """Drop the records with these ids and, optionally, every settlement of them."""
        changes = {}
        for account in store.accounts:
            kept = [
                t for t in account.transactions
                if t.id not in ids
                and not (with_settlements and t.settles_transaction_id in ids)
            ]
            if len(kept) != len(account.transactions):
                changes[account.id] = kept
        return store.replace_transactions(changes)

    # -------------------------------------------------------------------------
    # Create / edit
    # -------------------------------------------------------------------------

    def upsert_transaction(
        self,
        store: AccountStore,
        request: TransactionRequest,
    ) -> AccountStore:
        """
        Create a transaction, or replace the one with request.id.

        An edit keeps the id and the history of the original and appends a
        history entry when the amount changed. Balance checks run against
        the store with the original already removed, so an edited expense
        is credited back before its new amount is checked.
        """
        self._raise_if_invalid(self._validator.validate_request(request))

        history: tuple[TransactionHistoryEntry, ...] = ()
        working = store

        if request.is_edit:
            found = store.find_transaction(request.id)
            if found is None:
                raise TransactionNotFound(request.id)
            _, original = found
            if original.is_settlement:
                raise ValidationError.from_issues([ValidationIssue(
                    field="id",
                    issue_type="invalid_value",
                    message="Settlement records cannot be edited",
                    suggested_fix="Delete the settlement and record it again",
                )])

            history = original.history
            if original.amount != request.amount:
                history = history + (
                    TransactionHistoryEntry(
                        previous_amount=original.amount,
                        modified_at=self._clock(),
                    ),
                )
            working = self._without(
                store,
                {original.id, transfer_pair_id(original.id)},
                with_settlements=False,
            )

        transaction_id = request.id or self._new_id()
        common = dict(
            amount=request.amount,
            currency=request.currency,
            date=request.date,
        )

        if request.type == TransactionType.TRANSFER:
            source = working.get(request.from_account_id)
            destination = working.get(request.to_account_id)
            self._require_currency(source, request.currency, "from_account_id")
            self._require_currency(destination, request.currency, "to_account_id")
            self._require_funds(source, request.amount)

            additions = [
                (source.id, Transaction(
                    id=transaction_id,
                    type=TransactionType.EXPENSE,
                    description=f"{TRANSFER_OUT_PREFIX} {destination.name}: {request.description}",
                    history=history,
                    **common,
                )),
                (destination.id, Transaction(
                    id=transfer_pair_id(transaction_id),
                    type=TransactionType.INCOME,
                    description=f"{TRANSFER_IN_PREFIX} {source.name}: {request.description}",
                    **common,
                )),
            ]

        elif request.type == TransactionType.EXPENSE:
            source = working.get(request.source_account_id)
            self._require_currency(source, request.currency, "source_account_id")
            self._require_funds(source, request.amount)

            additions = [(source.id, Transaction(
                id=transaction_id,
                type=TransactionType.EXPENSE,
                description=request.description,
                history=history,
                **common,
            ))]

        elif request.type == TransactionType.INCOME:
            safe = working.get_by_role(AccountRole.SAFE, request.currency)
            additions = [(safe.id, Transaction(
                id=transaction_id,
                type=TransactionType.INCOME,
                description=request.description,
                history=history,
                **common,
            ))]

            # Borrowed money: the debt is linked to the income only by date
            if request.income_source == IncomeSource.DEBT and not request.is_edit:
                deferred = working.get_by_role(AccountRole.DEFERRED, request.currency)
                additions.append((deferred.id, Transaction(
                    id=self._new_id(),
                    type=TransactionType.LIABILITY,
                    description=f"{DEBT_INCOME_PREFIX} {request.description}",
                    **common,
                )))

        else:
            deferred = working.get_by_role(AccountRole.DEFERRED, request.currency)
            additions = [(deferred.id, Transaction(
                id=transaction_id,
                type=request.type,
                description=request.description,
                history=history,
                **common,
            ))]

        return self._append(working, additions)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete_transaction(self, store: AccountStore, transaction_id: str) -> AccountStore:
        """
        Remove a transaction and every settlement record referencing it.
        Deleting a transfer's EXPENSE leg removes its INCOME leg too.

        Irreversible. Asking the user to confirm is the caller's job.
        """
        if store.find_transaction(transaction_id) is None:
            raise TransactionNotFound(transaction_id)
        return self._without(store, {transaction_id, transfer_pair_id(transaction_id)})

    # -------------------------------------------------------------------------
    # Debt settlement
    # -------------------------------------------------------------------------

    def settle_debt(
        self,
        store: AccountStore,
        debt_transaction_id: str,
        amount_paid: Decimal,
        target_account_id: str,
    ) -> AccountStore:
        """
        Record a (partial) payment of a LIABILITY or RECEIVABLE.

        Writes two records linked to the debt: the cash leg in the target
        account (INCOME when collecting a receivable, EXPENSE when repaying
        a liability) and a mirror of opposite polarity in the deferred
        account. The original debt record stays as the audit trail.
        """
        found = store.find_transaction(debt_transaction_id)
        if found is None:
            raise TransactionNotFound(debt_transaction_id)
        _, debt = found

        if not debt.is_primary_debt:
            raise ValidationError.from_issues([ValidationIssue(
                field="debt_transaction_id",
                issue_type="invalid_value",
                message="Only an original LIABILITY or RECEIVABLE can be settled",
            )])

        target = store.get(target_account_id)
        if target.role == AccountRole.DEFERRED:
            raise ValidationError.from_issues([ValidationIssue(
                field="target_account_id",
                issue_type="invalid_value",
                message=f"Debts are paid from a safe or bank account, not '{target.name}'",
                suggested_fix="Choose a safe or bank account",
            )])
        status = settlement_status(debt, store, self._epsilon)
        self._raise_if_invalid(self._validator.validate_settlement(
            amount_paid=amount_paid,
            remaining=status.remaining,
            debt_currency=debt.currency,
            account_currency=target.currency,
        ))

        deferred = store.get_by_role(AccountRole.DEFERRED, debt.currency)
        is_receivable = debt.type == TransactionType.RECEIVABLE
        now = self._clock()
        common = dict(
            amount=amount_paid,
            currency=debt.currency,
            date=now,
            settles_transaction_id=debt.id,
        )

        cash_leg = Transaction(
            id=self._new_id(),
            type=TransactionType.INCOME if is_receivable else TransactionType.EXPENSE,
            description=f"{'Debt collected' if is_receivable else 'Debt repaid'}: {debt.description}",
            **common,
        )
        mirror = Transaction(
            id=self._new_id(),
            type=TransactionType.LIABILITY if is_receivable else TransactionType.RECEIVABLE,
            description=f"Debt settlement: {debt.description}",
            **common,
        )
        return self._append(store, [(target.id, cash_leg), (deferred.id, mirror)])

    # -------------------------------------------------------------------------
    # Currency exchange
    # -------------------------------------------------------------------------

    def exchange_currencies(
        self,
        store: AccountStore,
        amount_to_sell: Decimal,
        from_currency: Currency,
        to_currency: Currency,
        rate: Decimal,
        amount_to_receive: Decimal,
    ) -> AccountStore:
        """
        Sell cash from one safe for another currency's safe.

        amount_to_receive is committed exactly as given (the caller has
        already rounded it for the preview), so the stored record matches
        what the user saw.
        """
        self._raise_if_invalid(self._validator.validate_exchange(
            amount_to_sell=amount_to_sell,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            amount_to_receive=amount_to_receive,
        ))

        source = store.get_by_role(AccountRole.SAFE, from_currency)
        destination = store.get_by_role(AccountRole.SAFE, to_currency)
        self._require_funds(source, amount_to_sell)

        now = self._clock()
        from_symbol = CURRENCY_DETAILS[from_currency]["symbol"]
        to_symbol = CURRENCY_DETAILS[to_currency]["symbol"]

        sold = Transaction(
            id=self._new_id(),
            amount=amount_to_sell,
            currency=from_currency,
            type=TransactionType.EXPENSE,
            description=f"Exchange to {amount_to_receive:,} {to_symbol} at rate {rate}",
            date=now,
        )
        bought = Transaction(
            id=self._new_id(),
            amount=amount_to_receive,
            currency=to_currency,
            type=TransactionType.INCOME,
            description=f"Exchange from {amount_to_sell:,} {from_symbol} at rate {rate}",
            date=now,
        )
        return self._append(store, [(source.id, sold), (destination.id, bought)])

    # -------------------------------------------------------------------------
    # Savings
    # -------------------------------------------------------------------------

    def transfer_to_savings(
        self,
        store: AccountStore,
        amount: Decimal,
        currency: Currency,
        date: Optional[datetime] = None,
    ) -> AccountStore:
        """Transfer cash from the currency's safe to its bank account."""
        source = store.get_by_role(AccountRole.SAFE, currency)
        destination = store.get_by_role(AccountRole.BANK, currency)

        request = TransactionRequest(
            amount=amount,
            currency=currency,
            type=TransactionType.TRANSFER,
            description=SAVINGS_TRANSFER_DESCRIPTION,
            date=date or self._clock(),
            from_account_id=source.id,
            to_account_id=destination.id,
        )
        return self.upsert_transaction(store, request)


__all__ = [
    "DEBT_INCOME_PREFIX",
    "INTERNAL_TRANSFER_PREFIXES",
    "SAVINGS_TRANSFER_DESCRIPTION",
    "TRANSFER_IN_PREFIX",
    "TRANSFER_IN_SUFFIX",
    "TRANSFER_OUT_PREFIX",
    "TransactionLedger",
    "is_internal_transfer",
    "new_transaction_id",
    "transfer_pair_id",
]
