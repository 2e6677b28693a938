"""Request validation package."""

from home_ledger.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
