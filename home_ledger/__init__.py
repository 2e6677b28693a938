"""
Home Ledger - Source Package

A personal multi-currency ledger for cash kept in home safes,
bank accounts and a deferred (debt) account.

DESIGN PRINCIPLES:
1. Every mutation produces a new snapshot, never a partial one
2. Fail early, fail visibly
3. Derived figures are recomputed from the canonical transactions
4. Decoy mode changes what is shown, never what is stored
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Home Ledger Team"
