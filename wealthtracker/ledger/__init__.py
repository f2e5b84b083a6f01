"""Mini README: Income ledger package for WealthTracker.

The ``entries`` module holds the in-memory ledger that every calculation
reads from; ``storage`` persists it as a local JSON snapshot.
"""

from .entries import IncomeEntry, IncomeLedger, weekday_name
from .storage import LedgerSnapshotStore, LedgerStorageError

__all__ = [
    "IncomeEntry",
    "IncomeLedger",
    "LedgerSnapshotStore",
    "LedgerStorageError",
    "weekday_name",
]
