"""Mini README: Pairing service storage for WealthTracker.

A client uploads its ledger snapshot and receives a 4-digit code; a second
client redeems the code within the TTL to download the same payload. The
store is payload-agnostic and keeps everything in memory.
"""

from .errors import (
    CodeConflictError,
    CodeExpiredError,
    CodeNotFoundError,
    InvalidCodeFormatError,
    MissingPayloadError,
    SyncError,
    SyncInternalError,
    SyncValidationError,
)
from .store import SyncCodeStore, SyncReceipt, SyncRecord

__all__ = [
    "CodeConflictError",
    "CodeExpiredError",
    "CodeNotFoundError",
    "InvalidCodeFormatError",
    "MissingPayloadError",
    "SyncCodeStore",
    "SyncError",
    "SyncInternalError",
    "SyncReceipt",
    "SyncRecord",
    "SyncValidationError",
]
