"""Mini README: Error taxonomy for the sync code store.

Every error carries a short ``kind`` string and the HTTP status the web
layer answers with, so the store stays framework-free while the interface
can translate failures with a single exception handler.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base class for sync store failures."""

    kind = "sync_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class SyncValidationError(SyncError, ValueError):
    kind = "validation"
    status_code = 400


class MissingPayloadError(SyncValidationError):
    kind = "missing_payload"


class InvalidCodeFormatError(SyncValidationError):
    kind = "invalid_format"


class CodeConflictError(SyncError):
    """Raised when a caller-supplied code is still live."""

    kind = "conflict"
    status_code = 409


class CodeNotFoundError(SyncError, LookupError):
    kind = "not_found"
    status_code = 404


class CodeExpiredError(SyncError):
    """Raised when a code existed but its TTL has lapsed; the record is evicted."""

    kind = "expired"
    status_code = 410


class SyncInternalError(SyncError):
    kind = "internal"
    status_code = 500
