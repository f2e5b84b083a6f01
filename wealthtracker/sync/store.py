"""Mini README: Ephemeral code store used to pair two clients.

Structure:
    * SyncRecord - payload plus creation and expiry timestamps.
    * SyncReceipt - what a successful store hands back to the caller.
    * SyncCodeStore - thread-safe map from 4-digit codes to payloads.

Codes live for a fixed TTL. Expiry is checked lazily whenever a code is
read; ``purge_expired`` exists only to keep memory tidy and is not needed
for correctness. Payloads are opaque and returned exactly as stored.

Server-assigned codes never overwrite a live record: generation retries
until it finds a free code. Caller-supplied codes are rejected with
``CodeConflictError`` while the existing code is live.
"""

from __future__ import annotations

import math
import random
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from ..logging_utils import get_logger
from .errors import (
    CodeConflictError,
    CodeExpiredError,
    CodeNotFoundError,
    InvalidCodeFormatError,
    MissingPayloadError,
    SyncInternalError,
    SyncValidationError,
)

LOGGER = get_logger(__name__)

CODE_PATTERN = re.compile(r"[0-9]{4}")
CODE_MIN = 1000
CODE_MAX = 9999
DEFAULT_TTL_SECONDS = 3600


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_empty_payload(payload: Any) -> bool:
    """``None`` and empty strings/containers count as a missing payload."""

    if payload is None:
        return True
    if isinstance(payload, (str, bytes, dict, list, tuple)):
        return len(payload) == 0
    return False


def has_non_finite_number(payload: Any) -> bool:
    """True when a NaN or infinity appears anywhere in ``payload``."""

    if isinstance(payload, float):
        return not math.isfinite(payload)
    if isinstance(payload, dict):
        return any(has_non_finite_number(value) for value in payload.values())
    if isinstance(payload, (list, tuple)):
        return any(has_non_finite_number(item) for item in payload)
    return False


@dataclass(frozen=True, slots=True)
class SyncRecord:
    code: str
    payload: Any
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True, slots=True)
class SyncReceipt:
    """Code and expiry returned to the client that stored a payload."""

    code: str
    expires_at: datetime

    @property
    def expires_at_ms(self) -> int:
        return int(self.expires_at.timestamp() * 1000)

    def as_dict(self) -> Dict[str, object]:
        return {"code": self.code, "expiresAt": self.expires_at_ms}


class SyncCodeStore:
    """In-memory store of short-lived sync codes."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        max_code_attempts: int = 50,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or _utcnow
        self._rng = rng or random.SystemRandom()
        self._max_code_attempts = max_code_attempts
        self._records: Dict[str, SyncRecord] = {}
        # Guards every check-then-act sequence on ``_records``.
        self._lock = threading.Lock()
        LOGGER.debug("Sync store initialised with TTL %s", self._ttl)

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for record in self._records.values() if not record.is_expired(now))

    def __contains__(self, code: object) -> bool:
        now = self._clock()
        with self._lock:
            record = self._records.get(code)  # type: ignore[arg-type]
            return record is not None and not record.is_expired(now)

    def _generate_code(self) -> str:
        return str(self._rng.randint(CODE_MIN, CODE_MAX))

    def _is_live(self, code: str, now: datetime) -> bool:
        record = self._records.get(code)
        return record is not None and not record.is_expired(now)

    def store(self, payload: Any, code: Optional[str] = None) -> SyncReceipt:
        """Store ``payload`` under a new or caller-supplied code."""

        if code is not None:
            if not isinstance(code, str) or not CODE_PATTERN.fullmatch(code):
                raise InvalidCodeFormatError("Code must be exactly 4 digits")
        if is_empty_payload(payload):
            raise MissingPayloadError("Data is required")
        if has_non_finite_number(payload):
            raise SyncValidationError("Data must not contain NaN or infinite numbers")

        now = self._clock()
        with self._lock:
            if code is None:
                code = self._assign_code(now)
            elif self._is_live(code, now):
                LOGGER.warning("Rejected store for live code %s", code)
                raise CodeConflictError(f"Code {code} is already in use")
            record = SyncRecord(
                code=code,
                payload=payload,
                created_at=now,
                expires_at=now + self._ttl,
            )
            self._records[code] = record
        LOGGER.info("Stored payload under code %s until %s", code, record.expires_at.isoformat())
        return SyncReceipt(code=record.code, expires_at=record.expires_at)

    def _assign_code(self, now: datetime) -> str:
        for _ in range(self._max_code_attempts):
            candidate = self._generate_code()
            if not self._is_live(candidate, now):
                return candidate
        raise SyncInternalError("Unable to allocate a free sync code")

    def retrieve(self, code: str) -> Any:
        """Return the payload for ``code`` without consuming it."""

        now = self._clock()
        with self._lock:
            record = self._records.get(code)
            if record is None:
                raise CodeNotFoundError("Invalid or expired code")
            if record.is_expired(now):
                del self._records[code]
                LOGGER.info("Evicted expired code %s", code)
                raise CodeExpiredError("Code has expired")
        LOGGER.debug("Retrieved payload for code %s", code)
        return record.payload

    def purge_expired(self) -> int:
        """Drop every expired record and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [code for code, record in self._records.items() if record.is_expired(now)]
            for code in expired:
                del self._records[code]
        if expired:
            LOGGER.info("Purged %s expired sync codes", len(expired))
        return len(expired)
