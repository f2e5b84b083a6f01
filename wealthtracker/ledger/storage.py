"""Mini README: Local snapshot persistence for the income ledger.

Structure:
    * LedgerStorageError - raised when the snapshot cannot be read or written.
    * LedgerSnapshotStore - loads and saves the ledger as one JSON file.

This plays the role browser local storage plays for the web page: a single
JSON array of entries that is rewritten after every change. Writes go to a
temporary file first and are moved into place so a crash never leaves a
half-written snapshot behind.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

from ..logging_utils import get_logger
from .entries import Clock, IncomeLedger

LOGGER = get_logger(__name__)


class LedgerStorageError(IOError):
    """Raised when the ledger snapshot is unreadable or cannot be saved."""


class LedgerSnapshotStore:
    """File-backed snapshot of an :class:`IncomeLedger`."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load_records(self) -> List[Dict[str, object]]:
        if not self._path.exists():
            return []
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise LedgerStorageError(f"Corrupted JSON data in {self._path}") from exc
        except OSError as exc:
            raise LedgerStorageError(f"Unable to read from {self._path}") from exc

        if not isinstance(payload, list):
            raise LedgerStorageError(f"Expected list payload in {self._path}")
        return payload

    def load(self, *, clock: Optional[Clock] = None) -> IncomeLedger:
        """Load the ledger, returning an empty one when no snapshot exists."""

        records = self.load_records()
        try:
            ledger = IncomeLedger.from_snapshot(records, clock=clock)
        except ValueError as exc:
            raise LedgerStorageError(f"Invalid entry in {self._path}: {exc}") from exc
        LOGGER.debug("Loaded %s entries from %s", len(ledger), self._path)
        return ledger

    def save(self, ledger: IncomeLedger) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(ledger.export_snapshot(), handle, indent=2)
                handle.flush()
            temp_path.replace(self._path)
        except OSError as exc:
            raise LedgerStorageError(f"Unable to write to {self._path}") from exc
        LOGGER.debug("Saved %s entries to %s", len(ledger), self._path)

    def clear(self) -> None:
        """Drop the snapshot file entirely."""

        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise LedgerStorageError(f"Unable to remove {self._path}") from exc
        LOGGER.info("Removed ledger snapshot %s", self._path)
