"""Mini README: In-memory income ledger.

Structure:
    * weekday_name - English day name for a calendar date.
    * IncomeEntry - dataclass for one day's cash and coin takings.
    * IncomeLedger - ordered collection with add/edit/remove/clear helpers.

The ledger is the only owner of income entries. Editing is deliberately not
an in-place mutation: the old entry is removed and a replacement is added
with a fresh identifier, so callers holding an old identifier can tell that
the record has changed. Serialised entries use the same keys as the browser
snapshot (``paperMoney``, ``coins``, ``day`` ...) so exported files and sync
payloads can be exchanged with the web page.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

Clock = Callable[[], datetime]


def weekday_name(on: date) -> str:
    """Return the English weekday name for ``on``."""

    return WEEKDAY_NAMES[on.weekday()]


def parse_entry_date(value: object) -> date:
    """Parse ISO formatted strings or date objects into a calendar date."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as error:
            raise ValueError(f"Invalid entry date: {value!r}") from error
    raise ValueError("Dates must be provided as ISO strings or date/datetime instances.")


def _parse_amount(value: object, field_name: str) -> float:
    """Coerce an amount, treating blanks as zero like the entry form does."""

    if value is None or value == "":
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError) as error:
        raise ValueError(f"{field_name} must be a number") from error
    if not math.isfinite(amount):
        raise ValueError(f"{field_name} must be a finite number")
    if amount < 0:
        raise ValueError(f"{field_name} cannot be negative")
    return amount


@dataclass(frozen=True, slots=True)
class IncomeEntry:
    """A single day's takings split into paper money and coins."""

    entry_id: int
    entry_date: date
    weekday: str
    cash_amount: float
    coin_amount: float
    recorded_time: str = ""

    @classmethod
    def create(
        cls,
        *,
        entry_id: int,
        entry_date: object,
        cash_amount: object = 0.0,
        coin_amount: object = 0.0,
        recorded_time: str = "",
    ) -> "IncomeEntry":
        """Build an entry, deriving the weekday from the date."""

        parsed_date = parse_entry_date(entry_date)
        return cls(
            entry_id=int(entry_id),
            entry_date=parsed_date,
            weekday=weekday_name(parsed_date),
            cash_amount=_parse_amount(cash_amount, "cash_amount"),
            coin_amount=_parse_amount(coin_amount, "coin_amount"),
            recorded_time=recorded_time or "",
        )

    @property
    def total(self) -> float:
        return self.cash_amount + self.coin_amount

    def as_dict(self) -> Dict[str, object]:
        """Export the entry using the browser snapshot keys."""

        return {
            "id": self.entry_id,
            "date": self.entry_date.isoformat(),
            "day": self.weekday,
            "paperMoney": self.cash_amount,
            "coins": self.coin_amount,
            "total": self.total,
            "time": self.recorded_time,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "IncomeEntry":
        """Hydrate an entry; ``day`` and ``total`` are recomputed, not trusted."""

        if not isinstance(payload, dict):
            raise ValueError(f"Entry records must be JSON objects, got {type(payload).__name__}")
        try:
            return cls.create(
                entry_id=payload["id"],
                entry_date=payload["date"],
                cash_amount=payload.get("paperMoney", 0.0),
                coin_amount=payload.get("coins", 0.0),
                recorded_time=str(payload.get("time") or ""),
            )
        except KeyError as error:
            raise ValueError(f"Entry is missing required field {error}") from error
        except TypeError as error:
            raise ValueError("Entry identifiers must be integers") from error


class IncomeLedger:
    """Ordered collection of income entries with an injectable clock."""

    def __init__(
        self,
        entries: Optional[Iterable[IncomeEntry]] = None,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self._clock: Clock = clock or datetime.now
        self._entries: Dict[int, IncomeEntry] = {}
        self._last_id = 0
        for entry in entries or ():
            self._register(entry)
        LOGGER.debug("Income ledger initialised with %s entries", len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IncomeEntry]:
        return iter(self.entries())

    def _register(self, entry: IncomeEntry) -> None:
        if entry.entry_id in self._entries:
            raise ValueError(f"Entry {entry.entry_id} already exists.")
        self._entries[entry.entry_id] = entry
        self._last_id = max(self._last_id, entry.entry_id)

    def _next_id(self) -> int:
        """Creation-time identifier in epoch milliseconds, kept strictly increasing."""

        candidate = int(self._clock().timestamp() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    def add_entry(
        self,
        cash_amount: object,
        coin_amount: object,
        entry_date: object,
        recorded_time: Optional[str] = None,
    ) -> IncomeEntry:
        """Validate and append a new entry."""

        if recorded_time is None:
            recorded_time = self._clock().strftime("%H:%M")
        draft = IncomeEntry.create(
            entry_id=0,
            entry_date=entry_date,
            cash_amount=cash_amount,
            coin_amount=coin_amount,
            recorded_time=recorded_time,
        )
        entry = replace(draft, entry_id=self._next_id())
        self._register(entry)
        LOGGER.info("Added entry %s for %s (total %.2f)", entry.entry_id, entry.entry_date, entry.total)
        return entry

    def get_entry(self, entry_id: int) -> IncomeEntry:
        """Retrieve an entry, raising informative errors when missing."""

        if entry_id not in self._entries:
            raise KeyError(f"Entry {entry_id} not found")
        return self._entries[entry_id]

    def remove_entry(self, entry_id: int) -> IncomeEntry:
        entry = self.get_entry(entry_id)
        del self._entries[entry_id]
        LOGGER.info("Removed entry %s", entry_id)
        return entry

    def edit_entry(self, entry_id: int, **changes: object) -> IncomeEntry:
        """Replace an entry by removing it and adding an edited copy.

        Accepted changes are ``cash_amount``, ``coin_amount``, ``entry_date``
        and ``recorded_time``. The replacement receives a new identifier and
        is appended at the end of the ledger. Changes are validated before
        anything is removed, so invalid edits leave the ledger unchanged.
        """

        unsupported = set(changes) - {"cash_amount", "coin_amount", "entry_date", "recorded_time"}
        if unsupported:
            raise ValueError(f"Editing field(s) {', '.join(sorted(unsupported))} is not supported.")

        original = self.get_entry(entry_id)
        merged = {
            "cash_amount": original.cash_amount,
            "coin_amount": original.coin_amount,
            "entry_date": original.entry_date,
            "recorded_time": original.recorded_time,
        }
        merged.update({key: value for key, value in changes.items() if value is not None})
        IncomeEntry.create(entry_id=0, **merged)

        self.remove_entry(entry_id)
        replacement = self.add_entry(**merged)
        LOGGER.info("Edited entry %s -> %s", entry_id, replacement.entry_id)
        return replacement

    def clear(self) -> int:
        """Remove every entry and return how many were dropped."""

        removed = len(self._entries)
        self._entries.clear()
        LOGGER.info("Cleared %s entries", removed)
        return removed

    def entries(self) -> Tuple[IncomeEntry, ...]:
        """Read-only snapshot in insertion order."""

        return tuple(self._entries.values())

    def list_entries(self) -> List[IncomeEntry]:
        """Return entries ordered by most recent date first."""

        return sorted(self._entries.values(), key=lambda entry: entry.entry_date, reverse=True)

    def export_snapshot(self) -> List[Dict[str, object]]:
        return [entry.as_dict() for entry in self._entries.values()]

    @classmethod
    def from_snapshot(
        cls,
        records: Iterable[Dict[str, object]],
        *,
        clock: Optional[Clock] = None,
    ) -> "IncomeLedger":
        """Rebuild a ledger from exported records."""

        return cls((IncomeEntry.from_dict(record) for record in records), clock=clock)

    @staticmethod
    def export_filename(today: date) -> str:
        return f"wealthtracker-data-{today.isoformat()}.json"
