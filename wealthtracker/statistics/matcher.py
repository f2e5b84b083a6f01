"""Mini README: "Same weekday last month" comparison.

Structure:
    * week_of_month - 1-based week row of a date within its month grid.
    * PeriodComparison - matched prior entry with the computed deltas.
    * find_comparable_entry - picks the closest prior-month entry.
    * compare_all - comparison for every entry of a snapshot.

Week rows follow a Sunday-first calendar: day 1 sits in the column of the
month's first weekday, and every seven columns start a new row. This is not
an ISO week number.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from ..ledger.entries import IncomeEntry
from ..logging_utils import get_logger
from .engine import previous_month

LOGGER = get_logger(__name__)


def first_weekday_index(on: date) -> int:
    """Sunday-based (Sunday = 0) weekday of the first day of ``on``'s month."""

    return (on.replace(day=1).weekday() + 1) % 7


def week_of_month(on: date) -> int:
    return math.ceil((on.day + first_weekday_index(on)) / 7)


@dataclass(frozen=True, slots=True)
class PeriodComparison:
    """An entry compared against its closest match from the previous month."""

    entry: IncomeEntry
    matched: IncomeEntry
    difference: float
    percent_change: Optional[float]

    def as_dict(self) -> Dict[str, object]:
        return {
            "entryId": self.entry.entry_id,
            "matchedId": self.matched.entry_id,
            "matchedDate": self.matched.entry_date.isoformat(),
            "matchedTotal": self.matched.total,
            "difference": self.difference,
            "percentChange": self.percent_change,
        }


def find_comparable_entry(
    target: IncomeEntry, entries: Iterable[IncomeEntry]
) -> Optional[PeriodComparison]:
    """Find the prior-month entry on the same weekday in the nearest week row.

    Ties keep the first candidate encountered, so the ledger's order decides
    between two equally close matches. Returns ``None`` when the previous
    month has no entry on that weekday.
    """

    prior_year, prior_month = previous_month(target.entry_date.year, target.entry_date.month)
    candidates: List[IncomeEntry] = [
        entry
        for entry in entries
        if entry.entry_date.year == prior_year
        and entry.entry_date.month == prior_month
        and entry.weekday == target.weekday
    ]
    if not candidates:
        return None

    target_week = week_of_month(target.entry_date)
    # min() returns the first minimal element
    matched = min(candidates, key=lambda entry: abs(week_of_month(entry.entry_date) - target_week))

    difference = target.total - matched.total
    percent_change = difference / matched.total * 100 if matched.total != 0 else None
    LOGGER.debug(
        "Entry %s matched %s (%s candidates, difference %.2f)",
        target.entry_id,
        matched.entry_id,
        len(candidates),
        difference,
    )
    return PeriodComparison(
        entry=target,
        matched=matched,
        difference=difference,
        percent_change=percent_change,
    )


def compare_all(entries: Sequence[IncomeEntry]) -> Dict[int, Optional[PeriodComparison]]:
    """Map every entry id to its comparison, or ``None`` when nothing matches."""

    return {entry.entry_id: find_comparable_entry(entry, entries) for entry in entries}
