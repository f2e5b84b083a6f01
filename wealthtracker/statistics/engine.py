"""Mini README: Dashboard statistics derived from a ledger snapshot.

Structure:
    * previous_month / month_label - calendar helpers shared with the matcher.
    * LedgerStatistics - dataclass of totals, growth and the monthly series.
    * compute_statistics - single pass aggregation over the entries.

All comparisons are between calendar dates, never instants, so an entry
dated "2024-03-01" belongs to March regardless of the caller's timezone.
The caller supplies "now"; nothing here reads the system clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Tuple

from ..ledger.entries import IncomeEntry
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

WEEKLY_WINDOW_DAYS = 7


def previous_month(year: int, month: int) -> Tuple[int, int]:
    """Return the (year, month) immediately before the given month."""

    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_label(on: date) -> str:
    """Chart label such as ``"Mar 2024"``."""

    return f"{MONTH_ABBREVIATIONS[on.month - 1]} {on.year}"


def growth_percentage(current: float, previous: float) -> float:
    """Month-over-month growth with the dashboard's zero conventions."""

    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def _as_date(now: date | datetime) -> date:
    return now.date() if isinstance(now, datetime) else now


@dataclass(slots=True)
class LedgerStatistics:
    """Totals shown on the dashboard cards plus the chart series."""

    today_total: float = 0.0
    weekly_total: float = 0.0
    monthly_total: float = 0.0
    last_month_total: float = 0.0
    growth_percentage: float = 0.0
    monthly_series: Dict[str, float] = field(default_factory=dict)

    @property
    def is_growth(self) -> bool:
        return self.growth_percentage >= 0

    def as_dict(self) -> Dict[str, object]:
        """Export rounded values for display; stored totals keep full precision."""

        return {
            "todayTotal": round(self.today_total, 2),
            "weeklyTotal": round(self.weekly_total, 2),
            "monthlyTotal": round(self.monthly_total, 2),
            "lastMonthTotal": round(self.last_month_total, 2),
            "growthPercentage": round(self.growth_percentage, 2),
            "isGrowth": self.is_growth,
            "monthlySeries": {label: round(total, 2) for label, total in self.monthly_series.items()},
        }


def compute_statistics(entries: Iterable[IncomeEntry], now: date | datetime) -> LedgerStatistics:
    """Aggregate today/week/month totals, growth and the monthly series."""

    today = _as_date(now)
    week_start = today - timedelta(days=WEEKLY_WINDOW_DAYS - 1)
    last_year, last_month = previous_month(today.year, today.month)

    stats = LedgerStatistics()
    # dict preserves first-seen order of each month label
    series: Dict[str, float] = {}
    count = 0
    for entry in entries:
        count += 1
        on = entry.entry_date
        total = entry.total
        if on == today:
            stats.today_total += total
        if week_start <= on <= today:
            stats.weekly_total += total
        if (on.year, on.month) == (today.year, today.month):
            stats.monthly_total += total
        elif (on.year, on.month) == (last_year, last_month):
            stats.last_month_total += total
        label = month_label(on)
        series[label] = series.get(label, 0.0) + total

    stats.monthly_series = series
    stats.growth_percentage = growth_percentage(stats.monthly_total, stats.last_month_total)
    LOGGER.debug(
        "Statistics for %s over %s entries -> month %.2f last %.2f growth %.2f%%",
        today,
        count,
        stats.monthly_total,
        stats.last_month_total,
        stats.growth_percentage,
    )
    return stats
