"""Mini README: Derived figures for the WealthTracker dashboard.

``engine`` computes the card totals, growth percentage and chart series;
``matcher`` finds the comparable entry from the previous month. Both accept a
plain sequence of ledger entries and a caller-supplied date.
"""

from .engine import LedgerStatistics, compute_statistics, growth_percentage, month_label, previous_month
from .matcher import PeriodComparison, compare_all, find_comparable_entry, week_of_month

__all__ = [
    "LedgerStatistics",
    "PeriodComparison",
    "compare_all",
    "compute_statistics",
    "find_comparable_entry",
    "growth_percentage",
    "month_label",
    "previous_month",
    "week_of_month",
]
