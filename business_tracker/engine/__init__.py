"""Expense statistics engine and its supporting helpers."""

from __future__ import annotations

from .categories import ExpenseCategory, category_label
from .sources import ExpenseRecord, ExpenseSource, InMemoryExpenseSource
from .statistics import (
    QuarterBucket,
    QuarterlyStatistics,
    YearBucket,
    YearlyStatistics,
    compute_quarterly_statistics,
    compute_yearly_statistics,
    percentage_change,
    quarter_bounds,
)

__all__ = [
    "ExpenseCategory",
    "ExpenseRecord",
    "ExpenseSource",
    "InMemoryExpenseSource",
    "QuarterBucket",
    "QuarterlyStatistics",
    "YearBucket",
    "YearlyStatistics",
    "category_label",
    "compute_quarterly_statistics",
    "compute_yearly_statistics",
    "percentage_change",
    "quarter_bounds",
]
