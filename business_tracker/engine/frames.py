"""Tabular views of the period statistics for display and CSV export."""

from __future__ import annotations

from collections.abc import Mapping

import pandas as pd

from business_tracker.engine.statistics import QuarterlyStatistics, YearlyStatistics

__all__ = ["category_frame", "quarterly_frame", "yearly_frame"]

QUARTER_COLUMNS = [
    "quarter",
    "year",
    "start_date",
    "end_date",
    "total_amount",
    "expense_count",
    "previous_quarter_total",
    "percentage_change",
    "top_category",
]
YEAR_COLUMNS = [
    "year",
    "total_amount",
    "expense_count",
    "previous_year_total",
    "percentage_change",
    "average_per_month",
    "top_category",
]


def quarterly_frame(stats: QuarterlyStatistics) -> pd.DataFrame:
    """One row per quarter; missing period-over-period values become ``NaN``."""

    rows = [
        {
            "quarter": bucket.name,
            "year": bucket.year,
            "start_date": bucket.start_date,
            "end_date": bucket.end_date,
            "total_amount": bucket.total_amount,
            "expense_count": bucket.expense_count,
            "previous_quarter_total": bucket.previous_quarter_total,
            "percentage_change": bucket.percentage_change,
            "top_category": bucket.top_category[0] if bucket.top_category else None,
        }
        for bucket in stats.quarters
    ]
    frame = pd.DataFrame(rows, columns=QUARTER_COLUMNS)
    frame["previous_quarter_total"] = frame["previous_quarter_total"].astype("float64")
    frame["percentage_change"] = frame["percentage_change"].astype("float64")
    return frame


def yearly_frame(stats: YearlyStatistics) -> pd.DataFrame:
    """One row per year in ascending order; an empty frame keeps its columns."""

    rows = [
        {
            "year": bucket.year,
            "total_amount": bucket.total_amount,
            "expense_count": bucket.expense_count,
            "previous_year_total": bucket.previous_year_total,
            "percentage_change": bucket.percentage_change,
            "average_per_month": bucket.average_per_month,
            "top_category": bucket.top_category[0] if bucket.top_category else None,
        }
        for bucket in stats.years
    ]
    frame = pd.DataFrame(rows, columns=YEAR_COLUMNS)
    frame["previous_year_total"] = frame["previous_year_total"].astype("float64")
    frame["percentage_change"] = frame["percentage_change"].astype("float64")
    return frame


def category_frame(breakdown: Mapping[str, float]) -> pd.DataFrame:
    frame = pd.DataFrame(
        {"category": list(breakdown.keys()), "amount": list(breakdown.values())},
        columns=["category", "amount"],
    )
    return frame.sort_values("amount", ascending=False, kind="stable").reset_index(drop=True)
