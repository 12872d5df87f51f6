"""Quarterly and yearly expense rollups with period-over-period change.

The engine is a pair of pure functions over a collection of expense records.
Nothing is cached: every call builds fresh buckets from the supplied records.

The two granularities derive the previous-period total differently. Quarterly
buckets recompute the preceding quarter from the records on every iteration,
while yearly buckets carry the running total of the previous year in ascending
order. With sparse data the two approaches are observably different and both
behaviours are kept as they are.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from business_tracker.engine.categories import category_label
from business_tracker.engine.logging import setup_logger
from business_tracker.engine.sources import ExpenseRecord

__all__ = [
    "QuarterBucket",
    "QuarterlyStatistics",
    "YearBucket",
    "YearlyStatistics",
    "compute_quarterly_statistics",
    "compute_yearly_statistics",
    "percentage_change",
    "quarter_bounds",
]

LOG = setup_logger(__name__)

QUARTERS_PER_YEAR = 4
MONTHS_PER_YEAR = 12


@dataclass(frozen=True, slots=True)
class QuarterBucket:
    """Aggregate over the expenses of one calendar quarter."""

    quarter: int
    year: int
    start_date: datetime
    end_date: datetime
    total_amount: float
    expense_count: int
    category_breakdown: dict[str, float]
    previous_quarter_total: float | None
    percentage_change: float | None

    @property
    def name(self) -> str:
        return f"Q{self.quarter}"

    @property
    def label(self) -> str:
        return f"Q{self.quarter} {self.year}"

    @property
    def top_category(self) -> tuple[str, float] | None:
        return _top_category(self.category_breakdown)


@dataclass(frozen=True, slots=True)
class QuarterlyStatistics:
    year: int
    quarters: tuple[QuarterBucket, ...]
    year_total: float
    average_per_quarter: float


@dataclass(frozen=True, slots=True)
class YearBucket:
    """Aggregate over the expenses of one calendar year."""

    year: int
    total_amount: float
    expense_count: int
    category_breakdown: dict[str, float]
    previous_year_total: float | None
    percentage_change: float | None
    average_per_month: float

    @property
    def average_per_quarter(self) -> float:
        return self.total_amount / QUARTERS_PER_YEAR

    @property
    def top_category(self) -> tuple[str, float] | None:
        """Category with the highest spend, or ``None`` for an empty breakdown."""

        return _top_category(self.category_breakdown)


@dataclass(frozen=True, slots=True)
class YearlyStatistics:
    """Per-year buckets in ascending order plus grand totals.

    ``grand_total`` and ``average_per_year`` are ``None`` when no record
    exists at all; they are omitted rather than reported as zero.
    """

    years: tuple[YearBucket, ...]
    total_years: int
    grand_total: float | None
    average_per_year: float | None

    @property
    def latest_year(self) -> YearBucket | None:
        return self.years[-1] if self.years else None

    @property
    def highest_expense_year(self) -> YearBucket | None:
        if not self.years:
            return None
        return max(self.years, key=lambda bucket: bucket.total_amount)

    @property
    def lowest_expense_year(self) -> YearBucket | None:
        if not self.years:
            return None
        return min(self.years, key=lambda bucket: bucket.total_amount)


def _top_category(breakdown: dict[str, float]) -> tuple[str, float] | None:
    if not breakdown:
        return None
    return max(breakdown.items(), key=lambda item: item[1])


def quarter_bounds(year: int, quarter: int) -> tuple[datetime, datetime]:
    """Return the first and last second of ``quarter`` in ``year``.

    Args:
      year: Calendar year.
      quarter: Quarter number between 1 and 4.

    Returns:
      Tuple ``(start, end)`` where ``start`` is midnight of the first day of the
      quarter and ``end`` is 23:59:59 of its last day.

    Raises:
      ValueError: If ``quarter`` is outside ``1..4``.
    """

    if not 1 <= quarter <= QUARTERS_PER_YEAR:
        raise ValueError(f"quarter must be between 1 and 4, got {quarter}")
    first_month = (quarter - 1) * 3 + 1
    last_month = quarter * 3
    last_day = calendar.monthrange(year, last_month)[1]
    return datetime(year, first_month, 1), datetime(year, last_month, last_day, 23, 59, 59)


def percentage_change(current: float, previous: float | None) -> float | None:
    """Relative change in percent, omitted unless ``previous`` is positive."""

    if previous is None or previous <= 0:
        return None
    return (current - previous) / previous * 100


def _bucket_time(timestamp: datetime) -> datetime:
    # Whole-second wall-clock time: sub-second parts past 23:59:59 stay in the period.
    return timestamp.replace(microsecond=0, tzinfo=None)


def _members(records: Sequence[ExpenseRecord], start: datetime, end: datetime) -> list[ExpenseRecord]:
    return [record for record in records if start <= _bucket_time(record.timestamp) <= end]


def _total(records: Iterable[ExpenseRecord]) -> float:
    return sum((float(record.amount) for record in records), 0.0)


def _category_breakdown(records: Iterable[ExpenseRecord]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for record in records:
        totals[category_label(record.category)] += float(record.amount)
    return dict(totals)


def compute_quarterly_statistics(
    records: Iterable[ExpenseRecord],
    year: int | None = None,
) -> QuarterlyStatistics:
    """Build the four quarter buckets of ``year``.

    Args:
      records: Every available record; filtering happens here.
      year: Calendar year to report on. Defaults to the current year.

    Returns:
      Statistics holding exactly four buckets (Q1..Q4), even when a quarter
      has no records, plus the year total and the average per quarter.
    """

    target_year = datetime.now().year if year is None else year
    snapshot = tuple(records)

    quarters: list[QuarterBucket] = []
    for quarter in range(1, QUARTERS_PER_YEAR + 1):
        start, end = quarter_bounds(target_year, quarter)
        members = _members(snapshot, start, end)
        total = _total(members)

        previous_total: float | None = None
        if quarter > 1:
            previous_start, previous_end = quarter_bounds(target_year, quarter - 1)
            previous_total = _total(_members(snapshot, previous_start, previous_end))

        quarters.append(
            QuarterBucket(
                quarter=quarter,
                year=target_year,
                start_date=start,
                end_date=end,
                total_amount=total,
                expense_count=len(members),
                category_breakdown=_category_breakdown(members),
                previous_quarter_total=previous_total,
                percentage_change=percentage_change(total, previous_total),
            )
        )

    year_total = _total_of_buckets(bucket.total_amount for bucket in quarters)
    LOG.debug(
        "Quarterly statistics for %d computed from %d records",
        target_year,
        len(snapshot),
        extra={"records_processed": len(snapshot)},
    )
    return QuarterlyStatistics(
        year=target_year,
        quarters=tuple(quarters),
        year_total=year_total,
        average_per_quarter=year_total / QUARTERS_PER_YEAR,
    )


def compute_yearly_statistics(records: Iterable[ExpenseRecord]) -> YearlyStatistics:
    """Build one bucket per calendar year that has at least one record.

    Args:
      records: Every available record.

    Returns:
      Buckets ordered by ascending year. The previous-year total is the
      running total of the preceding bucket in that order.
    """

    by_year: dict[int, list[ExpenseRecord]] = defaultdict(list)
    count = 0
    for record in records:
        by_year[record.timestamp.year].append(record)
        count += 1

    buckets: list[YearBucket] = []
    previous_total: float | None = None
    for year in sorted(by_year):
        members = by_year[year]
        total = _total(members)
        buckets.append(
            YearBucket(
                year=year,
                total_amount=total,
                expense_count=len(members),
                category_breakdown=_category_breakdown(members),
                previous_year_total=previous_total,
                percentage_change=percentage_change(total, previous_total),
                average_per_month=total / MONTHS_PER_YEAR,
            )
        )
        previous_total = total

    grand_total: float | None = None
    average_per_year: float | None = None
    if buckets:
        grand_total = _total_of_buckets(bucket.total_amount for bucket in buckets)
        average_per_year = grand_total / len(buckets)

    LOG.debug(
        "Yearly statistics computed for %d years from %d records",
        len(buckets),
        count,
        extra={"records_processed": count},
    )
    return YearlyStatistics(
        years=tuple(buckets),
        total_years=len(buckets),
        grand_total=grand_total,
        average_per_year=average_per_year,
    )


def _total_of_buckets(totals: Iterable[float]) -> float:
    return sum(totals, 0.0)
