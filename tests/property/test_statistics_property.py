from __future__ import annotations

import math
from datetime import datetime

import pytest

pytest.importorskip("hypothesis")

from hypothesis import given
from hypothesis import strategies as st

from business_tracker.engine import (
    ExpenseCategory,
    ExpenseRecord,
    compute_quarterly_statistics,
    compute_yearly_statistics,
)

YEAR = 2024

# Same range the API accepts for a single expense.
amounts = st.floats(min_value=0.01, max_value=999_999.99, allow_nan=False, allow_infinity=False)
timestamps = st.datetimes(min_value=datetime(2022, 1, 1), max_value=datetime(2026, 12, 31, 23, 59, 59))
records = st.lists(
    st.builds(ExpenseRecord.create, amounts, st.sampled_from(list(ExpenseCategory)), timestamps),
    max_size=40,
)


@given(records)
def test_every_record_lands_in_exactly_one_quarter(items: list[ExpenseRecord]) -> None:
    stats = compute_quarterly_statistics(items, YEAR)
    in_year = [record for record in items if record.timestamp.year == YEAR]

    assert len(stats.quarters) == 4
    assert sum(bucket.expense_count for bucket in stats.quarters) == len(in_year)
    expected = sum(record.amount for record in in_year)
    assert math.isclose(stats.year_total, expected, rel_tol=1e-9, abs_tol=1e-6)
    assert math.isclose(
        stats.year_total,
        sum(bucket.total_amount for bucket in stats.quarters),
        rel_tol=1e-12,
        abs_tol=1e-9,
    )


@given(records)
def test_breakdowns_add_up_to_bucket_totals(items: list[ExpenseRecord]) -> None:
    for bucket in compute_quarterly_statistics(items, YEAR).quarters:
        assert math.isclose(
            sum(bucket.category_breakdown.values()),
            bucket.total_amount,
            rel_tol=1e-9,
            abs_tol=1e-6,
        )
        assert (bucket.expense_count == 0) == (bucket.category_breakdown == {})


@given(records)
def test_percentage_change_is_finite_or_absent(items: list[ExpenseRecord]) -> None:
    quarterly = compute_quarterly_statistics(items, YEAR).quarters
    yearly = compute_yearly_statistics(items).years
    for bucket in (*quarterly, *yearly):
        change = bucket.percentage_change
        if change is not None:
            assert math.isfinite(change)
    for bucket in quarterly[1:]:
        if bucket.previous_quarter_total == 0:
            assert bucket.percentage_change is None


@given(records)
def test_yearly_buckets_are_ascending_and_complete(items: list[ExpenseRecord]) -> None:
    stats = compute_yearly_statistics(items)
    years = [bucket.year for bucket in stats.years]
    assert years == sorted({record.timestamp.year for record in items})
    assert sum(bucket.expense_count for bucket in stats.years) == len(items)
    if not items:
        assert stats.grand_total is None


@given(records)
def test_computations_are_repeatable(items: list[ExpenseRecord]) -> None:
    assert compute_quarterly_statistics(items, YEAR) == compute_quarterly_statistics(items, YEAR)
    assert compute_yearly_statistics(items) == compute_yearly_statistics(items)
