from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from business_tracker.engine import ExpenseRecord, compute_quarterly_statistics, compute_yearly_statistics
from business_tracker.engine.frames import (
    QUARTER_COLUMNS,
    YEAR_COLUMNS,
    category_frame,
    quarterly_frame,
    yearly_frame,
)
from business_tracker.utils.io import write_csv


def _records() -> list[ExpenseRecord]:
    return [
        ExpenseRecord.create(100, "Travel", datetime(2025, 2, 15)),
        ExpenseRecord.create(50, "Office", datetime(2025, 5, 10)),
        ExpenseRecord.create(200, "Travel", datetime(2024, 2, 20)),
    ]


def test_quarterly_frame_has_one_row_per_quarter() -> None:
    frame = quarterly_frame(compute_quarterly_statistics(_records(), 2025))
    assert list(frame.columns) == QUARTER_COLUMNS
    assert frame["quarter"].tolist() == ["Q1", "Q2", "Q3", "Q4"]
    assert frame["total_amount"].tolist() == [100.0, 50.0, 0.0, 0.0]
    assert pd.isna(frame.loc[0, "previous_quarter_total"])
    assert pd.isna(frame.loc[3, "percentage_change"])
    assert frame.loc[0, "top_category"] == "Travel"
    assert frame.loc[2, "top_category"] is None
    assert frame["percentage_change"].dtype == "float64"


def test_yearly_frame_rows_follow_year_order() -> None:
    frame = yearly_frame(compute_yearly_statistics(_records()))
    assert list(frame.columns) == YEAR_COLUMNS
    assert frame["year"].tolist() == [2024, 2025]
    assert frame.loc[1, "previous_year_total"] == 200.0
    assert frame.loc[1, "percentage_change"] == -25.0


def test_yearly_frame_empty_keeps_columns() -> None:
    frame = yearly_frame(compute_yearly_statistics([]))
    assert frame.empty
    assert list(frame.columns) == YEAR_COLUMNS


def test_category_frame_sorted_by_amount() -> None:
    frame = category_frame({"Food": 20.0, "Travel": 300.0, "Office": 20.0})
    assert frame["category"].tolist() == ["Travel", "Food", "Office"]
    assert frame["amount"].tolist() == [300.0, 20.0, 20.0]


def test_write_csv_creates_parent_folders(tmp_path: Path) -> None:
    frame = yearly_frame(compute_yearly_statistics(_records()))
    target = write_csv(frame, tmp_path / "reports" / "yearly.csv")
    assert target.exists()
    reloaded = pd.read_csv(target)
    assert reloaded["year"].tolist() == [2024, 2025]
