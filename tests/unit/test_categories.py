from __future__ import annotations

from datetime import datetime

import pytest

from business_tracker.engine import ExpenseCategory, ExpenseRecord, InMemoryExpenseSource, category_label


def test_category_labels_are_fixed() -> None:
    assert ExpenseCategory.labels() == [
        "Travel",
        "Office",
        "Marketing",
        "Equipment",
        "Software",
        "Training",
        "Food",
        "Transport",
        "Accommodation",
        "Other",
    ]


def test_enum_compares_to_label() -> None:
    assert ExpenseCategory("Food") is ExpenseCategory.FOOD
    assert ExpenseCategory.FOOD == "Food"
    assert category_label(ExpenseCategory.FOOD) == "Food"
    assert category_label("Custom") == "Custom"


def test_unknown_category_is_rejected() -> None:
    with pytest.raises(ValueError):
        ExpenseCategory("Gadgets")


def test_record_create_normalises_fields() -> None:
    record = ExpenseRecord.create(12, ExpenseCategory.TRAINING, datetime(2024, 1, 1))
    assert record.amount == 12.0
    assert isinstance(record.amount, float)
    assert record.category == "Training"


def test_in_memory_source_range_is_inclusive() -> None:
    records = [
        ExpenseRecord.create(1, "Food", datetime(2024, 1, 1)),
        ExpenseRecord.create(2, "Food", datetime(2024, 1, 31)),
        ExpenseRecord.create(3, "Food", datetime(2024, 2, 1)),
    ]
    source = InMemoryExpenseSource(records)
    assert len(source) == 3
    found = source.records_between(datetime(2024, 1, 1), datetime(2024, 1, 31))
    assert [record.amount for record in found] == [1.0, 2.0]
    assert source.all_records() == records
