"""Read-only record sources feeding the statistics engine."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from business_tracker.engine.categories import ExpenseCategory, category_label

__all__ = ["ExpenseRecord", "ExpenseSource", "InMemoryExpenseSource"]


@dataclass(frozen=True, slots=True)
class ExpenseRecord:
    """Immutable snapshot of the fields the engine aggregates over.

    Attributes:
      amount: Non-negative amount in an unspecified currency unit.
      category: Category label (``ExpenseCategory`` value).
      timestamp: Naive point in time used for period bucketing.
    """

    amount: float
    category: str
    timestamp: datetime

    @classmethod
    def create(
        cls,
        amount: float | Decimal | int,
        category: ExpenseCategory | str,
        timestamp: datetime,
    ) -> ExpenseRecord:
        return cls(amount=float(amount), category=category_label(category), timestamp=timestamp)


class ExpenseSource(Protocol):
    """Capability the engine needs from a record store."""

    def all_records(self) -> list[ExpenseRecord]: ...

    def records_between(self, start: datetime, end: datetime) -> list[ExpenseRecord]: ...


class InMemoryExpenseSource:
    """Expense source backed by a fixed collection, used by tests and the CLI."""

    def __init__(self, records: Iterable[ExpenseRecord]) -> None:
        self._records = tuple(records)

    def all_records(self) -> list[ExpenseRecord]:
        return list(self._records)

    def records_between(self, start: datetime, end: datetime) -> list[ExpenseRecord]:
        return [record for record in self._records if start <= record.timestamp <= end]

    def __len__(self) -> int:
        return len(self._records)
