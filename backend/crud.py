"""CRUD helper functions for the expense tracking backend."""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from business_tracker.engine import (
    ExpenseCategory,
    ExpenseRecord,
    QuarterlyStatistics,
    YearlyStatistics,
    compute_quarterly_statistics,
    compute_yearly_statistics,
)
from business_tracker.engine.logging import setup_logger

from . import models, schemas

LOG = setup_logger(__name__)

DEFAULT_EXPENSIVE_THRESHOLD = 100.0
DEFAULT_DELETE_WINDOW_DAYS = 30


class EntityNotFoundError(RuntimeError):
    """Raised when an entity cannot be located in the database."""


class DeletionNotAllowedError(RuntimeError):
    """Raised when an expense is too old to be deleted."""


class InvalidRangeError(ValueError):
    """Raised when a date range starts after it ends."""


class SqlExpenseSource:
    """Read-only record source over the ``expenses`` table."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def all_records(self) -> List[ExpenseRecord]:
        return [expense.to_record() for expense in self._session.scalars(select(models.Expense))]

    def records_between(self, start: datetime, end: datetime) -> List[ExpenseRecord]:
        return [expense.to_record() for expense in list_between(self._session, start, end)]


def list_expenses(session: Session) -> List[models.Expense]:
    stmt = select(models.Expense).order_by(models.Expense.expense_date.desc(), models.Expense.id.desc())
    return list(session.scalars(stmt))


def get_expense(session: Session, expense_id: int) -> models.Expense:
    expense = session.get(models.Expense, expense_id)
    if expense is None:
        raise EntityNotFoundError(f"Expense with ID {expense_id} not found")
    return expense


def create_expense(session: Session, expense_in: schemas.ExpenseCreate) -> models.Expense:
    data = expense_in.model_dump(exclude_unset=True)
    data["category"] = expense_in.category.value
    if data.get("expense_date") is None:
        data["expense_date"] = datetime.now()
    expense = models.Expense(**data)
    session.add(expense)
    session.flush()
    session.refresh(expense)
    LOG.info("Created expense %s", expense.id, extra={"expense_id": expense.id})
    return expense


def update_expense(session: Session, expense_id: int, update_in: schemas.ExpenseUpdate) -> models.Expense:
    expense = get_expense(session, expense_id)
    for field, value in update_in.model_dump(exclude_unset=True, exclude_none=True).items():
        if isinstance(value, ExpenseCategory):
            value = value.value
        setattr(expense, field, value)
    session.flush()
    session.refresh(expense)
    LOG.info("Updated expense %s", expense.id, extra={"expense_id": expense.id})
    return expense


def delete_expense(
    session: Session,
    expense_id: int,
    *,
    window_days: int = DEFAULT_DELETE_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> None:
    expense = get_expense(session, expense_id)
    cutoff = (now or datetime.now()) - timedelta(days=window_days)
    if expense.created_at < cutoff:
        raise DeletionNotAllowedError(f"Cannot delete expenses older than {window_days} days")
    session.delete(expense)
    session.flush()
    LOG.info("Deleted expense %s", expense_id, extra={"expense_id": expense_id})


def list_by_category(session: Session, category: ExpenseCategory) -> List[models.Expense]:
    stmt = (
        select(models.Expense)
        .where(models.Expense.category == category.value)
        .order_by(models.Expense.expense_date.desc())
    )
    return list(session.scalars(stmt))


def search_by_title(session: Session, term: Optional[str]) -> List[models.Expense]:
    if term is None or not term.strip():
        return list_expenses(session)
    stmt = (
        select(models.Expense)
        .where(models.Expense.title.icontains(term.strip(), autoescape=True))
        .order_by(models.Expense.expense_date.desc())
    )
    return list(session.scalars(stmt))


def list_between(session: Session, start: datetime, end: datetime) -> List[models.Expense]:
    if start > end:
        raise InvalidRangeError("Start date must be before end date")
    stmt = (
        select(models.Expense)
        .where(models.Expense.expense_date.between(start, end))
        .order_by(models.Expense.expense_date.desc())
    )
    return list(session.scalars(stmt))


def expense_overview(
    session: Session,
    threshold: Optional[float] = None,
    *,
    default_threshold: float = DEFAULT_EXPENSIVE_THRESHOLD,
) -> schemas.OverviewRead:
    if threshold is None or threshold <= 0:
        threshold = default_threshold

    total_stmt = select(func.coalesce(func.sum(models.Expense.amount), 0))
    total_value = Decimal(session.scalar(total_stmt) or 0)

    by_category_stmt = (
        select(
            models.Expense.category,
            func.coalesce(func.sum(models.Expense.amount), 0).label("total"),
        )
        .group_by(models.Expense.category)
        .order_by(models.Expense.category)
    )
    by_category = [
        schemas.CategorySummary(category=row.category, total=row.total)
        for row in session.execute(by_category_stmt)
    ]

    expensive_stmt = (
        select(models.Expense)
        .where(models.Expense.amount > threshold)
        .order_by(models.Expense.amount.desc())
    )
    expensive = [schemas.ExpenseRead.model_validate(item) for item in session.scalars(expensive_stmt)]

    return schemas.OverviewRead(
        total_amount=total_value,
        category_breakdown=by_category,
        expensive_expenses=expensive,
        expensive_count=len(expensive),
    )


def quarterly_statistics(session: Session, year: Optional[int] = None) -> QuarterlyStatistics:
    return compute_quarterly_statistics(SqlExpenseSource(session).all_records(), year)


def yearly_statistics(session: Session) -> YearlyStatistics:
    return compute_yearly_statistics(SqlExpenseSource(session).all_records())
