"""Seed a fresh database with a handful of demonstration expenses."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from business_tracker.engine import ExpenseCategory
from business_tracker.engine.logging import setup_logger

from . import crud, models, schemas

LOG = setup_logger(__name__)


def sample_expenses(now: Optional[datetime] = None) -> List[schemas.ExpenseCreate]:
    now = now or datetime.now()
    return [
        schemas.ExpenseCreate(
            title="Hotel Berlin",
            amount=Decimal("150.50"),
            category=ExpenseCategory.TRAVEL,
            expense_date=now - timedelta(days=5),
            description="Business trip accommodation in Berlin",
        ),
        schemas.ExpenseCreate(
            title="Office Supplies",
            amount=Decimal("89.99"),
            category=ExpenseCategory.OFFICE,
            expense_date=now - timedelta(days=3),
            description="Printer paper, pens, and notebooks",
        ),
        schemas.ExpenseCreate(
            title="Software License",
            amount=Decimal("299.00"),
            category=ExpenseCategory.SOFTWARE,
            expense_date=now - timedelta(days=1),
            description="Annual license for development tools",
        ),
        schemas.ExpenseCreate(
            title="Client Lunch",
            amount=Decimal("45.75"),
            category=ExpenseCategory.FOOD,
            expense_date=now - timedelta(hours=2),
            description="Business lunch with potential client",
        ),
        schemas.ExpenseCreate(
            title="Taxi to Airport",
            amount=Decimal("32.50"),
            category=ExpenseCategory.TRANSPORT,
            expense_date=now - timedelta(hours=6),
            description="Airport transfer for business trip",
        ),
        schemas.ExpenseCreate(
            title="Google Ads Campaign",
            amount=Decimal("250.00"),
            category=ExpenseCategory.MARKETING,
            expense_date=now - timedelta(days=2),
            description="Online advertising campaign",
        ),
    ]


def seed_sample_data(session: Session, *, enabled: bool = True, now: Optional[datetime] = None) -> int:
    """Insert the sample expenses when enabled and the table is empty.

    Returns the number of inserted expenses (``0`` when skipped).
    """
    if not enabled:
        LOG.info("Sample data creation disabled via configuration")
        return 0

    existing = session.scalar(select(func.count(models.Expense.id))) or 0
    if existing:
        LOG.info("Database already contains %d expenses - skipping sample data", existing)
        return 0

    created = [crud.create_expense(session, item) for item in sample_expenses(now)]
    total = sum((expense.amount for expense in created), Decimal("0"))
    per_category = Counter(expense.category for expense in created)
    LOG.info("Created %d sample expenses, total amount %.2f", len(created), total)
    for category, count in sorted(per_category.items()):
        LOG.info("  %s: %d expenses", category, count)
    return len(created)
