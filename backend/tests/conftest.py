from __future__ import annotations

import os
import pathlib
import sys
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# The application engine binds at import time; keep it in memory and empty.
os.environ.setdefault("BT_DATABASE_URL", "sqlite://")
os.environ.setdefault("BT_SAMPLE_DATA", "false")

from backend import database, models, server  # noqa: E402
from business_tracker.config import Settings  # noqa: E402
from business_tracker.engine import ExpenseCategory  # noqa: E402


@pytest.fixture(scope="session")
def engine():
    memory_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    database.Base.metadata.create_all(bind=memory_engine)
    yield memory_engine
    database.Base.metadata.drop_all(bind=memory_engine)


@pytest.fixture()
def db_session(engine):
    """Session bound to an outer transaction that is rolled back after each test."""
    connection = engine.connect()
    outer = connection.begin()
    session: Session = sessionmaker(bind=connection, autoflush=False, future=True)()
    try:
        yield session
    finally:
        session.close()
        outer.rollback()
        connection.close()


@pytest.fixture()
def settings() -> Settings:
    return Settings(database_url="sqlite://", sample_data_enabled=False)


@pytest.fixture()
def expense_factory(db_session):
    """Insert an expense row directly, bypassing request validation."""

    def _make(
        title: str = "Expense",
        amount: str = "10.00",
        category: ExpenseCategory = ExpenseCategory.OTHER,
        expense_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> models.Expense:
        expense = models.Expense(
            title=title,
            amount=Decimal(amount),
            category=category.value,
            expense_date=expense_date or datetime.now(),
        )
        if created_at is not None:
            expense.created_at = created_at
        db_session.add(expense)
        db_session.flush()
        return expense

    return _make


@pytest.fixture()
def client(db_session, settings):
    def _session_override():
        yield db_session

    server.app.dependency_overrides[database.get_db] = _session_override
    server.app.dependency_overrides[server.get_settings] = lambda: settings
    with TestClient(server.app) as test_client:
        yield test_client
    server.app.dependency_overrides.clear()
