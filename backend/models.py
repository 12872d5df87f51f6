"""SQLAlchemy models for the expense tracking backend."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text

from business_tracker.engine import ExpenseRecord

from .database import Base


class Expense(Base):
    __tablename__ = "expenses"

    id: int = Column(Integer, primary_key=True, index=True)
    title: str = Column(String(255), nullable=False)
    amount: float = Column(Numeric(12, 2), nullable=False)
    category: str = Column(String(50), nullable=False, index=True)
    expense_date: datetime = Column(DateTime, nullable=False, default=datetime.now, index=True)
    description: Optional[str] = Column(Text, nullable=True)
    image_path: Optional[str] = Column(String(500), nullable=True)
    created_at: datetime = Column(DateTime, nullable=False, default=datetime.now)
    updated_at: datetime = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_record(self) -> ExpenseRecord:
        """Snapshot the fields the statistics engine aggregates over."""
        return ExpenseRecord.create(self.amount, self.category, self.expense_date)
