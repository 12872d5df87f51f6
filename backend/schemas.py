"""Pydantic schemas for serialising expense tracking data."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from business_tracker.engine import ExpenseCategory

MAX_AMOUNT = Decimal("999999.99")

DataT = TypeVar("DataT")


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _clean_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError("Expense title is required")
    return stripped


def _not_in_future(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    if value > datetime.now():
        raise ValueError("Expense date cannot be in the future")
    return value


class ExpenseBase(BaseModel):
    title: str = Field(..., max_length=255)
    amount: Decimal = Field(..., gt=0, le=MAX_AMOUNT, decimal_places=2)
    category: ExpenseCategory
    expense_date: Optional[datetime] = None
    description: Optional[str] = None
    image_path: Optional[str] = Field(None, max_length=500)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> Optional[str]:
        return _clean_title(value)

    @field_validator("expense_date")
    @classmethod
    def validate_expense_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _not_in_future(value)


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, le=MAX_AMOUNT, decimal_places=2)
    category: Optional[ExpenseCategory] = None
    expense_date: Optional[datetime] = None
    description: Optional[str] = None
    image_path: Optional[str] = Field(None, max_length=500)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> Optional[str]:
        return _clean_title(value)

    @field_validator("expense_date")
    @classmethod
    def validate_expense_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _not_in_future(value)


class ExpenseRead(ORMModel):
    id: int
    title: str
    amount: Decimal
    category: ExpenseCategory
    expense_date: datetime
    description: Optional[str] = None
    image_path: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CategorySummary(BaseModel):
    category: str
    total: Decimal


class OverviewRead(BaseModel):
    total_amount: Decimal
    category_breakdown: List[CategorySummary]
    expensive_expenses: List[ExpenseRead]
    expensive_count: int


class QuarterRead(ORMModel):
    quarter: int
    year: int
    start_date: datetime
    end_date: datetime
    total_amount: float
    expense_count: int
    category_breakdown: dict[str, float]
    previous_quarter_total: Optional[float] = None
    percentage_change: Optional[float] = None


class QuarterlyStatisticsRead(ORMModel):
    year: int
    quarters: List[QuarterRead]
    year_total: float
    average_per_quarter: float


class YearRead(ORMModel):
    year: int
    total_amount: float
    expense_count: int
    category_breakdown: dict[str, float]
    previous_year_total: Optional[float] = None
    percentage_change: Optional[float] = None
    average_per_month: float


class YearlyStatisticsRead(ORMModel):
    years: List[YearRead]
    total_years: int
    grand_total: Optional[float] = None
    average_per_year: Optional[float] = None


class HealthRead(BaseModel):
    success: bool = True
    status: str
    timestamp: datetime
    message: str
    version: str


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every API payload."""

    success: bool = True
    message: str
    data: Optional[DataT] = None


class ApiListResponse(ApiResponse[List[DataT]], Generic[DataT]):
    count: int = 0


class MessageResponse(BaseModel):
    """Envelope for operations that return no payload."""

    success: bool = True
    message: str
    data: None = None
