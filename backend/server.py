"""FastAPI application exposing expense tracking endpoints."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from business_tracker import __version__
from business_tracker.config import Settings, load_settings
from business_tracker.engine import ExpenseCategory
from business_tracker.engine.logging import setup_logger

from . import crud, database, sample_data, schemas

LOG = setup_logger(__name__)
SETTINGS = load_settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the active settings."""
    return SETTINGS


@asynccontextmanager
async def lifespan(_: FastAPI):
    database.init_db()
    with database.session_scope() as session:
        sample_data.seed_sample_data(session, enabled=SETTINGS.sample_data_enabled)
    LOG.info("BusinessTracker API %s ready on %s", __version__, database.DATABASE_URL)
    yield


app = FastAPI(title="BusinessTracker Expense API", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "data": None},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    response = _error(status.HTTP_400_BAD_REQUEST, message)
    LOG.info("Rejected request: %s", message)
    return response


@app.exception_handler(Exception)
async def unexpected_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    LOG.exception("Unhandled error")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"An unexpected error occurred: {exc}")


def _expense_list(message: str, expenses) -> schemas.ApiListResponse[schemas.ExpenseRead]:
    items = [schemas.ExpenseRead.model_validate(expense) for expense in expenses]
    return schemas.ApiListResponse[schemas.ExpenseRead](message=message, data=items, count=len(items))


@app.get("/", tags=["system"])
def root() -> dict[str, str]:
    return {"message": "BusinessTracker API is running!", "status": "OK"}


@app.get("/health", response_model=schemas.HealthRead, tags=["system"])
def healthcheck() -> schemas.HealthRead:
    return schemas.HealthRead(
        status="UP",
        timestamp=datetime.now(),
        message="BusinessTracker API is running successfully!",
        version=__version__,
    )


@app.get("/expenses", response_model=schemas.ApiListResponse[schemas.ExpenseRead])
def list_expenses(db: Session = Depends(database.get_db)):
    return _expense_list("Expenses retrieved successfully", crud.list_expenses(db))


@app.post(
    "/expenses",
    response_model=schemas.ApiResponse[schemas.ExpenseRead],
    status_code=status.HTTP_201_CREATED,
)
def create_expense(expense_in: schemas.ExpenseCreate, db: Session = Depends(database.get_db)):
    expense = crud.create_expense(db, expense_in)
    return schemas.ApiResponse[schemas.ExpenseRead](
        message="Expense created successfully",
        data=schemas.ExpenseRead.model_validate(expense),
    )


@app.get("/expenses/stats", response_model=schemas.ApiResponse[schemas.OverviewRead])
def get_overview(
    threshold: Optional[float] = Query(None),
    db: Session = Depends(database.get_db),
    settings: Settings = Depends(get_settings),
):
    overview = crud.expense_overview(db, threshold, default_threshold=settings.expensive_threshold)
    return schemas.ApiResponse[schemas.OverviewRead](message="Statistics retrieved successfully", data=overview)


@app.get("/expenses/stats/quarterly", response_model=schemas.ApiResponse[schemas.QuarterlyStatisticsRead])
def get_quarterly_statistics(
    year: Optional[int] = Query(None, ge=1, le=9999),
    db: Session = Depends(database.get_db),
):
    stats = crud.quarterly_statistics(db, year)
    return schemas.ApiResponse[schemas.QuarterlyStatisticsRead](
        message=f"Quarterly statistics for {stats.year} retrieved successfully",
        data=schemas.QuarterlyStatisticsRead.model_validate(stats),
    )


@app.get("/expenses/stats/yearly", response_model=schemas.ApiResponse[schemas.YearlyStatisticsRead])
def get_yearly_statistics(db: Session = Depends(database.get_db)):
    stats = crud.yearly_statistics(db)
    return schemas.ApiResponse[schemas.YearlyStatisticsRead](
        message="Yearly statistics retrieved successfully",
        data=schemas.YearlyStatisticsRead.model_validate(stats),
    )


@app.get("/expenses/search", response_model=schemas.ApiListResponse[schemas.ExpenseRead])
def search_expenses(term: str = Query(""), db: Session = Depends(database.get_db)):
    return _expense_list(f"Search completed for term: '{term}'", crud.search_by_title(db, term))


@app.get("/expenses/range", response_model=schemas.ApiListResponse[schemas.ExpenseRead])
def list_expenses_between(start: datetime, end: datetime, db: Session = Depends(database.get_db)):
    try:
        expenses = crud.list_between(db, start, end)
    except crud.InvalidRangeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _expense_list("Expenses in date range retrieved", expenses)


@app.get("/expenses/category/{category}", response_model=schemas.ApiListResponse[schemas.ExpenseRead])
def list_expenses_by_category(category: str, db: Session = Depends(database.get_db)):
    try:
        member = ExpenseCategory(category)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid expense category: {category}"
        ) from exc
    return _expense_list(f"Expenses for category '{member.value}' retrieved", crud.list_by_category(db, member))


@app.get("/expenses/{expense_id}", response_model=schemas.ApiResponse[schemas.ExpenseRead])
def get_expense(expense_id: int, db: Session = Depends(database.get_db)):
    try:
        expense = crud.get_expense(db, expense_id)
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return schemas.ApiResponse[schemas.ExpenseRead](
        message="Expense found", data=schemas.ExpenseRead.model_validate(expense)
    )


@app.put("/expenses/{expense_id}", response_model=schemas.ApiResponse[schemas.ExpenseRead])
def update_expense(
    expense_id: int,
    update_in: schemas.ExpenseUpdate,
    db: Session = Depends(database.get_db),
):
    try:
        expense = crud.update_expense(db, expense_id, update_in)
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return schemas.ApiResponse[schemas.ExpenseRead](
        message="Expense updated successfully", data=schemas.ExpenseRead.model_validate(expense)
    )


@app.delete("/expenses/{expense_id}", response_model=schemas.MessageResponse)
def delete_expense(
    expense_id: int,
    db: Session = Depends(database.get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        crud.delete_expense(db, expense_id, window_days=settings.delete_window_days)
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except crud.DeletionNotAllowedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return schemas.MessageResponse(message="Expense deleted successfully")
