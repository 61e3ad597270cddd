from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backoffice.db import get_db
from backoffice.models import ExpenseStatus, ExpenseType
from backoffice.schemas import (
    ExpenseCreate,
    ExpensePage,
    ExpenseRead,
    ExpenseStatsResponse,
    ExpenseStatusUpdate,
    ExpenseSummaryResponse,
    ExpenseUpdate,
)
from backoffice.services import expenses as expense_service

router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.get("", response_model=ExpensePage)
def list_expenses_endpoint(
    expense_type: ExpenseType | None = Query(default=None),
    status_filter: ExpenseStatus | None = Query(default=None, alias="status"),
    site: str | None = Query(default=None, max_length=255),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    search: str | None = Query(default=None, max_length=255),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=200),
    db: Session = Depends(get_db),
) -> ExpensePage:
    return expense_service.list_expenses(
        db,
        expense_type=expense_type,
        status=status_filter,
        site=site,
        start_date=start_date,
        end_date=end_date,
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/stats", response_model=ExpenseStatsResponse)
def expense_stats_endpoint(
    period: Literal["monthly", "weekly"] = Query(default="monthly"),
    db: Session = Depends(get_db),
) -> ExpenseStatsResponse:
    return expense_service.expense_stats(db, period=period)


@router.get("/summary", response_model=ExpenseSummaryResponse)
def expense_summary_endpoint(db: Session = Depends(get_db)) -> ExpenseSummaryResponse:
    return expense_service.expense_summary(db)


@router.get("/{expense_pk}", response_model=ExpenseRead)
def get_expense_endpoint(expense_pk: int, db: Session = Depends(get_db)) -> ExpenseRead:
    return expense_service.get_expense(db, expense_pk)


@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense_endpoint(payload: ExpenseCreate, db: Session = Depends(get_db)) -> ExpenseRead:
    return expense_service.create_expense(db, payload)


@router.put("/{expense_pk}", response_model=ExpenseRead)
def update_expense_endpoint(
    expense_pk: int,
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),
) -> ExpenseRead:
    return expense_service.update_expense(db, expense_pk, payload)


@router.patch("/{expense_pk}/status", response_model=ExpenseRead)
def update_expense_status_endpoint(
    expense_pk: int,
    payload: ExpenseStatusUpdate,
    db: Session = Depends(get_db),
) -> ExpenseRead:
    return expense_service.update_expense_status(db, expense_pk, payload.status)


@router.delete("/{expense_pk}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense_endpoint(expense_pk: int, db: Session = Depends(get_db)) -> None:
    expense_service.delete_expense(db, expense_pk)
