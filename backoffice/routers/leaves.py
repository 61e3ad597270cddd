from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backoffice.db import get_db
from backoffice.models import LeaveStatus
from backoffice.schemas import LeaveApplyRequest, LeaveRead, LeaveStatsResponse, LeaveStatusUpdate
from backoffice.services import leaves as leave_service

router = APIRouter(prefix="/api/leaves", tags=["leaves"])


@router.post("/apply", response_model=LeaveRead, status_code=status.HTTP_201_CREATED)
def apply_leave_endpoint(payload: LeaveApplyRequest, db: Session = Depends(get_db)) -> LeaveRead:
    return leave_service.apply_leave(db, payload)


@router.get("", response_model=list[LeaveRead])
def list_leaves_endpoint(
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[LeaveRead]:
    return leave_service.list_leaves(db, status=status_filter)


@router.get("/employee/{employee_id}", response_model=list[LeaveRead])
def employee_leaves_endpoint(employee_id: str, db: Session = Depends(get_db)) -> list[LeaveRead]:
    return leave_service.list_leaves(db, employee_id=employee_id)


@router.get("/supervisor", response_model=list[LeaveRead])
def supervisor_leaves_endpoint(
    department: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db),
) -> list[LeaveRead]:
    return leave_service.list_leaves(db, department=department)


@router.get("/stats", response_model=LeaveStatsResponse)
def leave_stats_endpoint(db: Session = Depends(get_db)) -> LeaveStatsResponse:
    return leave_service.leave_stats(db)


@router.put("/{leave_id}/status", response_model=LeaveRead)
def update_leave_status_endpoint(
    leave_id: int,
    payload: LeaveStatusUpdate,
    db: Session = Depends(get_db),
) -> LeaveRead:
    return leave_service.update_leave_status(db, leave_id, payload.status)
