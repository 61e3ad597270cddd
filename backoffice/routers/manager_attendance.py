from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.db import get_db
from backoffice.schemas import (
    ManagerActionRequest,
    ManagerActivityCreate,
    ManagerAttendanceRead,
    ManagerCheckinRequest,
    ManagerCleanupResponse,
    ManagerHistoryResponse,
    ManagerMonthlySummary,
    ServiceHealthResponse,
)
from backoffice.security import require_admin_role
from backoffice.services import manager_attendance as manager_service

router = APIRouter(prefix="/api/manager-attendance", tags=["manager-attendance"])


@router.get("/health", response_model=ServiceHealthResponse)
def health_endpoint(db: Session = Depends(get_db)) -> ServiceHealthResponse:
    return manager_service.database_health(db)


@router.post("/checkin", response_model=ManagerAttendanceRead)
def checkin_endpoint(payload: ManagerCheckinRequest, db: Session = Depends(get_db)) -> ManagerAttendanceRead:
    return manager_service.check_in(db, manager_id=payload.manager_id, manager_name=payload.manager_name)


@router.post("/checkout", response_model=ManagerAttendanceRead)
def checkout_endpoint(payload: ManagerActionRequest, db: Session = Depends(get_db)) -> ManagerAttendanceRead:
    return manager_service.check_out(db, payload.manager_id)


@router.post("/breakin", response_model=ManagerAttendanceRead)
def breakin_endpoint(payload: ManagerActionRequest, db: Session = Depends(get_db)) -> ManagerAttendanceRead:
    return manager_service.break_in(db, payload.manager_id)


@router.post("/breakout", response_model=ManagerAttendanceRead)
def breakout_endpoint(payload: ManagerActionRequest, db: Session = Depends(get_db)) -> ManagerAttendanceRead:
    return manager_service.break_out(db, payload.manager_id)


@router.get("/today/{manager_id}", response_model=ManagerAttendanceRead | None)
def today_endpoint(manager_id: str, db: Session = Depends(get_db)) -> ManagerAttendanceRead | None:
    return manager_service.get_today_record(db, manager_id)


@router.get("/history/{manager_id}", response_model=ManagerHistoryResponse)
def history_endpoint(
    manager_id: str,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=30, ge=1, le=200),
    db: Session = Depends(get_db),
) -> ManagerHistoryResponse:
    return manager_service.attendance_history(
        db,
        manager_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/summary/{manager_id}", response_model=ManagerMonthlySummary)
def summary_endpoint(
    manager_id: str,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1970, le=2100),
    db: Session = Depends(get_db),
) -> ManagerMonthlySummary:
    return manager_service.monthly_summary(db, manager_id, month=month, year=year)


@router.post("/activity", response_model=ManagerAttendanceRead)
def activity_endpoint(payload: ManagerActivityCreate, db: Session = Depends(get_db)) -> ManagerAttendanceRead:
    return manager_service.add_activity(db, payload)


@router.post(
    "/cleanup",
    response_model=ManagerCleanupResponse,
    dependencies=[Depends(require_admin_role)],
)
def cleanup_endpoint(db: Session = Depends(get_db)) -> ManagerCleanupResponse:
    return manager_service.cleanup_duplicates(db)
