from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from backoffice.db import get_db
from backoffice.schemas import (
    AttendanceCheckinRequest,
    AttendanceEmployeeRequest,
    AttendanceManualRequest,
    AttendancePage,
    AttendanceRead,
    AttendanceStatusResponse,
    AttendanceUpdateRequest,
    WeeklySummaryResponse,
)
from backoffice.services import attendance as attendance_service

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


def _tag_employee(request: Request, employee_id: str) -> None:
    request.state.employee_id = employee_id


@router.post("/checkin", response_model=AttendanceRead)
def checkin_endpoint(
    payload: AttendanceCheckinRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AttendanceRead:
    _tag_employee(request, payload.employee_id)
    return attendance_service.check_in(db, payload)


@router.post("/checkout", response_model=AttendanceRead)
def checkout_endpoint(
    payload: AttendanceEmployeeRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AttendanceRead:
    _tag_employee(request, payload.employee_id)
    return attendance_service.check_out(db, payload.employee_id)


@router.post("/breakin", response_model=AttendanceRead)
def breakin_endpoint(
    payload: AttendanceEmployeeRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AttendanceRead:
    _tag_employee(request, payload.employee_id)
    return attendance_service.break_in(db, payload.employee_id)


@router.post("/breakout", response_model=AttendanceRead)
def breakout_endpoint(
    payload: AttendanceEmployeeRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AttendanceRead:
    _tag_employee(request, payload.employee_id)
    return attendance_service.break_out(db, payload.employee_id)


@router.get("/status/{employee_id}", response_model=AttendanceStatusResponse)
def status_endpoint(employee_id: str, db: Session = Depends(get_db)) -> AttendanceStatusResponse:
    return attendance_service.today_status(db, employee_id)


@router.get("/history", response_model=AttendancePage)
def history_endpoint(
    employee_id: str = Query(min_length=1, max_length=64),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=30, ge=1, le=200),
    db: Session = Depends(get_db),
) -> AttendancePage:
    return attendance_service.attendance_history(
        db,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


@router.get("/team", response_model=list[AttendanceRead])
def team_endpoint(
    supervisor_id: str = Query(min_length=1, max_length=64),
    day: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
) -> list[AttendanceRead]:
    return attendance_service.team_attendance(db, supervisor_id=supervisor_id, day=day)


@router.get("/weekly-summary", response_model=WeeklySummaryResponse)
def weekly_summary_endpoint(
    start_date: date = Query(),
    end_date: date = Query(),
    db: Session = Depends(get_db),
) -> WeeklySummaryResponse:
    return attendance_service.weekly_summary(db, start_date=start_date, end_date=end_date)


@router.get("", response_model=AttendancePage)
def list_attendance_endpoint(
    day: date | None = Query(default=None, alias="date"),
    employee_id: str | None = Query(default=None, max_length=64),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
) -> AttendancePage:
    return attendance_service.list_attendance(db, day=day, employee_id=employee_id, page=page, limit=limit)


@router.post("/manual", response_model=AttendanceRead)
def manual_attendance_endpoint(
    payload: AttendanceManualRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> AttendanceRead:
    _tag_employee(request, payload.employee_id)
    return attendance_service.upsert_manual_attendance(db, payload)


@router.put("/{record_id}", response_model=AttendanceRead)
def update_attendance_endpoint(
    record_id: int,
    payload: AttendanceUpdateRequest,
    db: Session = Depends(get_db),
) -> AttendanceRead:
    return attendance_service.update_attendance(db, record_id, payload)
