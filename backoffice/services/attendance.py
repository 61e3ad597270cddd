from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.errors import ApiError, not_found
from backoffice.models import AttendanceRecord, AttendanceStatus
from backoffice.schemas import (
    AttendanceCheckinRequest,
    AttendanceManualRequest,
    AttendanceUpdateRequest,
)
from backoffice.services.common import hours_between, local_day, normalize_ts, paginate, utcnow, worked_hours

logger = logging.getLogger("backoffice.attendance")

WEEKLY_STATUS_THRESHOLD_DAYS = 5


def get_record_for_day(db: Session, employee_id: str, day: date) -> AttendanceRecord | None:
    return db.scalar(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee_id,
            AttendanceRecord.date == day,
        )
    )


def _commit_record(db: Session, record: AttendanceRecord) -> AttendanceRecord:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ApiError(
            status_code=409,
            code="ATTENDANCE_CONFLICT",
            message="Attendance for this employee and day was recorded concurrently.",
        ) from exc
    db.refresh(record)
    return record


def check_in(db: Session, payload: AttendanceCheckinRequest) -> AttendanceRecord:
    now = utcnow()
    today = local_day(now)
    record = get_record_for_day(db, payload.employee_id, today)

    if record is not None and record.is_checked_in:
        raise ApiError(status_code=400, code="ALREADY_CHECKED_IN", message="Already checked in for today.")

    if record is None:
        record = AttendanceRecord(
            employee_id=payload.employee_id,
            employee_name=payload.employee_name,
            date=today,
            check_in_time=now,
            total_hours=0.0,
            break_time=0.0,
            status=AttendanceStatus.PRESENT,
            is_checked_in=True,
            is_on_break=False,
            supervisor_id=payload.supervisor_id,
            department=payload.department,
        )
        db.add(record)
    else:
        record.check_in_time = now
        record.check_out_time = None
        record.is_checked_in = True
        record.status = AttendanceStatus.PRESENT
        if payload.supervisor_id:
            record.supervisor_id = payload.supervisor_id
        if payload.department:
            record.department = payload.department

    record = _commit_record(db, record)
    logger.info(
        "attendance_checkin",
        extra={"employee_id": record.employee_id, "date": today.isoformat(), "record_id": record.id},
    )
    return record


def check_out(db: Session, employee_id: str) -> AttendanceRecord:
    now = utcnow()
    today = local_day(now)
    record = get_record_for_day(db, employee_id, today)
    if record is None or not record.is_checked_in:
        raise ApiError(status_code=404, code="NO_ACTIVE_CHECKIN", message="No active check-in found.")

    if record.is_on_break:
        record.break_time = round((record.break_time or 0.0) + hours_between(record.break_start_time, now), 2)
        record.break_end_time = now

    record.check_out_time = now
    record.total_hours = worked_hours(record.check_in_time, now, record.break_time)
    record.is_checked_in = False
    record.is_on_break = False

    record = _commit_record(db, record)
    logger.info(
        "attendance_checkout",
        extra={
            "employee_id": employee_id,
            "date": today.isoformat(),
            "total_hours": record.total_hours,
            "break_time": record.break_time,
        },
    )
    return record


def break_in(db: Session, employee_id: str) -> AttendanceRecord:
    now = utcnow()
    record = get_record_for_day(db, employee_id, local_day(now))
    if record is None or not record.is_checked_in or record.is_on_break:
        raise ApiError(
            status_code=404,
            code="NO_ACTIVE_CHECKIN",
            message="No active check-in found or already on break.",
        )

    record.break_start_time = now
    record.break_end_time = None
    record.is_on_break = True
    record = _commit_record(db, record)
    logger.info("attendance_break_start", extra={"employee_id": employee_id, "record_id": record.id})
    return record


def break_out(db: Session, employee_id: str) -> AttendanceRecord:
    now = utcnow()
    record = get_record_for_day(db, employee_id, local_day(now))
    if record is None or not record.is_checked_in or not record.is_on_break:
        raise ApiError(status_code=404, code="NO_ACTIVE_BREAK", message="No active break found.")

    duration = hours_between(record.break_start_time, now)
    record.break_end_time = now
    record.break_time = round((record.break_time or 0.0) + duration, 2)
    record.is_on_break = False
    record = _commit_record(db, record)
    logger.info(
        "attendance_break_end",
        extra={"employee_id": employee_id, "record_id": record.id, "break_hours": round(duration, 2)},
    )
    return record


def today_status(db: Session, employee_id: str) -> dict[str, object]:
    today = local_day()
    record = get_record_for_day(db, employee_id, today)
    if record is None:
        return {"employee_id": employee_id, "date": today}
    return {
        "employee_id": employee_id,
        "date": today,
        "is_checked_in": record.is_checked_in,
        "is_on_break": record.is_on_break,
        "check_in_time": record.check_in_time,
        "check_out_time": record.check_out_time,
        "break_start_time": record.break_start_time,
        "total_hours": record.total_hours,
        "break_time": record.break_time,
        "status": record.status,
        "record": record,
    }


def attendance_history(
    db: Session,
    *,
    employee_id: str,
    start_date: date | None,
    end_date: date | None,
    page: int,
    limit: int,
) -> dict[str, object]:
    stmt = (
        select(AttendanceRecord)
        .where(AttendanceRecord.employee_id == employee_id)
        .order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.desc())
    )
    if start_date is not None:
        stmt = stmt.where(AttendanceRecord.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(AttendanceRecord.date <= end_date)
    items, total, pages = paginate(db, stmt, page=page, limit=limit)
    return {"items": items, "total": total, "page": page, "limit": limit, "pages": pages}


def team_attendance(db: Session, *, supervisor_id: str, day: date | None) -> list[AttendanceRecord]:
    stmt = (
        select(AttendanceRecord)
        .where(
            AttendanceRecord.supervisor_id == supervisor_id,
            AttendanceRecord.date == (day or local_day()),
        )
        .order_by(AttendanceRecord.employee_name.asc(), AttendanceRecord.id.asc())
    )
    return list(db.scalars(stmt).all())


def list_attendance(
    db: Session,
    *,
    day: date | None,
    employee_id: str | None,
    page: int,
    limit: int,
) -> dict[str, object]:
    stmt = select(AttendanceRecord).order_by(AttendanceRecord.date.desc(), AttendanceRecord.check_in_time.desc())
    if day is not None:
        stmt = stmt.where(AttendanceRecord.date == day)
    if employee_id:
        stmt = stmt.where(AttendanceRecord.employee_id == employee_id)
    items, total, pages = paginate(db, stmt, page=page, limit=limit)
    return {"items": items, "total": total, "page": page, "limit": limit, "pages": pages}


def update_attendance(db: Session, record_id: int, payload: AttendanceUpdateRequest) -> AttendanceRecord:
    record = db.get(AttendanceRecord, record_id)
    if record is None:
        raise not_found("attendance record")

    changes = payload.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if value is None and field_name in {"status", "break_time"}:
            continue
        setattr(record, field_name, value)

    if payload.check_in_time is not None and payload.check_out_time is not None:
        if hours_between(payload.check_in_time, payload.check_out_time) <= 0:
            raise ApiError(
                status_code=400,
                code="INVALID_TIME_RANGE",
                message="check_out_time must be after check_in_time.",
            )
        record.total_hours = worked_hours(payload.check_in_time, payload.check_out_time, record.break_time)
        record.is_checked_in = False
        record.is_on_break = False

    db.commit()
    db.refresh(record)
    logger.info("attendance_corrected", extra={"record_id": record.id, "fields": sorted(changes)})
    return record


def upsert_manual_attendance(db: Session, payload: AttendanceManualRequest) -> AttendanceRecord:
    break_time = round(hours_between(payload.break_start_time, payload.break_end_time), 2)
    total_hours = 0.0
    if payload.check_out_time is not None:
        total_hours = worked_hours(payload.check_in_time, payload.check_out_time, break_time)

    record = get_record_for_day(db, payload.employee_id, payload.date)
    if record is None:
        record = AttendanceRecord(employee_id=payload.employee_id, date=payload.date)
        db.add(record)

    record.employee_name = payload.employee_name
    record.check_in_time = normalize_ts(payload.check_in_time)
    record.check_out_time = normalize_ts(payload.check_out_time)
    record.break_start_time = normalize_ts(payload.break_start_time)
    record.break_end_time = normalize_ts(payload.break_end_time)
    record.break_time = break_time
    record.total_hours = total_hours
    record.status = payload.status
    record.is_checked_in = payload.check_out_time is None
    record.is_on_break = payload.break_start_time is not None and payload.break_end_time is None
    record.department = payload.department
    record.supervisor_id = payload.supervisor_id
    record.remarks = payload.remarks

    record = _commit_record(db, record)
    logger.info(
        "attendance_manual_upsert",
        extra={"employee_id": payload.employee_id, "date": payload.date.isoformat(), "record_id": record.id},
    )
    return record


def weekly_summary(db: Session, *, start_date: date, end_date: date) -> dict[str, object]:
    if end_date < start_date:
        raise ApiError(
            status_code=400,
            code="INVALID_DATE_RANGE",
            message="end_date must be greater than or equal to start_date.",
        )

    records = db.scalars(
        select(AttendanceRecord)
        .where(AttendanceRecord.date >= start_date, AttendanceRecord.date <= end_date)
        .order_by(AttendanceRecord.employee_id.asc(), AttendanceRecord.date.asc())
    ).all()

    summaries: OrderedDict[str, dict[str, object]] = OrderedDict()
    for record in records:
        summary = summaries.setdefault(
            record.employee_id,
            {
                "employee_id": record.employee_id,
                "employee_name": record.employee_name,
                "department": record.department,
                "present_days": 0,
                "absent_days": 0,
                "half_days": 0,
                "leave_days": 0,
                "total_hours": 0.0,
                "total_break_time": 0.0,
            },
        )
        if record.status == AttendanceStatus.PRESENT:
            summary["present_days"] += 1
        elif record.status == AttendanceStatus.ABSENT:
            summary["absent_days"] += 1
        elif record.status == AttendanceStatus.HALF_DAY:
            summary["half_days"] += 1
        elif record.status == AttendanceStatus.LEAVE:
            summary["leave_days"] += 1

        if record.status in {AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY}:
            summary["total_hours"] += record.total_hours or 0.0
        summary["total_break_time"] += record.break_time or 0.0

    employees = []
    for summary in summaries.values():
        if summary["present_days"] >= WEEKLY_STATUS_THRESHOLD_DAYS:
            overall = "present"
        elif summary["absent_days"] >= WEEKLY_STATUS_THRESHOLD_DAYS:
            overall = "absent"
        else:
            overall = "mixed"
        summary["total_hours"] = round(summary["total_hours"], 2)
        summary["total_break_time"] = round(summary["total_break_time"], 2)
        summary["overall_status"] = overall
        employees.append(summary)

    return {"start_date": start_date, "end_date": end_date, "employees": employees}
