from __future__ import annotations

import calendar
import logging
from datetime import date, datetime

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from backoffice.errors import ApiError
from backoffice.models import ManagerActivity, ManagerAttendance
from backoffice.schemas import ManagerActivityCreate
from backoffice.services.common import hours_between, local_day, local_tz, normalize_ts, paginate, utcnow, worked_hours
from backoffice.settings import get_manager_late_after, get_settings

logger = logging.getLogger("backoffice.manager_attendance")


def database_health(db: Session) -> dict[str, object]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.exception("manager_attendance_health_failed")
        raise ApiError(
            status_code=503,
            code="DATABASE_UNAVAILABLE",
            message="Database is not reachable.",
        ) from exc
    return {"status": "ok", "database": "connected", "checked_at_utc": utcnow()}


def get_today_record(db: Session, manager_id: str, day: date | None = None) -> ManagerAttendance | None:
    return db.scalar(
        select(ManagerAttendance)
        .options(selectinload(ManagerAttendance.activities))
        .where(
            ManagerAttendance.manager_id == manager_id,
            ManagerAttendance.date == (day or local_day()),
        )
    )


def _add_activity(record: ManagerAttendance, *, type: str, title: str, details: str, at: datetime) -> None:
    record.activities.append(ManagerActivity(type=type, title=title, details=details, timestamp=at))


def _format_local_time(value: datetime) -> str:
    return (normalize_ts(value) or value).astimezone(local_tz()).strftime("%H:%M")


def _require_today_record(db: Session, manager_id: str, day: date) -> ManagerAttendance:
    record = get_today_record(db, manager_id, day)
    if record is None:
        raise ApiError(
            status_code=404,
            code="NO_CHECKIN_TODAY",
            message="No check-in record found for today.",
        )
    return record


def check_in(db: Session, *, manager_id: str, manager_name: str) -> ManagerAttendance:
    now = utcnow()
    today = local_day(now)
    record = get_today_record(db, manager_id, today)

    if record is not None and record.has_checked_out_today:
        raise ApiError(
            status_code=400,
            code="ALREADY_CHECKED_OUT",
            message="Already checked out for today. Cannot check in again.",
        )
    if record is not None and record.is_checked_in:
        raise ApiError(status_code=400, code="ALREADY_CHECKED_IN", message="Already checked in for today.")

    if record is None:
        record = ManagerAttendance(
            manager_id=manager_id,
            manager_name=manager_name,
            date=today,
            total_hours=0.0,
            break_time=0.0,
            is_on_break=False,
        )
        db.add(record)
    record.check_in_time = now
    record.check_out_time = None
    record.is_checked_in = True
    record.has_checked_out_today = False
    _add_activity(
        record,
        type="checkin",
        title="Checked in",
        details=f"Checked in at {_format_local_time(now)}",
        at=now,
    )

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("manager_checkin_conflict", extra={"manager_id": manager_id, "date": today.isoformat()})
        raise ApiError(
            status_code=409,
            code="ATTENDANCE_CONFLICT",
            message="Attendance for today was recorded by a concurrent request.",
        ) from exc
    db.refresh(record)
    logger.info("manager_checkin", extra={"manager_id": manager_id, "date": today.isoformat(), "record_id": record.id})
    return record


def check_out(db: Session, manager_id: str) -> ManagerAttendance:
    now = utcnow()
    record = _require_today_record(db, manager_id, local_day(now))
    if not record.is_checked_in:
        raise ApiError(status_code=400, code="NOT_CHECKED_IN", message="Not currently checked in.")
    if record.is_on_break:
        raise ApiError(status_code=400, code="ON_BREAK", message="End the current break before checking out.")

    record.check_out_time = now
    record.total_hours = worked_hours(record.check_in_time, now, record.break_time)
    record.is_checked_in = False
    record.has_checked_out_today = True
    _add_activity(
        record,
        type="checkout",
        title="Checked out",
        details=f"Checked out at {_format_local_time(now)}. Total hours: {record.total_hours:.2f}",
        at=now,
    )
    db.commit()
    db.refresh(record)
    logger.info(
        "manager_checkout",
        extra={"manager_id": manager_id, "record_id": record.id, "total_hours": record.total_hours},
    )
    return record


def break_in(db: Session, manager_id: str) -> ManagerAttendance:
    now = utcnow()
    record = _require_today_record(db, manager_id, local_day(now))
    if not record.is_checked_in:
        raise ApiError(status_code=400, code="NOT_CHECKED_IN", message="Must be checked in to take a break.")
    if record.is_on_break:
        raise ApiError(status_code=400, code="ALREADY_ON_BREAK", message="Already on break.")

    record.break_start_time = now
    record.break_end_time = None
    record.is_on_break = True
    _add_activity(
        record,
        type="break",
        title="Break started",
        details=f"Break started at {_format_local_time(now)}",
        at=now,
    )
    db.commit()
    db.refresh(record)
    logger.info("manager_break_start", extra={"manager_id": manager_id, "record_id": record.id})
    return record


def break_out(db: Session, manager_id: str) -> ManagerAttendance:
    now = utcnow()
    record = _require_today_record(db, manager_id, local_day(now))
    if not record.is_on_break:
        raise ApiError(status_code=400, code="NOT_ON_BREAK", message="Not currently on break.")
    if record.break_start_time is None:
        raise ApiError(status_code=400, code="BREAK_START_MISSING", message="Break start time not found.")

    duration = round(hours_between(record.break_start_time, now), 2)
    record.break_end_time = now
    record.break_time = round((record.break_time or 0.0) + duration, 2)
    record.is_on_break = False
    _add_activity(
        record,
        type="break",
        title="Break ended",
        details=f"Break ended at {_format_local_time(now)}. Duration: {duration:.2f} hours",
        at=now,
    )
    db.commit()
    db.refresh(record)
    logger.info(
        "manager_break_end",
        extra={"manager_id": manager_id, "record_id": record.id, "break_hours": duration},
    )
    return record


def add_activity(db: Session, payload: ManagerActivityCreate) -> ManagerAttendance:
    now = utcnow()
    today = local_day(now)
    record = get_today_record(db, payload.manager_id, today)
    if record is None:
        record = ManagerAttendance(
            manager_id=payload.manager_id,
            manager_name=payload.manager_name or payload.manager_id,
            date=today,
            total_hours=0.0,
            break_time=0.0,
            is_checked_in=False,
            is_on_break=False,
            has_checked_out_today=False,
        )
        db.add(record)

    _add_activity(record, type=payload.type, title=payload.title, details=payload.details, at=now)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ApiError(
            status_code=409,
            code="ATTENDANCE_CONFLICT",
            message="Attendance for today was recorded by a concurrent request.",
        ) from exc
    db.refresh(record)
    return record


def attendance_history(
    db: Session,
    manager_id: str,
    *,
    start_date: date | None,
    end_date: date | None,
    page: int,
    limit: int,
) -> dict[str, object]:
    stmt = (
        select(ManagerAttendance)
        .options(selectinload(ManagerAttendance.activities))
        .where(ManagerAttendance.manager_id == manager_id)
        .order_by(ManagerAttendance.date.desc())
    )
    if start_date is not None:
        stmt = stmt.where(ManagerAttendance.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(ManagerAttendance.date <= end_date)
    items, total, pages = paginate(db, stmt, page=page, limit=limit)

    present = [item for item in items if item.check_out_time is not None]
    total_hours = sum(item.total_hours for item in present)
    total_break = sum(item.break_time for item in items)
    stats = {
        "total_days": len(items),
        "present_days": len(present),
        "absent_days": len(items) - len(present),
        "average_hours": round(total_hours / (len(present) or 1), 1),
        "total_break_time": round(total_break, 1),
        "attendance_rate": round(len(present) / len(items) * 100) if items else 0,
    }
    return {"items": items, "total": total, "page": page, "limit": limit, "pages": pages, "stats": stats}


def _day_status(record: ManagerAttendance) -> str:
    if record.check_out_time is not None:
        status = "Present"
        check_in = normalize_ts(record.check_in_time)
        if check_in is not None and check_in.astimezone(local_tz()).time() > get_manager_late_after():
            status = "Late"
        if record.total_hours < get_settings().half_day_hours:
            status = "Half Day"
        return status
    if record.is_checked_in:
        return "Checked In"
    return "Absent"


def monthly_summary(db: Session, manager_id: str, *, month: int | None, year: int | None) -> dict[str, object]:
    today = local_day()
    year = year or today.year
    month = month or today.month
    days_in_month = calendar.monthrange(year, month)[1]
    first_day = date(year, month, 1)
    last_day = date(year, month, days_in_month)
    standard_hours = get_settings().standard_work_hours

    records = db.scalars(
        select(ManagerAttendance)
        .options(selectinload(ManagerAttendance.activities))
        .where(
            ManagerAttendance.manager_id == manager_id,
            ManagerAttendance.date >= first_day,
            ManagerAttendance.date <= last_day,
        )
        .order_by(ManagerAttendance.date.asc())
    ).all()
    by_date = {record.date: record for record in records}

    days = []
    for day_number in range(1, days_in_month + 1):
        current = date(year, month, day_number)
        record = by_date.get(current)
        if record is None:
            days.append({"date": current, "day": current.strftime("%a"), "status": "Absent"})
            continue
        days.append(
            {
                "date": current,
                "day": current.strftime("%a"),
                "status": _day_status(record),
                "check_in_time": record.check_in_time,
                "check_out_time": record.check_out_time,
                "total_hours": round(record.total_hours, 1),
                "break_time": round(record.break_time, 1),
                "overtime_hours": round(max(0.0, record.total_hours - standard_hours), 1),
                "is_on_break": record.is_on_break,
            }
        )

    present = [record for record in records if record.check_out_time is not None]
    total_hours = sum(record.total_hours for record in present)
    stats = {
        "total_days": days_in_month,
        "present_days": len(present),
        "checked_in_days": sum(1 for record in records if record.is_checked_in and record.check_out_time is None),
        "late_days": sum(1 for item in days if item["status"] == "Late"),
        "half_days": sum(1 for item in days if item["status"] == "Half Day"),
        "absent_days": sum(1 for item in days if item["status"] == "Absent"),
        "total_hours": round(total_hours, 1),
        "total_break_time": round(sum(record.break_time for record in records), 1),
        "overtime_hours": round(sum(max(0.0, record.total_hours - standard_hours) for record in present), 1),
        "average_hours": round(total_hours / (len(present) or 1), 1),
        "attendance_rate": round(len(present) / days_in_month * 100),
    }
    current_status = next(
        (
            record
            for record in records
            if record.date == today and record.is_checked_in and not record.has_checked_out_today
        ),
        None,
    )
    return {
        "manager_id": manager_id,
        "month": month,
        "year": year,
        "days": days,
        "stats": stats,
        "current_status": current_status,
    }


def cleanup_duplicates(db: Session) -> dict[str, int]:
    duplicate_keys = db.execute(
        select(ManagerAttendance.manager_id, ManagerAttendance.date, func.min(ManagerAttendance.id))
        .group_by(ManagerAttendance.manager_id, ManagerAttendance.date)
        .having(func.count(ManagerAttendance.id) > 1)
    ).all()

    removed = 0
    for manager_id, day, keep_id in duplicate_keys:
        extras = db.scalars(
            select(ManagerAttendance).where(
                ManagerAttendance.manager_id == manager_id,
                ManagerAttendance.date == day,
                ManagerAttendance.id != keep_id,
            )
        ).all()
        for record in extras:
            db.delete(record)
            removed += 1
    db.commit()
    logger.info("manager_attendance_cleanup", extra={"groups": len(duplicate_keys), "removed": removed})
    return {"removed": removed, "groups": len(duplicate_keys)}
