from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from backoffice.settings import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_tz() -> ZoneInfo:
    try:
        return ZoneInfo(get_settings().attendance_timezone)
    except ZoneInfoNotFoundError:
        return ZoneInfo("UTC")


def normalize_ts(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_day(value: datetime | None = None) -> date:
    moment = normalize_ts(value) or utcnow()
    return moment.astimezone(local_tz()).date()


def hours_between(start: datetime | None, end: datetime | None) -> float:
    start_utc = normalize_ts(start)
    end_utc = normalize_ts(end)
    if start_utc is None or end_utc is None:
        return 0.0
    return max(0.0, (end_utc - start_utc).total_seconds() / 3600)


def worked_hours(check_in: datetime | None, check_out: datetime | None, break_time: float) -> float:
    return round(max(0.0, hours_between(check_in, check_out) - (break_time or 0.0)), 2)


def paginate(db: Session, stmt: Select[Any], *, page: int, limit: int) -> tuple[list[Any], int, int]:
    total = int(db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0)
    rows = list(db.scalars(stmt.offset((page - 1) * limit).limit(limit)).all())
    pages = math.ceil(total / limit) if limit else 0
    return rows, total, pages


def like_pattern(value: str) -> str:
    escaped = value.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
