from __future__ import annotations

import calendar
import logging
from collections import Counter, defaultdict
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.errors import ApiError, not_found
from backoffice.models import RosterCreator, RosterEntry, RosterType, UserRole
from backoffice.schemas import RosterEntryCreate, RosterEntryUpdate
from backoffice.services.common import local_day, paginate

logger = logging.getLogger("backoffice.roster")


def _creator_for(role: UserRole) -> RosterCreator:
    if role == UserRole.ADMIN:
        return RosterCreator.ADMIN
    return RosterCreator.SUPERADMIN


def _date_filters(stmt, start_date: date | None, end_date: date | None):  # type: ignore[no-untyped-def]
    if start_date is not None:
        stmt = stmt.where(RosterEntry.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(RosterEntry.date <= end_date)
    return stmt


def _duplicate_ref(entry: RosterEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "employee_id": entry.employee_id,
        "employee_name": entry.employee_name,
        "date": entry.date.isoformat(),
        "shift": entry.shift,
        "created_by": entry.created_by.value,
    }


def find_duplicate(
    db: Session,
    *,
    employee_id: str,
    day: date,
    shift: str,
    role: UserRole,
) -> RosterEntry | None:
    """Return the entry that makes (employee_id, day, shift) a duplicate for ``role``.

    A superadmin collides with any existing entry for the same key. An admin
    only collides with entries that an admin created, so admin and superadmin
    rosters can hold the same shift independently.
    """
    stmt = select(RosterEntry).where(
        RosterEntry.employee_id == employee_id,
        RosterEntry.date == day,
        RosterEntry.shift == shift,
    )
    if role == UserRole.ADMIN:
        stmt = stmt.where(RosterEntry.created_by == RosterCreator.ADMIN)
    return db.scalar(stmt.order_by(RosterEntry.id.asc()).limit(1))


def list_entries(
    db: Session,
    *,
    start_date: date | None,
    end_date: date | None,
    type: RosterType | None,
    employee_id: str | None,
    created_by: RosterCreator | None,
    page: int,
    limit: int,
) -> dict[str, object]:
    stmt = select(RosterEntry).order_by(RosterEntry.date.desc(), RosterEntry.created_at.desc(), RosterEntry.id.desc())
    stmt = _date_filters(stmt, start_date, end_date)
    if type is not None:
        stmt = stmt.where(RosterEntry.type == type)
    if employee_id:
        stmt = stmt.where(RosterEntry.employee_id == employee_id)
    if created_by is not None:
        stmt = stmt.where(RosterEntry.created_by == created_by)

    items, total, pages = paginate(db, stmt, page=page, limit=limit)
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": pages,
        "stats": {
            "total_entries": len(items),
            "total_hours": round(sum(item.hours for item in items), 2),
            "unique_employees": len({item.employee_id for item in items}),
        },
    }


def get_entry(db: Session, entry_id: int) -> RosterEntry:
    entry = db.get(RosterEntry, entry_id)
    if entry is None:
        raise not_found("roster entry")
    return entry


def create_entry(db: Session, payload: RosterEntryCreate, *, role: UserRole) -> RosterEntry:
    existing = find_duplicate(
        db,
        employee_id=payload.employee_id,
        day=payload.date,
        shift=payload.shift,
        role=role,
    )
    if existing is not None:
        logger.info(
            "roster_duplicate_rejected",
            extra={"employee_id": payload.employee_id, "date": payload.date.isoformat(), "role": role.value},
        )
        raise ApiError(
            status_code=409,
            code="DUPLICATE_ROSTER_ENTRY",
            message="A roster entry for this employee, date and shift already exists.",
            details={"existing": _duplicate_ref(existing)},
        )

    entry = RosterEntry(**payload.model_dump(), created_by=_creator_for(role))
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("roster_entry_created", extra={"entry_id": entry.id, "created_by": entry.created_by.value})
    return entry


def bulk_create_entries(db: Session, entries: list[RosterEntryCreate], *, role: UserRole) -> dict[str, object]:
    seen: set[tuple[str, date, str]] = set()
    accepted: list[RosterEntryCreate] = []
    duplicates: list[dict[str, object]] = []

    for index, payload in enumerate(entries):
        key = (payload.employee_id, payload.date, payload.shift)
        existing = find_duplicate(db, employee_id=payload.employee_id, day=payload.date, shift=payload.shift, role=role)
        if existing is not None or key in seen:
            duplicates.append(
                {
                    "index": index,
                    "employee_id": payload.employee_id,
                    "date": payload.date,
                    "shift": payload.shift,
                    "existing_id": existing.id if existing is not None else None,
                }
            )
            continue
        seen.add(key)
        accepted.append(payload)

    if not accepted:
        raise ApiError(
            status_code=409,
            code="DUPLICATE_ROSTER_ENTRY",
            message="All roster entries are duplicates.",
            details={"duplicate_count": len(duplicates)},
        )

    creator = _creator_for(role)
    created = [RosterEntry(**payload.model_dump(), created_by=creator) for payload in accepted]
    db.add_all(created)
    db.commit()
    for entry in created:
        db.refresh(entry)

    logger.info(
        "roster_bulk_created",
        extra={"created_count": len(created), "duplicate_count": len(duplicates), "created_by": creator.value},
    )
    return {
        "created_count": len(created),
        "duplicate_count": len(duplicates),
        "created": created,
        "duplicates": duplicates,
    }


def _ensure_can_modify(entry: RosterEntry, role: UserRole) -> None:
    if role == UserRole.ADMIN and entry.created_by != RosterCreator.ADMIN:
        raise ApiError(
            status_code=403,
            code="FORBIDDEN",
            message="Admins can only modify roster entries created by admin.",
        )


def update_entry(db: Session, entry_id: int, payload: RosterEntryUpdate, *, role: UserRole) -> RosterEntry:
    entry = get_entry(db, entry_id)
    _ensure_can_modify(entry, role)

    for field_name, value in payload.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(entry, field_name, value)
    db.commit()
    db.refresh(entry)
    return entry


def delete_entry(db: Session, entry_id: int, *, role: UserRole) -> None:
    entry = get_entry(db, entry_id)
    _ensure_can_modify(entry, role)
    db.delete(entry)
    db.commit()
    logger.info("roster_entry_deleted", extra={"entry_id": entry_id, "role": role.value})


def roster_stats(
    db: Session,
    *,
    start_date: date | None,
    end_date: date | None,
    created_by: RosterCreator | None,
) -> dict[str, object]:
    stmt = _date_filters(select(RosterEntry), start_date, end_date)
    if created_by is not None:
        stmt = stmt.where(RosterEntry.created_by == created_by)
    entries = db.scalars(stmt).all()

    return {
        "total_entries": len(entries),
        "total_hours": round(sum(entry.hours for entry in entries), 2),
        "unique_employees": len({entry.employee_id for entry in entries}),
        "by_type": dict(Counter(entry.type.value for entry in entries)),
        "by_department": dict(Counter(entry.department for entry in entries)),
        "by_creator": dict(Counter(entry.created_by.value for entry in entries)),
    }


def roster_calendar(
    db: Session,
    *,
    month: int | None,
    year: int | None,
    created_by: RosterCreator | None,
) -> dict[str, object]:
    today = local_day()
    year = year or today.year
    month = month or today.month
    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])

    stmt = _date_filters(select(RosterEntry), first_day, last_day).order_by(
        RosterEntry.date.asc(),
        RosterEntry.employee_name.asc(),
    )
    if created_by is not None:
        stmt = stmt.where(RosterEntry.created_by == created_by)

    grouped: dict[date, list[RosterEntry]] = defaultdict(list)
    for entry in db.scalars(stmt).all():
        grouped[entry.date].append(entry)

    days = [
        {
            "date": day,
            "total_hours": round(sum(entry.hours for entry in day_entries), 2),
            "entries": day_entries,
        }
        for day, day_entries in sorted(grouped.items())
    ]
    return {"month": month, "year": year, "days": days}


def roster_summary(db: Session, *, start_date: date | None, end_date: date | None) -> dict[str, object]:
    entries = db.scalars(_date_filters(select(RosterEntry), start_date, end_date)).all()

    buckets: dict[RosterCreator, list[RosterEntry]] = defaultdict(list)
    for entry in entries:
        buckets[entry.created_by].append(entry)

    summary = [
        {
            "created_by": creator,
            "total_entries": len(items),
            "total_hours": round(sum(item.hours for item in items), 2),
            "unique_employees": len({item.employee_id for item in items}),
            "total_dates": len({item.date for item in items}),
        }
        for creator, items in sorted(buckets.items(), key=lambda pair: pair[0].value)
    ]
    return {
        "summary": summary,
        "total_entries": sum(item["total_entries"] for item in summary),
        "total_hours": round(sum(item["total_hours"] for item in summary), 2),
    }
