from __future__ import annotations

import logging
import secrets
from datetime import date, timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from backoffice.errors import not_found
from backoffice.models import Expense, ExpenseStatus, ExpenseType
from backoffice.schemas import ExpenseCreate, ExpenseUpdate
from backoffice.services.common import like_pattern, local_day, paginate
from backoffice.settings import get_settings

logger = logging.getLogger("backoffice.expenses")

RECENT_EXPENSE_COUNT = 5


def generate_expense_id() -> str:
    return f"EXP-{secrets.randbelow(900) + 100}-{secrets.token_hex(3).upper()}"


def compute_gst(base_amount: float) -> float:
    return round(base_amount * get_settings().gst_rate, 2)


def list_expenses(
    db: Session,
    *,
    expense_type: ExpenseType | None,
    status: ExpenseStatus | None,
    site: str | None,
    start_date: date | None,
    end_date: date | None,
    search: str | None,
    page: int,
    limit: int,
) -> dict[str, object]:
    stmt = select(Expense).order_by(Expense.date.desc(), Expense.id.desc())
    if expense_type is not None:
        stmt = stmt.where(Expense.expense_type == expense_type)
    if status is not None:
        stmt = stmt.where(Expense.status == status)
    if site:
        stmt = stmt.where(Expense.site == site)
    if start_date is not None:
        stmt = stmt.where(Expense.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Expense.date <= end_date)
    if search and search.strip():
        pattern = like_pattern(search)
        stmt = stmt.where(
            or_(
                Expense.expense_id.ilike(pattern, escape="\\"),
                Expense.category.ilike(pattern, escape="\\"),
                Expense.description.ilike(pattern, escape="\\"),
                Expense.vendor.ilike(pattern, escape="\\"),
            )
        )
    items, total, pages = paginate(db, stmt, page=page, limit=limit)
    return {"items": items, "total": total, "page": page, "limit": limit, "pages": pages}


def get_expense(db: Session, expense_pk: int) -> Expense:
    expense = db.get(Expense, expense_pk)
    if expense is None:
        raise not_found("expense")
    return expense


def create_expense(db: Session, payload: ExpenseCreate) -> Expense:
    gst = compute_gst(payload.base_amount)
    expense = Expense(
        **payload.model_dump(exclude={"created_by"}),
        expense_id=generate_expense_id(),
        gst=gst,
        amount=round(payload.base_amount + gst, 2),
        status=ExpenseStatus.PENDING,
        created_by=payload.created_by or "system",
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info("expense_created", extra={"expense_id": expense.expense_id, "amount": expense.amount})
    return expense


def update_expense(db: Session, expense_pk: int, payload: ExpenseUpdate) -> Expense:
    expense = get_expense(db, expense_pk)
    changes = payload.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if value is None and field_name not in {"receipt_url", "notes"}:
            continue
        setattr(expense, field_name, value)

    if changes.get("base_amount") is not None:
        expense.gst = compute_gst(expense.base_amount)
        expense.amount = round(expense.base_amount + expense.gst, 2)
    db.commit()
    db.refresh(expense)
    return expense


def update_expense_status(db: Session, expense_pk: int, status: ExpenseStatus) -> Expense:
    expense = get_expense(db, expense_pk)
    expense.status = status
    db.commit()
    db.refresh(expense)
    logger.info("expense_status_changed", extra={"expense_id": expense.expense_id, "status": status.value})
    return expense


def delete_expense(db: Session, expense_pk: int) -> None:
    expense = get_expense(db, expense_pk)
    db.delete(expense)
    db.commit()


def _period_bounds(period: str, today: date) -> tuple[date, date]:
    if period == "weekly":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)
    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def expense_stats(db: Session, *, period: str) -> dict[str, object]:
    start_date, end_date = _period_bounds(period, local_day())
    approved = db.scalars(
        select(Expense).where(
            Expense.status == ExpenseStatus.APPROVED,
            Expense.date >= start_date,
            Expense.date <= end_date,
        )
    ).all()

    by_site: dict[str, dict[str, object]] = {}
    by_type = {item.value: 0.0 for item in ExpenseType}
    for expense in approved:
        row = by_site.setdefault(
            expense.site,
            {"site": expense.site, "operational": 0.0, "office": 0.0, "other": 0.0},
        )
        row[expense.expense_type.value] += expense.amount
        by_type[expense.expense_type.value] += expense.amount

    sites = []
    for row in sorted(by_site.values(), key=lambda item: str(item["site"])):
        for key in ("operational", "office", "other"):
            row[key] = round(row[key], 2)
        row["total"] = round(row["operational"] + row["office"] + row["other"], 2)
        sites.append(row)

    status_counts = {item.value: 0 for item in ExpenseStatus}
    for status, count in db.execute(select(Expense.status, func.count(Expense.id)).group_by(Expense.status)).all():
        status_counts[ExpenseStatus(status).value] = int(count)

    return {
        "period": period,
        "start_date": start_date,
        "end_date": end_date,
        "by_site": sites,
        "by_type": {key: round(value, 2) for key, value in by_type.items()},
        "status_counts": status_counts,
    }


def expense_summary(db: Session) -> dict[str, object]:
    today = local_day()
    month_start = today.replace(day=1)
    year_start = today.replace(month=1, day=1)

    def _approved_total(start: date) -> float:
        total = db.scalar(
            select(func.coalesce(func.sum(Expense.amount), 0.0)).where(
                Expense.status == ExpenseStatus.APPROVED,
                Expense.date >= start,
                Expense.date <= today,
            )
        )
        return round(float(total or 0.0), 2)

    pending_count = db.scalar(select(func.count(Expense.id)).where(Expense.status == ExpenseStatus.PENDING)) or 0
    recent = db.scalars(
        select(Expense).order_by(Expense.created_at.desc(), Expense.id.desc()).limit(RECENT_EXPENSE_COUNT)
    ).all()
    return {
        "month_total": _approved_total(month_start),
        "year_total": _approved_total(year_start),
        "pending_count": int(pending_count),
        "recent": list(recent),
    }
