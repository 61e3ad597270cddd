from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice.errors import ApiError, not_found
from backoffice.models import LeaveRequest, LeaveStatus, LeaveType
from backoffice.schemas import LeaveApplyRequest

logger = logging.getLogger("backoffice.leaves")

DECIDED_STATUSES = {LeaveStatus.APPROVED, LeaveStatus.REJECTED}


def apply_leave(db: Session, payload: LeaveApplyRequest) -> LeaveRequest:
    if payload.to_date < payload.from_date:
        raise ApiError(
            status_code=400,
            code="INVALID_DATE_RANGE",
            message="to_date must be greater than or equal to from_date.",
        )

    leave = LeaveRequest(
        employee_id=payload.employee_id,
        employee_name=payload.employee_name,
        department=payload.department,
        contact_number=payload.contact_number,
        leave_type=payload.leave_type,
        from_date=payload.from_date,
        to_date=payload.to_date,
        total_days=(payload.to_date - payload.from_date).days + 1,
        reason=payload.reason,
        status=LeaveStatus.PENDING,
        applied_by=payload.applied_by or payload.employee_id,
        applied_for=payload.applied_for or payload.employee_id,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)
    logger.info(
        "leave_applied",
        extra={"leave_id": leave.id, "employee_id": leave.employee_id, "total_days": leave.total_days},
    )
    return leave


def list_leaves(
    db: Session,
    *,
    employee_id: str | None = None,
    department: str | None = None,
    status: LeaveStatus | None = None,
) -> list[LeaveRequest]:
    stmt = select(LeaveRequest).order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
    if employee_id:
        stmt = stmt.where(LeaveRequest.employee_id == employee_id)
    if department:
        stmt = stmt.where(LeaveRequest.department == department)
    if status is not None:
        stmt = stmt.where(LeaveRequest.status == status)
    return list(db.scalars(stmt).all())


def leave_stats(db: Session) -> dict[str, object]:
    by_status = {item.value: 0 for item in LeaveStatus}
    for status, count in db.execute(
        select(LeaveRequest.status, func.count(LeaveRequest.id)).group_by(LeaveRequest.status)
    ).all():
        by_status[LeaveStatus(status).value] = int(count)

    by_type = {item.value: 0 for item in LeaveType}
    for leave_type, count in db.execute(
        select(LeaveRequest.leave_type, func.count(LeaveRequest.id)).group_by(LeaveRequest.leave_type)
    ).all():
        by_type[LeaveType(leave_type).value] = int(count)

    return {"total": sum(by_status.values()), **by_status, "by_type": by_type}


def update_leave_status(db: Session, leave_id: int, status: LeaveStatus) -> LeaveRequest:
    if status not in DECIDED_STATUSES:
        raise ApiError(
            status_code=400,
            code="INVALID_LEAVE_STATUS",
            message="Status must be approved or rejected.",
        )

    leave = db.get(LeaveRequest, leave_id)
    if leave is None:
        raise not_found("leave")

    leave.status = status
    db.commit()
    db.refresh(leave)
    logger.info("leave_status_changed", extra={"leave_id": leave_id, "status": status.value})
    return leave
