from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice.errors import not_found
from backoffice.models import Alert, AlertSeverity, AlertStatus
from backoffice.schemas import AlertCreate, AlertUpdate
from backoffice.services.common import local_day


def list_alerts(
    db: Session,
    *,
    status: AlertStatus | None = None,
    severity: AlertSeverity | None = None,
    site: str | None = None,
) -> list[Alert]:
    stmt = select(Alert).order_by(Alert.created_at.desc(), Alert.id.desc())
    if status is not None:
        stmt = stmt.where(Alert.status == status)
    if severity is not None:
        stmt = stmt.where(Alert.severity == severity)
    if site:
        stmt = stmt.where(Alert.site == site)
    return list(db.scalars(stmt).all())


def get_alert(db: Session, alert_id: int) -> Alert:
    alert = db.get(Alert, alert_id)
    if alert is None:
        raise not_found("alert")
    return alert


def create_alert(db: Session, payload: AlertCreate) -> Alert:
    alert = Alert(
        title=payload.title,
        description=payload.description,
        severity=payload.severity,
        status=AlertStatus.OPEN,
        date=payload.date or local_day(),
        reported_by=payload.reported_by,
        site=payload.site,
        photos=list(payload.photos),
        assigned_to=payload.assigned_to,
    )
    db.add(alert)
    db.commit()
    db.refresh(alert)
    return alert


def update_alert(db: Session, alert_id: int, payload: AlertUpdate) -> Alert:
    alert = get_alert(db, alert_id)
    changes = payload.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if value is None:
            continue
        if field_name == "photos":
            value = list(value)
        setattr(alert, field_name, value)
    db.commit()
    db.refresh(alert)
    return alert


def update_alert_status(db: Session, alert_id: int, status: AlertStatus) -> Alert:
    alert = get_alert(db, alert_id)
    alert.status = status
    db.commit()
    db.refresh(alert)
    return alert


def delete_alert(db: Session, alert_id: int) -> None:
    alert = get_alert(db, alert_id)
    db.delete(alert)
    db.commit()


def alert_stats(db: Session) -> dict[str, object]:
    by_status = {item.value: 0 for item in AlertStatus}
    for status, count in db.execute(select(Alert.status, func.count(Alert.id)).group_by(Alert.status)).all():
        by_status[AlertStatus(status).value] = int(count)

    by_severity = {item.value: 0 for item in AlertSeverity}
    for severity, count in db.execute(select(Alert.severity, func.count(Alert.id)).group_by(Alert.severity)).all():
        by_severity[AlertSeverity(severity).value] = int(count)

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_severity": by_severity,
    }
