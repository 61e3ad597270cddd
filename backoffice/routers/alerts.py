from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from backoffice.audit import audit_request
from backoffice.db import get_db
from backoffice.models import AlertSeverity, AlertStatus
from backoffice.schemas import AlertCreate, AlertRead, AlertStatsResponse, AlertStatusUpdate, AlertUpdate
from backoffice.security import Caller, get_caller
from backoffice.services.alerts import (
    alert_stats,
    create_alert,
    delete_alert,
    get_alert,
    list_alerts,
    update_alert,
    update_alert_status,
)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("", response_model=list[AlertRead])
def list_alerts_endpoint(
    status_filter: AlertStatus | None = Query(default=None, alias="status"),
    severity: AlertSeverity | None = Query(default=None),
    site: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db),
) -> list[AlertRead]:
    return list_alerts(db, status=status_filter, severity=severity, site=site)


@router.get("/stats/overview", response_model=AlertStatsResponse)
def alert_stats_endpoint(db: Session = Depends(get_db)) -> AlertStatsResponse:
    return alert_stats(db)


@router.get("/{alert_id}", response_model=AlertRead)
def get_alert_endpoint(alert_id: int, db: Session = Depends(get_db)) -> AlertRead:
    return get_alert(db, alert_id)


@router.post("", response_model=AlertRead, status_code=status.HTTP_201_CREATED)
def create_alert_endpoint(
    payload: AlertCreate,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> AlertRead:
    alert = create_alert(db, payload)
    audit_request(
        db,
        request,
        caller,
        action="ALERT_CREATED",
        entity_type="alert",
        entity_id=alert.id,
        details={"severity": alert.severity.value, "site": alert.site},
    )
    return alert


@router.put("/{alert_id}", response_model=AlertRead)
def update_alert_endpoint(alert_id: int, payload: AlertUpdate, db: Session = Depends(get_db)) -> AlertRead:
    return update_alert(db, alert_id, payload)


@router.patch("/{alert_id}/status", response_model=AlertRead)
def update_alert_status_endpoint(
    alert_id: int,
    payload: AlertStatusUpdate,
    db: Session = Depends(get_db),
) -> AlertRead:
    return update_alert_status(db, alert_id, payload.status)


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_alert_endpoint(
    alert_id: int,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> None:
    delete_alert(db, alert_id)
    audit_request(db, request, caller, action="ALERT_DELETED", entity_type="alert", entity_id=alert_id)
