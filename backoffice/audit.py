from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.models import AuditActorType, AuditLog
from backoffice.security import Caller

logger = logging.getLogger("backoffice.audit")


def client_ip(request: Request) -> str | None:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def request_meta(request: Request) -> dict[str, str | None]:
    return {
        "ip": client_ip(request),
        "user_agent": request.headers.get("user-agent"),
        "request_id": getattr(request.state, "request_id", None),
    }


def log_audit(
    db: Session,
    *,
    actor_type: AuditActorType,
    actor_id: str,
    action: str,
    success: bool = True,
    entity_type: str | None = None,
    entity_id: str | int | None = None,
    ip: str | None = None,
    user_agent: str | None = None,
    details: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditLog | None:
    """Persist one audit row in its own commit.

    A failed write is rolled back and logged; the business change that
    triggered it has already been committed by the caller.
    """
    entry = AuditLog(
        ts_utc=datetime.now(timezone.utc),
        actor_type=actor_type,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=None if entity_id is None else str(entity_id),
        ip=ip,
        user_agent=user_agent,
        success=success,
        details=details or {},
    )
    fields = {
        "request_id": request_id,
        "action": action,
        "actor": f"{actor_type.value}:{actor_id}",
        "entity": f"{entity_type}:{entry.entity_id}" if entity_type else None,
        "success": success,
    }

    db.add(entry)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("audit_write_failed", extra=fields)
        return None

    logger.info("audit_recorded", extra=fields)
    return entry


def audit_request(
    db: Session,
    request: Request,
    caller: Caller,
    *,
    action: str,
    entity_type: str,
    entity_id: str | int | None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> AuditLog | None:
    return log_audit(
        db,
        actor_type=AuditActorType(caller.role.value),
        actor_id=caller.actor_id,
        action=action,
        success=success,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        **request_meta(request),
    )
