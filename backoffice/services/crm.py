from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.errors import ApiError, not_found
from backoffice.models import Client, ClientStatus, Communication, Lead, LeadStatus
from backoffice.schemas import (
    ClientCreate,
    ClientUpdate,
    CommunicationCreate,
    LeadCreate,
    LeadUpdate,
)
from backoffice.services.common import like_pattern, utcnow

logger = logging.getLogger("backoffice.crm")

CLIENT_SEARCH_LIMIT = 20
LEAD_BULK_REQUIRED_FIELDS = ("name", "company", "email", "phone")


def _duplicate_email() -> ApiError:
    return ApiError(status_code=409, code="CLIENT_EMAIL_EXISTS", message="A client with this email already exists.")


def _client_search_clause(term: str):  # type: ignore[no-untyped-def]
    pattern = like_pattern(term)
    return or_(
        Client.name.ilike(pattern, escape="\\"),
        Client.company.ilike(pattern, escape="\\"),
        Client.email.ilike(pattern, escape="\\"),
        Client.phone.ilike(pattern, escape="\\"),
    )


# Clients


def list_clients(db: Session, *, search: str | None, status: ClientStatus | None) -> list[Client]:
    stmt = select(Client).order_by(Client.created_at.desc(), Client.id.desc())
    if status is not None:
        stmt = stmt.where(Client.status == status)
    if search and search.strip():
        stmt = stmt.where(_client_search_clause(search))
    return list(db.scalars(stmt).all())


def search_clients(db: Session, query: str | None) -> list[Client]:
    if not query or not query.strip():
        return []
    stmt = (
        select(Client)
        .where(Client.status == ClientStatus.ACTIVE, _client_search_clause(query))
        .order_by(Client.name.asc())
        .limit(CLIENT_SEARCH_LIMIT)
    )
    return list(db.scalars(stmt).all())


def client_stats(db: Session) -> dict[str, int]:
    counts = {item.value: 0 for item in ClientStatus}
    for status, count in db.execute(select(Client.status, func.count(Client.id)).group_by(Client.status)).all():
        counts[ClientStatus(status).value] = int(count)
    return {"total": sum(counts.values()), "active": counts["active"], "inactive": counts["inactive"]}


def get_client(db: Session, client_id: int) -> Client:
    client = db.get(Client, client_id)
    if client is None:
        raise not_found("client")
    return client


def _email_taken(db: Session, email: str, *, exclude_id: int | None = None) -> bool:
    stmt = select(Client.id).where(func.lower(Client.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(Client.id != exclude_id)
    return db.scalar(stmt) is not None


def create_client(db: Session, payload: ClientCreate) -> Client:
    if _email_taken(db, payload.email):
        raise _duplicate_email()

    client = Client(**payload.model_dump())
    db.add(client)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _duplicate_email() from exc
    db.refresh(client)
    logger.info("client_created", extra={"client_id": client.id})
    return client


def update_client(db: Session, client_id: int, payload: ClientUpdate) -> Client:
    client = get_client(db, client_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("email") and _email_taken(db, changes["email"], exclude_id=client.id):
        raise _duplicate_email()

    for field_name, value in changes.items():
        if value is None and field_name in {"name", "company", "email", "phone", "value", "industry", "status"}:
            continue
        setattr(client, field_name, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _duplicate_email() from exc
    db.refresh(client)
    return client


def delete_client(db: Session, client_id: int) -> None:
    client = get_client(db, client_id)
    db.delete(client)
    db.commit()
    logger.info("client_deleted", extra={"client_id": client_id})


def toggle_client_status(db: Session, client_id: int) -> Client:
    client = get_client(db, client_id)
    client.status = ClientStatus.INACTIVE if client.status == ClientStatus.ACTIVE else ClientStatus.ACTIVE
    db.commit()
    db.refresh(client)
    return client


# Leads


def list_leads(db: Session, *, search: str | None) -> list[Lead]:
    stmt = select(Lead).order_by(Lead.created_at.desc(), Lead.id.desc())
    if search and search.strip():
        pattern = like_pattern(search)
        stmt = stmt.where(
            or_(
                Lead.name.ilike(pattern, escape="\\"),
                Lead.company.ilike(pattern, escape="\\"),
                Lead.email.ilike(pattern, escape="\\"),
                cast(Lead.source, String).ilike(pattern, escape="\\"),
                Lead.assigned_to.ilike(pattern, escape="\\"),
            )
        )
    return list(db.scalars(stmt).all())


def get_lead(db: Session, lead_id: int) -> Lead:
    lead = db.get(Lead, lead_id)
    if lead is None:
        raise not_found("lead")
    return lead


def create_lead(db: Session, payload: LeadCreate) -> Lead:
    lead = Lead(**payload.model_dump())
    db.add(lead)
    db.commit()
    db.refresh(lead)
    return lead


def bulk_import_leads(db: Session, rows: list[dict[str, Any]]) -> dict[str, object]:
    if not rows:
        raise ApiError(status_code=400, code="INVALID_LEAD_DATA", message="Lead data must be a non-empty list.")

    leads: list[Lead] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, dict) or not all(row.get(field) for field in LEAD_BULK_REQUIRED_FIELDS):
            skipped += 1
            continue
        try:
            payload = LeadCreate.model_validate(row)
        except ValidationError:
            skipped += 1
            continue
        leads.append(Lead(**payload.model_dump()))

    if not leads:
        raise ApiError(status_code=400, code="NO_VALID_LEADS", message="No valid leads to import.")

    db.add_all(leads)
    db.commit()
    for lead in leads:
        db.refresh(lead)
    logger.info("leads_imported", extra={"imported": len(leads), "skipped": skipped})
    return {"imported_count": len(leads), "skipped_count": skipped, "leads": leads}


def update_lead(db: Session, lead_id: int, payload: LeadUpdate) -> Lead:
    lead = get_lead(db, lead_id)
    for field_name, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field_name not in {"follow_up_date", "notes"}:
            continue
        setattr(lead, field_name, value)
    db.commit()
    db.refresh(lead)
    return lead


def update_lead_status(db: Session, lead_id: int, status: LeadStatus) -> Lead:
    lead = get_lead(db, lead_id)
    lead.status = status
    db.commit()
    db.refresh(lead)
    return lead


def delete_lead(db: Session, lead_id: int) -> None:
    lead = get_lead(db, lead_id)
    db.delete(lead)
    db.commit()


# Communications


def list_communications(db: Session, *, search: str | None) -> list[Communication]:
    stmt = select(Communication).order_by(Communication.date.desc(), Communication.id.desc())
    if search and search.strip():
        pattern = like_pattern(search)
        stmt = stmt.where(
            or_(
                Communication.client_name.ilike(pattern, escape="\\"),
                Communication.notes.ilike(pattern, escape="\\"),
            )
        )
    return list(db.scalars(stmt).all())


def create_communication(db: Session, payload: CommunicationCreate) -> Communication:
    client = get_client(db, payload.client_id)
    communication = Communication(
        client_id=client.id,
        client_name=client.name,
        type=payload.type,
        date=payload.date or utcnow(),
        notes=payload.notes,
        follow_up_required=payload.follow_up_required,
        follow_up_date=payload.follow_up_date,
    )
    db.add(communication)
    db.commit()
    db.refresh(communication)
    return communication


def delete_communication(db: Session, communication_id: int) -> None:
    communication = db.get(Communication, communication_id)
    if communication is None:
        raise not_found("communication")
    db.delete(communication)
    db.commit()
