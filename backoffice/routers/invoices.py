from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from backoffice.audit import audit_request
from backoffice.db import get_db
from backoffice.models import InvoiceType, RosterCreator
from backoffice.schemas import (
    InvoiceCreate,
    InvoiceRead,
    InvoiceShareRequest,
    InvoiceStatsResponse,
    InvoiceUpdate,
)
from backoffice.security import Caller, get_caller, require_admin_role
from backoffice.services import invoices as invoice_service

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("", response_model=list[InvoiceRead])
def list_invoices_endpoint(
    created_by: RosterCreator | None = Query(default=None),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> list[InvoiceRead]:
    return invoice_service.list_invoices(db, caller, created_by=created_by)


@router.get("/type/{invoice_type}", response_model=list[InvoiceRead])
def list_invoices_by_type_endpoint(
    invoice_type: InvoiceType,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> list[InvoiceRead]:
    return invoice_service.list_invoices_by_type(db, caller, invoice_type)


@router.get("/search/{query}", response_model=list[InvoiceRead])
def search_invoices_endpoint(
    query: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> list[InvoiceRead]:
    return invoice_service.search_invoices(db, caller, query)


@router.get("/stats/summary", response_model=InvoiceStatsResponse)
def invoice_stats_endpoint(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> InvoiceStatsResponse:
    return invoice_service.invoice_stats(db, caller)


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice_endpoint(
    invoice_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    return invoice_service.get_invoice(db, invoice_id, caller)


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice_endpoint(
    payload: InvoiceCreate,
    request: Request,
    caller: Caller = Depends(require_admin_role),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    invoice = invoice_service.create_invoice(db, payload, caller)
    audit_request(
        db,
        request,
        caller,
        action="INVOICE_CREATED",
        entity_type="invoice",
        entity_id=invoice.invoice_id,
        details={"invoice_type": invoice.invoice_type.value, "amount": invoice.amount},
    )
    return invoice


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice_endpoint(
    invoice_id: str,
    payload: InvoiceUpdate,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    invoice = invoice_service.update_invoice(db, invoice_id, payload, caller)
    audit_request(db, request, caller, action="INVOICE_UPDATED", entity_type="invoice", entity_id=invoice_id)
    return invoice


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice_endpoint(
    invoice_id: str,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> None:
    invoice_service.delete_invoice(db, invoice_id, caller)
    audit_request(db, request, caller, action="INVOICE_DELETED", entity_type="invoice", entity_id=invoice_id)


@router.patch("/{invoice_id}/mark-paid", response_model=InvoiceRead)
def mark_paid_endpoint(
    invoice_id: str,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    invoice = invoice_service.mark_paid(db, invoice_id, caller)
    audit_request(db, request, caller, action="INVOICE_MARKED_PAID", entity_type="invoice", entity_id=invoice_id)
    return invoice


@router.post("/{invoice_id}/share", response_model=InvoiceRead)
def share_invoice_endpoint(
    invoice_id: str,
    payload: InvoiceShareRequest,
    request: Request,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> InvoiceRead:
    invoice = invoice_service.share_invoice(db, invoice_id, payload.user_ids, caller)
    audit_request(
        db,
        request,
        caller,
        action="INVOICE_SHARED",
        entity_type="invoice",
        entity_id=invoice_id,
        details={"user_ids": payload.user_ids},
    )
    return invoice
