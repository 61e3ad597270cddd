from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.errors import ApiError, not_found
from backoffice.models import Invoice, InvoiceStatus, InvoiceType, RosterCreator, UserRole
from backoffice.schemas import InvoiceCreate, InvoiceItem, InvoiceUpdate
from backoffice.security import Caller
from backoffice.settings import get_settings

logger = logging.getLogger("backoffice.invoices")

RECENT_INVOICE_COUNT = 5
SEARCH_FIELDS = ("invoice_id", "client", "voucher_no", "invoice_number", "service_type")


def _creator_for(caller: Caller) -> RosterCreator:
    if caller.role == UserRole.SUPERADMIN:
        return RosterCreator.SUPERADMIN
    return RosterCreator.ADMIN


def is_visible(invoice: Invoice, caller: Caller) -> bool:
    if caller.is_superadmin:
        return True
    if caller.user_id is not None:
        if invoice.user_id == caller.user_id:
            return True
        if caller.user_id in (invoice.shared_with or []):
            return True
    return invoice.created_by == RosterCreator.SUPERADMIN and invoice.is_visible_to_admin


def can_modify(invoice: Invoice, caller: Caller) -> bool:
    if caller.is_superadmin:
        return True
    return caller.user_id is not None and invoice.user_id == caller.user_id


def compute_totals(
    *,
    invoice_type: InvoiceType,
    items: list[InvoiceItem],
    tax: float | None,
    discount: float,
    round_up: float,
    management_fees_percent: float | None,
    management_fees_amount: float | None,
    amount: float | None,
) -> dict[str, Any]:
    """Derive subtotal, fees, tax and the payable amount for an invoice.

    Explicit ``tax`` and ``amount`` values win over the derived ones. For tax
    invoices the management fee is either given as an amount or derived from
    the percentage, and GST is charged on subtotal plus fees.
    """
    gst_rate = get_settings().gst_rate
    item_rows = [item.model_dump() for item in items]
    subtotal = round(sum(row["amount"] or 0.0 for row in item_rows), 2)

    fees = 0.0
    if invoice_type == InvoiceType.TAX:
        if management_fees_amount is not None:
            fees = management_fees_amount
        elif management_fees_percent is not None:
            fees = round(subtotal * management_fees_percent / 100, 2)

    if tax is None:
        taxable = subtotal + fees if invoice_type == InvoiceType.TAX else subtotal
        tax = round(taxable * gst_rate, 2)

    if amount is None:
        amount = round(subtotal + tax + fees + round_up - discount, 2)

    return {
        "items": item_rows,
        "subtotal": subtotal,
        "tax": tax,
        "management_fees_amount": fees if invoice_type == InvoiceType.TAX else management_fees_amount,
        "amount": amount,
    }


def _visible_invoices(db: Session, caller: Caller, stmt=None) -> list[Invoice]:  # type: ignore[no-untyped-def]
    if stmt is None:
        stmt = select(Invoice)
    rows = db.scalars(stmt.order_by(Invoice.created_at.desc(), Invoice.id.desc())).all()
    return [invoice for invoice in rows if is_visible(invoice, caller)]


def list_invoices(db: Session, caller: Caller, *, created_by: RosterCreator | None = None) -> list[Invoice]:
    stmt = select(Invoice)
    if created_by is not None:
        stmt = stmt.where(Invoice.created_by == created_by)
    return _visible_invoices(db, caller, stmt)


def list_invoices_by_type(db: Session, caller: Caller, invoice_type: InvoiceType) -> list[Invoice]:
    return _visible_invoices(db, caller, select(Invoice).where(Invoice.invoice_type == invoice_type))


def search_invoices(db: Session, caller: Caller, query: str) -> list[Invoice]:
    needle = query.strip().lower()
    if not needle:
        return []
    return [
        invoice
        for invoice in _visible_invoices(db, caller)
        if any(needle in str(getattr(invoice, field) or "").lower() for field in SEARCH_FIELDS)
    ]


def invoice_stats(db: Session, caller: Caller) -> dict[str, Any]:
    invoices = _visible_invoices(db, caller)
    by_status = {item.value: 0 for item in InvoiceStatus}
    amount_by_type = {item.value: 0.0 for item in InvoiceType}
    for invoice in invoices:
        by_status[invoice.status.value] += 1
        amount_by_type[invoice.invoice_type.value] += invoice.amount
    return {
        "total": len(invoices),
        "by_status": by_status,
        "total_amount": round(sum(invoice.amount for invoice in invoices), 2),
        "amount_by_type": {key: round(value, 2) for key, value in amount_by_type.items()},
        "recent": invoices[:RECENT_INVOICE_COUNT],
    }


def _find_invoice(db: Session, invoice_id: str) -> Invoice:
    invoice = db.scalar(select(Invoice).where(Invoice.invoice_id == invoice_id))
    if invoice is None:
        raise not_found("invoice")
    return invoice


def get_invoice(db: Session, invoice_id: str, caller: Caller) -> Invoice:
    invoice = _find_invoice(db, invoice_id)
    if not is_visible(invoice, caller):
        raise ApiError(status_code=403, code="FORBIDDEN", message="You do not have access to this invoice.")
    return invoice


def _duplicate_invoice() -> ApiError:
    return ApiError(status_code=409, code="INVOICE_EXISTS", message="Invoice with this ID already exists.")


def create_invoice(db: Session, payload: InvoiceCreate, caller: Caller) -> Invoice:
    if db.scalar(select(Invoice.id).where(Invoice.invoice_id == payload.invoice_id)) is not None:
        raise _duplicate_invoice()

    totals = compute_totals(
        invoice_type=payload.invoice_type,
        items=payload.items,
        tax=payload.tax,
        discount=payload.discount,
        round_up=payload.round_up,
        management_fees_percent=payload.management_fees_percent,
        management_fees_amount=payload.management_fees_amount,
        amount=payload.amount,
    )
    fields = payload.model_dump(exclude={"items", "tax", "amount", "management_fees_amount"})
    invoice = Invoice(
        **fields,
        **totals,
        created_by=_creator_for(caller),
        user_id=caller.user_id,
        shared_with=[],
    )
    invoice.invoice_number = payload.invoice_number or payload.invoice_id
    invoice.due_date = payload.due_date or payload.date + timedelta(days=get_settings().invoice_due_days)
    db.add(invoice)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise _duplicate_invoice() from exc
    db.refresh(invoice)
    logger.info(
        "invoice_created",
        extra={"invoice_id": invoice.invoice_id, "amount": invoice.amount, "created_by": invoice.created_by.value},
    )
    return invoice


def _ensure_can_modify(invoice: Invoice, caller: Caller) -> None:
    if not can_modify(invoice, caller):
        raise ApiError(
            status_code=403,
            code="FORBIDDEN",
            message="Only the invoice creator or a superadmin can modify this invoice.",
        )


def update_invoice(db: Session, invoice_id: str, payload: InvoiceUpdate, caller: Caller) -> Invoice:
    invoice = _find_invoice(db, invoice_id)
    _ensure_can_modify(invoice, caller)

    changes = payload.model_dump(exclude_unset=True)
    pricing_fields = {
        "items",
        "tax",
        "discount",
        "round_up",
        "management_fees_percent",
        "management_fees_amount",
        "amount",
        "invoice_type",
    }
    for field_name, value in changes.items():
        if field_name in pricing_fields or value is None:
            continue
        setattr(invoice, field_name, value)

    if pricing_fields & changes.keys():
        invoice_type = payload.invoice_type or invoice.invoice_type
        items = payload.items
        if items is None:
            items = [InvoiceItem.model_validate(row) for row in invoice.items]
        discount = payload.discount if payload.discount is not None else invoice.discount
        round_up = payload.round_up if payload.round_up is not None else invoice.round_up
        fees_percent = (
            payload.management_fees_percent
            if "management_fees_percent" in changes
            else invoice.management_fees_percent
        )
        if "management_fees_amount" in changes:
            fees_amount = payload.management_fees_amount
        elif "management_fees_percent" in changes or fees_percent is not None:
            fees_amount = None
        else:
            # A fee entered as a flat amount has no percent to re-derive it from.
            fees_amount = invoice.management_fees_amount
        totals = compute_totals(
            invoice_type=invoice_type,
            items=items,
            tax=payload.tax,
            discount=discount,
            round_up=round_up,
            management_fees_percent=fees_percent,
            management_fees_amount=fees_amount,
            amount=payload.amount,
        )
        invoice.invoice_type = invoice_type
        invoice.discount = discount
        invoice.round_up = round_up
        invoice.management_fees_percent = fees_percent
        for field_name, value in totals.items():
            setattr(invoice, field_name, value)

    db.commit()
    db.refresh(invoice)
    return invoice


def mark_paid(db: Session, invoice_id: str, caller: Caller) -> Invoice:
    invoice = get_invoice(db, invoice_id, caller)
    invoice.status = InvoiceStatus.PAID
    db.commit()
    db.refresh(invoice)
    logger.info("invoice_marked_paid", extra={"invoice_id": invoice_id})
    return invoice


def delete_invoice(db: Session, invoice_id: str, caller: Caller) -> None:
    invoice = _find_invoice(db, invoice_id)
    _ensure_can_modify(invoice, caller)
    db.delete(invoice)
    db.commit()
    logger.info("invoice_deleted", extra={"invoice_id": invoice_id})


def share_invoice(db: Session, invoice_id: str, user_ids: list[str], caller: Caller) -> Invoice:
    if not caller.is_superadmin:
        raise ApiError(status_code=403, code="FORBIDDEN", message="Only a superadmin can share invoices.")
    invoice = _find_invoice(db, invoice_id)

    shared = list(invoice.shared_with or [])
    for user_id in user_ids:
        user_id = user_id.strip()
        if user_id and user_id not in shared:
            shared.append(user_id)
    # Reassign so the JSON column is flagged dirty.
    invoice.shared_with = shared
    db.commit()
    db.refresh(invoice)
    return invoice
