from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from backoffice.audit import audit_request
from backoffice.db import get_db
from backoffice.models import RosterCreator, RosterType
from backoffice.schemas import (
    RosterBulkCreateRequest,
    RosterBulkCreateResponse,
    RosterCalendarResponse,
    RosterDuplicateCheckResponse,
    RosterDuplicateRef,
    RosterEntryCreate,
    RosterEntryRead,
    RosterEntryUpdate,
    RosterPage,
    RosterStatsResponse,
    RosterSummaryResponse,
)
from backoffice.security import Caller, get_caller, require_admin_role
from backoffice.services import roster as roster_service

router = APIRouter(prefix="/api/roster", tags=["roster"])


@router.get("", response_model=RosterPage)
def list_roster_endpoint(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    type: RosterType | None = Query(default=None),
    employee_id: str | None = Query(default=None, max_length=64),
    created_by: RosterCreator | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> RosterPage:
    return roster_service.list_entries(
        db,
        start_date=start_date,
        end_date=end_date,
        type=type,
        employee_id=employee_id,
        created_by=created_by,
        page=page,
        limit=limit,
    )


@router.get("/stats", response_model=RosterStatsResponse)
def roster_stats_endpoint(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    created_by: RosterCreator | None = Query(default=None),
    db: Session = Depends(get_db),
) -> RosterStatsResponse:
    return roster_service.roster_stats(db, start_date=start_date, end_date=end_date, created_by=created_by)


@router.get("/calendar", response_model=RosterCalendarResponse)
def roster_calendar_endpoint(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=1970, le=2100),
    created_by: RosterCreator | None = Query(default=None),
    db: Session = Depends(get_db),
) -> RosterCalendarResponse:
    return roster_service.roster_calendar(db, month=month, year=year, created_by=created_by)


@router.get("/summary", response_model=RosterSummaryResponse)
def roster_summary_endpoint(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> RosterSummaryResponse:
    return roster_service.roster_summary(db, start_date=start_date, end_date=end_date)


@router.get("/check-duplicate", response_model=RosterDuplicateCheckResponse)
def check_duplicate_endpoint(
    employee_id: str = Query(min_length=1, max_length=64),
    day: date = Query(alias="date"),
    shift: str = Query(min_length=1, max_length=100),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> RosterDuplicateCheckResponse:
    existing = roster_service.find_duplicate(db, employee_id=employee_id, day=day, shift=shift, role=caller.role)
    if existing is None:
        return RosterDuplicateCheckResponse(is_duplicate=False)
    return RosterDuplicateCheckResponse(is_duplicate=True, existing=RosterDuplicateRef.model_validate(existing))


@router.get("/{entry_id}", response_model=RosterEntryRead)
def get_roster_entry_endpoint(entry_id: int, db: Session = Depends(get_db)) -> RosterEntryRead:
    return roster_service.get_entry(db, entry_id)


@router.post("", response_model=RosterEntryRead, status_code=status.HTTP_201_CREATED)
def create_roster_entry_endpoint(
    payload: RosterEntryCreate,
    request: Request,
    caller: Caller = Depends(require_admin_role),
    db: Session = Depends(get_db),
) -> RosterEntryRead:
    entry = roster_service.create_entry(db, payload, role=caller.role)
    audit_request(
        db,
        request,
        caller,
        action="ROSTER_ENTRY_CREATED",
        entity_type="roster_entry",
        entity_id=entry.id,
        details={"employee_id": entry.employee_id, "date": entry.date.isoformat(), "shift": entry.shift},
    )
    return entry


@router.post("/bulk", response_model=RosterBulkCreateResponse, status_code=status.HTTP_201_CREATED)
def bulk_create_roster_endpoint(
    payload: RosterBulkCreateRequest,
    request: Request,
    caller: Caller = Depends(require_admin_role),
    db: Session = Depends(get_db),
) -> RosterBulkCreateResponse:
    result = roster_service.bulk_create_entries(db, payload.entries, role=caller.role)
    audit_request(
        db,
        request,
        caller,
        action="ROSTER_BULK_CREATED",
        entity_type="roster_entry",
        entity_id=None,
        details={"created": result["created_count"], "duplicates": result["duplicate_count"]},
    )
    return result


@router.put("/{entry_id}", response_model=RosterEntryRead)
def update_roster_entry_endpoint(
    entry_id: int,
    payload: RosterEntryUpdate,
    request: Request,
    caller: Caller = Depends(require_admin_role),
    db: Session = Depends(get_db),
) -> RosterEntryRead:
    entry = roster_service.update_entry(db, entry_id, payload, role=caller.role)
    audit_request(db, request, caller, action="ROSTER_ENTRY_UPDATED", entity_type="roster_entry", entity_id=entry.id)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_roster_entry_endpoint(
    entry_id: int,
    request: Request,
    caller: Caller = Depends(require_admin_role),
    db: Session = Depends(get_db),
) -> None:
    roster_service.delete_entry(db, entry_id, role=caller.role)
    audit_request(db, request, caller, action="ROSTER_ENTRY_DELETED", entity_type="roster_entry", entity_id=entry_id)
