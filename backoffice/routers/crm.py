from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from backoffice.db import get_db
from backoffice.models import ClientStatus
from backoffice.schemas import (
    ClientCreate,
    ClientRead,
    ClientStatsResponse,
    ClientUpdate,
    CommunicationCreate,
    CommunicationRead,
    LeadBulkImportResponse,
    LeadCreate,
    LeadRead,
    LeadStatusUpdate,
    LeadUpdate,
)
from backoffice.services import crm as crm_service

router = APIRouter(prefix="/api/crm", tags=["crm"])


# Clients


@router.get("/clients", response_model=list[ClientRead])
def list_clients_endpoint(
    search: str | None = Query(default=None, max_length=255),
    status_filter: ClientStatus = Query(default=ClientStatus.ACTIVE, alias="status"),
    db: Session = Depends(get_db),
) -> list[ClientRead]:
    return crm_service.list_clients(db, search=search, status=status_filter)


@router.get("/clients/search", response_model=list[ClientRead])
def search_clients_endpoint(
    query: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db),
) -> list[ClientRead]:
    return crm_service.search_clients(db, query)


@router.get("/clients/stats", response_model=ClientStatsResponse)
def client_stats_endpoint(db: Session = Depends(get_db)) -> ClientStatsResponse:
    return crm_service.client_stats(db)


@router.get("/clients/{client_id}", response_model=ClientRead)
def get_client_endpoint(client_id: int, db: Session = Depends(get_db)) -> ClientRead:
    return crm_service.get_client(db, client_id)


@router.post("/clients", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client_endpoint(payload: ClientCreate, db: Session = Depends(get_db)) -> ClientRead:
    return crm_service.create_client(db, payload)


@router.put("/clients/{client_id}", response_model=ClientRead)
def update_client_endpoint(client_id: int, payload: ClientUpdate, db: Session = Depends(get_db)) -> ClientRead:
    return crm_service.update_client(db, client_id, payload)


@router.delete("/clients/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client_endpoint(client_id: int, db: Session = Depends(get_db)) -> None:
    crm_service.delete_client(db, client_id)


@router.patch("/clients/{client_id}/toggle-status", response_model=ClientRead)
def toggle_client_status_endpoint(client_id: int, db: Session = Depends(get_db)) -> ClientRead:
    return crm_service.toggle_client_status(db, client_id)


# Leads


@router.get("/leads", response_model=list[LeadRead])
def list_leads_endpoint(
    search: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db),
) -> list[LeadRead]:
    return crm_service.list_leads(db, search=search)


@router.post("/leads", response_model=LeadRead, status_code=status.HTTP_201_CREATED)
def create_lead_endpoint(payload: LeadCreate, db: Session = Depends(get_db)) -> LeadRead:
    return crm_service.create_lead(db, payload)


@router.post("/leads/bulk", response_model=LeadBulkImportResponse, status_code=status.HTTP_201_CREATED)
def bulk_import_leads_endpoint(
    rows: list[dict[str, Any]] = Body(),
    db: Session = Depends(get_db),
) -> LeadBulkImportResponse:
    return crm_service.bulk_import_leads(db, rows)


@router.put("/leads/{lead_id}", response_model=LeadRead)
def update_lead_endpoint(lead_id: int, payload: LeadUpdate, db: Session = Depends(get_db)) -> LeadRead:
    return crm_service.update_lead(db, lead_id, payload)


@router.patch("/leads/{lead_id}/status", response_model=LeadRead)
def update_lead_status_endpoint(
    lead_id: int,
    payload: LeadStatusUpdate,
    db: Session = Depends(get_db),
) -> LeadRead:
    return crm_service.update_lead_status(db, lead_id, payload.status)


@router.delete("/leads/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lead_endpoint(lead_id: int, db: Session = Depends(get_db)) -> None:
    crm_service.delete_lead(db, lead_id)


# Communications


@router.get("/communications", response_model=list[CommunicationRead])
def list_communications_endpoint(
    search: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db),
) -> list[CommunicationRead]:
    return crm_service.list_communications(db, search=search)


@router.post("/communications", response_model=CommunicationRead, status_code=status.HTTP_201_CREATED)
def create_communication_endpoint(
    payload: CommunicationCreate,
    db: Session = Depends(get_db),
) -> CommunicationRead:
    return crm_service.create_communication(db, payload)


@router.delete("/communications/{communication_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_communication_endpoint(communication_id: int, db: Session = Depends(get_db)) -> None:
    crm_service.delete_communication(db, communication_id)
