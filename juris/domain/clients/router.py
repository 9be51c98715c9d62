"""Client router - FastAPI endpoints for client operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_action, require_active_access, require_feature
from ...database import get_db
from ...models import Profile
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    status: Optional[str] = Query(None),
    client_type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    firm: Profile = Depends(require_active_access),
    service: ClientService = Depends(get_client_service),
):
    return service.get_clients(firm, status, client_type, search)


@router.get("/export")
async def export_clients_csv(
    status: Optional[str] = Query(None),
    client_type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    firm: Profile = Depends(require_feature("data_export")),
    service: ClientService = Depends(get_client_service),
):
    """Export clients as CSV with optional filters"""
    return service.export_clients_csv(firm, status, client_type, search)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    firm: Profile = Depends(require_active_access),
    service: ClientService = Depends(get_client_service),
):
    return service.get_client(client_id, firm)


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    firm: Profile = Depends(require_action("add_client")),
    service: ClientService = Depends(get_client_service),
):
    return service.create_client(data, firm)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    firm: Profile = Depends(require_active_access),
    service: ClientService = Depends(get_client_service),
):
    return service.update_client(client_id, data, firm)


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    firm: Profile = Depends(require_active_access),
    service: ClientService = Depends(get_client_service),
):
    return service.delete_client(client_id, firm)


@router.post("/{client_id}/welcome")
async def send_welcome(
    client_id: str,
    firm: Profile = Depends(require_active_access),
    service: ClientService = Depends(get_client_service),
):
    """Send the welcome email to a client"""
    return await service.send_welcome(client_id, firm)
