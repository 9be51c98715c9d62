"""Communication router - FastAPI endpoints for the communications log"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_active_access
from ...database import get_db
from ...models import Profile
from .schemas import (
    CommunicationCreate,
    CommunicationResponse,
    CommunicationSendRequest,
    CommunicationSendResponse,
    CommunicationUpdate,
)
from .service import CommunicationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/communications", tags=["Communications"])


def get_communication_service(db: Session = Depends(get_db)) -> CommunicationService:
    """Dependency injection for CommunicationService"""
    return CommunicationService(db)


@router.get("", response_model=list[CommunicationResponse])
async def get_communications(
    type: Optional[str] = Query(None),
    case_id: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    firm: Profile = Depends(require_active_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return service.get_communications(firm, type, case_id, client_id, limit)


@router.get("/{communication_id}", response_model=CommunicationResponse)
async def get_communication(
    communication_id: str,
    firm: Profile = Depends(require_active_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return service.get_communication(communication_id, firm)


@router.post("", response_model=CommunicationResponse, status_code=201)
async def log_communication(
    data: CommunicationCreate,
    firm: Profile = Depends(require_active_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return service.log_communication(data, firm)


@router.put("/{communication_id}", response_model=CommunicationResponse)
async def update_communication(
    communication_id: str,
    data: CommunicationUpdate,
    firm: Profile = Depends(require_active_access),
    service: CommunicationService = Depends(get_communication_service),
):
    return service.update_communication(communication_id, data, firm)


@router.post("/send", response_model=CommunicationSendResponse)
async def send_communication(
    data: CommunicationSendRequest,
    firm: Profile = Depends(require_active_access),
    service: CommunicationService = Depends(get_communication_service),
):
    """Send an email, SMS or WhatsApp message"""
    return await service.send(data, firm)
