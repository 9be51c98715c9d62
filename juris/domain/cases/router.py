"""Case router - FastAPI endpoints for legal cases"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_action, require_active_access
from ...database import get_db
from ...models import Profile
from .schemas import CaseCreate, CaseNotifyRequest, CaseResponse, CaseUpdate
from .service import CaseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cases", tags=["Cases"])


def get_case_service(db: Session = Depends(get_db)) -> CaseService:
    """Dependency injection for CaseService"""
    return CaseService(db)


@router.get("", response_model=list[CaseResponse])
async def get_cases(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    firm: Profile = Depends(require_active_access),
    service: CaseService = Depends(get_case_service),
):
    return service.get_cases(firm, status, priority, client_id, search)


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(
    case_id: str,
    firm: Profile = Depends(require_active_access),
    service: CaseService = Depends(get_case_service),
):
    return service.get_case(case_id, firm)


@router.post("", response_model=CaseResponse, status_code=201)
async def create_case(
    data: CaseCreate,
    firm: Profile = Depends(require_action("create_case")),
    service: CaseService = Depends(get_case_service),
):
    return service.create_case(data, firm)


@router.put("/{case_id}", response_model=CaseResponse)
async def update_case(
    case_id: str,
    data: CaseUpdate,
    firm: Profile = Depends(require_active_access),
    service: CaseService = Depends(get_case_service),
):
    return service.update_case(case_id, data, firm)


@router.delete("/{case_id}")
async def delete_case(
    case_id: str,
    firm: Profile = Depends(require_active_access),
    service: CaseService = Depends(get_case_service),
):
    return service.delete_case(case_id, firm)


@router.post("/{case_id}/notify")
async def notify_client(
    case_id: str,
    data: CaseNotifyRequest,
    firm: Profile = Depends(require_active_access),
    service: CaseService = Depends(get_case_service),
):
    """Notify the client of a case update by email / WhatsApp"""
    return await service.notify_client(case_id, data, firm)
