"""Contact router - FastAPI endpoints for professional contacts"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_active_access
from ...database import get_db
from ...models import Profile
from .schemas import ContactCreate, ContactResponse, ContactUpdate
from .service import ContactService

router = APIRouter(prefix="/contacts", tags=["Contacts"])


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    """Dependency injection for ContactService"""
    return ContactService(db)


@router.get("", response_model=list[ContactResponse])
async def get_contacts(
    contact_type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    firm: Profile = Depends(require_active_access),
    service: ContactService = Depends(get_contact_service),
):
    return service.get_contacts(firm, contact_type, search)


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: str,
    firm: Profile = Depends(require_active_access),
    service: ContactService = Depends(get_contact_service),
):
    return service.get_contact(contact_id, firm)


@router.post("", response_model=ContactResponse, status_code=201)
async def create_contact(
    data: ContactCreate,
    firm: Profile = Depends(require_active_access),
    service: ContactService = Depends(get_contact_service),
):
    return service.create_contact(data, firm)


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: str,
    data: ContactUpdate,
    firm: Profile = Depends(require_active_access),
    service: ContactService = Depends(get_contact_service),
):
    return service.update_contact(contact_id, data, firm)


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: str,
    firm: Profile = Depends(require_active_access),
    service: ContactService = Depends(get_contact_service),
):
    return service.delete_contact(contact_id, firm)
