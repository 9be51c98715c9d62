"""Invoice router - FastAPI endpoints for client billing"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_active_access
from ...database import get_db
from ...models import Profile
from .schemas import (
    InvoiceCreate,
    InvoiceFromTimeEntriesRequest,
    InvoiceResponse,
    InvoiceSendRequest,
    InvoiceUpdate,
    MarkPaidRequest,
)
from .service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[InvoiceResponse])
async def get_invoices(
    status: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    case_id: Optional[str] = Query(None),
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_invoices(firm, status, client_id, case_id)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.get_invoice(invoice_id, firm)


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.create_invoice(data, firm)


@router.post("/from-time-entries", response_model=InvoiceResponse, status_code=201)
async def create_from_time_entries(
    data: InvoiceFromTimeEntriesRequest,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Invoice the unbilled time of a case"""
    return service.create_from_time_entries(data, firm)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    data: InvoiceUpdate,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_invoice(invoice_id, data, firm)


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(invoice_id, firm)


# ============================================================================
# PAYMENT FOLLOW-UP
# ============================================================================


@router.post("/{invoice_id}/send")
async def send_invoice(
    invoice_id: str,
    data: InvoiceSendRequest,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return await service.send_invoice(invoice_id, data, firm)


@router.post("/{invoice_id}/remind")
async def send_reminder(
    invoice_id: str,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    return await service.send_reminder(invoice_id, firm)


@router.post("/{invoice_id}/mark-paid", response_model=InvoiceResponse)
async def mark_invoice_as_paid(
    invoice_id: str,
    data: MarkPaidRequest,
    firm: Profile = Depends(require_active_access),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Manually mark an invoice as paid (cash, cheque, bank transfer)"""
    return service.mark_paid(invoice_id, data, firm)
