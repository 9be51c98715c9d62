"""Payment router - FastAPI endpoints for mobile money payments"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ... import config
from ...access_guard import require_active_access
from ...database import get_db
from ...models import Profile
from ...rate_limiter import create_rate_limiter
from ...webhook_security import verify_payment_callback
from .schemas import (
    PaymentCallback,
    PaymentInitiateRequest,
    PaymentInitiateResponse,
    PaymentMethodInfo,
    PaymentStatusResponse,
    PaymentTransactionResponse,
)
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])

rate_limit_payments = create_rate_limiter(limit=10, window_seconds=60, key_prefix="payments")


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


@router.get("/methods", response_model=list[PaymentMethodInfo])
async def get_payment_methods(
    firm: Profile = Depends(require_active_access),
    service: PaymentService = Depends(get_payment_service),
):
    """Mobile money providers available for payments"""
    return service.get_available_payment_methods()


@router.post("/initiate", response_model=PaymentInitiateResponse)
async def initiate_payment(
    data: PaymentInitiateRequest,
    firm: Profile = Depends(require_active_access),
    service: PaymentService = Depends(get_payment_service),
    _: None = Depends(rate_limit_payments),
):
    return await service.initiate_payment(firm, data)


@router.get("/status/{transaction_id}", response_model=PaymentStatusResponse)
async def get_payment_status(
    transaction_id: str,
    firm: Profile = Depends(require_active_access),
    service: PaymentService = Depends(get_payment_service),
):
    return service.check_payment_status(transaction_id, firm)


@router.get("/transactions", response_model=list[PaymentTransactionResponse])
async def list_transactions(
    status: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    firm: Profile = Depends(require_active_access),
    service: PaymentService = Depends(get_payment_service),
):
    return service.list_transactions(firm, status, limit)


# ============================================================================
# PROVIDER CALLBACKS (unauthenticated, signature verified)
# ============================================================================


@router.post("/callback/{method}")
async def payment_callback(
    method: str,
    request: Request,
    service: PaymentService = Depends(get_payment_service),
):
    """Status notification sent by a payment provider"""
    raw_body = await verify_payment_callback(request, config.PAYMENT_CALLBACK_SECRET)

    try:
        callback = PaymentCallback.model_validate(json.loads(raw_body or b"{}"))
    except (ValueError, ValidationError) as e:
        logger.error(f"❌ Invalid {method} callback payload: {e}")
        raise HTTPException(status_code=400, detail="Invalid callback payload") from e

    return await service.handle_callback(method, callback)
