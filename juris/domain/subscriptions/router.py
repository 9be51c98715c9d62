"""Subscription router - FastAPI endpoints for plan status, usage and renewal"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...access_guard import require_active_access
from ...database import get_db
from ...models import Profile
from ...plan_limits import get_plan_amount
from ...rate_limiter import create_rate_limiter
from ..payments.schemas import PaymentInitiateRequest, PaymentInitiateResponse
from ..payments.service import PaymentService
from .payment_validation import PaymentValidationService
from .repository import SubscriptionRepository
from .schemas import (
    AccessDecisionResponse,
    PaymentStatusResponse,
    SubscribeRequest,
    SubscriptionPaymentResponse,
    SubscriptionStatusResponse,
    UsageLimitsResponse,
)
from .service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["Subscription"])

rate_limit_subscribe = create_rate_limiter(limit=10, window_seconds=60, key_prefix="subscribe")


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


def get_payment_validation_service(db: Session = Depends(get_db)) -> PaymentValidationService:
    """Dependency injection for PaymentValidationService"""
    return PaymentValidationService(db)


# ============================================================================
# STATUS & USAGE
# ============================================================================


@router.get("/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.check_subscription_status(firm.id)


@router.get("/usage", response_model=UsageLimitsResponse)
async def get_usage_limits(
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.check_usage_limits(firm.id)


@router.get("/plan")
async def get_current_plan(
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Limits and features of the firm's plan"""
    return service.get_current_plan_limits(firm.id)


@router.get("/pricing")
async def get_pricing(
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.get_plan_pricing()


@router.get("/overview")
async def get_overview(
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.get_subscription_overview(firm.id)


@router.get("/payment-status", response_model=PaymentStatusResponse)
async def get_payment_status(
    firm: Profile = Depends(require_active_access),
    service: PaymentValidationService = Depends(get_payment_validation_service),
):
    """Monthly payment state with display text and color"""
    return service.get_payment_status_for_ui(firm.id)


@router.get("/access")
async def get_access_state(
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
    payments: PaymentValidationService = Depends(get_payment_validation_service),
):
    """Whether the application should be locked for this firm"""
    expiry = service.block_access_if_expired(firm.id)
    payment = payments.block_access_if_payment_overdue(firm.id)
    return {
        "blocked": payment["blocked"],
        "reason": payment["reason"] or expiry["reason"],
        "subscription_blocked": expiry["blocked"],
    }


@router.get("/check/{action}", response_model=AccessDecisionResponse)
async def check_action(
    action: str,
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Dry-run an action against the plan (create_case, add_client, upload_document, ...)"""
    return service.enforce_subscription_access(firm.id, action)


@router.get("/feature/{feature}")
async def check_feature(
    feature: str,
    firm: Profile = Depends(require_active_access),
    service: SubscriptionService = Depends(get_subscription_service),
    payments: PaymentValidationService = Depends(get_payment_validation_service),
):
    return {
        "feature": feature,
        "available": service.has_feature(firm.id, feature),
        "payment_required": payments.requires_payment_for_feature(firm.id, feature),
    }


@router.get("/history", response_model=list[SubscriptionPaymentResponse])
async def get_payment_history(
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    return SubscriptionRepository.get_payment_history(db, firm.id)


# ============================================================================
# SUBSCRIBE
# ============================================================================


@router.post("/subscribe", response_model=PaymentInitiateResponse)
async def subscribe(
    data: SubscribeRequest,
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_subscribe),
):
    """
    Start the payment for a plan. The subscription is renewed when the provider
    reports the payment completed.
    """
    amount = get_plan_amount(data.plan)
    logger.info(f"💳 Firm {firm.id} subscribing to {data.plan} ({amount} FCFA) via {data.payment_method}")
    request = PaymentInitiateRequest(
        payment_method=data.payment_method,
        amount=amount,
        phone_number=data.phone_number,
        description=f"Abonnement JURIS {data.plan.capitalize()} - 1 mois",
        payer_name=firm.firm_name,
        subscription_id=data.plan,
    )
    return await PaymentService(db).initiate_payment(firm, request)
