"""
Subscription gating dependencies.
Every authenticated router depends on require_active_access; write endpoints add
require_action / require_feature for plan quotas and features.
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .auth import get_current_firm
from .database import get_db
from .domain.subscriptions.payment_validation import PaymentValidationService
from .domain.subscriptions.service import SubscriptionService
from .models import Profile

logger = logging.getLogger(__name__)

# Pages that stay reachable while access is blocked so the firm can pay
ALWAYS_ALLOWED_PREFIXES = ("/subscription", "/payments", "/auth")

# SMS is billed like WhatsApp messaging; in_app is always available
CHANNEL_FEATURES = {
    "email": "email_notifications",
    "whatsapp": "whatsapp_notifications",
    "sms": "whatsapp_notifications",
}


async def require_active_access(
    request: Request,
    firm: Profile = Depends(get_current_firm),
    db: Session = Depends(get_db),
) -> Profile:
    """Reject every request with 402 while the firm's payment is overdue past the grace period"""
    if request.url.path.startswith(ALWAYS_ALLOWED_PREFIXES):
        return firm

    result = PaymentValidationService(db).block_access_if_payment_overdue(firm.id)
    if result["blocked"]:
        logger.warning(f"🔒 Blocked request to {request.url.path} for firm {firm.id}")
        raise HTTPException(
            status_code=402,
            detail=result["reason"],
            headers={"X-Payment-Required": "true"},
        )
    return firm


def require_action(action: str):
    """
    Dependency factory enforcing subscription state and plan quotas for an action.

    Example usage:
        @router.post("", dependencies=[Depends(require_action("add_client"))])
    """

    async def action_guard(
        firm: Profile = Depends(require_active_access),
        db: Session = Depends(get_db),
    ) -> Profile:
        decision = SubscriptionService(db).enforce_subscription_access(firm.id, action)
        if decision["allowed"]:
            return firm

        logger.info(f"⚠️ Action {action} refused for firm {firm.id}: {decision['reason']}")
        if decision["payment_required"]:
            raise HTTPException(
                status_code=402,
                detail=decision["reason"],
                headers={"X-Payment-Required": "true"},
            )
        raise HTTPException(
            status_code=403,
            detail=decision["reason"],
            headers={"X-Plan-Required": "true"},
        )

    return action_guard


def ensure_channels_allowed(db: Session, firm_id: str, channels: list[str]) -> None:
    """
    Check the plan features behind notification channels.
    Raises 402 while the payment is due and 403 when the plan lacks the channel.
    """
    subscriptions = SubscriptionService(db)
    payments = PaymentValidationService(db)

    for channel in channels:
        feature = CHANNEL_FEATURES.get(channel)
        if feature is None:
            continue
        if payments.requires_payment_for_feature(firm_id, feature):
            raise HTTPException(
                status_code=402,
                detail="Paiement requis pour envoyer des notifications. Renouvelez votre abonnement.",
                headers={"X-Payment-Required": "true"},
            )
        decision = subscriptions.enforce_subscription_access(firm_id, feature)
        if not decision["allowed"]:
            raise HTTPException(
                status_code=402 if decision["payment_required"] else 403,
                detail=decision["reason"],
                headers=(
                    {"X-Payment-Required": "true"}
                    if decision["payment_required"]
                    else {"X-Plan-Required": "true"}
                ),
            )


def require_feature(feature: str):
    """Dependency factory requiring a plan feature (e.g. time_tracking, data_export)"""

    async def feature_guard(
        firm: Profile = Depends(require_active_access),
        db: Session = Depends(get_db),
    ) -> Profile:
        if not SubscriptionService(db).has_feature(firm.id, feature):
            logger.info(f"⚠️ Feature {feature} not available for firm {firm.id}")
            raise HTTPException(
                status_code=403,
                detail="Cette fonctionnalité nécessite un plan Premium ou Enterprise.",
                headers={"X-Plan-Required": "true"},
            )
        return firm

    return feature_guard
