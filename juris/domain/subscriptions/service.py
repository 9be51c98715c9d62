"""Subscription service - Access state, usage quotas and plan enforcement"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ... import config
from ...models import Profile
from ...plan_limits import (
    PLANS,
    build_usage_entry,
    get_plan_features,
    get_plan_limits,
    get_plan_pricing,
    normalize_plan,
)
from ...services.notification_service import send_notification
from ...shared.formatting import format_date_fr
from .repository import SubscriptionRepository

logger = logging.getLogger(__name__)

# Days before expiry at which a reminder is sent
EXPIRATION_NOTICE_DAYS = (7, 3, 1, 0)

EXPIRATION_MESSAGES = {
    7: "Votre abonnement expire dans 7 jours. Renouvelez maintenant pour éviter toute interruption.",
    3: "Votre abonnement expire dans 3 jours. Renouvelez dès maintenant!",
    1: "URGENT: Votre abonnement expire demain. Renouvelez immédiatement!",
    0: "Votre abonnement expire aujourd'hui. Renouvelez maintenant pour maintenir l'accès.",
}

QUOTA_ACTIONS = {
    "create_case": ("cases", "Limite de {limit} dossiers atteinte ({used}/{limit}). Mettez à niveau votre plan pour en créer davantage."),
    "add_client": ("clients", "Limite de {limit} clients atteinte ({used}/{limit}). Mettez à niveau votre plan pour en ajouter davantage."),
    "upload_document": ("documents", "Limite de {limit} documents atteinte ({used}/{limit}). Mettez à niveau votre plan pour en ajouter davantage."),
}

FEATURE_ACTIONS = {
    "whatsapp_notifications": "Les notifications WhatsApp nécessitent un plan Premium ou Enterprise.",
    "email_notifications": "Les notifications email automatiques nécessitent un plan Premium ou Enterprise.",
}


def days_until(expires_at: datetime, now: datetime) -> int:
    """Whole days left before expiry, rounded up. Zero or negative once expired."""
    return math.ceil((expires_at - now) / timedelta(days=1))


class SubscriptionService:
    """Computes subscription state and enforces plan quotas for a firm"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SubscriptionRepository()
        self.grace_period_days = config.SUBSCRIPTION_GRACE_PERIOD_DAYS

    def _restrictive_status(self) -> dict:
        return {
            "is_active": False,
            "plan": None,
            "expires_at": None,
            "days_remaining": 0,
            "is_expired": True,
            "grace_period_days": self.grace_period_days,
            "is_in_grace_period": False,
            "grace_days_remaining": 0,
            "can_use_features": False,
            "payment_required": True,
        }

    def check_subscription_status(self, firm_id: str) -> dict:
        """
        Compute the subscription state of a firm from its stored timestamps.

        A missing profile yields the fully restrictive status.
        """
        profile = self.repo.get_profile(self.db, firm_id)
        if not profile:
            return self._restrictive_status()

        now = datetime.utcnow()
        expires_at = profile.subscription_expires_at
        is_active = profile.subscription_status == "active"

        days_remaining = 0
        is_expired = True
        is_in_grace_period = False
        grace_days_remaining = 0
        can_use_features = False
        payment_required = True

        if expires_at:
            days_remaining = days_until(expires_at, now)
            is_expired = days_remaining <= 0
            # Whole days, the same count the payment checks and the expiry scan block on
            is_in_grace_period = is_expired and abs(days_remaining) <= self.grace_period_days
            if is_in_grace_period:
                grace_days_remaining = max(0, self.grace_period_days + days_remaining)
            can_use_features = is_active and (days_remaining > 0 or is_in_grace_period)
            payment_required = days_remaining <= 3

        return {
            "is_active": is_active,
            "plan": profile.subscription_plan,
            "expires_at": expires_at,
            "days_remaining": max(days_remaining, 0),
            "is_expired": is_expired,
            "grace_period_days": self.grace_period_days,
            "is_in_grace_period": is_in_grace_period,
            "grace_days_remaining": grace_days_remaining,
            "can_use_features": can_use_features,
            "payment_required": payment_required,
        }

    def get_real_usage_data(self, firm_id: str) -> dict:
        return self.repo.get_usage_counts(self.db, firm_id)

    def check_usage_limits(self, firm_id: str) -> dict:
        """Usage against plan quotas. Database errors return restrictive limits."""
        try:
            profile = self.repo.get_profile(self.db, firm_id)
            usage = self.get_real_usage_data(firm_id)
        except SQLAlchemyError as e:
            logger.error(f"❌ Error checking usage limits for firm {firm_id}: {e}")
            self.db.rollback()
            restrictive = {"used": 0, "limit": 0, "can_add": False, "percentage": 100}
            return {key: dict(restrictive) for key in ("cases", "clients", "documents")}

        limits = get_plan_limits(profile.subscription_plan if profile else None)
        return {
            "cases": build_usage_entry(usage["cases"], limits["max_cases"]),
            "clients": build_usage_entry(usage["clients"], limits["max_clients"]),
            "documents": build_usage_entry(usage["documents"], limits["max_documents"]),
        }

    def has_feature(self, firm_id: str, feature: str) -> bool:
        profile = self.repo.get_profile(self.db, firm_id)
        if not profile or profile.subscription_status != "active":
            return False
        return feature in get_plan_features(profile.subscription_plan)

    def enforce_subscription_access(self, firm_id: str, action: str) -> dict:
        """
        Decide whether a firm may perform an action.

        Returns:
            Dict with allowed, reason, upgrade_required and payment_required
        """
        status = self.check_subscription_status(firm_id)

        if not status["can_use_features"]:
            if status["is_expired"] and status["is_in_grace_period"]:
                reason = (
                    "Votre abonnement a expiré. Il vous reste "
                    f"{status['grace_days_remaining']} jour(s) de période de grâce. Renouvelez maintenant."
                )
            elif status["is_expired"] and status["expires_at"] is not None:
                reason = (
                    "Votre abonnement a expiré. Renouvelez-le immédiatement pour continuer "
                    "à utiliser cette fonctionnalité."
                )
            else:
                reason = "Aucun abonnement actif. Souscrivez à un plan pour utiliser cette fonctionnalité."
            return _decision(False, reason, payment_required=True)

        if action in QUOTA_ACTIONS:
            resource, template = QUOTA_ACTIONS[action]
            usage = self.check_usage_limits(firm_id)[resource]
            if not usage["can_add"]:
                reason = template.format(limit=usage["limit"], used=usage["used"])
                return _decision(False, reason, upgrade_required=True)

        elif action in FEATURE_ACTIONS:
            if not self.has_feature(firm_id, action):
                return _decision(False, FEATURE_ACTIONS[action], upgrade_required=True)

        elif action == "advanced_features":
            if normalize_plan(status["plan"]) == "basic":
                return _decision(
                    False,
                    "Cette fonctionnalité avancée nécessite un plan Premium ou Enterprise.",
                    upgrade_required=True,
                )

        elif action == "enterprise_features":
            if status["plan"] != "enterprise":
                return _decision(
                    False, "Cette fonctionnalité nécessite le plan Enterprise.", upgrade_required=True
                )

        return _decision(True)

    def should_block_action(self, firm_id: str, action: str) -> bool:
        return not self.enforce_subscription_access(firm_id, action)["allowed"]

    def block_access_if_expired(self, firm_id: str) -> dict:
        status = self.check_subscription_status(firm_id)
        if status["can_use_features"]:
            return {"blocked": False, "reason": None}

        if status["is_in_grace_period"]:
            reason = (
                "Votre abonnement a expiré. Période de grâce: "
                f"{status['grace_days_remaining']} jour(s) restant(s)."
            )
        else:
            reason = "Votre abonnement a expiré. Renouvelez-le pour continuer à utiliser l'application."
        return {"blocked": True, "reason": reason}

    def get_current_plan_limits(self, firm_id: str) -> dict:
        profile = self.repo.get_profile(self.db, firm_id)
        plan = normalize_plan(profile.subscription_plan if profile else None)
        return {
            "plan": plan,
            "limits": get_plan_limits(plan),
            "features": get_plan_features(plan),
        }

    def get_plan_pricing(self) -> dict:
        return get_plan_pricing()

    def get_subscription_overview(self, firm_id: str) -> dict:
        """Status, usage and plan details in one payload for the subscription page"""
        return {
            "status": self.check_subscription_status(firm_id),
            "usage": self.check_usage_limits(firm_id),
            "plan": self.get_current_plan_limits(firm_id),
            "pricing": self.get_plan_pricing(),
        }

    async def check_and_notify_expiration(self) -> dict:
        """
        Scan monitored subscriptions: send expiry reminders and block subscriptions
        past their grace period.
        """
        now = datetime.utcnow()
        notified = 0
        blocked = 0
        profiles = self.repo.get_monitored_profiles(self.db)

        for profile in profiles:
            days = days_until(profile.subscription_expires_at, now)

            if days in EXPIRATION_NOTICE_DAYS and profile.subscription_status == "active":
                try:
                    await self._send_expiration_notification(profile, days)
                    notified += 1
                except Exception as e:
                    logger.error(f"❌ Error sending expiration notice to firm {profile.id}: {e}")

            if days < -self.grace_period_days and profile.subscription_status != "blocked":
                self.repo.update_subscription(self.db, profile, status="blocked")
                blocked += 1
                logger.warning(
                    f"🔒 Subscription blocked for firm {profile.id} ({profile.firm_name}) - grace period exceeded"
                )

        logger.info(
            f"✅ Expiration check done: {len(profiles)} checked, {notified} notified, {blocked} blocked"
        )
        return {"checked": len(profiles), "notified": notified, "blocked": blocked}

    async def _send_expiration_notification(self, profile: Profile, days: int) -> dict:
        return await send_notification(
            self.db,
            profile.id,
            "subscription_expiring",
            channels=["email", "in_app"],
            recipients=[{"email": profile.email, "name": profile.firm_name}],
            data={
                "firmName": profile.firm_name,
                "expirationDate": format_date_fr(profile.subscription_expires_at),
                "planName": profile.subscription_plan,
                "daysRemaining": days,
                "message": EXPIRATION_MESSAGES[days],
            },
        )

    async def renew_subscription(self, firm_id: str, plan: str) -> dict:
        """Activate a plan for one calendar month starting now"""
        if plan not in PLANS:
            raise HTTPException(status_code=400, detail=f"Invalid plan: {plan}")

        profile = self.repo.get_profile(self.db, firm_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Firm profile not found")

        now = datetime.utcnow()
        profile = self.repo.update_subscription(
            self.db,
            profile,
            plan=plan,
            status="active",
            started_at=now,
            expires_at=now + relativedelta(months=1),
        )
        logger.info(f"✅ Subscription renewed for firm {firm_id}: {plan} until {profile.subscription_expires_at}")

        try:
            await send_notification(
                self.db,
                firm_id,
                "subscription_renewed",
                channels=["email", "in_app"],
                recipients=[{"email": profile.email, "name": profile.firm_name}],
                data={
                    "firmName": profile.firm_name,
                    "planName": plan,
                    "expirationDate": format_date_fr(profile.subscription_expires_at),
                },
            )
        except Exception as e:
            logger.error(f"❌ Error sending renewal confirmation to firm {firm_id}: {e}")

        return {
            "success": True,
            "plan": plan,
            "expires_at": profile.subscription_expires_at,
        }


def _decision(
    allowed: bool,
    reason: Optional[str] = None,
    upgrade_required: bool = False,
    payment_required: bool = False,
) -> dict:
    return {
        "allowed": allowed,
        "reason": reason,
        "upgrade_required": upgrade_required,
        "payment_required": payment_required,
    }
