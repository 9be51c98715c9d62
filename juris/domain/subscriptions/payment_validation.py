"""Payment validation service - Monthly payment status, reminders and account blocking"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from ... import config
from ...email_service import send_subscription_payment_reminder
from ...models import Profile
from ...plan_limits import PLANS, get_plan_amount
from ...services.notification_service import send_notification
from ...services.whatsapp_service import send_payment_reminder as send_whatsapp_payment_reminder
from ...shared.formatting import format_amount, format_date_fr
from .repository import SubscriptionRepository

logger = logging.getLogger(__name__)

# Features that need an up-to-date payment even during the grace period
PAYMENT_GATED_FEATURES = ("whatsapp_notifications", "email_notifications", "advanced_features")


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """First instant of the current month and of the next one"""
    start = datetime(now.year, now.month, 1)
    return start, start + relativedelta(months=1)


def subscription_reference(firm_id: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"SUB-{now.year}-{firm_id[:8]}"


class PaymentValidationService:
    """Tracks whether a firm's monthly subscription payment is up to date"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SubscriptionRepository()
        self.grace_period_days = config.SUBSCRIPTION_GRACE_PERIOD_DAYS

    def _default_status(self) -> dict:
        return {
            "is_current_month_paid": False,
            "payment_due": True,
            "days_overdue": 999,
            "next_payment_date": None,
            "last_payment_date": None,
            "access_blocked": True,
            "grace_period_remaining": 0,
            "current_plan": None,
            "monthly_amount": 0,
        }

    def check_payment_status(self, firm_id: str) -> dict:
        profile = self.repo.get_profile(self.db, firm_id)
        if not profile:
            return self._default_status()

        now = datetime.utcnow()
        month_start, next_month_start = month_bounds(now)

        current_payment = self.repo.get_paid_payment_in_period(
            self.db, firm_id, month_start, next_month_start
        )
        last_payment = self.repo.get_last_paid_payment(self.db, firm_id)

        payment_due = False
        days_overdue = 0
        access_blocked = False
        grace_period_remaining = self.grace_period_days

        if profile.subscription_expires_at:
            diff_days = (profile.subscription_expires_at - now) / timedelta(days=1)
            days_overdue = -math.ceil(diff_days)
            payment_due = days_overdue >= 0
            if payment_due:
                grace_period_remaining = max(0, self.grace_period_days - days_overdue)
                access_blocked = days_overdue > self.grace_period_days

        return {
            "is_current_month_paid": current_payment is not None,
            "payment_due": payment_due,
            "days_overdue": max(0, days_overdue),
            "next_payment_date": next_month_start,
            "last_payment_date": last_payment.paid_at if last_payment else None,
            "access_blocked": access_blocked,
            "grace_period_remaining": grace_period_remaining,
            "current_plan": profile.subscription_plan,
            "monthly_amount": get_plan_amount(profile.subscription_plan),
        }

    def block_access_if_payment_overdue(self, firm_id: str) -> dict:
        status = self.check_payment_status(firm_id)

        if status["access_blocked"]:
            return {
                "blocked": True,
                "reason": (
                    f"Votre abonnement a expiré depuis {status['days_overdue']} jour(s). "
                    "Renouvelez votre paiement pour continuer."
                ),
                "status": status,
            }

        if status["payment_due"] and status["grace_period_remaining"] > 0:
            return {
                "blocked": False,
                "reason": (
                    "Paiement en retard. Période de grâce: "
                    f"{status['grace_period_remaining']} jour(s) restant(s)."
                ),
                "status": status,
            }

        return {"blocked": False, "reason": None, "status": status}

    def get_urgency_level(self, days_overdue: int) -> str:
        if days_overdue >= self.grace_period_days:
            return "critical"
        if days_overdue >= 1:
            return "urgent"
        return "normal"

    def get_payment_reminder_message(self, status: dict, firm_name: str) -> str:
        if status["access_blocked"]:
            return (
                f"URGENT: Votre abonnement de {firm_name} a expiré depuis {status['days_overdue']} jour(s). "
                "L'accès est maintenant bloqué. Renouvelez immédiatement."
            )
        if status["grace_period_remaining"] > 0:
            return (
                f"Votre abonnement de {firm_name} a expiré. Période de grâce: "
                f"{status['grace_period_remaining']} jour(s) restant(s). Renouvelez maintenant."
            )
        return (
            f"Rappel: Votre paiement mensuel de {format_amount(status['monthly_amount'])} FCFA "
            f"est dû pour {firm_name}."
        )

    async def send_payment_reminders(self) -> dict:
        """Remind every firm with a due payment and block accounts past the grace period"""
        reminded = 0
        blocked = 0
        profiles = self.repo.get_monitored_profiles(self.db)

        for profile in profiles:
            status = self.check_payment_status(profile.id)

            if status["payment_due"]:
                try:
                    await self._send_reminder_notifications(profile, status)
                    reminded += 1
                except Exception as e:
                    logger.error(f"❌ Error sending payment reminder to firm {profile.id}: {e}")

            if status["access_blocked"] and profile.subscription_status != "blocked":
                self.repo.update_subscription(self.db, profile, status="blocked")
                blocked += 1
                logger.warning(
                    f"🔒 Account blocked for firm {profile.id} ({profile.firm_name}) due to payment overdue"
                )

        logger.info(f"✅ Payment reminders: {reminded} sent, {blocked} accounts blocked")
        return {"checked": len(profiles), "reminded": reminded, "blocked": blocked}

    async def _send_reminder_notifications(self, profile: Profile, status: dict) -> None:
        reference = subscription_reference(profile.id)
        urgency = self.get_urgency_level(status["days_overdue"])
        message = self.get_payment_reminder_message(status, profile.firm_name)

        if profile.email:
            await send_subscription_payment_reminder(
                self.db,
                profile.id,
                to=profile.email,
                firm_name=profile.firm_name,
                reference=reference,
                amount=status["monthly_amount"],
                days_overdue=status["days_overdue"],
            )

        if profile.phone:
            await send_whatsapp_payment_reminder(
                self.db,
                profile.id,
                profile.phone,
                profile.firm_name,
                status["monthly_amount"],
                reference,
            )

        await send_notification(
            self.db,
            profile.id,
            "payment_overdue_critical" if urgency == "critical" else "payment_reminder",
            channels=["in_app"],
            recipients=[{"email": profile.email, "name": profile.firm_name}],
            data={
                "firmName": profile.firm_name,
                "amount": status["monthly_amount"],
                "daysOverdue": status["days_overdue"],
                "gracePeriodRemaining": status["grace_period_remaining"],
                "planName": status["current_plan"],
                "message": message,
            },
        )
        logger.info(
            f"📧 Payment reminder sent to firm {profile.id} ({profile.firm_name}) - "
            f"{status['days_overdue']} days overdue"
        )

    async def process_successful_payment(
        self, firm_id: str, plan: str, transaction_id: Optional[str], amount: float
    ) -> Profile:
        """Record the month as paid and activate the subscription until the end of next month"""
        profile = self.repo.get_profile(self.db, firm_id)
        if not profile:
            raise ValueError(f"Firm profile not found: {firm_id}")
        if plan not in PLANS:
            raise ValueError(f"Unknown plan: {plan}")

        now = datetime.utcnow()
        period_start, next_month_start = month_bounds(now)
        period_end = next_month_start - timedelta(seconds=1)

        self.repo.create_subscription_payment(
            self.db,
            firm_id,
            transaction_id=transaction_id,
            plan_name=plan,
            amount=amount,
            currency="FCFA",
            billing_period="monthly",
            period_start=period_start,
            period_end=period_end,
            status="paid",
            paid_at=now,
        )

        # End of next month
        expires_at = period_end + relativedelta(months=1, day=31)
        profile = self.repo.update_subscription(
            self.db, profile, plan=plan, status="active", started_at=now, expires_at=expires_at
        )
        logger.info(f"✅ Payment processed for firm {firm_id}: {plan} plan, {amount} FCFA")

        try:
            await send_notification(
                self.db,
                firm_id,
                "payment_successful",
                channels=["email", "in_app"],
                recipients=[{"email": profile.email, "name": profile.firm_name}],
                data={
                    "firmName": profile.firm_name,
                    "planName": plan,
                    "amount": format_amount(amount),
                    "nextPaymentDate": format_date_fr(expires_at),
                },
            )
        except Exception as e:
            logger.error(f"❌ Error sending payment confirmation to firm {firm_id}: {e}")

        return profile

    def requires_payment_for_feature(self, firm_id: str, feature: str) -> bool:
        status = self.check_payment_status(firm_id)
        if status["access_blocked"]:
            return True
        return status["payment_due"] and feature in PAYMENT_GATED_FEATURES

    def get_payment_status_for_ui(self, firm_id: str) -> dict:
        status = self.check_payment_status(firm_id)
        return {
            **status,
            "status_text": self._status_text(status),
            "status_color": self._status_color(status),
            "action_required": status["payment_due"] or status["access_blocked"],
        }

    def _status_text(self, status: dict) -> str:
        if status["access_blocked"]:
            return f"Accès bloqué - {status['days_overdue']} jour(s) de retard"
        if status["payment_due"]:
            return f"Paiement en retard - {status['grace_period_remaining']} jour(s) de grâce"
        if status["is_current_month_paid"]:
            return "Paiement à jour"
        return "Statut inconnu"

    def _status_color(self, status: dict) -> str:
        if status["access_blocked"]:
            return "red"
        if status["payment_due"]:
            return "yellow"
        if status["is_current_month_paid"]:
            return "green"
        return "red"
