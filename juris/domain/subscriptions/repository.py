"""Subscription repository - Database operations for firm subscriptions"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Case, Client, Document, Profile
from ...models_payment import SubscriptionPayment

MONITORED_STATUSES = ("active", "expired")


class SubscriptionRepository:
    """Repository for subscription database operations"""

    @staticmethod
    def get_profile(db: Session, firm_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == firm_id).first()

    @staticmethod
    def get_usage_counts(db: Session, firm_id: str) -> dict:
        """Count the quota-limited resources of a firm"""
        return {
            "cases": db.query(Case).filter(Case.firm_id == firm_id).count(),
            "clients": db.query(Client).filter(Client.firm_id == firm_id).count(),
            "documents": db.query(Document).filter(Document.firm_id == firm_id).count(),
        }

    @staticmethod
    def get_monitored_profiles(db: Session) -> list[Profile]:
        """Profiles with an active or expired subscription and a known expiry"""
        return (
            db.query(Profile)
            .filter(
                Profile.subscription_status.in_(MONITORED_STATUSES),
                Profile.subscription_expires_at.isnot(None),
            )
            .all()
        )

    @staticmethod
    def update_subscription(
        db: Session,
        profile: Profile,
        plan: Optional[str] = None,
        status: Optional[str] = None,
        started_at: Optional[datetime] = None,
        expires_at: Optional[datetime] = None,
    ) -> Profile:
        if plan is not None:
            profile.subscription_plan = plan
        if status is not None:
            profile.subscription_status = status
        if started_at is not None:
            profile.subscription_started_at = started_at
        if expires_at is not None:
            profile.subscription_expires_at = expires_at

        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def get_paid_payment_in_period(
        db: Session, firm_id: str, period_start: datetime, period_end: datetime
    ) -> Optional[SubscriptionPayment]:
        """A paid subscription payment whose period falls inside [period_start, period_end)"""
        return (
            db.query(SubscriptionPayment)
            .filter(
                SubscriptionPayment.firm_id == firm_id,
                SubscriptionPayment.status == "paid",
                SubscriptionPayment.period_start >= period_start,
                SubscriptionPayment.period_end < period_end,
            )
            .first()
        )

    @staticmethod
    def get_last_paid_payment(db: Session, firm_id: str) -> Optional[SubscriptionPayment]:
        return (
            db.query(SubscriptionPayment)
            .filter(SubscriptionPayment.firm_id == firm_id, SubscriptionPayment.status == "paid")
            .order_by(SubscriptionPayment.paid_at.desc())
            .first()
        )

    @staticmethod
    def get_payment_history(db: Session, firm_id: str, limit: int = 12) -> list[SubscriptionPayment]:
        return (
            db.query(SubscriptionPayment)
            .filter(SubscriptionPayment.firm_id == firm_id)
            .order_by(SubscriptionPayment.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def create_subscription_payment(db: Session, firm_id: str, **payment_data) -> SubscriptionPayment:
        payment = SubscriptionPayment(firm_id=firm_id, **payment_data)
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment
