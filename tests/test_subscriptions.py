import asyncio
from datetime import datetime, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from juris.domain.subscriptions.payment_validation import (
    PaymentValidationService,
    month_bounds,
    subscription_reference,
)
from juris.domain.subscriptions.service import SubscriptionService, days_until
from juris.models import Case, Profile
from juris.models_payment import SubscriptionPayment


def _expire_in(db_session, firm, delta: timedelta):
    firm.subscription_expires_at = datetime.utcnow() + delta
    db_session.commit()


# ============================================================================
# SUBSCRIPTION STATUS
# ============================================================================


class TestSubscriptionStatus:
    def test_days_until_rounds_up(self):
        now = datetime(2025, 3, 1, 12, 0)
        assert days_until(now + timedelta(hours=1), now) == 1
        assert days_until(now + timedelta(days=2), now) == 2
        assert days_until(now - timedelta(hours=1), now) == 0

    def test_active_subscription(self, db_session, firm):
        status = SubscriptionService(db_session).check_subscription_status(firm.id)

        assert status["is_active"] is True
        assert status["plan"] == "premium"
        assert status["days_remaining"] == 20
        assert status["is_expired"] is False
        assert status["is_in_grace_period"] is False
        assert status["can_use_features"] is True
        assert status["payment_required"] is False

    def test_payment_required_three_days_before_expiry(self, db_session, firm):
        _expire_in(db_session, firm, timedelta(days=2, hours=12))

        status = SubscriptionService(db_session).check_subscription_status(firm.id)
        assert status["days_remaining"] == 3
        assert status["payment_required"] is True
        assert status["can_use_features"] is True

    def test_grace_period(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=1, hours=1))

        status = SubscriptionService(db_session).check_subscription_status(firm.id)
        assert status["is_expired"] is True
        assert status["days_remaining"] == 0
        assert status["is_in_grace_period"] is True
        assert status["grace_days_remaining"] == 2
        assert status["can_use_features"] is True

    def test_past_grace_period(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=5))

        status = SubscriptionService(db_session).check_subscription_status(firm.id)
        assert status["is_in_grace_period"] is False
        assert status["grace_days_remaining"] == 0
        assert status["can_use_features"] is False

    def test_last_grace_day_agrees_everywhere(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=3, hours=12))

        status = SubscriptionService(db_session).check_subscription_status(firm.id)
        assert status["is_in_grace_period"] is True
        assert status["grace_days_remaining"] == 0
        assert status["can_use_features"] is True

        access = SubscriptionService(db_session).enforce_subscription_access(firm.id, "create_case")
        assert access["allowed"] is True

        payment = PaymentValidationService(db_session).check_payment_status(firm.id)
        assert payment["days_overdue"] == 3
        assert payment["access_blocked"] is False

        result = asyncio.run(SubscriptionService(db_session).check_and_notify_expiration())
        assert result["blocked"] == 0

    def test_unknown_firm_gets_restrictive_status(self, db_session):
        status = SubscriptionService(db_session).check_subscription_status("missing")
        assert status["can_use_features"] is False
        assert status["payment_required"] is True
        assert status["plan"] is None

    def test_inactive_firm_cannot_use_features(self, db_session, firm):
        firm.subscription_status = "inactive"
        db_session.commit()

        status = SubscriptionService(db_session).check_subscription_status(firm.id)
        assert status["can_use_features"] is False


# ============================================================================
# ENFORCEMENT
# ============================================================================


class TestEnforcement:
    def test_quota_reached(self, db_session, basic_firm):
        for i in range(10):
            db_session.add(
                Case(firm_id=basic_firm.id, case_number=f"CASE-2025-{i + 1:04d}", title=f"Dossier {i}")
            )
        db_session.commit()

        decision = SubscriptionService(db_session).enforce_subscription_access(
            basic_firm.id, "create_case"
        )
        assert decision["allowed"] is False
        assert decision["upgrade_required"] is True
        assert decision["payment_required"] is False
        assert "10/10" in decision["reason"]

    def test_quota_available(self, db_session, basic_firm):
        decision = SubscriptionService(db_session).enforce_subscription_access(
            basic_firm.id, "add_client"
        )
        assert decision == {
            "allowed": True,
            "reason": None,
            "upgrade_required": False,
            "payment_required": False,
        }

    def test_whatsapp_needs_premium(self, db_session, basic_firm):
        decision = SubscriptionService(db_session).enforce_subscription_access(
            basic_firm.id, "whatsapp_notifications"
        )
        assert decision["allowed"] is False
        assert decision["upgrade_required"] is True

    def test_enterprise_features(self, db_session, firm):
        service = SubscriptionService(db_session)
        assert service.should_block_action(firm.id, "enterprise_features") is True
        assert service.should_block_action(firm.id, "advanced_features") is False

    def test_expired_subscription_requires_payment(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=10))

        decision = SubscriptionService(db_session).enforce_subscription_access(firm.id, "create_case")
        assert decision["allowed"] is False
        assert decision["payment_required"] is True

    def test_usage_limits(self, db_session, basic_firm, law_client):
        usage = SubscriptionService(db_session).check_usage_limits(basic_firm.id)
        assert usage["clients"] == {"used": 1, "limit": 25, "can_add": True, "percentage": 4.0}
        assert usage["cases"]["used"] == 0


# ============================================================================
# EXPIRATION SCAN
# ============================================================================


class TestExpirationScan:
    def test_blocks_subscriptions_past_grace(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=5))

        result = asyncio.run(SubscriptionService(db_session).check_and_notify_expiration())

        assert result["blocked"] == 1
        db_session.refresh(firm)
        assert firm.subscription_status == "blocked"

    def test_notifies_seven_days_before_expiry(self, db_session, firm):
        _expire_in(db_session, firm, timedelta(days=6, hours=12))

        result = asyncio.run(SubscriptionService(db_session).check_and_notify_expiration())
        assert result["notified"] == 1
        assert result["blocked"] == 0

    def test_renew_subscription(self, db_session, firm):
        result = asyncio.run(SubscriptionService(db_session).renew_subscription(firm.id, "enterprise"))

        assert result["success"] is True
        db_session.refresh(firm)
        assert firm.subscription_plan == "enterprise"
        assert firm.subscription_status == "active"


# ============================================================================
# PAYMENT VALIDATION
# ============================================================================


class TestPaymentValidation:
    def test_month_bounds(self):
        start, end = month_bounds(datetime(2025, 12, 17, 8, 30))
        assert start == datetime(2025, 12, 1)
        assert end == datetime(2026, 1, 1)

    def test_subscription_reference(self):
        assert subscription_reference("abcdef123456", datetime(2025, 5, 1)) == "SUB-2025-abcdef12"

    def test_payment_not_due(self, db_session, firm):
        status = PaymentValidationService(db_session).check_payment_status(firm.id)
        assert status["payment_due"] is False
        assert status["access_blocked"] is False
        assert status["monthly_amount"] == 35000

    def test_overdue_within_grace(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=2, hours=1))

        status = PaymentValidationService(db_session).check_payment_status(firm.id)
        assert status["payment_due"] is True
        assert status["days_overdue"] == 2
        assert status["grace_period_remaining"] == 1
        assert status["access_blocked"] is False

    def test_overdue_past_grace_blocks_access(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=5))

        result = PaymentValidationService(db_session).block_access_if_payment_overdue(firm.id)
        assert result["blocked"] is True
        assert "5 jour(s)" in result["reason"]

    def test_unknown_firm_is_blocked(self, db_session):
        status = PaymentValidationService(db_session).check_payment_status("missing")
        assert status["access_blocked"] is True
        assert status["days_overdue"] == 999

    def test_urgency_levels(self, db_session):
        service = PaymentValidationService(db_session)
        assert service.get_urgency_level(0) == "normal"
        assert service.get_urgency_level(1) == "urgent"
        assert service.get_urgency_level(3) == "critical"

    def test_successful_payment_extends_to_end_of_next_month(self, db_session, firm):
        profile = asyncio.run(
            PaymentValidationService(db_session).process_successful_payment(
                firm.id, "enterprise", "TXN-1", 75000
            )
        )

        next_month_start = month_bounds(datetime.utcnow())[1]
        expected = next_month_start + relativedelta(months=1) - timedelta(seconds=1)
        assert profile.subscription_plan == "enterprise"
        assert profile.subscription_status == "active"
        assert profile.subscription_expires_at == expected

        payments = db_session.query(SubscriptionPayment).filter_by(firm_id=firm.id).all()
        assert len(payments) == 1
        assert payments[0].status == "paid"
        assert payments[0].amount == 75000

        status = PaymentValidationService(db_session).check_payment_status(firm.id)
        assert status["is_current_month_paid"] is True

    def test_successful_payment_for_unknown_firm(self, db_session):
        service = PaymentValidationService(db_session)
        with pytest.raises(ValueError, match="missing"):
            asyncio.run(service.process_successful_payment("missing", "basic", None, 15000))

    def test_no_reminders_for_paid_up_firms(self, db_session, firm):
        result = asyncio.run(PaymentValidationService(db_session).send_payment_reminders())
        assert result == {"checked": 1, "reminded": 0, "blocked": 0}

    def test_reminders_block_accounts_past_grace(self, db_session, firm):
        _expire_in(db_session, firm, -timedelta(days=6))

        result = asyncio.run(PaymentValidationService(db_session).send_payment_reminders())

        assert result["reminded"] == 1
        assert result["blocked"] == 1
        db_session.refresh(firm)
        assert db_session.query(Profile).filter_by(subscription_status="blocked").count() == 1
