"""
Payment Models
Mobile money transactions and subscription payment history
"""

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.sql import func

from .database import Base
from .models import generate_uuid


class PaymentTransaction(Base):
    """One payment attempt through a mobile money gateway"""

    __tablename__ = "payment_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=True)
    subscription_id = Column(String(50), nullable=True)  # Plan being purchased
    transaction_id = Column(String(100), unique=True, nullable=False, index=True)
    external_reference = Column(String(255), nullable=True)  # Provider-side ID
    payment_method = Column(String(30), nullable=False)  # orange_money, moov_money, mtn_money, wave
    amount = Column(Float, nullable=False)
    currency = Column(String(10), default="XOF", nullable=False)
    status = Column(
        String(20), default="pending", nullable=False
    )  # pending, processing, completed, failed, cancelled, refunded
    phone_number = Column(String(50), nullable=True)
    payer_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    payment_url = Column(String(500), nullable=True)
    callback_url = Column(String(500), nullable=True)
    return_url = Column(String(500), nullable=True)
    failure_reason = Column(Text, nullable=True)
    extra_data = Column("metadata", JSON, nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class SubscriptionPayment(Base):
    """A paid (or pending) subscription billing period"""

    __tablename__ = "subscription_payments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    transaction_id = Column(String(100), nullable=True)
    plan_name = Column(String(50), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), default="FCFA", nullable=False)
    billing_period = Column(String(20), default="monthly", nullable=False)
    period_start = Column(DateTime, nullable=False)
    period_end = Column(DateTime, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, paid, failed
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
