"""Subscription domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, field_validator

from ...plan_limits import PLANS
from ...shared.validators import validate_phone

Limit = Union[int, str]


class SubscriptionStatusResponse(BaseModel):
    is_active: bool
    plan: Optional[str] = None
    expires_at: Optional[datetime] = None
    days_remaining: int
    is_expired: bool
    grace_period_days: int
    is_in_grace_period: bool
    grace_days_remaining: int
    can_use_features: bool
    payment_required: bool


class UsageEntry(BaseModel):
    used: int
    limit: Limit
    can_add: bool
    percentage: float


class UsageLimitsResponse(BaseModel):
    cases: UsageEntry
    clients: UsageEntry
    documents: UsageEntry


class PaymentStatusResponse(BaseModel):
    is_current_month_paid: bool
    payment_due: bool
    days_overdue: int
    next_payment_date: Optional[datetime] = None
    last_payment_date: Optional[datetime] = None
    access_blocked: bool
    grace_period_remaining: int
    current_plan: Optional[str] = None
    monthly_amount: float
    status_text: str
    status_color: str
    action_required: bool


class AccessDecisionResponse(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    upgrade_required: bool = False
    payment_required: bool = False


class SubscribeRequest(BaseModel):
    """Start a subscription payment for a plan"""

    plan: str
    payment_method: str
    phone_number: str

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, v):
        v = v.lower()
        if v not in PLANS:
            raise ValueError(f"Plan must be one of: {', '.join(PLANS)}")
        return v

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v):
        return validate_phone(v)


class SubscriptionPaymentResponse(BaseModel):
    id: str
    transaction_id: Optional[str] = None
    plan_name: str
    amount: float
    currency: str
    billing_period: str
    period_start: datetime
    period_end: datetime
    status: str
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True
