"""Payment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import validate_phone

TRANSACTION_STATUSES = ("pending", "processing", "completed", "failed", "cancelled", "refunded")


class PaymentInitiateRequest(BaseModel):
    """Start a mobile money payment"""

    payment_method: str
    amount: float
    phone_number: str
    description: str
    payer_name: Optional[str] = None
    invoice_id: Optional[str] = None
    subscription_id: Optional[str] = None
    return_url: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v):
        return validate_phone(v)


class PaymentInitiateResponse(BaseModel):
    success: bool
    transaction_id: str
    external_reference: Optional[str] = None
    status: str
    message: str
    payment_url: Optional[str] = None


class PaymentCallback(BaseModel):
    """Provider notification. Accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    transaction_id: str = Field(alias="transactionId")
    status: str
    external_reference: Optional[str] = Field(default=None, alias="externalReference")
    failure_reason: Optional[str] = Field(default=None, alias="failureReason")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in TRANSACTION_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(TRANSACTION_STATUSES)}")
        return v


class PaymentStatusResponse(BaseModel):
    transaction_id: str
    status: str
    amount: float
    currency: str
    phone_number: Optional[str] = None
    reference: str
    processed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None


class PaymentTransactionResponse(BaseModel):
    id: str
    transaction_id: str
    payment_method: str
    amount: float
    currency: str
    status: str
    phone_number: Optional[str] = None
    description: Optional[str] = None
    external_reference: Optional[str] = None
    payment_url: Optional[str] = None
    subscription_id: Optional[str] = None
    invoice_id: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentMethodInfo(BaseModel):
    method: str
    name: str
    description: str
    countries: list[str]
    currency: str
