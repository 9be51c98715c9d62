"""Invoice domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_non_negative

INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")
DEFAULT_TAX_RATE = 20.0


def _validate_tax_rate(v: Optional[float]) -> Optional[float]:
    if v is not None and not 0 <= v <= 100:
        raise ValueError("tax_rate must be between 0 and 100")
    return v


class InvoiceItemCreate(BaseModel):
    description: str
    quantity: float = 1
    unit_price: float = 0

    @field_validator("quantity", "unit_price")
    @classmethod
    def validate_amounts(cls, v, info):
        return validate_non_negative(v, info.field_name)


class InvoiceItemResponse(BaseModel):
    id: str
    description: str
    quantity: float
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice. Totals are computed from the items."""

    client_id: str
    case_id: Optional[str] = None
    description: Optional[str] = None
    tax_rate: float = DEFAULT_TAX_RATE
    currency: str = "XOF"
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    items: list[InvoiceItemCreate] = []

    @field_validator("tax_rate")
    @classmethod
    def validate_tax_rate(cls, v):
        return _validate_tax_rate(v)


class InvoiceUpdate(BaseModel):
    """Items, when given, replace the current lines"""

    description: Optional[str] = None
    case_id: Optional[str] = None
    tax_rate: Optional[float] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[list[InvoiceItemCreate]] = None

    @field_validator("tax_rate")
    @classmethod
    def validate_tax_rate(cls, v):
        return _validate_tax_rate(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in INVOICE_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(INVOICE_STATUSES)}")
        return v


class InvoiceFromTimeEntriesRequest(BaseModel):
    case_id: str
    entry_ids: Optional[list[str]] = None
    tax_rate: float = DEFAULT_TAX_RATE
    due_date: Optional[date] = None
    description: Optional[str] = None

    @field_validator("tax_rate")
    @classmethod
    def validate_tax_rate(cls, v):
        return _validate_tax_rate(v)


class MarkPaidRequest(BaseModel):
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None


class InvoiceSendRequest(BaseModel):
    channels: list[str] = ["email"]


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    client_id: str
    case_id: Optional[str] = None
    description: Optional[str] = None
    subtotal: float
    tax_rate: float
    tax_amount: float
    total_amount: float
    currency: str
    status: str
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    items: list[InvoiceItemResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
