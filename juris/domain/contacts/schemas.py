"""Professional contact schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone

CONTACT_TYPES = ("lawyer", "accountant", "medical_expert", "bailiff", "other")
CONTACT_STATUSES = ("active", "inactive")


class ContactBase(BaseModel):
    @field_validator("contact_type", check_fields=False)
    @classmethod
    def validate_contact_type(cls, v):
        if v is not None and v not in CONTACT_TYPES:
            raise ValueError(f"contact_type must be one of: {', '.join(CONTACT_TYPES)}")
        return v

    @field_validator("status", check_fields=False)
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in CONTACT_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(CONTACT_STATUSES)}")
        return v

    @field_validator("phone", check_fields=False)
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)

    @field_validator("email", check_fields=False)
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)


class ContactCreate(ContactBase):
    first_name: str
    last_name: str
    contact_type: str = "other"
    company_name: Optional[str] = None
    title: Optional[str] = None
    speciality: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    last_contact_date: Optional[date] = None
    status: str = "active"


class ContactUpdate(ContactBase):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_type: Optional[str] = None
    company_name: Optional[str] = None
    title: Optional[str] = None
    speciality: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    last_contact_date: Optional[date] = None
    status: Optional[str] = None


class ContactResponse(BaseModel):
    id: str
    contact_type: str
    first_name: str
    last_name: str
    company_name: Optional[str] = None
    title: Optional[str] = None
    speciality: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    last_contact_date: Optional[date] = None
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
