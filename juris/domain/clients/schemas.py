"""Client domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone

CLIENT_TYPES = ("individual", "company")
CLIENT_STATUSES = ("active", "inactive", "archived")


def _check_choice(value: Optional[str], choices: tuple, field: str) -> Optional[str]:
    if value is not None and value not in choices:
        raise ValueError(f"{field} must be one of: {', '.join(choices)}")
    return value


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    id_number: Optional[str] = None
    company_name: Optional[str] = None
    client_type: str = "individual"
    status: str = "active"
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("client_type")
    @classmethod
    def validate_client_type(cls, v):
        return _check_choice(v, CLIENT_TYPES, "client_type")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _check_choice(v, CLIENT_STATUSES, "status")


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    id_number: Optional[str] = None
    company_name: Optional[str] = None
    client_type: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v)

    @field_validator("client_type")
    @classmethod
    def validate_client_type(cls, v):
        return _check_choice(v, CLIENT_TYPES, "client_type")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _check_choice(v, CLIENT_STATUSES, "status")


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: str
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[date] = None
    id_number: Optional[str] = None
    company_name: Optional[str] = None
    client_type: str
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
