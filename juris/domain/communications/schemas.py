"""Communication domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

COMMUNICATION_TYPES = ("email", "whatsapp", "phone", "sms", "letter", "meeting")
COMMUNICATION_STATUSES = ("draft", "pending", "sent", "delivered", "read", "failed")
SENDABLE_TYPES = ("email", "sms", "whatsapp")


class CommunicationCreate(BaseModel):
    """Manually log an exchange (phone call, meeting, letter, inbound message)"""

    type: str
    direction: str = "outbound"
    subject: Optional[str] = None
    content: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    status: str = "sent"

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in COMMUNICATION_TYPES:
            raise ValueError(f"type must be one of: {', '.join(COMMUNICATION_TYPES)}")
        return v

    @field_validator("direction")
    @classmethod
    def validate_direction(cls, v):
        if v not in ("inbound", "outbound"):
            raise ValueError("direction must be inbound or outbound")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in COMMUNICATION_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(COMMUNICATION_STATUSES)}")
        return v


class CommunicationUpdate(BaseModel):
    subject: Optional[str] = None
    content: Optional[str] = None
    status: Optional[str] = None
    read_at: Optional[datetime] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in COMMUNICATION_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(COMMUNICATION_STATUSES)}")
        return v


class CommunicationSendRequest(BaseModel):
    """Send a message through the email, SMS or WhatsApp provider"""

    type: str
    to: Optional[str] = None
    subject: Optional[str] = None
    content: str
    case_id: Optional[str] = None
    client_id: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in SENDABLE_TYPES:
            raise ValueError(f"type must be one of: {', '.join(SENDABLE_TYPES)}")
        return v


class CommunicationResponse(BaseModel):
    id: str
    type: str
    direction: str
    subject: Optional[str] = None
    content: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    status: str
    external_id: Optional[str] = None
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CommunicationSendResponse(BaseModel):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
