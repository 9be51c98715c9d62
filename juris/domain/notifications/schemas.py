"""Notification schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ...services.notification_service import NOTIFICATION_CHANNELS, NOTIFICATION_TEMPLATES


class NotificationRecipient(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None


class SendNotificationRequest(BaseModel):
    type: str
    channels: list[str]
    recipients: list[NotificationRecipient]
    data: dict[str, Any] = {}
    case_id: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in NOTIFICATION_TEMPLATES:
            raise ValueError(f"Unknown notification type: {v}")
        return v

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, v):
        invalid = [c for c in v if c not in NOTIFICATION_CHANNELS]
        if invalid:
            raise ValueError(f"Unknown channels: {', '.join(invalid)}")
        if not v:
            raise ValueError("At least one channel is required")
        return v


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: Optional[str] = None
    channel: str
    recipient: Optional[str] = None
    status: str
    case_id: Optional[str] = None
    read: bool
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnreadCountResponse(BaseModel):
    unread: int
