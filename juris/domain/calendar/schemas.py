"""Calendar domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

EVENT_TYPES = ("meeting", "hearing", "deadline", "consultation", "court_date", "appointment")
EVENT_STATUSES = ("scheduled", "confirmed", "cancelled", "completed")


class EventBase(BaseModel):
    @field_validator("event_type", check_fields=False)
    @classmethod
    def validate_event_type(cls, v):
        if v is not None and v not in EVENT_TYPES:
            raise ValueError(f"event_type must be one of: {', '.join(EVENT_TYPES)}")
        return v

    @field_validator("status", check_fields=False)
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in EVENT_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(EVENT_STATUSES)}")
        return v

    @field_validator("reminder_minutes", check_fields=False)
    @classmethod
    def validate_reminder(cls, v):
        if v is not None and v < 0:
            raise ValueError("reminder_minutes cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_times(self):
        start = getattr(self, "start_time", None)
        end = getattr(self, "end_time", None)
        if start and end and end < start:
            raise ValueError("end_time must be after start_time")
        return self


class EventCreate(EventBase):
    title: str
    start_time: datetime
    end_time: Optional[datetime] = None
    description: Optional[str] = None
    event_type: str = "meeting"
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    location: Optional[str] = None
    is_all_day: bool = False
    reminder_minutes: int = 30
    status: str = "scheduled"
    attendees: list[str] = []


class EventUpdate(EventBase):
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    location: Optional[str] = None
    is_all_day: Optional[bool] = None
    reminder_minutes: Optional[int] = None
    status: Optional[str] = None
    attendees: Optional[list[str]] = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    event_type: str
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    is_all_day: bool
    reminder_minutes: Optional[int] = None
    reminder_sent_at: Optional[datetime] = None
    status: str
    attendees: Optional[list[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
