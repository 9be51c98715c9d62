"""Case domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_non_negative

CASE_STATUSES = ("open", "in_progress", "closed", "pending", "won", "lost")
CASE_PRIORITIES = ("low", "medium", "high", "urgent")
CLOSED_STATUSES = ("closed", "won", "lost")


class CaseBase(BaseModel):
    @field_validator("status", check_fields=False)
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in CASE_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(CASE_STATUSES)}")
        return v

    @field_validator("priority", check_fields=False)
    @classmethod
    def validate_priority(cls, v):
        if v is not None and v not in CASE_PRIORITIES:
            raise ValueError(f"priority must be one of: {', '.join(CASE_PRIORITIES)}")
        return v

    @field_validator("hourly_rate", "estimated_hours", check_fields=False)
    @classmethod
    def validate_amounts(cls, v, info):
        return validate_non_negative(v, info.field_name)


class CaseCreate(CaseBase):
    """Schema for opening a new case"""

    title: str
    client_id: Optional[str] = None
    description: Optional[str] = None
    case_type: Optional[str] = None
    status: str = "open"
    priority: str = "medium"
    court_name: Optional[str] = None
    judge_name: Optional[str] = None
    opposing_party: Optional[str] = None
    opposing_counsel: Optional[str] = None
    start_date: Optional[date] = None
    expected_end_date: Optional[date] = None
    hourly_rate: Optional[float] = None
    estimated_hours: Optional[float] = None


class CaseUpdate(CaseBase):
    title: Optional[str] = None
    client_id: Optional[str] = None
    description: Optional[str] = None
    case_type: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    court_name: Optional[str] = None
    judge_name: Optional[str] = None
    opposing_party: Optional[str] = None
    opposing_counsel: Optional[str] = None
    start_date: Optional[date] = None
    expected_end_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    hourly_rate: Optional[float] = None
    estimated_hours: Optional[float] = None


class CaseResponse(BaseModel):
    id: str
    case_number: str
    title: str
    client_id: Optional[str] = None
    description: Optional[str] = None
    case_type: Optional[str] = None
    status: str
    priority: str
    court_name: Optional[str] = None
    judge_name: Optional[str] = None
    opposing_party: Optional[str] = None
    opposing_counsel: Optional[str] = None
    start_date: Optional[date] = None
    expected_end_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    hourly_rate: Optional[float] = None
    estimated_hours: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CaseNotifyRequest(BaseModel):
    """Send a case_update notification to the case client"""

    update: str
    channels: list[str] = ["email", "whatsapp"]
