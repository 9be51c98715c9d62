"""Time entry schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_non_negative


class TimerStartRequest(BaseModel):
    case_id: str
    description: Optional[str] = None
    hourly_rate: Optional[float] = None
    is_billable: bool = True

    @field_validator("hourly_rate")
    @classmethod
    def validate_rate(cls, v):
        return validate_non_negative(v, "hourly_rate")


class TimerStopRequest(BaseModel):
    description: Optional[str] = None


class TimeEntryCreate(BaseModel):
    """Manual entry: either an end time or a duration is required"""

    case_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    description: Optional[str] = None
    hourly_rate: Optional[float] = None
    is_billable: bool = True

    @field_validator("hourly_rate")
    @classmethod
    def validate_rate(cls, v):
        return validate_non_negative(v, "hourly_rate")

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v):
        return validate_non_negative(v, "duration_minutes")

    @model_validator(mode="after")
    def validate_period(self):
        if self.end_time is None and self.duration_minutes is None:
            raise ValueError("end_time or duration_minutes is required")
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimeEntryUpdate(BaseModel):
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    hourly_rate: Optional[float] = None
    is_billable: Optional[bool] = None

    @field_validator("hourly_rate")
    @classmethod
    def validate_rate(cls, v):
        return validate_non_negative(v, "hourly_rate")

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v):
        return validate_non_negative(v, "duration_minutes")


class TimeEntryResponse(BaseModel):
    id: str
    case_id: str
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    hourly_rate: Optional[float] = None
    billable_amount: Optional[float] = None
    is_billable: bool
    invoice_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TimeSummaryResponse(BaseModel):
    total_entries: int
    total_minutes: int
    total_hours: float
    billable_minutes: int
    billable_amount: float
    billed_amount: float
    unbilled_amount: float
