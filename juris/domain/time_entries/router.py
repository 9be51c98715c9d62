"""Time entry router - Time tracking endpoints (Premium and Enterprise plans)"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_feature
from ...database import get_db
from ...models import Profile
from .schemas import (
    TimeEntryCreate,
    TimeEntryResponse,
    TimeEntryUpdate,
    TimerStartRequest,
    TimerStopRequest,
    TimeSummaryResponse,
)
from .service import TimeEntryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/time-entries", tags=["Time Tracking"])

time_tracking_access = require_feature("time_tracking")


def get_time_entry_service(db: Session = Depends(get_db)) -> TimeEntryService:
    """Dependency injection for TimeEntryService"""
    return TimeEntryService(db)


@router.get("", response_model=list[TimeEntryResponse])
async def get_entries(
    case_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    billed: Optional[bool] = Query(None),
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.get_entries(firm, case_id, start, end, billed)


@router.get("/summary", response_model=TimeSummaryResponse)
async def get_summary(
    case_id: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.get_summary(firm, case_id, start, end)


@router.get("/running", response_model=Optional[TimeEntryResponse])
async def get_running_timer(
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.get_running_timer(firm)


@router.post("/start", response_model=TimeEntryResponse, status_code=201)
async def start_timer(
    data: TimerStartRequest,
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.start_timer(data, firm)


@router.post("/{entry_id}/stop", response_model=TimeEntryResponse)
async def stop_timer(
    entry_id: str,
    data: TimerStopRequest,
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.stop_timer(entry_id, data, firm)


@router.post("", response_model=TimeEntryResponse, status_code=201)
async def create_entry(
    data: TimeEntryCreate,
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    """Manual time entry"""
    return service.create_entry(data, firm)


@router.put("/{entry_id}", response_model=TimeEntryResponse)
async def update_entry(
    entry_id: str,
    data: TimeEntryUpdate,
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.update_entry(entry_id, data, firm)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    firm: Profile = Depends(time_tracking_access),
    service: TimeEntryService = Depends(get_time_entry_service),
):
    return service.delete_entry(entry_id, firm)
