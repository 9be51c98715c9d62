"""Calendar router - FastAPI endpoints for calendar events"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_active_access
from ...database import get_db
from ...models import Profile
from .schemas import EventCreate, EventResponse, EventUpdate
from .service import CalendarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calendar", tags=["Calendar"])


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    """Dependency injection for CalendarService"""
    return CalendarService(db)


@router.get("/events", response_model=list[EventResponse])
async def get_events(
    start: Optional[datetime] = Query(None, description="Range start (inclusive)"),
    end: Optional[datetime] = Query(None, description="Range end (exclusive)"),
    event_type: Optional[str] = Query(None),
    case_id: Optional[str] = Query(None),
    firm: Profile = Depends(require_active_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.get_events(firm, start, end, event_type, case_id)


@router.get("/upcoming", response_model=list[EventResponse])
async def get_upcoming(
    limit: int = Query(10, ge=1, le=100),
    firm: Profile = Depends(require_active_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.get_upcoming(firm, limit)


@router.get("/events/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    firm: Profile = Depends(require_active_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.get_event(event_id, firm)


@router.post("/events", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    firm: Profile = Depends(require_active_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.create_event(data, firm)


@router.put("/events/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    data: EventUpdate,
    firm: Profile = Depends(require_active_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.update_event(event_id, data, firm)


@router.delete("/events/{event_id}")
async def delete_event(
    event_id: str,
    firm: Profile = Depends(require_active_access),
    service: CalendarService = Depends(get_calendar_service),
):
    return service.delete_event(event_id, firm)
