"""Calendar repository - Database operations for calendar events"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import CalendarEvent


class CalendarRepository:
    """Repository for calendar event database operations"""

    @staticmethod
    def get_events(
        db: Session,
        firm_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        event_type: Optional[str] = None,
        case_id: Optional[str] = None,
    ) -> list[CalendarEvent]:
        query = db.query(CalendarEvent).filter(CalendarEvent.firm_id == firm_id)
        if start:
            query = query.filter(CalendarEvent.start_time >= start)
        if end:
            query = query.filter(CalendarEvent.start_time < end)
        if event_type:
            query = query.filter(CalendarEvent.event_type == event_type)
        if case_id:
            query = query.filter(CalendarEvent.case_id == case_id)
        return query.order_by(CalendarEvent.start_time.asc()).all()

    @staticmethod
    def get_upcoming(db: Session, firm_id: str, now: datetime, limit: int) -> list[CalendarEvent]:
        return (
            db.query(CalendarEvent)
            .filter(
                CalendarEvent.firm_id == firm_id,
                CalendarEvent.start_time >= now,
                CalendarEvent.status != "cancelled",
            )
            .order_by(CalendarEvent.start_time.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_event_by_id(db: Session, event_id: str, firm_id: str) -> Optional[CalendarEvent]:
        return (
            db.query(CalendarEvent)
            .filter(CalendarEvent.id == event_id, CalendarEvent.firm_id == firm_id)
            .first()
        )

    @staticmethod
    def get_reminder_candidates(db: Session, now: datetime) -> list[CalendarEvent]:
        """Future events with a client whose reminder has not been sent yet (all firms)"""
        return (
            db.query(CalendarEvent)
            .filter(
                CalendarEvent.start_time > now,
                CalendarEvent.reminder_sent_at.is_(None),
                CalendarEvent.status != "cancelled",
                CalendarEvent.client_id.isnot(None),
            )
            .all()
        )

    @staticmethod
    def create_event(db: Session, firm_id: str, **event_data) -> CalendarEvent:
        event = CalendarEvent(firm_id=firm_id, **event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def update_event(db: Session, event: CalendarEvent, **updates) -> CalendarEvent:
        for key, value in updates.items():
            if hasattr(event, key):
                setattr(event, key, value)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event: CalendarEvent) -> None:
        db.delete(event)
        db.commit()
