"""Calendar service - Events, deadlines and appointment reminders"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CalendarEvent, Case, Client, Profile
from ...services.notification_service import send_appointment_reminder
from ...shared.formatting import format_date_fr, format_time_fr
from ..subscriptions.payment_validation import PaymentValidationService
from .repository import CalendarRepository
from .schemas import EventCreate, EventUpdate

logger = logging.getLogger(__name__)


def reminder_due(event: CalendarEvent, now: datetime) -> bool:
    """True once start_time - reminder_minutes is reached and the event has not started"""
    if event.reminder_sent_at is not None or event.status == "cancelled":
        return False
    remind_at = event.start_time - timedelta(minutes=event.reminder_minutes or 0)
    return remind_at <= now < event.start_time


class CalendarService:
    """Service layer for calendar business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CalendarRepository()

    def get_events(
        self,
        firm: Profile,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        event_type: Optional[str] = None,
        case_id: Optional[str] = None,
    ) -> list[CalendarEvent]:
        if start and end and end < start:
            raise HTTPException(status_code=400, detail="end must be after start")
        return self.repo.get_events(self.db, firm.id, start, end, event_type, case_id)

    def get_upcoming(self, firm: Profile, limit: int = 10) -> list[CalendarEvent]:
        return self.repo.get_upcoming(self.db, firm.id, datetime.utcnow(), limit)

    def get_event(self, event_id: str, firm: Profile) -> CalendarEvent:
        event = self.repo.get_event_by_id(self.db, event_id, firm.id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event

    def _check_links(self, firm: Profile, case_id: Optional[str], client_id: Optional[str]) -> None:
        if case_id and not (
            self.db.query(Case).filter(Case.id == case_id, Case.firm_id == firm.id).first()
        ):
            raise HTTPException(status_code=400, detail="Case not found for this firm")
        if client_id and not (
            self.db.query(Client).filter(Client.id == client_id, Client.firm_id == firm.id).first()
        ):
            raise HTTPException(status_code=400, detail="Client not found for this firm")

    def create_event(self, data: EventCreate, firm: Profile) -> CalendarEvent:
        self._check_links(firm, data.case_id, data.client_id)
        event = self.repo.create_event(self.db, firm.id, **data.model_dump())
        logger.info(f"📅 Event {event.id} ({event.event_type}) created for firm {firm.id}")
        return event

    def update_event(self, event_id: str, data: EventUpdate, firm: Profile) -> CalendarEvent:
        event = self.get_event(event_id, firm)
        updates = data.model_dump(exclude_unset=True)
        self._check_links(firm, updates.get("case_id"), updates.get("client_id"))

        end_time = updates.get("end_time", event.end_time)
        start_time = updates.get("start_time", event.start_time)
        if end_time and start_time and end_time < start_time:
            raise HTTPException(status_code=400, detail="end_time must be after start_time")

        # A rescheduled event gets a fresh reminder
        if "start_time" in updates and updates["start_time"] != event.start_time:
            updates["reminder_sent_at"] = None

        return self.repo.update_event(self.db, event, **updates)

    def delete_event(self, event_id: str, firm: Profile) -> dict:
        event = self.get_event(event_id, firm)
        self.repo.delete_event(self.db, event)
        return {"message": "Event deleted"}


async def send_due_reminders(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Send appointment reminders for every event whose reminder time has been reached.
    Each event is reminded at most once (reminder_sent_at is stamped after the send).
    Firms whose access is blocked for non-payment are skipped.
    """
    now = now or datetime.utcnow()
    repo = CalendarRepository()
    payments = PaymentValidationService(db)
    stats = {"checked": 0, "sent": 0, "skipped": 0}
    blocked_cache: dict[str, bool] = {}

    for event in repo.get_reminder_candidates(db, now):
        stats["checked"] += 1
        if not reminder_due(event, now):
            continue

        if event.firm_id not in blocked_cache:
            blocked_cache[event.firm_id] = payments.block_access_if_payment_overdue(event.firm_id)[
                "blocked"
            ]
        if blocked_cache[event.firm_id]:
            stats["skipped"] += 1
            continue

        client = event.client
        firm = db.query(Profile).filter(Profile.id == event.firm_id).first()
        try:
            result = await send_appointment_reminder(
                db,
                event.firm_id,
                client_email=client.email,
                client_phone=client.phone,
                client_name=client.full_name,
                appointment_date=format_date_fr(event.start_time),
                appointment_time=format_time_fr(event.start_time),
                firm_name=firm.firm_name if firm else "",
                case_id=event.case_id,
            )
        except Exception as e:
            logger.error(f"❌ Reminder for event {event.id} failed: {e}")
            continue

        event.reminder_sent_at = now
        db.commit()
        if result.get("success"):
            stats["sent"] += 1
        logger.info(f"⏰ Reminder processed for event {event.id}: success={result.get('success')}")

    return stats
