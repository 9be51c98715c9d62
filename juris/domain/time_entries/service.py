"""Time entry service - Timers, manual entries and billable amounts"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Profile, TimeEntry
from .repository import TimeEntryRepository
from .schemas import TimeEntryCreate, TimeEntryUpdate, TimerStartRequest, TimerStopRequest

logger = logging.getLogger(__name__)


def duration_in_minutes(start_time: datetime, end_time: datetime) -> int:
    return max(0, round((end_time - start_time).total_seconds() / 60))


def calculate_billable_amount(
    hourly_rate: Optional[float], duration_minutes: Optional[int], is_billable: bool = True
) -> float:
    """hourly_rate / 60 * minutes, 0 for non billable time"""
    if not is_billable or not hourly_rate or not duration_minutes:
        return 0.0
    return round(hourly_rate / 60 * duration_minutes, 2)


class TimeEntryService:
    """Service layer for time tracking"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimeEntryRepository()

    def get_entries(
        self,
        firm: Profile,
        case_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        billed: Optional[bool] = None,
    ) -> list[TimeEntry]:
        return self.repo.get_entries(self.db, firm.id, case_id, start, end, billed)

    def get_entry(self, entry_id: str, firm: Profile) -> TimeEntry:
        entry = self.repo.get_entry_by_id(self.db, entry_id, firm.id)
        if not entry:
            raise HTTPException(status_code=404, detail="Time entry not found")
        return entry

    def get_running_timer(self, firm: Profile) -> Optional[TimeEntry]:
        return self.repo.get_running_entry(self.db, firm.id)

    def _resolve_rate(self, case_id: str, firm: Profile, hourly_rate: Optional[float]) -> Optional[float]:
        """The entry rate wins over the case rate"""
        case = self.repo.get_case(self.db, case_id, firm.id)
        if not case:
            raise HTTPException(status_code=400, detail="Case not found for this firm")
        return hourly_rate if hourly_rate is not None else case.hourly_rate

    def start_timer(self, data: TimerStartRequest, firm: Profile) -> TimeEntry:
        if self.repo.get_running_entry(self.db, firm.id):
            raise HTTPException(status_code=400, detail="A timer is already running")

        rate = self._resolve_rate(data.case_id, firm, data.hourly_rate)
        entry = self.repo.create_entry(
            self.db,
            firm.id,
            case_id=data.case_id,
            description=data.description,
            start_time=datetime.utcnow(),
            hourly_rate=rate,
            is_billable=data.is_billable,
        )
        logger.info(f"⏱️ Timer started for case {data.case_id} (firm {firm.id})")
        return entry

    def stop_timer(self, entry_id: str, data: TimerStopRequest, firm: Profile) -> TimeEntry:
        entry = self.get_entry(entry_id, firm)
        if entry.end_time is not None:
            raise HTTPException(status_code=400, detail="Timer already stopped")

        end_time = datetime.utcnow()
        minutes = duration_in_minutes(entry.start_time, end_time)
        updates = {
            "end_time": end_time,
            "duration_minutes": minutes,
            "billable_amount": calculate_billable_amount(entry.hourly_rate, minutes, entry.is_billable),
        }
        if data.description:
            updates["description"] = data.description

        entry = self.repo.update_entry(self.db, entry, **updates)
        logger.info(f"⏱️ Timer {entry.id} stopped after {minutes} minutes")
        return entry

    def create_entry(self, data: TimeEntryCreate, firm: Profile) -> TimeEntry:
        rate = self._resolve_rate(data.case_id, firm, data.hourly_rate)
        if data.end_time is not None:
            end_time = data.end_time
            minutes = duration_in_minutes(data.start_time, end_time)
        else:
            # Duration-only entries end at start + duration
            minutes = data.duration_minutes
            end_time = data.start_time + timedelta(minutes=minutes)

        entry_data = data.model_dump()
        entry_data.update(
            end_time=end_time,
            hourly_rate=rate,
            duration_minutes=minutes,
            billable_amount=calculate_billable_amount(rate, minutes, data.is_billable),
        )
        return self.repo.create_entry(self.db, firm.id, **entry_data)

    def update_entry(self, entry_id: str, data: TimeEntryUpdate, firm: Profile) -> TimeEntry:
        entry = self.get_entry(entry_id, firm)
        if entry.invoice_id:
            raise HTTPException(status_code=400, detail="A billed time entry cannot be modified")

        updates = data.model_dump(exclude_unset=True)
        start_time = updates.get("start_time", entry.start_time)
        end_time = updates.get("end_time", entry.end_time)
        if end_time is not None and end_time < start_time:
            raise HTTPException(status_code=400, detail="end_time must be after start_time")

        if "duration_minutes" not in updates and end_time is not None and (
            "start_time" in updates or "end_time" in updates
        ):
            updates["duration_minutes"] = duration_in_minutes(start_time, end_time)

        updates["billable_amount"] = calculate_billable_amount(
            updates.get("hourly_rate", entry.hourly_rate),
            updates.get("duration_minutes", entry.duration_minutes),
            updates.get("is_billable", entry.is_billable),
        )
        return self.repo.update_entry(self.db, entry, **updates)

    def delete_entry(self, entry_id: str, firm: Profile) -> dict:
        entry = self.get_entry(entry_id, firm)
        if entry.invoice_id:
            raise HTTPException(status_code=400, detail="A billed time entry cannot be deleted")
        self.repo.delete_entry(self.db, entry)
        return {"message": "Time entry deleted"}

    def get_summary(
        self,
        firm: Profile,
        case_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict:
        """Totals over finished entries"""
        entries = [
            e for e in self.repo.get_entries(self.db, firm.id, case_id, start, end) if e.end_time
        ]
        total_minutes = sum(e.duration_minutes or 0 for e in entries)
        billable = [e for e in entries if e.is_billable]
        billed_amount = sum(e.billable_amount or 0 for e in billable if e.invoice_id)
        billable_amount = sum(e.billable_amount or 0 for e in billable)

        return {
            "total_entries": len(entries),
            "total_minutes": total_minutes,
            "total_hours": round(total_minutes / 60, 2),
            "billable_minutes": sum(e.duration_minutes or 0 for e in billable),
            "billable_amount": round(billable_amount, 2),
            "billed_amount": round(billed_amount, 2),
            "unbilled_amount": round(billable_amount - billed_amount, 2),
        }
