"""Time entry repository - Database operations for time tracking"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Case, TimeEntry


class TimeEntryRepository:
    """Repository for time entry database operations"""

    @staticmethod
    def get_entries(
        db: Session,
        firm_id: str,
        case_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        billed: Optional[bool] = None,
    ) -> list[TimeEntry]:
        query = db.query(TimeEntry).filter(TimeEntry.firm_id == firm_id)
        if case_id:
            query = query.filter(TimeEntry.case_id == case_id)
        if start:
            query = query.filter(TimeEntry.start_time >= start)
        if end:
            query = query.filter(TimeEntry.start_time < end)
        if billed is True:
            query = query.filter(TimeEntry.invoice_id.isnot(None))
        elif billed is False:
            query = query.filter(TimeEntry.invoice_id.is_(None))
        return query.order_by(TimeEntry.start_time.desc()).all()

    @staticmethod
    def get_entry_by_id(db: Session, entry_id: str, firm_id: str) -> Optional[TimeEntry]:
        return (
            db.query(TimeEntry).filter(TimeEntry.id == entry_id, TimeEntry.firm_id == firm_id).first()
        )

    @staticmethod
    def get_running_entry(db: Session, firm_id: str) -> Optional[TimeEntry]:
        return (
            db.query(TimeEntry)
            .filter(TimeEntry.firm_id == firm_id, TimeEntry.end_time.is_(None))
            .first()
        )

    @staticmethod
    def get_case(db: Session, case_id: str, firm_id: str) -> Optional[Case]:
        return db.query(Case).filter(Case.id == case_id, Case.firm_id == firm_id).first()

    @staticmethod
    def create_entry(db: Session, firm_id: str, **entry_data) -> TimeEntry:
        entry = TimeEntry(firm_id=firm_id, **entry_data)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def update_entry(db: Session, entry: TimeEntry, **updates) -> TimeEntry:
        for key, value in updates.items():
            if hasattr(entry, key):
                setattr(entry, key, value)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def delete_entry(db: Session, entry: TimeEntry) -> None:
        db.delete(entry)
        db.commit()
