"""Case repository - Database operations for legal cases"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import CalendarEvent, Case, Client, Document, TimeEntry


class CaseRepository:
    """Repository for case database operations"""

    @staticmethod
    def get_cases(
        db: Session,
        firm_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Case]:
        query = db.query(Case).filter(Case.firm_id == firm_id)

        if status:
            query = query.filter(Case.status == status)
        if priority:
            query = query.filter(Case.priority == priority)
        if client_id:
            query = query.filter(Case.client_id == client_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Case.title.ilike(pattern),
                    Case.case_number.ilike(pattern),
                    Case.description.ilike(pattern),
                )
            )

        return query.order_by(Case.created_at.desc()).all()

    @staticmethod
    def get_case_by_id(db: Session, case_id: str, firm_id: str) -> Optional[Case]:
        return db.query(Case).filter(Case.id == case_id, Case.firm_id == firm_id).first()

    @staticmethod
    def get_client(db: Session, client_id: str, firm_id: str) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id, Client.firm_id == firm_id).first()

    @staticmethod
    def get_last_case_number(db: Session, prefix: str) -> Optional[str]:
        """Highest case number sharing a prefix. Longer suffixes sort first once past the padding."""
        row = (
            db.query(Case.case_number)
            .filter(Case.case_number.like(f"{prefix}%"))
            .order_by(func.length(Case.case_number).desc(), Case.case_number.desc())
            .first()
        )
        return row[0] if row else None

    @staticmethod
    def create_case(db: Session, firm_id: str, **case_data) -> Case:
        case = Case(firm_id=firm_id, **case_data)
        db.add(case)
        db.commit()
        db.refresh(case)
        return case

    @staticmethod
    def update_case(db: Session, case: Case, **updates) -> Case:
        for key, value in updates.items():
            if hasattr(case, key):
                setattr(case, key, value)
        db.commit()
        db.refresh(case)
        return case

    @staticmethod
    def delete_case(db: Session, case: Case) -> None:
        """Delete a case. Linked documents and events are kept and detached."""
        db.query(Document).filter(Document.case_id == case.id).update(
            {Document.case_id: None}, synchronize_session=False
        )
        db.query(CalendarEvent).filter(CalendarEvent.case_id == case.id).update(
            {CalendarEvent.case_id: None}, synchronize_session=False
        )
        db.query(TimeEntry).filter(TimeEntry.case_id == case.id).delete(synchronize_session=False)
        db.delete(case)
        db.commit()
