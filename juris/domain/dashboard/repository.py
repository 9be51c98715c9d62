"""Dashboard repository - Aggregate queries, search and export reads"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import CalendarEvent, Case, Client, Document, TimeEntry
from ...models_invoice import Invoice

ACTIVE_CASE_STATUSES = ("open", "in_progress")


class DashboardRepository:
    """Repository for dashboard, search and export queries"""

    # ============================================================================
    # STATISTICS
    # ============================================================================

    @staticmethod
    def count_clients(db: Session, firm_id: str) -> int:
        return db.query(Client).filter(Client.firm_id == firm_id).count()

    @staticmethod
    def count_cases(db: Session, firm_id: str, statuses: Optional[tuple] = None) -> int:
        query = db.query(Case).filter(Case.firm_id == firm_id)
        if statuses:
            query = query.filter(Case.status.in_(statuses))
        return query.count()

    @staticmethod
    def get_upcoming_deadlines(
        db: Session, firm_id: str, start: datetime, end: datetime
    ) -> list[CalendarEvent]:
        return (
            db.query(CalendarEvent)
            .filter(
                CalendarEvent.firm_id == firm_id,
                CalendarEvent.start_time >= start,
                CalendarEvent.start_time <= end,
                CalendarEvent.event_type.in_(("deadline", "hearing", "court_date")),
                CalendarEvent.status != "cancelled",
            )
            .order_by(CalendarEvent.start_time.asc())
            .all()
        )

    @staticmethod
    def sum_paid_revenue(db: Session, firm_id: str, start: date, end: date) -> float:
        """Total of invoices paid in [start, end)"""
        total = (
            db.query(func.coalesce(func.sum(Invoice.total_amount), 0))
            .filter(
                Invoice.firm_id == firm_id,
                Invoice.status == "paid",
                Invoice.paid_date >= start,
                Invoice.paid_date < end,
            )
            .scalar()
        )
        return float(total or 0)

    @staticmethod
    def get_recent_clients(db: Session, firm_id: str, limit: int = 5) -> list[Client]:
        return (
            db.query(Client)
            .filter(Client.firm_id == firm_id)
            .order_by(Client.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_recent_cases(db: Session, firm_id: str, limit: int = 5) -> list[Case]:
        return (
            db.query(Case)
            .filter(Case.firm_id == firm_id)
            .order_by(Case.created_at.desc())
            .limit(limit)
            .all()
        )

    # ============================================================================
    # SEARCH
    # ============================================================================

    @staticmethod
    def search_cases(
        db: Session,
        firm_id: str,
        term: Optional[str],
        status: Optional[str] = None,
        priority: Optional[str] = None,
        case_type: Optional[str] = None,
        limit: int = 50,
    ) -> list[Case]:
        query = db.query(Case).filter(Case.firm_id == firm_id)
        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(
                    Case.title.ilike(pattern),
                    Case.description.ilike(pattern),
                    Case.case_number.ilike(pattern),
                    Case.case_type.ilike(pattern),
                )
            )
        if status:
            query = query.filter(Case.status == status)
        if priority:
            query = query.filter(Case.priority == priority)
        if case_type:
            query = query.filter(Case.case_type == case_type)
        return query.order_by(Case.created_at.desc()).limit(limit).all()

    @staticmethod
    def search_clients(
        db: Session,
        firm_id: str,
        term: Optional[str],
        client_type: Optional[str] = None,
        limit: int = 50,
    ) -> list[Client]:
        query = db.query(Client).filter(Client.firm_id == firm_id)
        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(
                    Client.first_name.ilike(pattern),
                    Client.last_name.ilike(pattern),
                    Client.company_name.ilike(pattern),
                    Client.email.ilike(pattern),
                    Client.phone.ilike(pattern),
                )
            )
        if client_type:
            query = query.filter(Client.client_type == client_type)
        return query.order_by(Client.created_at.desc()).limit(limit).all()

    @staticmethod
    def search_documents(db: Session, firm_id: str, term: Optional[str], limit: int = 50) -> list[Document]:
        query = db.query(Document).filter(Document.firm_id == firm_id)
        if term:
            pattern = f"%{term}%"
            query = query.filter(or_(Document.name.ilike(pattern), Document.description.ilike(pattern)))
        return query.order_by(Document.created_at.desc()).limit(limit).all()

    # ============================================================================
    # EXPORT
    # ============================================================================

    @staticmethod
    def get_export_rows(
        db: Session,
        firm_id: str,
        model,
        date_column,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list:
        query = db.query(model).filter(model.firm_id == firm_id)
        if start:
            query = query.filter(date_column >= start)
        if end:
            query = query.filter(date_column <= end)
        return query.order_by(date_column.asc()).all()


EXPORT_MODELS = {
    "cases": (Case, Case.created_at),
    "clients": (Client, Client.created_at),
    "documents": (Document, Document.created_at),
    "time_entries": (TimeEntry, TimeEntry.start_time),
    "invoices": (Invoice, Invoice.issue_date),
}
