"""Invoice repository - Database operations for invoices"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Case, Client, TimeEntry
from ...models_invoice import Invoice, InvoiceItem


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(
        db: Session,
        firm_id: str,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        case_id: Optional[str] = None,
    ) -> list[Invoice]:
        query = db.query(Invoice).filter(Invoice.firm_id == firm_id)
        if status:
            query = query.filter(Invoice.status == status)
        if client_id:
            query = query.filter(Invoice.client_id == client_id)
        if case_id:
            query = query.filter(Invoice.case_id == case_id)
        return query.order_by(Invoice.created_at.desc()).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: str, firm_id: str) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.firm_id == firm_id).first()

    @staticmethod
    def get_last_invoice_number(db: Session, prefix: str) -> Optional[str]:
        """Highest invoice number sharing a prefix. Longer suffixes sort first once past the padding."""
        row = (
            db.query(Invoice.invoice_number)
            .filter(Invoice.invoice_number.like(f"{prefix}%"))
            .order_by(func.length(Invoice.invoice_number).desc(), Invoice.invoice_number.desc())
            .first()
        )
        return row[0] if row else None

    @staticmethod
    def get_client(db: Session, client_id: str, firm_id: str) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id, Client.firm_id == firm_id).first()

    @staticmethod
    def get_case(db: Session, case_id: str, firm_id: str) -> Optional[Case]:
        return db.query(Case).filter(Case.id == case_id, Case.firm_id == firm_id).first()

    @staticmethod
    def get_unbilled_entries(
        db: Session, firm_id: str, case_id: str, entry_ids: Optional[list[str]] = None
    ) -> list[TimeEntry]:
        """Finished billable entries of a case that are not on an invoice yet"""
        query = db.query(TimeEntry).filter(
            TimeEntry.firm_id == firm_id,
            TimeEntry.case_id == case_id,
            TimeEntry.is_billable.is_(True),
            TimeEntry.invoice_id.is_(None),
            TimeEntry.end_time.isnot(None),
        )
        if entry_ids:
            query = query.filter(TimeEntry.id.in_(entry_ids))
        return query.order_by(TimeEntry.start_time.asc()).all()

    @staticmethod
    def get_overdue_candidates(db: Session, today: date) -> list[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.status == "sent", Invoice.due_date.isnot(None), Invoice.due_date < today)
            .all()
        )

    @staticmethod
    def create_invoice(db: Session, firm_id: str, items: list[dict], **invoice_data) -> Invoice:
        invoice = Invoice(firm_id=firm_id, **invoice_data)
        invoice.items = [InvoiceItem(**item) for item in items]
        db.add(invoice)
        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def update_invoice(
        db: Session, invoice: Invoice, items: Optional[list[dict]] = None, **updates
    ) -> Invoice:
        for key, value in updates.items():
            if hasattr(invoice, key):
                setattr(invoice, key, value)
        if items is not None:
            invoice.items = [InvoiceItem(**item) for item in items]
        db.commit()
        db.refresh(invoice)
        return invoice

    @staticmethod
    def delete_invoice(db: Session, invoice: Invoice) -> None:
        # Billed time becomes unbilled again
        db.query(TimeEntry).filter(TimeEntry.invoice_id == invoice.id).update(
            {TimeEntry.invoice_id: None}, synchronize_session=False
        )
        db.delete(invoice)
        db.commit()
