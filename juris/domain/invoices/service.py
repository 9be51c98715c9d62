"""Invoice service - Client billing, totals and payment follow-up"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...access_guard import ensure_channels_allowed
from ...models import Profile
from ...models_invoice import Invoice
from ...services.notification_service import send_notification, send_payment_reminder
from ...shared.formatting import format_amount, format_date_fr
from .repository import InvoiceRepository
from .schemas import (
    InvoiceCreate,
    InvoiceFromTimeEntriesRequest,
    InvoiceSendRequest,
    InvoiceUpdate,
    MarkPaidRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_TERMS_DAYS = 30
REMINDABLE_STATUSES = ("sent", "overdue")


def calculate_item_total(quantity: float, unit_price: float) -> float:
    return round(quantity * unit_price, 2)


def calculate_totals(items: list[dict], tax_rate: float) -> dict:
    """
    subtotal = sum of line totals, tax = subtotal * rate / 100, total = subtotal + tax
    """
    subtotal = round(sum(item["total_price"] for item in items), 2)
    tax_amount = round(subtotal * tax_rate / 100, 2)
    return {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "total_amount": round(subtotal + tax_amount, 2),
    }


def build_items(items) -> list[dict]:
    return [
        {
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "total_price": calculate_item_total(item.quantity, item.unit_price),
        }
        for item in items
    ]


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    def get_invoices(
        self,
        firm: Profile,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        case_id: Optional[str] = None,
    ) -> list[Invoice]:
        return self.repo.get_invoices(self.db, firm.id, status, client_id, case_id)

    def get_invoice(self, invoice_id: str, firm: Profile) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id, firm.id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def generate_invoice_number(self, today: Optional[date] = None) -> str:
        """Next FACT-{year}-{month}-{NNN} number"""
        today = today or date.today()
        prefix = f"FACT-{today.year}-{today.month:02d}-"
        last = self.repo.get_last_invoice_number(self.db, prefix)
        sequence = int(last[len(prefix):]) + 1 if last else 1
        return f"{prefix}{sequence:03d}"

    def _check_links(self, firm: Profile, client_id: Optional[str], case_id: Optional[str]) -> None:
        if client_id and not self.repo.get_client(self.db, client_id, firm.id):
            raise HTTPException(status_code=400, detail="Client not found for this firm")
        if case_id and not self.repo.get_case(self.db, case_id, firm.id):
            raise HTTPException(status_code=400, detail="Case not found for this firm")

    def create_invoice(self, data: InvoiceCreate, firm: Profile) -> Invoice:
        self._check_links(firm, data.client_id, data.case_id)

        items = build_items(data.items)
        issue_date = data.issue_date or date.today()
        invoice_data = data.model_dump(exclude={"items"})
        invoice_data.update(calculate_totals(items, data.tax_rate))
        invoice_data["invoice_number"] = self.generate_invoice_number()
        invoice_data["issue_date"] = issue_date
        invoice_data["due_date"] = data.due_date or issue_date + timedelta(
            days=DEFAULT_PAYMENT_TERMS_DAYS
        )

        invoice = self.repo.create_invoice(self.db, firm.id, items, **invoice_data)
        logger.info(f"🧾 Invoice {invoice.invoice_number} created for firm {firm.id}")
        return invoice

    def update_invoice(self, invoice_id: str, data: InvoiceUpdate, firm: Profile) -> Invoice:
        invoice = self.get_invoice(invoice_id, firm)
        if invoice.status == "paid":
            raise HTTPException(status_code=400, detail="A paid invoice cannot be modified")

        updates = data.model_dump(exclude_unset=True, exclude={"items"})
        self._check_links(firm, None, updates.get("case_id"))

        items = build_items(data.items) if data.items is not None else None
        line_totals = items if items is not None else [
            {"total_price": item.total_price} for item in invoice.items
        ]
        tax_rate = updates.get("tax_rate", invoice.tax_rate)
        updates.update(calculate_totals(line_totals, tax_rate))

        return self.repo.update_invoice(self.db, invoice, items, **updates)

    def delete_invoice(self, invoice_id: str, firm: Profile) -> dict:
        invoice = self.get_invoice(invoice_id, firm)
        if invoice.status == "paid":
            raise HTTPException(status_code=400, detail="A paid invoice cannot be deleted")
        self.repo.delete_invoice(self.db, invoice)
        return {"message": "Invoice deleted"}

    def create_from_time_entries(self, data: InvoiceFromTimeEntriesRequest, firm: Profile) -> Invoice:
        """Bill the unbilled time of a case. The entries are linked to the new invoice."""
        case = self.repo.get_case(self.db, data.case_id, firm.id)
        if not case:
            raise HTTPException(status_code=404, detail="Case not found")
        if not case.client_id:
            raise HTTPException(status_code=400, detail="Case has no client to invoice")

        entries = self.repo.get_unbilled_entries(self.db, firm.id, case.id, data.entry_ids)
        if not entries:
            raise HTTPException(status_code=400, detail="No unbilled time entries for this case")

        items = []
        for entry in entries:
            quantity = (entry.duration_minutes or 0) / 60
            unit_price = entry.hourly_rate or 0
            items.append(
                {
                    "description": entry.description
                    or f"Temps passé le {format_date_fr(entry.start_time)}",
                    "quantity": quantity,
                    "unit_price": unit_price,
                    "total_price": calculate_item_total(quantity, unit_price),
                }
            )

        issue_date = date.today()
        invoice = self.repo.create_invoice(
            self.db,
            firm.id,
            items,
            client_id=case.client_id,
            case_id=case.id,
            invoice_number=self.generate_invoice_number(),
            description=data.description or f"Honoraires - {case.title}",
            tax_rate=data.tax_rate,
            issue_date=issue_date,
            due_date=data.due_date or issue_date + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS),
            **calculate_totals(items, data.tax_rate),
        )

        for entry in entries:
            entry.invoice_id = invoice.id
        self.db.commit()

        logger.info(
            f"🧾 Invoice {invoice.invoice_number} created from {len(entries)} time entries of case {case.case_number}"
        )
        return invoice

    def mark_paid(self, invoice_id: str, data: MarkPaidRequest, firm: Profile) -> Invoice:
        """Record an offline payment (cash, cheque, transfer)"""
        invoice = self.get_invoice(invoice_id, firm)
        if invoice.status == "paid":
            logger.info(f"Invoice {invoice.invoice_number} already marked as paid")
            return invoice
        if invoice.status == "cancelled":
            raise HTTPException(status_code=400, detail="A cancelled invoice cannot be paid")

        return self.repo.update_invoice(
            self.db,
            invoice,
            status="paid",
            paid_date=date.today(),
            payment_method=data.payment_method or "manual",
            payment_reference=data.payment_reference or f"manual-{datetime.utcnow().timestamp()}",
        )

    async def send_invoice(self, invoice_id: str, data: InvoiceSendRequest, firm: Profile) -> dict:
        """Send the invoice to the client and move it from draft to sent"""
        invoice = self.get_invoice(invoice_id, firm)
        if invoice.status in ("paid", "cancelled"):
            raise HTTPException(status_code=400, detail=f"Invoice is {invoice.status}")

        client = invoice.client
        ensure_channels_allowed(self.db, firm.id, data.channels)

        result = await send_notification(
            self.db,
            firm.id,
            "invoice_sent",
            channels=data.channels,
            recipients=[{"email": client.email, "phone": client.phone, "name": client.full_name}],
            data={
                "clientName": client.full_name,
                "invoiceNumber": invoice.invoice_number,
                "amount": f"{format_amount(invoice.total_amount)} {invoice.currency}",
                "firmName": firm.firm_name,
            },
            case_id=invoice.case_id,
        )

        if result["success"] and invoice.status == "draft":
            invoice.status = "sent"
            self.db.commit()
        return result

    async def send_reminder(self, invoice_id: str, firm: Profile) -> dict:
        invoice = self.get_invoice(invoice_id, firm)
        if invoice.status not in REMINDABLE_STATUSES:
            raise HTTPException(
                status_code=400, detail="Only sent or overdue invoices can be reminded"
            )

        ensure_channels_allowed(self.db, firm.id, ["email", "whatsapp"])

        client = invoice.client
        return await send_payment_reminder(
            self.db,
            firm.id,
            client_email=client.email,
            client_phone=client.phone,
            client_name=client.full_name,
            invoice_number=invoice.invoice_number,
            amount=f"{format_amount(invoice.total_amount)} {invoice.currency}",
            due_date=format_date_fr(invoice.due_date),
            firm_name=firm.firm_name,
        )


def mark_overdue_invoices(db: Session, today: Optional[date] = None) -> int:
    """Flag sent invoices whose due date has passed. Returns the number updated."""
    today = today or date.today()
    invoices = InvoiceRepository.get_overdue_candidates(db, today)
    for invoice in invoices:
        invoice.status = "overdue"
    db.commit()
    if invoices:
        logger.info(f"⏰ {len(invoices)} invoices marked overdue")
    return len(invoices)
