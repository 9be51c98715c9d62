"""
Invoice Models for client billing
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .models import generate_uuid


class Invoice(Base):
    """Invoice issued by a firm to one of its clients"""

    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=True)

    # FACT-{year}-{month}-{sequence}
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Pricing
    subtotal = Column(Float, default=0, nullable=False)
    tax_rate = Column(Float, default=20, nullable=False)  # Percent
    tax_amount = Column(Float, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    currency = Column(String(10), default="XOF", nullable=False)

    status = Column(String(20), default="draft", nullable=False)  # draft, sent, paid, overdue, cancelled

    # Dates
    issue_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    paid_date = Column(Date, nullable=True)

    # Payment
    payment_method = Column(String(50), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Audit
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    case = relationship("Case")
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan")


class InvoiceItem(Base):
    """Invoice line item"""

    __tablename__ = "invoice_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False)
    description = Column(String(500), nullable=False)
    quantity = Column(Float, default=1, nullable=False)
    unit_price = Column(Float, default=0, nullable=False)
    total_price = Column(Float, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    invoice = relationship("Invoice", back_populates="items")
