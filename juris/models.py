import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_uuid():
    """Generate a UUID primary key"""
    return str(uuid.uuid4())


class Profile(Base):
    """A law firm account. Its id is the Supabase auth user id and the tenant key."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    subscription_plan = Column(String(50), nullable=True)  # basic, premium, enterprise
    subscription_status = Column(
        String(50), default="inactive", nullable=False
    )  # active, expired, blocked, inactive
    subscription_started_at = Column(DateTime, nullable=True)
    subscription_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    clients = relationship("Client", back_populates="firm", cascade="all, delete-orphan")
    cases = relationship("Case", back_populates="firm", cascade="all, delete-orphan")


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    id_number = Column(String(100), nullable=True)
    company_name = Column(String(255), nullable=True)
    client_type = Column(String(20), default="individual", nullable=False)  # individual, company
    status = Column(String(20), default="active", nullable=False)  # active, inactive, archived
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    firm = relationship("Profile", back_populates="clients")
    cases = relationship("Case", back_populates="client")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Case(Base):
    """A legal matter owned by a firm and linked to a client"""

    __tablename__ = "cases"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True)
    case_number = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    case_type = Column(String(100), nullable=True)
    status = Column(
        String(20), default="open", nullable=False
    )  # open, in_progress, closed, pending, won, lost
    priority = Column(String(20), default="medium", nullable=False)  # low, medium, high, urgent
    court_name = Column(String(255), nullable=True)
    judge_name = Column(String(255), nullable=True)
    opposing_party = Column(String(255), nullable=True)
    opposing_counsel = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    expected_end_date = Column(Date, nullable=True)
    actual_end_date = Column(Date, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    firm = relationship("Profile", back_populates="cases")
    client = relationship("Client", back_populates="cases")
    documents = relationship("Document", back_populates="case")
    time_entries = relationship("TimeEntry", back_populates="case")


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    file_path = Column(String(500), nullable=True)  # R2 object key
    version = Column(Integer, default=1, nullable=False)
    is_template = Column(Boolean, default=False, nullable=False)
    tags = Column(JSON, default=list)
    confidentiality_level = Column(
        String(20), default="normal", nullable=False
    )  # public, normal, confidential, restricted
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    case = relationship("Case", back_populates="documents")
    client = relationship("Client")


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(
        String(30), default="meeting", nullable=False
    )  # meeting, hearing, deadline, consultation, court_date, appointment
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    is_all_day = Column(Boolean, default=False, nullable=False)
    reminder_minutes = Column(Integer, default=30)
    reminder_sent_at = Column(DateTime, nullable=True)
    status = Column(
        String(20), default="scheduled", nullable=False
    )  # scheduled, confirmed, cancelled, completed
    attendees = Column(JSON, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    case = relationship("Case")
    client = relationship("Client")


class Communication(Base):
    """Log of every message exchanged with clients (outbound sends are logged automatically)"""

    __tablename__ = "communications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=True)
    type = Column(String(20), nullable=False)  # email, whatsapp, phone, sms, letter, meeting
    direction = Column(String(10), default="outbound", nullable=False)  # inbound, outbound
    subject = Column(String(255), nullable=True)
    content = Column(Text, nullable=True)
    from_address = Column(String(255), nullable=True)
    to_address = Column(String(255), nullable=True)
    cc_addresses = Column(JSON, default=list)
    bcc_addresses = Column(JSON, default=list)
    attachments = Column(JSON, default=list)
    status = Column(
        String(20), default="draft", nullable=False
    )  # draft, pending, sent, delivered, read, failed
    external_id = Column(String(255), nullable=True)  # Provider message ID
    error_message = Column(Text, nullable=True)
    scheduled_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    read_at = Column(DateTime, nullable=True)
    extra_data = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class ProfessionalContact(Base):
    __tablename__ = "professional_contacts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    contact_type = Column(
        String(30), default="other", nullable=False
    )  # lawyer, accountant, medical_expert, bailiff, other
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    company_name = Column(String(255), nullable=True)
    title = Column(String(255), nullable=True)
    speciality = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    last_contact_date = Column(Date, nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, inactive
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class TimeEntry(Base):
    __tablename__ = "time_entries"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)  # Null while the timer is running
    duration_minutes = Column(Integer, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    billable_amount = Column(Float, nullable=True)
    is_billable = Column(Boolean, default=True, nullable=False)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    case = relationship("Case", back_populates="time_entries")
