from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.sql import func

from .database import Base
from .models import generate_uuid


class Notification(Base):
    """A notification dispatch. Rows sent on the in_app channel show up in the notification center."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    firm_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    case_id = Column(String(36), ForeignKey("cases.id"), nullable=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    channel = Column(String(100), nullable=False)  # Comma separated channel list
    recipient = Column(String(500), nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, sent, failed
    scheduled_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    extra_data = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
