"""
Outbound communication log
Every SMS, WhatsApp and email send is recorded in the communications table
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Communication

logger = logging.getLogger(__name__)


def log_outbound(
    db: Optional[Session],
    firm_id: Optional[str],
    channel: str,
    to_address: str,
    content: str,
    subject: Optional[str] = None,
    from_address: Optional[str] = None,
    case_id: Optional[str] = None,
    client_id: Optional[str] = None,
) -> Optional[Communication]:
    """Record a pending outbound message. Nothing is logged without a firm."""
    if db is None or not firm_id:
        return None

    communication = Communication(
        firm_id=firm_id,
        case_id=case_id,
        client_id=client_id,
        type=channel,
        direction="outbound",
        subject=subject,
        content=content,
        from_address=from_address,
        to_address=to_address,
        status="pending",
    )
    db.add(communication)
    db.commit()
    db.refresh(communication)
    return communication


def mark_delivery(
    db: Optional[Session],
    communication: Optional[Communication],
    success: bool,
    external_id: Optional[str] = None,
    error: Optional[str] = None,
) -> None:
    """Update a logged message with the provider outcome"""
    if db is None or communication is None:
        return

    communication.status = "sent" if success else "failed"
    communication.external_id = external_id
    communication.error_message = error
    if success:
        communication.sent_at = datetime.utcnow()
    db.commit()
    logger.debug(f"Communication {communication.id} marked {communication.status}")
