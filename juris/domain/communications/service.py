"""Communication service - Client exchange log and direct sends"""

import logging
from html import escape
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...access_guard import ensure_channels_allowed
from ...email_service import deliver_email
from ...email_templates import notification_email_template
from ...models import Client, Communication, Profile
from ...services.sms_service import send_sms
from ...services.whatsapp_service import send_whatsapp_message
from .repository import CommunicationRepository
from .schemas import CommunicationCreate, CommunicationSendRequest, CommunicationUpdate

logger = logging.getLogger(__name__)


class CommunicationService:
    """Service layer for communication business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CommunicationRepository()

    def get_communications(
        self,
        firm: Profile,
        comm_type: Optional[str] = None,
        case_id: Optional[str] = None,
        client_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[Communication]:
        return self.repo.get_communications(self.db, firm.id, comm_type, case_id, client_id, limit)

    def get_communication(self, communication_id: str, firm: Profile) -> Communication:
        communication = self.repo.get_communication_by_id(self.db, communication_id, firm.id)
        if not communication:
            raise HTTPException(status_code=404, detail="Communication not found")
        return communication

    def log_communication(self, data: CommunicationCreate, firm: Profile) -> Communication:
        return self.repo.create_communication(self.db, firm.id, **data.model_dump())

    def update_communication(
        self, communication_id: str, data: CommunicationUpdate, firm: Profile
    ) -> Communication:
        communication = self.get_communication(communication_id, firm)
        return self.repo.update_communication(
            self.db, communication, **data.model_dump(exclude_unset=True)
        )

    def _get_client(self, client_id: Optional[str], firm: Profile) -> Optional[Client]:
        if not client_id:
            return None
        client = (
            self.db.query(Client).filter(Client.id == client_id, Client.firm_id == firm.id).first()
        )
        if not client:
            raise HTTPException(status_code=400, detail="Client not found for this firm")
        return client

    async def send(self, data: CommunicationSendRequest, firm: Profile) -> dict:
        """
        Send a message to a client or an explicit address.
        The provider services log the exchange in the communications table.
        """
        ensure_channels_allowed(self.db, firm.id, [data.type])

        client = self._get_client(data.client_id, firm)
        recipient = data.to
        if not recipient and client:
            recipient = client.email if data.type == "email" else client.phone
        if not recipient:
            raise HTTPException(status_code=400, detail="No recipient address for this channel")

        if data.type == "email":
            if not data.subject:
                raise HTTPException(status_code=400, detail="Email subject is required")
            body_html = "<br>".join(escape(line) for line in data.content.splitlines())
            success, message_id, error = await deliver_email(
                self.db,
                firm.id,
                to=recipient,
                subject=data.subject,
                mjml_content=notification_email_template(data.subject, body_html, firm.firm_name),
                case_id=data.case_id,
                client_id=data.client_id,
            )
        elif data.type == "sms":
            success, message_id, error = await send_sms(
                self.db,
                firm.id,
                recipient,
                data.content,
                case_id=data.case_id,
                client_id=data.client_id,
            )
        else:
            success, message_id, error = await send_whatsapp_message(
                self.db,
                firm.id,
                recipient,
                data.content,
                case_id=data.case_id,
                client_id=data.client_id,
            )

        if success:
            logger.info(f"✅ {data.type} sent to {recipient} for firm {firm.id}")
        else:
            logger.warning(f"⚠️ {data.type} to {recipient} failed: {error}")
        return {"success": success, "message_id": message_id, "error": error}
