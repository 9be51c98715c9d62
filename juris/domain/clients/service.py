"""Client service - Business logic for client operations"""

import csv
import logging
from datetime import datetime
from io import StringIO
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...models import Client, Profile
from ...services.notification_service import send_notification
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(
        self,
        firm: Profile,
        status: Optional[str] = None,
        client_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Client]:
        return self.repo.get_clients(self.db, firm.id, status, client_type, search)

    def get_client(self, client_id: str, firm: Profile) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id, firm.id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def create_client(self, data: ClientCreate, firm: Profile) -> Client:
        """Create a new client. Quota is enforced by the add_client guard."""
        logger.info(f"📥 Creating client for firm: {firm.id}")
        return self.repo.create_client(self.db, firm.id, **data.model_dump())

    def update_client(self, client_id: str, data: ClientUpdate, firm: Profile) -> Client:
        client = self.get_client(client_id, firm)
        return self.repo.update_client(self.db, client, **data.model_dump(exclude_unset=True))

    def delete_client(self, client_id: str, firm: Profile) -> dict:
        client = self.get_client(client_id, firm)
        if client.cases:
            raise HTTPException(
                status_code=400,
                detail="Client has linked cases. Archive the client instead of deleting it.",
            )
        self.repo.delete_client(self.db, client)
        return {"message": "Client deleted"}

    async def send_welcome(self, client_id: str, firm: Profile) -> dict:
        client = self.get_client(client_id, firm)
        if not client.email:
            raise HTTPException(status_code=400, detail="Client has no email address")

        return await send_notification(
            self.db,
            firm.id,
            "welcome",
            channels=["email"],
            recipients=[{"email": client.email, "name": client.full_name}],
            data={"clientName": client.full_name, "firmName": firm.firm_name},
        )

    def export_clients_csv(
        self,
        firm: Profile,
        status: Optional[str] = None,
        client_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> StreamingResponse:
        """Export clients as CSV"""
        clients = self.repo.get_clients(self.db, firm.id, status, client_type, search)
        logger.info(f"📊 CSV export of {len(clients)} clients for firm {firm.id}")

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(
            [
                "ID",
                "First Name",
                "Last Name",
                "Company",
                "Type",
                "Email",
                "Phone",
                "Address",
                "Status",
                "Notes",
                "Created At",
            ]
        )
        for client in clients:
            writer.writerow(
                [
                    client.id,
                    client.first_name,
                    client.last_name,
                    client.company_name or "",
                    client.client_type,
                    client.email or "",
                    client.phone or "",
                    client.address or "",
                    client.status,
                    client.notes or "",
                    client.created_at.strftime("%Y-%m-%d %H:%M:%S") if client.created_at else "",
                ]
            )

        output.seek(0)
        filename = f"clients_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )
