"""Client repository - Database operations for clients"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Client


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def get_clients(
        db: Session,
        firm_id: str,
        status: Optional[str] = None,
        client_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Client]:
        """Get clients for a firm with optional filters"""
        query = db.query(Client).filter(Client.firm_id == firm_id)

        if status:
            query = query.filter(Client.status == status)
        if client_type:
            query = query.filter(Client.client_type == client_type)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Client.first_name.ilike(pattern),
                    Client.last_name.ilike(pattern),
                    Client.company_name.ilike(pattern),
                    Client.email.ilike(pattern),
                    Client.phone.ilike(pattern),
                )
            )

        return query.order_by(Client.created_at.desc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: str, firm_id: str) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id, Client.firm_id == firm_id).first()

    @staticmethod
    def create_client(db: Session, firm_id: str, **client_data) -> Client:
        client = Client(firm_id=firm_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        db.delete(client)
        db.commit()
