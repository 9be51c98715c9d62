"""Communication repository - Database operations for the communications log"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Communication


class CommunicationRepository:
    """Repository for communication database operations"""

    @staticmethod
    def get_communications(
        db: Session,
        firm_id: str,
        comm_type: Optional[str] = None,
        case_id: Optional[str] = None,
        client_id: Optional[str] = None,
        limit: int = 100,
    ) -> list[Communication]:
        query = db.query(Communication).filter(Communication.firm_id == firm_id)
        if comm_type:
            query = query.filter(Communication.type == comm_type)
        if case_id:
            query = query.filter(Communication.case_id == case_id)
        if client_id:
            query = query.filter(Communication.client_id == client_id)
        return query.order_by(Communication.created_at.desc()).limit(limit).all()

    @staticmethod
    def get_communication_by_id(
        db: Session, communication_id: str, firm_id: str
    ) -> Optional[Communication]:
        return (
            db.query(Communication)
            .filter(Communication.id == communication_id, Communication.firm_id == firm_id)
            .first()
        )

    @staticmethod
    def create_communication(db: Session, firm_id: str, **data) -> Communication:
        communication = Communication(firm_id=firm_id, **data)
        db.add(communication)
        db.commit()
        db.refresh(communication)
        return communication

    @staticmethod
    def update_communication(db: Session, communication: Communication, **updates) -> Communication:
        for key, value in updates.items():
            if hasattr(communication, key):
                setattr(communication, key, value)
        db.commit()
        db.refresh(communication)
        return communication
