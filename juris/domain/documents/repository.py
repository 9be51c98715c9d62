"""Document repository - Database operations for documents"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Case, Client, Document


class DocumentRepository:
    """Repository for document database operations"""

    @staticmethod
    def get_documents(
        db: Session,
        firm_id: str,
        case_id: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Document]:
        query = db.query(Document).filter(Document.firm_id == firm_id)
        if case_id:
            query = query.filter(Document.case_id == case_id)
        if client_id:
            query = query.filter(Document.client_id == client_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Document.name.ilike(pattern), Document.description.ilike(pattern)))
        return query.order_by(Document.created_at.desc()).all()

    @staticmethod
    def get_document_by_id(db: Session, document_id: str, firm_id: str) -> Optional[Document]:
        return (
            db.query(Document)
            .filter(Document.id == document_id, Document.firm_id == firm_id)
            .first()
        )

    @staticmethod
    def case_exists(db: Session, case_id: str, firm_id: str) -> bool:
        return db.query(Case).filter(Case.id == case_id, Case.firm_id == firm_id).first() is not None

    @staticmethod
    def client_exists(db: Session, client_id: str, firm_id: str) -> bool:
        return (
            db.query(Client).filter(Client.id == client_id, Client.firm_id == firm_id).first()
            is not None
        )

    @staticmethod
    def create_document(db: Session, firm_id: str, **document_data) -> Document:
        document = Document(firm_id=firm_id, **document_data)
        db.add(document)
        db.commit()
        db.refresh(document)
        return document

    @staticmethod
    def update_document(db: Session, document: Document, **updates) -> Document:
        for key, value in updates.items():
            if hasattr(document, key):
                setattr(document, key, value)
        db.commit()
        db.refresh(document)
        return document

    @staticmethod
    def delete_document(db: Session, document: Document) -> None:
        db.delete(document)
        db.commit()
