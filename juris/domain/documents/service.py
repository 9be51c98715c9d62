"""Document service - Document metadata, versions and R2 file access"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...access_guard import ensure_channels_allowed
from ...models import Document, Profile
from ...services.notification_service import send_notification
from ...utils.document_storage import (
    delete_document_object,
    generate_document_key,
    generate_download_url,
    generate_upload_url,
)
from .repository import DocumentRepository
from .schemas import DocumentCreate, DocumentNotifyRequest, DocumentUpdate, DocumentVersionRequest

logger = logging.getLogger(__name__)


class DocumentService:
    """Service layer for document business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DocumentRepository()

    def get_documents(
        self,
        firm: Profile,
        case_id: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Document]:
        return self.repo.get_documents(self.db, firm.id, case_id, client_id, search)

    def get_document(self, document_id: str, firm: Profile) -> Document:
        document = self.repo.get_document_by_id(self.db, document_id, firm.id)
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        return document

    def _check_links(self, firm: Profile, case_id: Optional[str], client_id: Optional[str]) -> None:
        if case_id and not self.repo.case_exists(self.db, case_id, firm.id):
            raise HTTPException(status_code=400, detail="Case not found for this firm")
        if client_id and not self.repo.client_exists(self.db, client_id, firm.id):
            raise HTTPException(status_code=400, detail="Client not found for this firm")

    def create_document(self, data: DocumentCreate, firm: Profile) -> dict:
        """
        Create document metadata and, when a file name is given, a presigned upload URL.
        Quota is enforced by the upload_document guard.
        """
        self._check_links(firm, data.case_id, data.client_id)

        document_data = data.model_dump(exclude={"file_name"})
        document = self.repo.create_document(self.db, firm.id, **document_data)

        upload_url = None
        if data.file_name:
            key = generate_document_key(firm.id, document.id, data.file_name, document.version)
            document = self.repo.update_document(self.db, document, file_path=key)
            upload_url = generate_upload_url(key, data.file_type)

        logger.info(f"📄 Document {document.id} created for firm {firm.id}")
        return {"document": document, "upload_url": upload_url}

    def update_document(self, document_id: str, data: DocumentUpdate, firm: Profile) -> Document:
        document = self.get_document(document_id, firm)
        updates = data.model_dump(exclude_unset=True)
        self._check_links(firm, updates.get("case_id"), updates.get("client_id"))
        return self.repo.update_document(self.db, document, **updates)

    def create_new_version(
        self, document_id: str, data: DocumentVersionRequest, firm: Profile
    ) -> dict:
        """Replace the stored file. The version number increments on every replacement."""
        document = self.get_document(document_id, firm)
        new_version = (document.version or 1) + 1
        key = generate_document_key(firm.id, document.id, data.file_name, new_version)

        document = self.repo.update_document(
            self.db,
            document,
            version=new_version,
            file_path=key,
            file_type=data.file_type or document.file_type,
            file_size=data.file_size,
        )
        logger.info(f"📄 Document {document.id} replaced, now version {new_version}")
        return {"document": document, "upload_url": generate_upload_url(key, data.file_type)}

    def get_download_url(self, document_id: str, firm: Profile) -> dict:
        document = self.get_document(document_id, firm)
        if not document.file_path:
            raise HTTPException(status_code=404, detail="Document has no file")

        url = generate_download_url(document.file_path, document.name)
        if not url:
            raise HTTPException(status_code=502, detail="Unable to generate download URL")
        return {"url": url}

    def delete_document(self, document_id: str, firm: Profile) -> dict:
        document = self.get_document(document_id, firm)
        if document.file_path and not delete_document_object(document.file_path):
            logger.warning(f"⚠️ File {document.file_path} could not be removed from storage")
        self.repo.delete_document(self.db, document)
        return {"message": "Document deleted"}

    async def notify_ready(self, document_id: str, data: DocumentNotifyRequest, firm: Profile) -> dict:
        """Tell the client that a document is ready"""
        document = self.get_document(document_id, firm)
        client = document.client or (document.case.client if document.case else None)
        if not client:
            raise HTTPException(status_code=400, detail="Document is not linked to a client")

        ensure_channels_allowed(self.db, firm.id, data.channels)

        return await send_notification(
            self.db,
            firm.id,
            "document_ready",
            channels=data.channels,
            recipients=[{"email": client.email, "phone": client.phone, "name": client.full_name}],
            data={
                "clientName": client.full_name,
                "documentName": document.name,
                "firmName": firm.firm_name,
            },
            case_id=document.case_id,
        )
