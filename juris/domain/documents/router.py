"""Document router - FastAPI endpoints for documents"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...access_guard import require_action, require_active_access
from ...database import get_db
from ...models import Profile
from .schemas import (
    DocumentCreate,
    DocumentNotifyRequest,
    DocumentResponse,
    DocumentUpdate,
    DocumentUploadResponse,
    DocumentVersionRequest,
)
from .service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])


def get_document_service(db: Session = Depends(get_db)) -> DocumentService:
    """Dependency injection for DocumentService"""
    return DocumentService(db)


@router.get("", response_model=list[DocumentResponse])
async def get_documents(
    case_id: Optional[str] = Query(None),
    client_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return service.get_documents(firm, case_id, client_id, search)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return service.get_document(document_id, firm)


@router.post("", response_model=DocumentUploadResponse, status_code=201)
async def create_document(
    data: DocumentCreate,
    firm: Profile = Depends(require_action("upload_document")),
    service: DocumentService = Depends(get_document_service),
):
    """Create a document and get a presigned URL to upload its file"""
    return service.create_document(data, firm)


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    data: DocumentUpdate,
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return service.update_document(document_id, data, firm)


@router.post("/{document_id}/versions", response_model=DocumentUploadResponse)
async def create_new_version(
    document_id: str,
    data: DocumentVersionRequest,
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return service.create_new_version(document_id, data, firm)


@router.get("/{document_id}/download")
async def get_download_url(
    document_id: str,
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return service.get_download_url(document_id, firm)


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return service.delete_document(document_id, firm)


@router.post("/{document_id}/notify-ready")
async def notify_ready(
    document_id: str,
    data: DocumentNotifyRequest,
    firm: Profile = Depends(require_active_access),
    service: DocumentService = Depends(get_document_service),
):
    return await service.notify_ready(document_id, data, firm)
