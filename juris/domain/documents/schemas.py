"""Document domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...utils.document_storage import MAX_DOCUMENT_SIZE_BYTES

CONFIDENTIALITY_LEVELS = ("public", "normal", "confidential", "restricted")


def _validate_confidentiality(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in CONFIDENTIALITY_LEVELS:
        raise ValueError(f"confidentiality_level must be one of: {', '.join(CONFIDENTIALITY_LEVELS)}")
    return v


def _validate_file_size(v: Optional[int]) -> Optional[int]:
    if v is not None and (v < 0 or v > MAX_DOCUMENT_SIZE_BYTES):
        raise ValueError(
            f"File size must be between 0 and {MAX_DOCUMENT_SIZE_BYTES // (1024 * 1024)}MB"
        )
    return v


class DocumentCreate(BaseModel):
    """Document metadata. The file itself is uploaded to the returned presigned URL."""

    name: str
    file_name: Optional[str] = None
    description: Optional[str] = None
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    is_template: bool = False
    tags: list[str] = []
    confidentiality_level: str = "normal"

    @field_validator("confidentiality_level")
    @classmethod
    def validate_confidentiality(cls, v):
        return _validate_confidentiality(v)

    @field_validator("file_size")
    @classmethod
    def validate_file_size(cls, v):
        return _validate_file_size(v)


class DocumentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    is_template: Optional[bool] = None
    tags: Optional[list[str]] = None
    confidentiality_level: Optional[str] = None

    @field_validator("confidentiality_level")
    @classmethod
    def validate_confidentiality(cls, v):
        return _validate_confidentiality(v)


class DocumentVersionRequest(BaseModel):
    """Replace the file of a document with a new version"""

    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None

    @field_validator("file_size")
    @classmethod
    def validate_file_size(cls, v):
        return _validate_file_size(v)


class DocumentResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    case_id: Optional[str] = None
    client_id: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    file_path: Optional[str] = None
    version: int
    is_template: bool
    tags: Optional[list[str]] = None
    confidentiality_level: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentUploadResponse(BaseModel):
    document: DocumentResponse
    upload_url: Optional[str] = None


class DocumentNotifyRequest(BaseModel):
    channels: list[str] = ["email", "whatsapp"]
