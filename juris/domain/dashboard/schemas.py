"""Dashboard, search and export schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ..cases.schemas import CaseResponse
from ..clients.schemas import ClientResponse
from ..documents.schemas import DocumentResponse

SEARCH_SCOPES = ("cases", "clients", "documents")

EXPORT_FIELDS = {
    "cases": [
        "case_number", "title", "client_id", "case_type", "status", "priority",
        "court_name", "start_date", "expected_end_date", "actual_end_date",
        "hourly_rate", "created_at",
    ],
    "clients": [
        "first_name", "last_name", "company_name", "client_type", "email",
        "phone", "address", "status", "created_at",
    ],
    "documents": [
        "name", "case_id", "client_id", "file_type", "file_size", "version",
        "confidentiality_level", "created_at",
    ],
    "time_entries": [
        "case_id", "description", "start_time", "end_time", "duration_minutes",
        "hourly_rate", "billable_amount", "is_billable", "invoice_id",
    ],
    "invoices": [
        "invoice_number", "client_id", "case_id", "subtotal", "tax_rate",
        "tax_amount", "total_amount", "currency", "status", "issue_date",
        "due_date", "paid_date",
    ],
}


class DeadlineItem(BaseModel):
    id: str
    title: str
    event_type: str
    start_time: datetime
    case_id: Optional[str] = None

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    total_clients: int
    total_cases: int
    active_cases: int
    upcoming_deadlines: int
    monthly_revenue: float
    deadlines: list[DeadlineItem]
    recent_clients: list[ClientResponse]
    recent_cases: list[CaseResponse]
    subscription: dict
    usage: dict


class SearchRequest(BaseModel):
    query: Optional[str] = None
    scopes: list[str] = list(SEARCH_SCOPES)
    status: Optional[str] = None
    priority: Optional[str] = None
    case_type: Optional[str] = None
    client_type: Optional[str] = None
    limit: int = 50

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, v):
        invalid = [s for s in v if s not in SEARCH_SCOPES]
        if invalid:
            raise ValueError(f"Unknown search scopes: {', '.join(invalid)}")
        return v

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v):
        if not 1 <= v <= 200:
            raise ValueError("limit must be between 1 and 200")
        return v


class SearchResponse(BaseModel):
    cases: list[CaseResponse] = []
    clients: list[ClientResponse] = []
    documents: list[DocumentResponse] = []
    total: int


class ExportRequest(BaseModel):
    entity: str
    fields: Optional[list[str]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("entity")
    @classmethod
    def validate_entity(cls, v):
        if v not in EXPORT_FIELDS:
            raise ValueError(f"entity must be one of: {', '.join(EXPORT_FIELDS)}")
        return v
