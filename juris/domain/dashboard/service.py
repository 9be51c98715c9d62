"""Dashboard service - Firm statistics, advanced search and data export"""

import csv
import logging
from datetime import date, datetime, time, timedelta
from io import StringIO

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...models import Profile
from ..subscriptions.service import SubscriptionService
from .repository import ACTIVE_CASE_STATUSES, EXPORT_MODELS, DashboardRepository
from .schemas import EXPORT_FIELDS, ExportRequest, SearchRequest

logger = logging.getLogger(__name__)

DEADLINE_WINDOW_DAYS = 30
RECENT_ITEMS = 5


def _csv_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return str(value)


class DashboardService:
    """Service layer for dashboard statistics, search and export"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DashboardRepository()

    def get_stats(self, firm: Profile) -> dict:
        now = datetime.utcnow()
        month_start = now.date().replace(day=1)
        next_month = month_start + relativedelta(months=1)

        deadlines = self.repo.get_upcoming_deadlines(
            self.db, firm.id, now, now + timedelta(days=DEADLINE_WINDOW_DAYS)
        )
        subscriptions = SubscriptionService(self.db)

        return {
            "total_clients": self.repo.count_clients(self.db, firm.id),
            "total_cases": self.repo.count_cases(self.db, firm.id),
            "active_cases": self.repo.count_cases(self.db, firm.id, ACTIVE_CASE_STATUSES),
            "upcoming_deadlines": len(deadlines),
            "monthly_revenue": self.repo.sum_paid_revenue(self.db, firm.id, month_start, next_month),
            "deadlines": deadlines,
            "recent_clients": self.repo.get_recent_clients(self.db, firm.id, RECENT_ITEMS),
            "recent_cases": self.repo.get_recent_cases(self.db, firm.id, RECENT_ITEMS),
            "subscription": subscriptions.check_subscription_status(firm.id),
            "usage": subscriptions.check_usage_limits(firm.id),
        }

    def search(self, request: SearchRequest, firm: Profile) -> dict:
        """Case-insensitive search over the requested scopes"""
        term = request.query.strip() if request.query else None
        results = {"cases": [], "clients": [], "documents": []}

        if "cases" in request.scopes:
            results["cases"] = self.repo.search_cases(
                self.db,
                firm.id,
                term,
                request.status,
                request.priority,
                request.case_type,
                request.limit,
            )
        if "clients" in request.scopes:
            results["clients"] = self.repo.search_clients(
                self.db, firm.id, term, request.client_type, request.limit
            )
        if "documents" in request.scopes:
            results["documents"] = self.repo.search_documents(self.db, firm.id, term, request.limit)

        results["total"] = sum(len(results[scope]) for scope in ("cases", "clients", "documents"))
        logger.info(f"🔍 Search '{term}' for firm {firm.id}: {results['total']} results")
        return results

    def export_csv(self, request: ExportRequest, firm: Profile) -> StreamingResponse:
        """Export one entity as CSV with the selected fields over a date range"""
        allowed = EXPORT_FIELDS[request.entity]
        fields = request.fields or allowed
        unknown = [f for f in fields if f not in allowed]
        if unknown:
            raise HTTPException(
                status_code=400, detail=f"Unknown fields for {request.entity}: {', '.join(unknown)}"
            )
        if request.start_date and request.end_date and request.end_date < request.start_date:
            raise HTTPException(status_code=400, detail="end_date must be after start_date")

        model, date_column = EXPORT_MODELS[request.entity]
        start, end = request.start_date, request.end_date
        # Invoices are filtered on a date column, everything else on timestamps
        if request.entity != "invoices":
            start = datetime.combine(start, time.min) if start else None
            end = datetime.combine(end, time.max) if end else None

        rows = self.repo.get_export_rows(self.db, firm.id, model, date_column, start, end)
        logger.info(f"📊 CSV export of {len(rows)} {request.entity} for firm {firm.id}")

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(["id", *fields])
        for row in rows:
            writer.writerow([row.id, *[_csv_value(getattr(row, f)) for f in fields]])

        output.seek(0)
        filename = f"{request.entity}_export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        return StreamingResponse(
            iter([output.getvalue()]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename={filename}",
                "Cache-Control": "no-cache",
            },
        )
