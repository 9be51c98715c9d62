"""Dashboard router - Statistics, advanced search and data export"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...access_guard import require_active_access, require_feature
from ...database import get_db
from ...models import Profile
from .schemas import DashboardStats, ExportRequest, SearchRequest, SearchResponse
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/dashboard/stats", response_model=DashboardStats)
async def get_stats(
    firm: Profile = Depends(require_active_access),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_stats(firm)


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    firm: Profile = Depends(require_feature("advanced_search")),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Advanced search over cases, clients and documents"""
    return service.search(request, firm)


@router.post("/export")
async def export_data(
    request: ExportRequest,
    firm: Profile = Depends(require_feature("data_export")),
    service: DashboardService = Depends(get_dashboard_service),
):
    """CSV export of a firm's data"""
    return service.export_csv(request, firm)
