"""
Notification center routes.
Lists the firm's notifications, tracks read state and sends templated notifications.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...access_guard import ensure_channels_allowed, require_active_access
from ...database import get_db
from ...models import Profile
from ...services.notification_service import list_templates, send_notification
from .repository import NotificationRepository
from .schemas import NotificationResponse, SendNotificationRequest, UnreadCountResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationResponse])
async def get_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    return NotificationRepository.get_notifications(db, firm.id, unread_only, limit)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    return {"unread": NotificationRepository.count_unread(db, firm.id)}


@router.get("/templates")
async def get_templates(firm: Profile = Depends(require_active_access)):
    """Available notification templates with their channels and required data"""
    return list_templates()


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    notification = NotificationRepository.get_notification_by_id(db, notification_id, firm.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/mark-all-read")
async def mark_all_read(
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    updated = NotificationRepository.mark_all_read(db, firm.id)
    return {"success": True, "updated": updated}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    notification = NotificationRepository.get_notification_by_id(db, notification_id, firm.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    NotificationRepository.delete_notification(db, notification)
    return {"message": "Notification deleted"}


@router.post("/send")
async def send(
    request: SendNotificationRequest,
    firm: Profile = Depends(require_active_access),
    db: Session = Depends(get_db),
):
    """Send a templated notification. Channel access follows the firm's plan."""
    ensure_channels_allowed(db, firm.id, request.channels)

    data = {"firmName": firm.firm_name, **request.data}
    return await send_notification(
        db,
        firm.id,
        request.type,
        channels=request.channels,
        recipients=[r.model_dump() for r in request.recipients],
        data=data,
        case_id=request.case_id,
    )
