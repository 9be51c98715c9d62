"""Notification repository - Notification center queries"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_notification import Notification


class NotificationRepository:
    @staticmethod
    def get_notifications(
        db: Session, firm_id: str, unread_only: bool = False, limit: int = 50
    ) -> list[Notification]:
        query = db.query(Notification).filter(Notification.firm_id == firm_id)
        if unread_only:
            query = query.filter(Notification.read.is_(False))
        return query.order_by(Notification.created_at.desc()).limit(limit).all()

    @staticmethod
    def count_unread(db: Session, firm_id: str) -> int:
        return (
            db.query(Notification)
            .filter(Notification.firm_id == firm_id, Notification.read.is_(False))
            .count()
        )

    @staticmethod
    def get_notification_by_id(db: Session, notification_id: str, firm_id: str) -> Optional[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.firm_id == firm_id)
            .first()
        )

    @staticmethod
    def mark_all_read(db: Session, firm_id: str) -> int:
        updated = (
            db.query(Notification)
            .filter(Notification.firm_id == firm_id, Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def delete_notification(db: Session, notification: Notification) -> None:
        db.delete(notification)
        db.commit()
