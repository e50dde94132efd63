# campus_market/services/notifications.py
from typing import List

from sqlalchemy import desc, func, select, update
from sqlalchemy.orm import Session

from campus_market.core.db import utcnow
from campus_market.core.errors import Forbidden, NotFound
from campus_market.models.notification import Notification, NotificationType
from campus_market.models.user import User


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def push(
        self,
        user_id: int,
        type_: NotificationType,
        title: str,
        message: str = "",
        link: str = "",
    ) -> Notification:
        """Queue a notification on the current session. The caller commits."""
        n = Notification(
            user_id=user_id,
            type=type_.value,
            title=title,
            message=message,
            link=link,
            is_read=False,
        )
        self.db.add(n)
        return n

    def list_for(self, user: User, unread_only: bool = False) -> List[Notification]:
        q = select(Notification).where(Notification.user_id == user.id)
        if unread_only:
            q = q.where(Notification.is_read.is_(False))
        q = q.order_by(desc(Notification.created_at), desc(Notification.id))
        return list(self.db.scalars(q).all())

    def unread_count(self, user: User) -> int:
        q = select(func.count(Notification.id)).where(
            Notification.user_id == user.id,
            Notification.is_read.is_(False),
        )
        return self.db.scalar(q) or 0

    def _owned(self, user: User, notification_id: int) -> Notification:
        n = self.db.scalars(select(Notification).where(Notification.id == notification_id)).first()
        if not n:
            raise NotFound("Notification not found")
        if n.user_id != user.id:
            raise Forbidden("Not authorized")
        return n

    def mark_read(self, user: User, notification_id: int) -> Notification:
        n = self._owned(user, notification_id)
        # already read: keep the original read_at
        if not n.is_read:
            n.is_read = True
            n.read_at = utcnow()
            self.db.commit()
        return n

    def mark_all_read(self, user: User) -> int:
        result = self.db.execute(
            update(Notification)
            .where(
                Notification.user_id == user.id,
                Notification.is_read.is_(False),
                Notification.deleted_at.is_(None),
            )
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount or 0

    def delete(self, user: User, notification_id: int) -> None:
        n = self._owned(user, notification_id)
        n.deleted_at = utcnow()
        self.db.commit()
