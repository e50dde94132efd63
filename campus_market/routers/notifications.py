from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from campus_market.core.auth import get_current_user
from campus_market.core.db import get_db
from campus_market.models.user import User
from campus_market.schemas.common import CountOut, DetailOut
from campus_market.schemas.notification import MarkAllReadOut, NotificationOut
from campus_market.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    unread: bool = False,
    svc: NotificationService = Depends(get_notification_service),
    me: User = Depends(get_current_user),
):
    return [NotificationOut.model_validate(n) for n in svc.list_for(me, unread_only=unread)]


@router.get("/unread-count", response_model=CountOut)
def unread_count(svc: NotificationService = Depends(get_notification_service), me: User = Depends(get_current_user)):
    return CountOut(count=svc.unread_count(me))


@router.put("/read-all", response_model=MarkAllReadOut)
def mark_all_read(svc: NotificationService = Depends(get_notification_service), me: User = Depends(get_current_user)):
    updated = svc.mark_all_read(me)
    return MarkAllReadOut(message="All notifications marked as read", updated=updated)


@router.put("/{notification_id}/read", response_model=DetailOut)
def mark_read(
    notification_id: int = Path(..., ge=1),
    svc: NotificationService = Depends(get_notification_service),
    me: User = Depends(get_current_user),
):
    svc.mark_read(me, notification_id)
    return DetailOut(message="Marked as read")


@router.delete("/{notification_id}", response_model=DetailOut)
def delete_notification(
    notification_id: int = Path(..., ge=1),
    svc: NotificationService = Depends(get_notification_service),
    me: User = Depends(get_current_user),
):
    svc.delete(me, notification_id)
    return DetailOut(message="Notification deleted")
