from datetime import datetime
from typing import Optional

from .base import BaseSchema


class NotificationOut(BaseSchema):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    link: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class MarkAllReadOut(BaseSchema):
    message: str
    updated: int
