# campus_market/schemas/chat.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import BaseSchema
from .listing import ListingOut
from .user import UserOut


class ChatCreateIn(BaseSchema):
    listing_id: int = Field(..., ge=1)
    message: str = Field(..., min_length=1)


class SendMessageIn(BaseSchema):
    content: str = Field(..., min_length=1)


class MessageOut(BaseSchema):
    id: int
    chat_id: int
    sender_id: int
    sender: Optional[UserOut] = None
    content: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class ChatCreateOut(BaseSchema):
    chat_id: int
    message: MessageOut


# ===== chat list / detail =====
class ChatOut(BaseSchema):
    id: int
    listing_id: int
    listing: Optional[ListingOut] = None
    buyer_id: int
    buyer: UserOut
    seller_id: int
    seller: UserOut
    other_user: UserOut
    last_message: Optional[MessageOut] = None
    unread_count: int = 0
    created_at: datetime
    updated_at: datetime
