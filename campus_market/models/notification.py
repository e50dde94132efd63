import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from campus_market.core.db import Base, SoftDeleteMixin, TimestampMixin


class NotificationType(str, enum.Enum):
    NEW_MESSAGE = "new_message"
    NEW_OFFER = "new_offer"
    LISTING_SOLD = "listing_sold"
    PRICE_DROPPED = "price_dropped"


class Notification(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False, default="")
    link = Column(String(500), nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
