# campus_market/models/chat.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from campus_market.core.db import Base, SoftDeleteMixin, TimestampMixin


class Chat(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "chats"
    __table_args__ = (UniqueConstraint("listing_id", "buyer_id", name="uq_chat_listing_buyer"),)

    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # copied from the listing when the chat is opened
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    listing = relationship("Listing", lazy="joined")
    buyer = relationship("User", foreign_keys=[buyer_id], lazy="joined")
    seller = relationship("User", foreign_keys=[seller_id], lazy="joined")
    messages = relationship("Message", back_populates="chat", order_by="Message.id", lazy="raise")


class Message(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chats.id"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    chat = relationship("Chat", back_populates="messages")
    sender = relationship("User", lazy="joined")
