# campus_market/services/chats.py
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_market.core.db import utcnow
from campus_market.core.errors import Forbidden, InvalidInput, NotFound
from campus_market.models.chat import Chat, Message
from campus_market.models.listing import Listing
from campus_market.models.notification import NotificationType
from campus_market.models.user import User
from campus_market.services.notifications import NotificationService
from campus_market.utils.logger import logger

# (chat, last message, unread count for the viewer)
ChatSummary = Tuple[Chat, Optional[Message], int]


def counterpart(chat: Chat, user_id: int) -> int:
    """The participant of ``chat`` who is not ``user_id``."""
    if user_id == chat.buyer_id:
        return chat.seller_id
    if user_id == chat.seller_id:
        return chat.buyer_id
    raise Forbidden("Not a participant of this chat")


def is_participant(chat: Chat, user_id: int) -> bool:
    return user_id in (chat.buyer_id, chat.seller_id)


class ChatService:
    def __init__(self, db: Session, notifications: NotificationService):
        self.db = db
        self.notifications = notifications

    # ---------- helpers ----------
    def _find(self, listing_id: int, buyer_id: int) -> Optional[Chat]:
        q = select(Chat).where(Chat.listing_id == listing_id, Chat.buyer_id == buyer_id)
        return self.db.scalars(q).first()

    def _chat_for(self, user: User, chat_id: int) -> Chat:
        chat = self.db.scalars(select(Chat).where(Chat.id == chat_id)).first()
        if not chat:
            raise NotFound("Chat not found")
        if not is_participant(chat, user.id):
            raise Forbidden("Not authorized to view this chat")
        return chat

    def _append(self, chat: Chat, sender: User, content: str) -> Message:
        msg = Message(chat_id=chat.id, sender_id=sender.id, content=content, is_read=False)
        self.db.add(msg)
        chat.updated_at = utcnow()
        return msg

    def _notify(self, chat: Chat, recipient_id: int, text: str) -> None:
        self.notifications.push(
            recipient_id,
            NotificationType.NEW_MESSAGE,
            "New Message",
            text,
            f"/chat/{chat.id}",
        )

    def _reload(self, message_id: int) -> Message:
        q = select(Message).where(Message.id == message_id).execution_options(populate_existing=True)
        return self.db.scalars(q).one()

    def _last_message(self, chat_id: int) -> Optional[Message]:
        q = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(desc(Message.created_at), desc(Message.id))
            .limit(1)
        )
        return self.db.scalars(q).first()

    def _unread_counts(self, chat_ids: List[int], viewer_id: int) -> Dict[int, int]:
        if not chat_ids:
            return {}
        q = (
            select(Message.chat_id, func.count(Message.id))
            .where(
                Message.chat_id.in_(chat_ids),
                Message.sender_id != viewer_id,
                Message.is_read.is_(False),
            )
            .group_by(Message.chat_id)
        )
        return {chat_id: count for chat_id, count in self.db.execute(q).all()}

    # ---------- operations ----------
    def start(self, user: User, listing_id: int, content: str) -> Tuple[Chat, Message, bool]:
        """Open the (listing, buyer) chat or reuse it, then append ``content``.

        Returns the chat, the new message and whether the chat was created.
        """
        listing = self.db.scalars(select(Listing).where(Listing.id == listing_id)).first()
        if not listing:
            raise InvalidInput("Listing not found")
        if listing.seller_id == user.id:
            raise InvalidInput("Cannot message your own listing")

        created = False
        chat = self._find(listing.id, user.id)
        if chat is None:
            chat = Chat(listing_id=listing.id, buyer_id=user.id, seller_id=listing.seller_id)
            self.db.add(chat)
            try:
                self.db.flush()
                created = True
            except IntegrityError:
                # a concurrent first message created it; append to that one
                self.db.rollback()
                chat = self._find(listing.id, user.id)
                if chat is None:
                    raise

        msg = self._append(chat, user, content)
        if created:
            text = "You have a new message about your listing: " + listing.title
        else:
            text = "You have a new message about: " + listing.title
        self._notify(chat, chat.seller_id, text)
        self.db.commit()

        logger.info("chat %s chat=%s listing=%s buyer=%s", "opened" if created else "reused", chat.id, listing.id, user.id)
        return chat, self._reload(msg.id), created

    def list_for(self, user: User) -> List[ChatSummary]:
        q = (
            select(Chat)
            .where(or_(Chat.buyer_id == user.id, Chat.seller_id == user.id))
            .order_by(desc(Chat.updated_at), desc(Chat.id))
        )
        chats = list(self.db.scalars(q).unique().all())
        unread = self._unread_counts([c.id for c in chats], user.id)
        return [(c, self._last_message(c.id), unread.get(c.id, 0)) for c in chats]

    def get(self, user: User, chat_id: int) -> ChatSummary:
        chat = self._chat_for(user, chat_id)
        unread = self._unread_counts([chat.id], user.id)
        return chat, self._last_message(chat.id), unread.get(chat.id, 0)

    def messages(self, user: User, chat_id: int) -> List[Message]:
        """Oldest-first message list. Viewing it marks the other side's messages read."""
        chat = self._chat_for(user, chat_id)

        # one conditional UPDATE, never fetch-then-loop
        self.db.execute(
            update(Message)
            .where(
                Message.chat_id == chat.id,
                Message.sender_id != user.id,
                Message.is_read.is_(False),
                Message.deleted_at.is_(None),
            )
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

        q = (
            select(Message)
            .where(Message.chat_id == chat.id)
            .order_by(Message.created_at, Message.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.scalars(q).unique().all())

    def send(self, user: User, chat_id: int, content: str) -> Message:
        chat = self._chat_for(user, chat_id)

        msg = self._append(chat, user, content)
        title = chat.listing.title if chat.listing else "a listing"
        self._notify(chat, counterpart(chat, user.id), "You have a new message about: " + title)
        self.db.commit()
        return self._reload(msg.id)
