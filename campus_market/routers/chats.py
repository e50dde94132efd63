# campus_market/routers/chats.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from campus_market.core.auth import get_current_user
from campus_market.core.db import get_db
from campus_market.models.chat import Chat, Message
from campus_market.models.user import User
from campus_market.schemas.chat import ChatCreateIn, ChatCreateOut, ChatOut, MessageOut, SendMessageIn
from campus_market.schemas.listing import ListingOut
from campus_market.schemas.user import UserOut
from campus_market.services.chats import ChatService, counterpart
from campus_market.services.notifications import NotificationService

router = APIRouter(prefix="/chats", tags=["chats"])


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    return ChatService(db, NotificationService(db))


def to_chat_out(chat: Chat, me: User, last: Optional[Message], unread: int) -> ChatOut:
    other = chat.seller if counterpart(chat, me.id) == chat.seller_id else chat.buyer
    return ChatOut(
        id=chat.id,
        listing_id=chat.listing_id,
        listing=ListingOut.model_validate(chat.listing) if chat.listing else None,
        buyer_id=chat.buyer_id,
        buyer=UserOut.model_validate(chat.buyer),
        seller_id=chat.seller_id,
        seller=UserOut.model_validate(chat.seller),
        other_user=UserOut.model_validate(other),
        last_message=MessageOut.model_validate(last) if last else None,
        unread_count=unread,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


# GET /chats
@router.get("", response_model=List[ChatOut])
def my_chats(svc: ChatService = Depends(get_chat_service), me: User = Depends(get_current_user)):
    return [to_chat_out(chat, me, last, unread) for chat, last, unread in svc.list_for(me)]


# POST /chats : open a chat about a listing, or append to the existing one
@router.post("", response_model=ChatCreateOut, status_code=status.HTTP_201_CREATED)
def start_chat(
    body: ChatCreateIn,
    response: Response,
    svc: ChatService = Depends(get_chat_service),
    me: User = Depends(get_current_user),
):
    chat, message, created = svc.start(me, body.listing_id, body.message)
    if not created:
        response.status_code = status.HTTP_200_OK
    return ChatCreateOut(chat_id=chat.id, message=MessageOut.model_validate(message))


@router.get("/{chat_id}", response_model=ChatOut)
def get_chat(
    chat_id: int = Path(..., ge=1),
    svc: ChatService = Depends(get_chat_service),
    me: User = Depends(get_current_user),
):
    chat, last, unread = svc.get(me, chat_id)
    return to_chat_out(chat, me, last, unread)


@router.get("/{chat_id}/messages", response_model=List[MessageOut])
def list_messages(
    chat_id: int = Path(..., ge=1),
    svc: ChatService = Depends(get_chat_service),
    me: User = Depends(get_current_user),
):
    return [MessageOut.model_validate(m) for m in svc.messages(me, chat_id)]


@router.post("/{chat_id}/messages", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    body: SendMessageIn,
    chat_id: int = Path(..., ge=1),
    svc: ChatService = Depends(get_chat_service),
    me: User = Depends(get_current_user),
):
    return MessageOut.model_validate(svc.send(me, chat_id, body.content))
