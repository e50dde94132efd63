from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_market.core.config import Settings, get_settings
from campus_market.core.db import get_db
from campus_market.core.errors import Unauthenticated
from campus_market.core.security import decode_access_token
from campus_market.models.user import User

bearer = HTTPBearer(auto_error=False)


def _resolve_user(creds: Optional[HTTPAuthorizationCredentials], db: Session, cfg: Settings) -> User:
    if not creds or (creds.scheme or "").lower() != "bearer":
        raise Unauthenticated("invalid_token")

    claims = decode_access_token(creds.credentials, cfg)

    # the stored row is authoritative for is_admin, not the token claim
    user = db.scalars(select(User).where(User.id == claims["user_id"])).first()
    if not user:
        raise Unauthenticated("invalid_token")
    return user


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
) -> User:
    """Reject the request with 401 unless it carries a valid bearer token."""
    return _resolve_user(creds, db, cfg)


def get_current_user_optional(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
) -> Optional[User]:
    """
    Anonymous (None) when the header is missing or the token does not check out.
    Used by the public browse and detail routes.
    """
    if creds is None:
        return None
    try:
        return _resolve_user(creds, db, cfg)
    except Unauthenticated:
        return None
