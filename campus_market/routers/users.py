from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from campus_market.core.auth import get_current_user
from campus_market.core.config import Settings, get_settings
from campus_market.core.db import get_db
from campus_market.models.user import User
from campus_market.schemas.common import DetailOut
from campus_market.schemas.listing import ListingOut
from campus_market.schemas.user import PasswordChangeIn, UserOut, UserUpdateIn
from campus_market.services.auth import AuthService
from campus_market.services.listings import ListingService
from campus_market.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])

# /me routes are declared before /{user_id} so "me" is never parsed as an id


@router.put("/me", response_model=UserOut)
def update_me(payload: UserUpdateIn, current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserOut.model_validate(UserService(db).update_profile(current, payload))


@router.put("/me/password", response_model=DetailOut)
def change_password(
    payload: PasswordChangeIn,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
):
    AuthService(db, cfg).change_password(current, payload.current_password, payload.new_password)
    return DetailOut(message="Password updated successfully")


@router.get("/me/listings", response_model=List[ListingOut])
def my_listings(
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(active|sold|inactive)$"),
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = ListingService(db).by_seller(current.id, status=status_filter)
    return [ListingOut.model_validate(p) for p in rows]


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return UserOut.model_validate(UserService(db).get(user_id))


@router.get("/{user_id}/listings", response_model=List[ListingOut])
def user_listings(user_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    rows = ListingService(db).by_seller(user_id)
    return [ListingOut.model_validate(p) for p in rows]
