# campus_market/schemas/user.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import BaseSchema


class UserOut(BaseSchema):
    """Public view of a user. Never carries the password hash."""

    id: int
    email: str
    first_name: str
    last_name: str
    profile_image: str = ""
    phone: str = ""
    bio: str = ""
    is_admin: bool = False
    created_at: datetime


class UserUpdateIn(BaseSchema):
    # empty values are ignored, not applied
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None


class PasswordChangeIn(BaseSchema):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
