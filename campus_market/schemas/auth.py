from pydantic import EmailStr, Field

from .base import BaseSchema
from .user import UserOut


class RegisterIn(BaseSchema):
    email: EmailStr
    password: str
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LoginIn(BaseSchema):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AuthOut(BaseSchema):
    token: str
    user: UserOut
