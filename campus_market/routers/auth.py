from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from campus_market.core.auth import get_current_user
from campus_market.core.config import Settings, get_settings
from campus_market.core.db import get_db
from campus_market.models.user import User
from campus_market.schemas.auth import AuthOut, LoginIn, RegisterIn
from campus_market.schemas.user import UserOut
from campus_market.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(db: Session = Depends(get_db), cfg: Settings = Depends(get_settings)) -> AuthService:
    return AuthService(db, cfg)


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    token, user = svc.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return AuthOut(token=token, user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthOut, status_code=status.HTTP_200_OK)
def login(payload: LoginIn, svc: AuthService = Depends(get_auth_service)):
    token, user = svc.login(payload.email, payload.password)
    return AuthOut(token=token, user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def me(current: User = Depends(get_current_user)):
    return UserOut.model_validate(current)
