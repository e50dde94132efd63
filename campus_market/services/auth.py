# campus_market/services/auth.py
from typing import Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_market.core.config import Settings
from campus_market.core.errors import Conflict, InvalidCredentials, InvalidInput, Unauthenticated
from campus_market.core.security import (
    burn_verify,
    check_password_policy,
    create_access_token,
    hash_password,
    verify_password,
)
from campus_market.models.user import User
from campus_market.utils.logger import logger

# one message for both "no such user" and "wrong password"
LOGIN_FAILED = "Invalid email or password. Please try again."
EMAIL_TAKEN = "An account with this email already exists. Please login or use a different email."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def issue_token(user: User, cfg: Settings) -> str:
    return create_access_token(user.id, user.email, user.is_admin, cfg)


class AuthService:
    def __init__(self, db: Session, cfg: Settings):
        self.db = db
        self.cfg = cfg

    def _by_email(self, email: str):
        # include_deleted: a soft-deleted account still owns its address
        stmt = select(User).where(func.lower(User.email) == email)
        return self.db.scalars(stmt.execution_options(include_deleted=True)).first()

    def register(self, email: str, password: str, first_name: str, last_name: str) -> Tuple[str, User]:
        email = normalize_email(email)
        domain = self.cfg.ALLOWED_EMAIL_DOMAIN.lower()
        if domain and not email.endswith("@" + domain):
            raise InvalidInput(f"Must use a valid university email (@{domain})")
        check_password_policy(password, self.cfg)

        if self._by_email(email) is not None:
            raise Conflict(EMAIL_TAKEN)

        user = User(
            email=email,
            password_hash=hash_password(password, self.cfg),
            first_name=first_name,
            last_name=last_name,
            is_admin=email in self.cfg.admin_emails,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration of the same address
            self.db.rollback()
            raise Conflict(EMAIL_TAKEN)
        self.db.refresh(user)

        logger.info("user registered id=%s", user.id)
        return issue_token(user, self.cfg), user

    def login(self, email: str, password: str) -> Tuple[str, User]:
        user = self._by_email(normalize_email(email))
        if user is None or user.deleted_at is not None:
            burn_verify(password, self.cfg)
            raise Unauthenticated(LOGIN_FAILED)
        if not verify_password(password, user.password_hash):
            raise Unauthenticated(LOGIN_FAILED)
        return issue_token(user, self.cfg), user

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentials()
        check_password_policy(new_password, self.cfg)

        user.password_hash = hash_password(new_password, self.cfg)
        self.db.commit()
        logger.info("password changed user=%s", user.id)
