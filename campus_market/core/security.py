import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.hash import argon2

from campus_market.core.config import Settings, settings as default_settings
from campus_market.core.errors import InvalidInput, Unauthenticated

_SYMBOL = re.compile(r"[^A-Za-z0-9]")

# each helper takes the app's Settings; None means the process-wide defaults


def _hasher(cfg: Settings):
    return argon2.using(
        time_cost=cfg.ARGON2_TIME_COST,
        memory_cost=cfg.ARGON2_MEMORY_COST,
        parallelism=cfg.ARGON2_PARALLELISM,
    )


def hash_password(plain: str, cfg: Optional[Settings] = None) -> str:
    return _hasher(cfg or default_settings).hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return argon2.verify(plain, hashed)
    except ValueError:
        # malformed stored hash
        return False


# verified against when the login email is unknown, so both failure paths cost the same
_DUMMY_HASHES = {}


def burn_verify(plain: str, cfg: Optional[Settings] = None) -> None:
    cfg = cfg or default_settings
    key = (cfg.ARGON2_TIME_COST, cfg.ARGON2_MEMORY_COST, cfg.ARGON2_PARALLELISM)
    if key not in _DUMMY_HASHES:
        _DUMMY_HASHES[key] = hash_password("not-a-real-password", cfg)
    verify_password(plain, _DUMMY_HASHES[key])


def check_password_policy(password: str, cfg: Optional[Settings] = None) -> None:
    cfg = cfg or default_settings
    if len(password) < 6:
        raise InvalidInput("Password must be at least 6 characters")
    if not cfg.ENFORCE_PASSWORD_POLICY:
        return
    if not (
        any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
        and _SYMBOL.search(password)
    ):
        raise InvalidInput(
            "Password must contain an uppercase letter, a lowercase letter, a number and a symbol"
        )


def create_access_token(user_id: int, email: str, is_admin: bool, cfg: Optional[Settings] = None) -> str:
    cfg = cfg or default_settings
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "is_admin": bool(is_admin),
        "iat": now,
        "nbf": now,
        "exp": now + timedelta(hours=cfg.ACCESS_TOKEN_EXPIRE_HOURS),
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm=cfg.JWT_ALG)


def decode_access_token(token: str, cfg: Optional[Settings] = None) -> dict:
    """Return the claims of a valid token, raise Unauthenticated otherwise."""
    cfg = cfg or default_settings
    try:
        payload = jwt.decode(token, cfg.JWT_SECRET, algorithms=[cfg.JWT_ALG])
    except ExpiredSignatureError:
        raise Unauthenticated("token_expired")
    except JWTError:
        raise Unauthenticated("invalid_token")

    sub = payload.get("sub")
    try:
        payload["user_id"] = int(sub)
    except (TypeError, ValueError):
        raise Unauthenticated("invalid_token")
    return payload
