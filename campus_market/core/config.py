# campus_market/core/config.py
from typing import List

from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./marketplace.db"
    API_PREFIX: str = "/api"

    JWT_SECRET: str = "change-this-secret"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # argon2 cost, tuned for roughly 100ms per verify
    ARGON2_TIME_COST: int = 2
    ARGON2_MEMORY_COST: int = 102400
    ARGON2_PARALLELISM: int = 8

    ALLOWED_EMAIL_DOMAIN: str = "ufl.edu"
    ENFORCE_PASSWORD_POLICY: bool = True
    # comma separated, registered with the admin flag
    ADMIN_EMAILS: str = ""

    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    CORS_ORIGINS: str = "http://localhost:4200,http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def admin_emails(self) -> set:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}


settings = Settings()


def get_settings(request: Request) -> Settings:
    """The Settings the running app was built with."""
    return request.app.state.settings
