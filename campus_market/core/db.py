# campus_market/core/db.py
from datetime import datetime, timezone
from typing import Iterator

from fastapi import Request
from sqlalchemy import Column, DateTime, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker, with_loader_criteria

from campus_market.utils.logger import logger

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class SoftDeleteMixin:
    """Rows with ``deleted_at`` set are hidden from every ORM SELECT.

    Pass ``execution_options(include_deleted=True)`` to see them.
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)


@event.listens_for(Session, "do_orm_execute")
def _exclude_soft_deleted(execute_state):
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
        and not execute_state.execution_options.get("include_deleted", False)
    ):
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                SoftDeleteMixin,
                lambda cls: cls.deleted_at.is_(None),
                include_aliases=True,
            )
        )


class Database:
    """Engine and session factory, built once at startup and shared."""

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
        self.engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True, echo=echo)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False)

    def create_all(self) -> None:
        # models register on Base.metadata at import
        from campus_market.models import chat, listing, notification, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("tables ready: %s", sorted(Base.metadata.tables.keys()))

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
