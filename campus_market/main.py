# campus_market/main.py
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from campus_market.core.config import Settings, settings as default_settings
from campus_market.core.db import Database
from campus_market.core.errors import AppError
from campus_market.routers.auth import router as auth_router
from campus_market.routers.categories import router as categories_router
from campus_market.routers.chats import router as chats_router
from campus_market.routers.health import router as health_router
from campus_market.routers.image import router as image_router
from campus_market.routers.listings import router as listings_router
from campus_market.routers.notifications import router as notifications_router
from campus_market.routers.users import router as users_router
from campus_market.services.categories import seed_categories
from campus_market.utils.logger import configure_logging, logger

routers = [
    health_router,
    auth_router,
    categories_router,
    listings_router,
    image_router,
    users_router,
    chats_router,
    notifications_router,
]


def _internal_error(rid: Optional[str]) -> JSONResponse:
    resp = JSONResponse({"detail": "Internal server error"}, status_code=500)
    if rid:
        resp.headers["X-Request-ID"] = rid
    return resp


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    cfg = settings or default_settings
    configure_logging(cfg.LOG_LEVEL)

    db = Database(cfg.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db.create_all()
        session = db.session()
        try:
            seed_categories(session)
        finally:
            session.close()
        logger.info("Campus Market API ready (db backend=%s)", db.engine.url.get_backend_name())
        yield
        db.dispose()

    app = FastAPI(title="Campus Market API", version="1.0.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.db = db

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )

    # Request logging middleware with request ID
    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        rid = uuid.uuid4().hex[:8]
        request.state.rid = rid
        logger.info("→ %s %s rid=%s", request.method, request.url.path, rid)
        try:
            resp = await call_next(request)
        except Exception:
            logger.exception("Unhandled error rid=%s", rid)
            return _internal_error(rid)
        logger.info("← %s status=%s rid=%s", request.url.path, resp.status_code, rid)
        resp.headers["X-Request-ID"] = rid
        return resp

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("internal error rid=%s: %s", getattr(request.state, "rid", None), exc.detail)
            return _internal_error(getattr(request.state, "rid", None))
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")}
            for e in exc.errors()
        ]
        detail = errors[0]["msg"] if errors else "Invalid input"
        return JSONResponse({"detail": detail, "errors": errors}, status_code=400)

    @app.exception_handler(SQLAlchemyError)
    async def db_error_handler(request: Request, exc: SQLAlchemyError):
        # store messages stay in the log
        logger.exception("database error rid=%s", getattr(request.state, "rid", None))
        return _internal_error(getattr(request.state, "rid", None))

    for r in routers:
        app.include_router(r, prefix=cfg.API_PREFIX)

    upload_dir = Path(cfg.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    return app


app = create_app()
