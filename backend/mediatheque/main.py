"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.orm import Session

from .database import engine, Base, get_db, DATABASE_URL
from .api import folders_router, media_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .middleware.exception_handler import media_exception_handler, request_validation_handler
from .middleware.request_context import RequestContextMiddleware
from .exceptions import MediaException
from .storage import LocalStorage
from . import models  # noqa: F401  (registers tables on Base.metadata)

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _init_database() -> None:
    """Verify connectivity and create missing tables. Exits with a clear message on failure."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.critical(
            "Database initialisation failed.\n"
            f"  DATABASE_URL: {masked}\n"
            "  Check that the server is reachable (PostgreSQL) or that the\n"
            "  directory exists and is writable (SQLite).\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e
    logger.info("Database ready")


_init_database()

# The static mount needs the directory to exist at import time.
storage = LocalStorage()
storage.ensure_root()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the media API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        if not settings.auth_enabled:
            logger.warning(
                "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
                "Every media endpoint is open. Set AUTH_ENABLED=true for production."
            )
        elif settings.jwt_secret_key == "dev-insecure-key-change-me":
            logger.critical(
                "SECURITY: AUTH_ENABLED=true but JWT_SECRET_KEY is the default. "
                "Anyone can forge tokens."
            )

    yield


app = FastAPI(
    title="Médiathèque API",
    description=(
        "Media library for the company admin panel: folder hierarchy, batch "
        "upload, file metadata, bulk deletion and library statistics.\n\n"
        "**Authentication:** when `AUTH_ENABLED=true`, every `/api/media` endpoint "
        "requires a `Bearer` token issued by the panel's auth service."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(MediaException, media_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

app.include_router(folders_router)
app.include_router(media_router)
app.mount(settings.media_url_prefix, StaticFiles(directory=str(storage.root)), name="uploads")

logger.info(
    "Médiathèque API started | env=%s | db=%s | auth=%s | uploads=%s",
    settings.environment.value,
    "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite",
    "enabled" if settings.auth_enabled else "disabled",
    storage.root,
)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Médiathèque API",
        "version": API_VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check with database status, uptime and file count.

    Never raises, so load balancers get a degraded status instead of a 5xx.
    """
    db_status = "ok"
    file_count = 0
    try:
        file_count = db.execute(text("SELECT COUNT(*) FROM media_files")).scalar() or 0
    except Exception:
        logger.exception("Health check query failed")
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": API_VERSION,
        "file_count": file_count,
    }
