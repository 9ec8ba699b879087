import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Settings, load_settings
from .database import Database
from .domain.accounts.router import router as accounts_router
from .domain.accounts.service import AccountService
from .domain.appointments.router import router as appointments_router
from .domain.doctors.router import router as doctors_router
from .errors import STATUS_KINDS, InternalError, InvalidInputError, error_body

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce verbosity of third-party libraries
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _bootstrap_admin(database: Database, settings: Settings) -> None:
    if not (settings.admin_email and settings.admin_password):
        return
    db = database.SessionLocal()
    try:
        AccountService(db, settings).ensure_admin(
            settings.admin_email.lower(), settings.admin_password
        )
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    database: Database = app.state.database
    try:
        database.create_all()
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Ignore "already exists" errors from race conditions between workers
        if "already exists" in str(e):
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    _bootstrap_admin(database, app.state.settings)

    yield
    logger.info("Application shutting down...")
    database.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        kind = getattr(exc, "kind", None) or STATUS_KINDS.get(exc.status_code, "internal_error")
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} - {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(kind, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=InvalidInputError.status_code,
            content=error_body(InvalidInputError.kind, _validation_message(exc)),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"{request.method} {request.url.path} - Database error: {exc}")
        return JSONResponse(
            status_code=InternalError.status_code,
            content=error_body(InternalError.kind, "Database error, please try again later"),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API; every component receives settings from here"""
    settings = settings or load_settings()
    configure_logging(settings)

    app = FastAPI(title="MedConnect API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = Database(settings)

    register_exception_handlers(app)

    logger.info(f"CORS allowed origins: {settings.allowed_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Routes
    app.include_router(accounts_router, prefix=API_PREFIX)
    app.include_router(doctors_router, prefix=API_PREFIX)
    app.include_router(appointments_router, prefix=API_PREFIX)

    @app.get("/")
    def root():
        return {"message": "MedConnect API is running"}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    @app.get(f"{API_PREFIX}/test")
    def api_test():
        return {
            "message": "API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    return app
