"""Main FastAPI application."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from mediavault.api import manga_api_router, movie_api_router
from mediavault.auth import LoginRequiredMiddleware
from mediavault.config import get_settings
from mediavault.constants import SERVED_BY_HEADER, SESSION_COOKIE_NAME
from mediavault.db import create_databases, get_manga_db, get_movies_db, init_db
from mediavault.storage import build_storage
from mediavault.utils import get_client_ip, is_api_path, setup_logging
from mediavault.utils.access_log import AccessLogMiddleware
from mediavault.web import web_router

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    databases = create_databases(settings)
    await init_db(databases)
    app.state.databases = databases
    logger.info("Databases initialized")

    app.state.storage = build_storage(settings)

    yield

    # Shutdown
    await databases.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=VERSION,
    lifespan=lifespan,
)

# Middleware (order matters - last added runs first)
app.add_middleware(LoginRequiredMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    session_cookie=SESSION_COOKIE_NAME,
    max_age=settings.session_max_age_seconds,
    same_site="lax",
    https_only=settings.is_production,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Range"],
    max_age=86400,
)
app.add_middleware(AccessLogMiddleware)

# Routers
app.include_router(movie_api_router)
app.include_router(manga_api_router)
app.include_router(web_router)


def _route_not_found(request: Request) -> Response:
    logger.warning(
        f"{get_client_ip(request)} - Not Found: {request.method} {request.url}"
    )
    if is_api_path(request.url.path):
        return JSONResponse(
            {"error": "Not Found", "message": "API endpoint not found."},
            status_code=404,
            headers={SERVED_BY_HEADER: "NotFoundHandler-API"},
        )
    return PlainTextResponse(
        "Resource Not Found",
        status_code=404,
        headers={SERVED_BY_HEADER: "NotFoundHandler-Page"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Shape HTTP errors as ``{"error": detail}``; unmatched routes get the not-found page."""
    if exc.status_code == 404 and exc.detail == "Not Found" and not exc.headers:
        return _route_not_found(request)

    headers = dict(exc.headers or {})
    headers.setdefault(SERVED_BY_HEADER, "ErrorHandler")
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed parameters or bodies are client errors."""
    return JSONResponse(
        {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        status_code=400,
        headers={SERVED_BY_HEADER: "ErrorHandler"},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"{get_client_ip(request)} - Database error at {request.url.path}: {exc}")
    return JSONResponse(
        {"error": "Database error", "details": str(exc)},
        status_code=500,
        headers={SERVED_BY_HEADER: "ErrorHandler"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort; only development builds echo the exception message."""
    logger.exception(f"{get_client_ip(request)} - Server Error at {request.url.path}")
    message = str(exc) if settings.is_development else "An unexpected error occurred."
    return JSONResponse(
        {"error": "Internal Server Error", "message": message},
        status_code=500,
        headers={SERVED_BY_HEADER: "ErrorHandler"},
    )


# Store app start time for uptime tracking
_app_start_time = datetime.now(UTC)


async def _check_database(db: AsyncSession) -> dict[str, str]:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return {"status": "unhealthy"}
    return {"status": "healthy"}


@app.get("/health", include_in_schema=True, tags=["monitoring"])
async def health_check(
    movies_db: Annotated[AsyncSession, Depends(get_movies_db)],
    manga_db: Annotated[AsyncSession, Depends(get_manga_db)],
) -> JSONResponse:
    """Health check endpoint for monitoring and load balancers.

    Returns:
        JSONResponse with status, uptime, and per-database checks.
    """
    checks = {
        "movies_database": await _check_database(movies_db),
        "manga_database": await _check_database(manga_db),
    }
    healthy = all(check["status"] == "healthy" for check in checks.values())
    health_status = {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": (datetime.now(UTC) - _app_start_time).total_seconds(),
        "version": VERSION,
        "checks": checks,
    }
    return JSONResponse(
        content=health_status,
        status_code=200 if healthy else 503,
        headers={SERVED_BY_HEADER: "HealthCheck"},
    )
