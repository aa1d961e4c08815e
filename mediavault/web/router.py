"""Login flow, SPA shells and static assets served from object storage."""

import logging
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse, Response

from mediavault.auth import check_login_code, end_session, start_session
from mediavault.config import Settings, get_settings
from mediavault.constants import (
    CACHE_CONTROL_MANGA_IMAGES,
    CACHE_CONTROL_STATIC,
    LOGIN_ERROR_MESSAGE,
    LOGIN_PAGE,
    LOGIN_PATH,
    MAIN_PAGE,
    MANGA_PAGE,
    SERVED_BY_HEADER,
    VIDEO_DETAIL_PAGE,
)
from mediavault.services.catalog import join_key
from mediavault.storage import Storage, get_storage, require_store, serve_object
from mediavault.utils import LogContext, get_client_ip

logger = logging.getLogger(__name__)

web_router = APIRouter()

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
MAIN_PAGE_PATHS = (
    "/",
    "/movies_home",
    "/series_view_page",
    "/actors_view_page",
    "/directors_view_page",
    "/studios_view_page",
    "/numbers_view_page",
)
MANGA_PAGE_PATHS = (
    "/manga_home",
    "/manga_detail/{manga_id}",
    "/manga_read/{manga_id}",
    "/manga_author/{author_name:path}",
)


async def _serve_page(storage: Storage, page: str) -> Response:
    store = require_store(
        storage.static_files,
        "Page service misconfiguration",
        "Error-StaticBucketMissing",
    )
    return await serve_object(
        store,
        page,
        cache_control="no-cache",
        served_by="R2-Html",
        content_type=HTML_CONTENT_TYPE,
    )


@web_router.get(LOGIN_PATH, include_in_schema=False)
async def login_page(storage: Annotated[Storage, Depends(get_storage)]) -> Response:
    """Login form. Errors come back as ``?error=`` for the page script to show."""
    return await _serve_page(storage, LOGIN_PAGE)


@web_router.post(LOGIN_PATH, include_in_schema=False)
async def login(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    login_code: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    """Start a session when the submitted code matches."""
    log = LogContext(logger, ip=get_client_ip(request))
    if not check_login_code(login_code, settings.login_code):
        log.warning("Failed login attempt")
        query = urlencode({"error": LOGIN_ERROR_MESSAGE})
        return RedirectResponse(url=f"{LOGIN_PATH}?{query}", status_code=303)

    start_session(request)
    log.info("Logged in")
    return RedirectResponse(url="/", status_code=303)


@web_router.get("/logout", include_in_schema=False)
async def logout(request: Request) -> RedirectResponse:
    end_session(request)
    return RedirectResponse(url=LOGIN_PATH, status_code=303)


async def main_page(storage: Annotated[Storage, Depends(get_storage)]) -> Response:
    return await _serve_page(storage, MAIN_PAGE)


async def manga_page(storage: Annotated[Storage, Depends(get_storage)]) -> Response:
    return await _serve_page(storage, MANGA_PAGE)


for path in MAIN_PAGE_PATHS:
    web_router.add_api_route(path, main_page, methods=["GET"], include_in_schema=False)
for path in MANGA_PAGE_PATHS:
    web_router.add_api_route(path, manga_page, methods=["GET"], include_in_schema=False)


@web_router.get("/video_detail.html", include_in_schema=False)
async def video_detail_page(storage: Annotated[Storage, Depends(get_storage)]) -> Response:
    """Player page; reads the item id from its own query string."""
    return await _serve_page(storage, VIDEO_DETAIL_PAGE)


@web_router.get("/static/{file_path:path}", include_in_schema=False)
async def static_file(
    file_path: str,
    request: Request,
    storage: Annotated[Storage, Depends(get_storage)],
) -> Response:
    """Files under ``static/`` in the static bucket."""
    store = require_store(
        storage.static_files,
        "Static file service misconfiguration",
        "Error-StaticBucketMissing",
    )
    return await serve_object(
        store,
        join_key("static", file_path),
        cache_control=CACHE_CONTROL_STATIC,
        range_header=request.headers.get("range"),
        served_by="R2-Static",
    )


@web_router.get("/data/manga_images/{image_path:path}", include_in_schema=False)
async def manga_image(
    image_path: str,
    request: Request,
    storage: Annotated[Storage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Manga covers and pages, addressed as ``<manga folder>/<file>``."""
    if not image_path.strip("/"):
        raise HTTPException(
            status_code=400,
            detail="Manga image path suffix missing or invalid",
            headers={SERVED_BY_HEADER: "Error-MangaImagePath"},
        )

    store = require_store(
        storage.manga,
        "Manga image service misconfiguration",
        "Error-MangaBucketMissing",
    )
    return await serve_object(
        store,
        join_key(settings.manga_base_prefix, image_path),
        cache_control=CACHE_CONTROL_MANGA_IMAGES,
        range_header=request.headers.get("range"),
        served_by="R2-MangaImage",
    )
