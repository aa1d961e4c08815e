"""Movie artwork and video stream endpoints, served from the movie assets bucket."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.config import Settings, get_settings
from mediavault.constants import CACHE_CONTROL_DEFAULT, CACHE_CONTROL_STREAM
from mediavault.db import get_movies_db
from mediavault.db.crud import get_actor_thumb_path, get_movie_by_ref, get_movie_for_image
from mediavault.services.catalog import (
    ImageAction,
    join_key,
    movie_artwork_key,
    parse_json_field,
    resolve_image_target,
)
from mediavault.services.catalog.serializers import movie_image_url
from mediavault.storage import Storage, get_storage, require_store, serve_object
from mediavault.utils import LogContext, get_client_ip, get_origin

router = APIRouter()
logger = logging.getLogger(__name__)


async def _serve_artwork(
    kind: str,
    movie_ref: str,
    request: Request,
    db: AsyncSession,
    storage: Storage,
    settings: Settings,
) -> Response:
    movie = await get_movie_for_image(db, movie_ref)
    label = kind.capitalize()
    if not movie:
        raise HTTPException(status_code=404, detail=f"{label} not found")

    target = resolve_image_target(movie_ref, movie.uniqueid_num)
    if target.action is ImageAction.REDIRECT:
        return RedirectResponse(
            movie_image_url(get_origin(request), kind, target.identifier),
            status_code=301,
        )

    key = movie_artwork_key(movie, kind, settings.movie_assets_base_prefix)
    if not key:
        raise HTTPException(status_code=404, detail=f"{label} not found")

    store = require_store(
        storage.movie_assets, "Image service misconfiguration", "Error-MovieBucketMissing"
    )
    return await serve_object(
        store,
        key,
        cache_control=CACHE_CONTROL_DEFAULT,
        range_header=request.headers.get("range"),
        served_by=f"R2-{label}",
    )


@router.get("/images/poster/{movie_ref:path}")
async def get_poster(
    movie_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    storage: Annotated[Storage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Poster image, redirecting to the canonical identifier when addressed otherwise."""
    return await _serve_artwork("poster", movie_ref, request, db, storage, settings)


@router.get("/images/fanart/{movie_ref:path}")
async def get_fanart(
    movie_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    storage: Annotated[Storage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Backdrop image, redirecting to the canonical identifier when addressed otherwise."""
    return await _serve_artwork("fanart", movie_ref, request, db, storage, settings)


@router.get("/images/actor_thumb/{actor_name:path}")
async def get_actor_thumb(
    actor_name: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    storage: Annotated[Storage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    thumb_path = await get_actor_thumb_path(db, actor_name)
    if not thumb_path:
        raise HTTPException(status_code=404, detail="Actor thumb not found")

    store = require_store(
        storage.movie_assets, "Image service misconfiguration", "Error-MovieBucketMissing"
    )
    key = join_key(settings.movie_assets_base_prefix, settings.actor_thumbs_subfolder, thumb_path)
    return await serve_object(
        store,
        key,
        cache_control=CACHE_CONTROL_DEFAULT,
        range_header=request.headers.get("range"),
        served_by="R2-ActorThumb",
    )


def _first_stream_key(strm_files: str | None) -> str | None:
    """First stream reference: a bare key or an object with a ``url``."""
    entries = parse_json_field(strm_files)
    if not entries:
        return None
    first = entries[0]
    if isinstance(first, str) and first:
        return first
    if isinstance(first, dict) and isinstance(first.get("url"), str) and first["url"]:
        return first["url"]
    return None


@router.get("/stream/{item_ref:path}")
async def stream_item(
    item_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    storage: Annotated[Storage, Depends(get_storage)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Stream a movie's first video file, honouring ``Range`` for seeking."""
    log = LogContext(logger, ip=get_client_ip(request))
    movie = await get_movie_by_ref(db, item_ref)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found for streaming")
    log.info(f"Stream request for movie: '{movie.title}' (ID/Num: {item_ref})")

    if not parse_json_field(movie.strm_files):
        raise HTTPException(status_code=404, detail="No stream links available")

    stream_ref = _first_stream_key(movie.strm_files)
    if not stream_ref:
        raise HTTPException(
            status_code=404, detail="Valid storage key for video file not found in strm_files"
        )

    store = require_store(
        storage.movie_assets, "Stream service misconfiguration", "Error-MovieBucketMissing"
    )
    key = join_key(settings.movie_assets_base_prefix, stream_ref)
    log.info(f"Started playing movie: '{movie.title}' (ID/Num: {item_ref}) from key: {key}")
    return await serve_object(
        store,
        key,
        cache_control=CACHE_CONTROL_STREAM,
        range_header=request.headers.get("range"),
        served_by="R2-Stream",
    )
