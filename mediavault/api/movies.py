"""Movie library API endpoints."""

import logging
import math
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.constants import (
    DEFAULT_MOVIE_SORT_BY,
    DEFAULT_MOVIE_SORT_ORDER,
    MOVIES_DEFAULT_LIMIT,
)
from mediavault.db import get_movies_db
from mediavault.db.crud import (
    create_movie_collection,
    expand_movies,
    get_all_actor_thumb_names,
    get_genre_rows,
    get_library_roots,
    get_movie_by_ref,
    get_person_rows,
    get_related_candidates,
    get_related_primary,
    get_series_rows,
    get_shadowed_ids,
    get_studio_names,
    list_movie_collections,
    list_movies,
    set_movie_liked,
)
from mediavault.models.schemas import CollectionCreate, CollectionRead, LikeStatus, MovieListRead
from mediavault.services.catalog import (
    blend_related,
    genre_list,
    library_list,
    person_list,
    series_list,
    studio_list,
)
from mediavault.utils import LogContext, get_client_ip, get_origin

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/items", response_model=MovieListRead)
async def list_items(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    start_index: Annotated[int, Query(alias="StartIndex", ge=0)] = 0,
    limit: Annotated[int, Query(alias="Limit", ge=1)] = MOVIES_DEFAULT_LIMIT,
    sort_by: Annotated[str, Query(alias="SortBy")] = DEFAULT_MOVIE_SORT_BY,
    sort_order: Annotated[str, Query(alias="SortOrder")] = DEFAULT_MOVIE_SORT_ORDER,
) -> MovieListRead:
    """List movies matching the filter keys in the query string."""
    movies, total = await list_movies(
        db=db,
        args=request.query_params,
        sort_by=sort_by,
        descending=sort_order.upper() == "DESCENDING",
        start_index=start_index,
        limit=limit,
    )
    items = await expand_movies(db, movies, get_origin(request))

    return MovieListRead(
        Items=items,
        TotalRecordCount=total,
        CurrentPage=start_index // limit + 1,
        PageSize=limit,
        TotalPages=math.ceil(total / limit),
    )


@router.get("/items/{item_ref}/precomputed_related")
async def get_precomputed_related(
    item_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> list[dict[str, Any]]:
    """Ranked related movies followed by a few random same-genre picks."""
    movie = await get_movie_by_ref(db, item_ref)
    if not movie:
        raise HTTPException(status_code=404, detail="Source movie not found")

    origin = get_origin(request)
    primary = await expand_movies(db, await get_related_primary(db, movie.id), origin)
    candidates = await expand_movies(db, await get_related_candidates(db, movie.id), origin)
    return blend_related(primary, candidates)


async def _set_like(request: Request, db: AsyncSession, item_ref: str, liked: bool) -> LikeStatus:
    movie = await get_movie_by_ref(db, item_ref)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")

    await set_movie_liked(db, movie, liked)
    action = "Liked" if liked else "Unliked"
    LogContext(logger, ip=get_client_ip(request)).info(
        f"{action} movie: '{movie.title}' (ID/Num: {item_ref})"
    )
    return LikeStatus(message=f"Movie {action.lower()}", is_liked=liked)


@router.post("/items/{item_ref}/like", response_model=LikeStatus)
async def like_item(
    item_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> LikeStatus:
    """Mark a movie as liked."""
    return await _set_like(request, db, item_ref, liked=True)


@router.delete("/items/{item_ref}/like", response_model=LikeStatus)
async def unlike_item(
    item_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> LikeStatus:
    """Clear a movie's liked flag."""
    return await _set_like(request, db, item_ref, liked=False)


@router.get("/items/{item_ref:path}")
async def get_item(
    item_ref: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> dict[str, Any]:
    """Get a movie by numeric id or external identifier."""
    movie = await get_movie_by_ref(db, item_ref)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")

    items = await expand_movies(db, [movie], get_origin(request))
    return items[0]


# Aggregates
@router.get("/genres")
async def list_genres(
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    parent_id: Annotated[str | None, Query(alias="ParentId")] = None,
) -> list[dict[str, str]]:
    return genre_list(await get_genre_rows(db, parent_id))


@router.get("/libraries")
async def list_libraries(
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> list[dict[str, str]]:
    return library_list(await get_library_roots(db))


@router.get("/persons")
async def list_persons(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    person_type: Annotated[str, Query(alias="PersonType")] = "Actor",
    parent_id: Annotated[str | None, Query(alias="ParentId")] = None,
) -> list[dict[str, Any]]:
    """Actors or directors ranked by movie count."""
    rows = await get_person_rows(db, parent_id)
    thumbs: set[str] = set()
    if person_type.lower() == "actor":
        thumbs = await get_all_actor_thumb_names(db)
    return person_list(rows, person_type, get_origin(request), thumbs)


@router.get("/studios")
async def list_studios(
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    parent_id: Annotated[str | None, Query(alias="ParentId")] = None,
) -> list[dict[str, Any]]:
    return studio_list(await get_studio_names(db, parent_id))


@router.get("/series")
async def list_series(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
    parent_id: Annotated[str | None, Query(alias="ParentId")] = None,
) -> list[dict[str, Any]]:
    """Series with member count, merged genres and artwork from the newest members."""
    rows = await get_series_rows(db, parent_id)
    shadowed = await get_shadowed_ids(db, [row.id for row in rows])
    return series_list(rows, get_origin(request), shadowed)


# Collections
@router.get("/movie_collections", response_model=list[CollectionRead])
async def get_movie_collections(
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> list[CollectionRead]:
    collections = await list_movie_collections(db)
    return [CollectionRead.model_validate(c) for c in collections]


@router.post("/movie_collections", response_model=CollectionRead, status_code=201)
async def create_collection(
    data: CollectionCreate,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_movies_db)],
) -> CollectionRead:
    """Create a named movie collection."""
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name required")

    try:
        collection_id = await create_movie_collection(db, name)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Collection name already exists",
        ) from None

    LogContext(logger, ip=get_client_ip(request)).info(
        f"Created movie collection: '{name}' (ID: {collection_id})"
    )
    return CollectionRead(id=collection_id, name=name)
