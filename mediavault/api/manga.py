"""Manga library API endpoints."""

import logging
import math
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.constants import DEFAULT_MANGA_SORT, MANGA_DEFAULT_PER_PAGE
from mediavault.db import get_manga_db
from mediavault.db.crud import (
    create_manga_collection,
    get_manga,
    get_manga_appendices,
    get_manga_collections,
    list_authors,
    list_manga_collections,
    list_mangas,
    set_manga_favorite,
)
from mediavault.models.schemas import (
    AuthorRead,
    CollectionCreate,
    CollectionRead,
    FavoriteStatus,
    FavoriteUpdate,
    MangaListRead,
)
from mediavault.services.catalog import manga_page_urls, manga_to_dict
from mediavault.utils import LogContext, get_client_ip, get_origin

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/mangas", response_model=MangaListRead)
async def list_manga_items(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_manga_db)],
    search_term: Annotated[str | None, Query()] = None,
    sort_by: Annotated[str, Query()] = DEFAULT_MANGA_SORT,
    collection_id: Annotated[int | None, Query()] = None,
    author: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1)] = MANGA_DEFAULT_PER_PAGE,
) -> MangaListRead:
    """List primary mangas; appendices only appear on their parent's detail."""
    mangas, total = await list_mangas(
        db=db,
        search_term=search_term,
        sort_by=sort_by,
        collection_id=collection_id,
        author=author,
        page=page,
        per_page=per_page,
    )
    origin = get_origin(request)

    return MangaListRead(
        mangas=[manga_to_dict(m, origin) for m in mangas],
        total_mangas=total,
        current_page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page),
    )


@router.get("/manga_item/{item_id}")
async def get_manga_item(
    item_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_manga_db)],
) -> dict[str, Any]:
    """Get a manga with page URLs, appendices and collection membership."""
    manga = await get_manga(db, item_id)
    if not manga:
        raise HTTPException(status_code=404, detail="Manga not found")

    LogContext(logger, ip=get_client_ip(request)).info(
        f"Viewed manga details: '{manga.title}' (ID: {item_id})"
    )

    origin = get_origin(request)
    data = manga_to_dict(manga, origin)
    data["image_urls"] = manga_page_urls(manga, origin)
    data["appendices"] = await get_manga_appendices(db, item_id)
    data["member_of_collections"] = await get_manga_collections(db, item_id)
    return data


@router.post("/manga_item/{item_id}/favorite", response_model=FavoriteStatus)
async def favorite_manga_item(
    item_id: int,
    data: FavoriteUpdate,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_manga_db)],
) -> FavoriteStatus:
    """Set the favorite flag to the state given in the body."""
    manga = await get_manga(db, item_id)
    if not manga:
        raise HTTPException(status_code=404, detail="Manga not found")

    await set_manga_favorite(db, manga, data.favorited)
    action = "Favorited" if data.favorited else "Unfavorited"
    LogContext(logger, ip=get_client_ip(request)).info(
        f"{action} manga: '{manga.title}' (ID: {item_id})"
    )
    return FavoriteStatus(message=f"Manga {action.lower()}", is_favorited=data.favorited)


@router.get("/collections", response_model=list[CollectionRead])
async def get_collections(
    db: Annotated[AsyncSession, Depends(get_manga_db)],
) -> list[CollectionRead]:
    collections = await list_manga_collections(db)
    return [CollectionRead.model_validate(c) for c in collections]


@router.post("/collections", response_model=CollectionRead, status_code=201)
async def create_collection(
    data: CollectionCreate,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_manga_db)],
) -> CollectionRead:
    """Create a named manga collection."""
    name = data.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name required")

    try:
        collection_id = await create_manga_collection(db, name)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Collection name already exists",
        ) from None

    LogContext(logger, ip=get_client_ip(request)).info(
        f"Created manga collection: '{name}' (ID: {collection_id})"
    )
    return CollectionRead(id=collection_id, name=name)


@router.get("/authors", response_model=list[AuthorRead])
async def get_authors(
    db: Annotated[AsyncSession, Depends(get_manga_db)],
) -> list[AuthorRead]:
    """Authors of primary mangas with their work counts."""
    return [AuthorRead(**row) for row in await list_authors(db)]
