"""CRUD operations for the manga library."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.constants import DEFAULT_MANGA_SORT
from mediavault.models.manga import Collection, Manga, manga_collections

# Sort option -> ORDER BY clauses; id keeps pages disjoint on ties
MANGA_ORDERINGS = {
    "title_asc": (Manga.title.asc(), Manga.id.asc()),
    "title_desc": (Manga.title.desc(), Manga.id.desc()),
    "id_desc": (Manga.id.desc(),),
    "id_asc": (Manga.id.asc(),),
    "page_count_desc": (Manga.page_count.desc().nullslast(), Manga.title.asc(), Manga.id.asc()),
    "page_count_asc": (Manga.page_count.asc().nullslast(), Manga.title.asc(), Manga.id.asc()),
}


async def list_mangas(
    db: AsyncSession,
    search_term: str | None = None,
    sort_by: str | None = None,
    collection_id: int | None = None,
    author: str | None = None,
    page: int = 1,
    per_page: int = 40,
) -> tuple[Sequence[Manga], int]:
    """Get one page of primary mangas (appendices excluded) and the total.

    ``search_term`` matches title or author and is ignored when ``author``
    is given.
    """
    conditions = [Manga.is_appendix_to.is_(None)]
    if collection_id:
        conditions.append(manga_collections.c.collection_id == collection_id)
    if author:
        conditions.append(Manga.author == author)
    elif search_term:
        term = f"%{search_term}%"
        conditions.append(or_(Manga.title.like(term), Manga.author.like(term)))

    count_query = select(func.count(func.distinct(Manga.id))).select_from(Manga)
    query = select(Manga)
    if collection_id:
        count_query = count_query.join(manga_collections, manga_collections.c.manga_id == Manga.id)
        query = query.join(manga_collections, manga_collections.c.manga_id == Manga.id)

    total_result = await db.execute(count_query.where(*conditions))
    total = total_result.scalar() or 0

    ordering = MANGA_ORDERINGS.get(sort_by or "", MANGA_ORDERINGS[DEFAULT_MANGA_SORT])
    query = (
        query.where(*conditions)
        .order_by(*ordering)
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    result = await db.execute(query)
    return result.scalars().unique().all(), total


async def get_manga(db: AsyncSession, manga_id: int) -> Manga | None:
    return await db.get(Manga, manga_id)


async def get_manga_appendices(db: AsyncSession, manga_id: int) -> list[dict[str, Any]]:
    """Supplementary records attached to a manga, by title."""
    result = await db.execute(
        select(Manga.id, Manga.title, Manga.page_count)
        .where(Manga.is_appendix_to == manga_id)
        .order_by(Manga.title, Manga.id)
    )
    return [
        {"id": row.id, "title": row.title, "page_count": row.page_count} for row in result.all()
    ]


async def get_manga_collections(db: AsyncSession, manga_id: int) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Collection.id, Collection.name)
        .join(manga_collections, manga_collections.c.collection_id == Collection.id)
        .where(manga_collections.c.manga_id == manga_id)
        .order_by(Collection.name)
    )
    return [{"id": row.id, "name": row.name} for row in result.all()]


async def set_manga_favorite(db: AsyncSession, manga: Manga, favorited: bool) -> Manga:
    manga.is_favorited = 1 if favorited else 0
    await db.flush()
    return manga


async def list_manga_collections(db: AsyncSession) -> Sequence[Collection]:
    result = await db.execute(select(Collection).order_by(Collection.name.asc()))
    return result.scalars().all()


async def create_manga_collection(db: AsyncSession, name: str) -> int:
    """Insert a collection and return its id.

    Raises:
        IntegrityError: when the name is already taken
    """
    result = await db.execute(insert(Collection).values(name=name).returning(Collection.id))
    return result.scalar_one()


async def list_authors(db: AsyncSession) -> list[dict[str, Any]]:
    """Authors with the number of primary (non-appendix) mangas, alphabetical."""
    result = await db.execute(
        select(Manga.author, func.count(Manga.id).label("manga_count"))
        .where(
            Manga.author.is_not(None),
            Manga.author != "",
            Manga.is_appendix_to.is_(None),
        )
        .group_by(Manga.author)
        .order_by(Manga.author)
    )
    return [{"name": row.author, "manga_count": row.manga_count} for row in result.all()]
