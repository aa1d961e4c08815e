"""CRUD operations for the movie library."""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import ColumnElement, and_, func, insert, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.constants import (
    DEFAULT_MOVIE_SORT_FIELD,
    MAX_GENRE_CANDIDATES,
    MAX_PRIMARY_RELATED,
    MAX_SQLITE_INTEGER,
    MOVIE_SORT_FIELDS,
    RELATION_GENRE_RANDOM_PICK,
)
from mediavault.models.movie import (
    ActorInfo,
    Movie,
    MovieCollection,
    PrecomputedRelatedMovie,
    movie_movie_collections,
)
from mediavault.services.catalog.serializers import actor_name, movie_to_dict, parse_json_field

_TRUE_VALUES = {"1", "true", "yes"}


def _has_value(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def build_movie_filter(args: Mapping[str, Any]) -> ColumnElement[bool]:
    """Build the WHERE predicate for a movie listing.

    Every user value is bound as a parameter. JSON list columns are matched
    with ``LIKE '%"value"%'``, which can give false positives when one value
    is a substring of another and does not escape ``%`` or ``_`` in input.

    Args:
        args: Flat query mapping (``SearchTerm``, ``Genres``, ``ParentId``, ...)

    Returns:
        Boolean expression; always true when no filter keys are present
    """
    conditions: list[ColumnElement[bool]] = []

    search_term = args.get("SearchTerm")
    if _has_value(search_term):
        term = f"%{search_term}%"
        conditions.append(
            or_(
                Movie.title.like(term),
                Movie.plot.like(term),
                Movie.director.like(term),
                Movie.studio.like(term),
                Movie.uniqueid_num.like(term),
                Movie.actors.like(term),
            )
        )

    fuzzy = args.get("uniqueid_num_fuzzy")
    if _has_value(fuzzy):
        conditions.append(Movie.uniqueid_num.like(f"%{fuzzy}%"))

    prefix = args.get("uniqueid_num_prefix")
    if _has_value(prefix):
        conditions.append(Movie.uniqueid_num.like(f"{prefix}%"))

    genres = args.get("Genres")
    if _has_value(genres):
        tokens = [g.strip() for g in str(genres).split(",") if g.strip()]
        if tokens:
            conditions.append(or_(*(Movie.genres.like(f'%"{g}"%') for g in tokens)))

    parent_id = args.get("ParentId")
    if _has_value(parent_id):
        conditions.append(Movie.root_folder == parent_id)

    item_type = args.get("IncludeItemTypes")
    if item_type == "Movie":
        conditions.append(or_(Movie.set_name.is_(None), Movie.set_name == ""))
    elif item_type == "Series":
        conditions.append(and_(Movie.set_name.is_not(None), Movie.set_name != ""))

    person = args.get("personIds")
    if _has_value(person):
        conditions.append(
            or_(
                # Scanners write actor JSON with and without a space after the colon
                Movie.actors.like(f'%"name":"{person}"%'),
                Movie.actors.like(f'%"name": "{person}"%'),
                Movie.director == person,
                Movie.director.like(f'%"{person}"%'),
            )
        )

    studio = args.get("studioIds")
    if _has_value(studio):
        conditions.append(Movie.studio == studio)

    series_name = args.get("seriesName")
    if _has_value(series_name):
        conditions.append(Movie.set_name == series_name)

    is_favorite = args.get("IsFavorite")
    if _has_value(is_favorite) and str(is_favorite).lower() in _TRUE_VALUES:
        conditions.append(Movie.is_liked == 1)

    if not conditions:
        return true()
    return and_(*conditions)


def movie_sort_column(sort_by: str | None):
    """Map an API sort name onto a movies column, defaulting to the premiere date."""
    field = MOVIE_SORT_FIELDS.get(sort_by or "", DEFAULT_MOVIE_SORT_FIELD)
    return getattr(Movie, field)


async def list_movies(
    db: AsyncSession,
    args: Mapping[str, Any],
    sort_by: str | None,
    descending: bool,
    start_index: int,
    limit: int,
) -> tuple[Sequence[Movie], int]:
    """Get one page of filtered movies and the total match count.

    Nulls sort last in either direction and ``id`` breaks ties, so pages
    taken with the same parameters are disjoint.
    """
    predicate = build_movie_filter(args)

    total_result = await db.execute(select(func.count(Movie.id)).where(predicate))
    total = total_result.scalar() or 0

    sort_column = movie_sort_column(sort_by)
    query = select(Movie).where(predicate)
    if descending:
        query = query.order_by(sort_column.desc().nullslast(), Movie.id.desc())
    else:
        query = query.order_by(sort_column.asc().nullslast(), Movie.id.asc())
    query = query.offset(start_index).limit(limit)

    result = await db.execute(query)
    return result.scalars().all(), total


def parse_movie_id(ref: str) -> int | None:
    """Primary key named by ``ref``, or None when it is not a storable id."""
    if not (ref.isascii() and ref.isdigit()):
        return None
    movie_id = int(ref)
    if not 0 < movie_id <= MAX_SQLITE_INTEGER:
        return None
    return movie_id


async def get_movie_by_ref(db: AsyncSession, ref: str) -> Movie | None:
    """Get a movie by numeric id, or by external identifier otherwise."""
    movie_id = parse_movie_id(ref)
    if movie_id is not None:
        return await db.get(Movie, movie_id)
    result = await db.execute(
        select(Movie).where(Movie.uniqueid_num == ref).order_by(Movie.id).limit(1)
    )
    return result.scalars().first()


async def get_movie_for_image(db: AsyncSession, ref: str) -> Movie | None:
    """Get a movie for an image request.

    An exact external identifier match wins, so a numeric-looking identifier
    addresses its own movie rather than the row with that primary key.
    """
    result = await db.execute(
        select(Movie).where(Movie.uniqueid_num == ref).order_by(Movie.id).limit(1)
    )
    movie = result.scalars().first()
    if movie is None:
        movie_id = parse_movie_id(ref)
        if movie_id is not None:
            movie = await db.get(Movie, movie_id)
    return movie


async def set_movie_liked(db: AsyncSession, movie: Movie, liked: bool) -> Movie:
    """Set the liked flag. Repeating the same call leaves the row unchanged."""
    movie.is_liked = 1 if liked else 0
    await db.flush()
    return movie


async def get_movie_collections_map(
    db: AsyncSession, movie_ids: Sequence[int]
) -> dict[int, list[dict[str, Any]]]:
    """Collection membership for many movies in one query."""
    if not movie_ids:
        return {}
    result = await db.execute(
        select(movie_movie_collections.c.movie_id, MovieCollection.id, MovieCollection.name)
        .join(MovieCollection, MovieCollection.id == movie_movie_collections.c.collection_id)
        .where(movie_movie_collections.c.movie_id.in_(set(movie_ids)))
        .order_by(MovieCollection.name)
    )
    memberships: dict[int, list[dict[str, Any]]] = {}
    for movie_id, collection_id, name in result.all():
        memberships.setdefault(movie_id, []).append({"id": collection_id, "name": name})
    return memberships


async def get_actor_thumb_names(db: AsyncSession, names: Sequence[str]) -> set[str]:
    """Names among ``names`` that have a thumbnail on record."""
    if not names:
        return set()
    result = await db.execute(
        select(ActorInfo.name)
        .where(
            ActorInfo.name.in_(set(names)),
            ActorInfo.thumb_path.is_not(None),
            ActorInfo.thumb_path != "",
        )
        .distinct()
    )
    return set(result.scalars().all())


async def get_all_actor_thumb_names(db: AsyncSession) -> set[str]:
    result = await db.execute(
        select(ActorInfo.name)
        .where(ActorInfo.thumb_path.is_not(None), ActorInfo.thumb_path != "")
        .distinct()
    )
    return set(result.scalars().all())


async def get_actor_thumb_path(db: AsyncSession, name: str) -> str | None:
    result = await db.execute(
        select(ActorInfo.thumb_path)
        .where(ActorInfo.name == name, ActorInfo.thumb_path.is_not(None), ActorInfo.thumb_path != "")
        .order_by(ActorInfo.id)
        .limit(1)
    )
    return result.scalars().first()


async def get_shadowed_ids(db: AsyncSession, movie_ids: Sequence[int]) -> set[int]:
    """Ids that some movie also uses as its external identifier.

    The image endpoint matches identifiers first, so an image URL keyed by one
    of these ids would resolve to the identifier's movie.
    """
    refs = {str(movie_id) for movie_id in movie_ids if movie_id is not None}
    if not refs:
        return set()
    result = await db.execute(
        select(Movie.uniqueid_num).where(Movie.uniqueid_num.in_(refs)).distinct()
    )
    return {int(ref) for ref in result.scalars().all()}


async def expand_movies(
    db: AsyncSession, movies: Sequence[Movie], origin: str
) -> list[dict[str, Any]]:
    """Expand rows into response dicts, keeping input order.

    Collection membership, actor thumbnails and shadowed image ids are
    fetched with one batched query each for the whole page.
    """
    if not movies:
        return []

    names: set[str] = set()
    for movie in movies:
        for entry in parse_json_field(movie.actors):
            name = actor_name(entry)
            if name:
                names.add(name)

    memberships = await get_movie_collections_map(db, [m.id for m in movies])
    thumbs = await get_actor_thumb_names(db, sorted(names))
    shadowed = await get_shadowed_ids(db, [m.id for m in movies])

    expanded = []
    for movie in movies:
        data = movie_to_dict(
            movie, origin, memberships.get(movie.id, []), thumbs, shadowed_ids=shadowed
        )
        if data is not None:
            expanded.append(data)
    return expanded


# Aggregate listings
async def get_genre_rows(db: AsyncSession, parent_id: str | None = None) -> Sequence[str | None]:
    query = select(Movie.genres).distinct()
    if parent_id:
        query = query.where(Movie.root_folder == parent_id)
    result = await db.execute(query)
    return result.scalars().all()


async def get_library_roots(db: AsyncSession) -> Sequence[str]:
    result = await db.execute(
        select(Movie.root_folder)
        .where(Movie.root_folder.is_not(None), Movie.root_folder != "")
        .distinct()
    )
    return result.scalars().all()


async def get_person_rows(db: AsyncSession, parent_id: str | None = None) -> Sequence[Any]:
    query = select(Movie.id, Movie.actors, Movie.director)
    if parent_id:
        query = query.where(Movie.root_folder == parent_id)
    result = await db.execute(query)
    return result.all()


async def get_studio_names(db: AsyncSession, parent_id: str | None = None) -> Sequence[str]:
    query = select(Movie.studio).where(Movie.studio.is_not(None), Movie.studio != "")
    if parent_id:
        query = query.where(Movie.root_folder == parent_id)
    result = await db.execute(query)
    return result.scalars().all()


async def get_series_rows(db: AsyncSession, parent_id: str | None = None) -> Sequence[Any]:
    """Movies that belong to a series, newest first."""
    query = select(
        Movie.id, Movie.uniqueid_num, Movie.set_name, Movie.genres, Movie.premiered
    ).where(Movie.set_name.is_not(None), Movie.set_name != "")
    if parent_id:
        query = query.where(Movie.root_folder == parent_id)
    query = query.order_by(Movie.premiered.desc().nullslast(), Movie.id.desc())
    result = await db.execute(query)
    return result.all()


# Related movies
async def get_related_primary(
    db: AsyncSession, source_movie_id: int, limit: int = MAX_PRIMARY_RELATED
) -> Sequence[Movie]:
    """Ranked relations: best score first, then highest rating."""
    result = await db.execute(
        select(Movie)
        .join(PrecomputedRelatedMovie, PrecomputedRelatedMovie.related_movie_id == Movie.id)
        .where(
            PrecomputedRelatedMovie.source_movie_id == source_movie_id,
            PrecomputedRelatedMovie.relation_type != RELATION_GENRE_RANDOM_PICK,
        )
        .order_by(
            PrecomputedRelatedMovie.relevance_score.desc(),
            Movie.rating.desc().nullslast(),
            Movie.id,
        )
        .limit(limit)
    )
    return result.scalars().all()


async def get_related_candidates(
    db: AsyncSession, source_movie_id: int, limit: int = MAX_GENRE_CANDIDATES
) -> Sequence[Movie]:
    """Unranked discovery pool in random order."""
    result = await db.execute(
        select(Movie)
        .join(PrecomputedRelatedMovie, PrecomputedRelatedMovie.related_movie_id == Movie.id)
        .where(
            PrecomputedRelatedMovie.source_movie_id == source_movie_id,
            PrecomputedRelatedMovie.relation_type == RELATION_GENRE_RANDOM_PICK,
        )
        .order_by(func.random())
        .limit(limit)
    )
    return result.scalars().all()


# Collections
async def list_movie_collections(db: AsyncSession) -> Sequence[MovieCollection]:
    result = await db.execute(select(MovieCollection).order_by(MovieCollection.name.asc()))
    return result.scalars().all()


async def create_movie_collection(db: AsyncSession, name: str) -> int:
    """Insert a collection and return its id.

    Raises:
        IntegrityError: when the name is already taken
    """
    result = await db.execute(
        insert(MovieCollection).values(name=name).returning(MovieCollection.id)
    )
    return result.scalar_one()
