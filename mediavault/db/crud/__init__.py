"""CRUD operations module."""

from mediavault.db.crud.manga import (
    create_manga_collection,
    get_manga,
    get_manga_appendices,
    get_manga_collections,
    list_authors,
    list_manga_collections,
    list_mangas,
    set_manga_favorite,
)
from mediavault.db.crud.movies import (
    build_movie_filter,
    create_movie_collection,
    expand_movies,
    get_actor_thumb_names,
    get_actor_thumb_path,
    get_all_actor_thumb_names,
    get_genre_rows,
    get_library_roots,
    get_movie_by_ref,
    get_movie_collections_map,
    get_movie_for_image,
    get_person_rows,
    get_related_candidates,
    get_related_primary,
    get_series_rows,
    get_shadowed_ids,
    get_studio_names,
    list_movie_collections,
    list_movies,
    movie_sort_column,
    parse_movie_id,
    set_movie_liked,
)

__all__ = [
    # Movies
    "build_movie_filter",
    "create_movie_collection",
    "expand_movies",
    "get_actor_thumb_names",
    "get_actor_thumb_path",
    "get_all_actor_thumb_names",
    "get_genre_rows",
    "get_library_roots",
    "get_movie_by_ref",
    "get_movie_collections_map",
    "get_movie_for_image",
    "get_person_rows",
    "get_related_candidates",
    "get_related_primary",
    "get_series_rows",
    "get_shadowed_ids",
    "get_studio_names",
    "list_movie_collections",
    "list_movies",
    "movie_sort_column",
    "parse_movie_id",
    "set_movie_liked",
    # Manga
    "create_manga_collection",
    "get_manga",
    "get_manga_appendices",
    "get_manga_collections",
    "list_authors",
    "list_manga_collections",
    "list_mangas",
    "set_manga_favorite",
]
