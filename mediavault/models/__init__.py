"""SQLAlchemy models."""

from mediavault.models.base import MangaBase, MovieBase
from mediavault.models.manga import Collection, Manga, manga_collections
from mediavault.models.movie import (
    ActorInfo,
    Movie,
    MovieCollection,
    PrecomputedRelatedMovie,
    movie_movie_collections,
)

__all__ = [
    "MovieBase",
    "MangaBase",
    "Movie",
    "ActorInfo",
    "MovieCollection",
    "PrecomputedRelatedMovie",
    "movie_movie_collections",
    "Manga",
    "Collection",
    "manga_collections",
]
