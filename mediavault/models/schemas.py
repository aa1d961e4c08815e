"""Pydantic schemas for API validation and serialization."""

from typing import Any

from pydantic import BaseModel, ConfigDict, StrictBool


# Collection schemas
class CollectionCreate(BaseModel):
    """Collection creation schema. Blank names are rejected by the endpoint."""

    name: str = ""


class CollectionRead(BaseModel):
    """Collection read schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# Flag schemas
class LikeStatus(BaseModel):
    """Result of a like/unlike request."""

    message: str
    is_liked: bool


class FavoriteUpdate(BaseModel):
    """Desired favorite state for a manga."""

    favorited: StrictBool


class FavoriteStatus(BaseModel):
    """Result of a favorite request."""

    message: str
    is_favorited: bool


# Movie listing
class MovieListRead(BaseModel):
    """Paginated movie list in the Emby-style shape the web client expects."""

    Items: list[dict[str, Any]]
    TotalRecordCount: int
    CurrentPage: int
    PageSize: int
    TotalPages: int


# Manga listing
class MangaListRead(BaseModel):
    """Paginated manga list."""

    mangas: list[dict[str, Any]]
    total_mangas: int
    current_page: int
    per_page: int
    total_pages: int


class AuthorRead(BaseModel):
    """Manga author with the number of primary works."""

    name: str
    manga_count: int
