"""Row-to-response expansion for movies and mangas.

Stored rows keep list values as JSON-encoded text and storage-relative file
paths. Responses carry decoded lists, booleans and absolute URLs pointing at
this service's own image and stream endpoints.
"""

import json
from collections.abc import Container
from typing import Any
from urllib.parse import quote

from mediavault.constants import (
    MANGA_IMAGES_PATH,
    MOVIE_API_PREFIX,
    RUNTIME_TICKS_PER_MINUTE,
)
from mediavault.models.manga import Manga
from mediavault.models.movie import Movie

# Storage-relative paths never leave the service
MOVIE_STORAGE_FIELDS = (
    "folder_path_relative",
    "poster_file_relative_path",
    "fanart_file_relative_path",
)


def parse_json_field(value: Any) -> list[Any]:
    """Decode a JSON-encoded list column.

    Falls back to a comma-separated split when the text is not JSON, wraps a
    decoded scalar in a list, and returns ``[]`` for empty or missing values.
    Never raises.
    """
    if isinstance(value, list):
        return value
    if not isinstance(value, str) or not value:
        return []
    try:
        parsed = json.loads(value)
    except ValueError:
        return [part.strip() for part in value.split(",") if part.strip()]
    if parsed is None:
        return []
    return parsed if isinstance(parsed, list) else [parsed]


def parse_directors(value: Any) -> list[str]:
    """Directors are a JSON list of names, a JSON string, or a bare name."""
    if isinstance(value, list):
        return [d for d in value if isinstance(d, str) and d]
    if not isinstance(value, str) or not value:
        return []
    try:
        parsed = json.loads(value)
    except ValueError:
        return [value]
    if isinstance(parsed, list):
        return [d for d in parsed if isinstance(d, str) and d]
    if isinstance(parsed, str) and parsed:
        return [parsed]
    return []


def actor_name(entry: Any) -> str | None:
    """Name of an actor entry, stored either as ``{"name": ...}`` or a plain string."""
    if isinstance(entry, dict):
        name = entry.get("name")
        return name if isinstance(name, str) and name else None
    if isinstance(entry, str) and entry:
        return entry
    return None


def movie_image_url(origin: str, kind: str, ref: int | str) -> str:
    return f"{origin}{MOVIE_API_PREFIX}/images/{kind}/{quote(str(ref), safe='')}"


def movie_image_ref(
    movie_id: int | None,
    uniqueid_num: str | None,
    shadowed_ids: Container[int] = frozenset(),
) -> int | str | None:
    """Reference used in image URLs: the id, else the external identifier.

    Ids in ``shadowed_ids`` equal another movie's identifier, which the image
    endpoint matches first, so those use the movie's own identifier instead.
    """
    if movie_id is None or (movie_id in shadowed_ids and uniqueid_num):
        return uniqueid_num
    return movie_id


def actor_thumb_url(origin: str, name: str) -> str:
    return f"{origin}{MOVIE_API_PREFIX}/images/actor_thumb/{quote(name, safe='')}"


def manga_image_url(origin: str, path: str, filename: str) -> str:
    return f"{origin}{MANGA_IMAGES_PATH}/{quote(path.strip('/'))}/{quote(filename)}"


def _row_to_dict(row: Any) -> dict[str, Any]:
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


def movie_to_dict(
    movie: Movie | None,
    origin: str,
    collections: list[dict[str, Any]] | None = None,
    actor_thumbs: Container[str] = frozenset(),
    shadowed_ids: Container[int] = frozenset(),
) -> dict[str, Any] | None:
    """Expand a movie row into the response shape.

    Args:
        movie: Stored row, or None
        origin: Scheme and host used for synthesized URLs
        collections: ``{id, name}`` entries the movie belongs to
        actor_thumbs: Actor names that have a thumbnail record
        shadowed_ids: Ids that another movie uses as its external identifier

    Returns:
        Response dict, or None when ``movie`` is None
    """
    if movie is None:
        return None

    data = _row_to_dict(movie)
    for field in MOVIE_STORAGE_FIELDS:
        data.pop(field, None)

    data["genres"] = parse_json_field(movie.genres)
    data["tags"] = parse_json_field(movie.tags)
    actors = parse_json_field(movie.actors)
    directors = parse_directors(movie.director)
    data["actors"] = actors
    data["director"] = directors
    data["strm_files"] = parse_json_field(movie.strm_files)
    data["is_liked"] = bool(movie.is_liked)

    # Emby-like fields
    data["Id"] = movie.id
    data["Name"] = movie.title
    data["Type"] = "Movie"
    data["CommunityRating"] = movie.rating
    data["PremiereDate"] = movie.premiered
    data["RunTimeTicks"] = movie.runtime * RUNTIME_TICKS_PER_MINUTE if movie.runtime else None
    data["SortName"] = movie.title
    data["Overview"] = movie.plot

    image_ref = movie_image_ref(movie.id, movie.uniqueid_num, shadowed_ids)
    stream_ref = movie.id if movie.id is not None else movie.uniqueid_num
    data["PrimaryImageTag"] = None
    data["BackdropImageTags"] = []
    if image_ref is not None:
        if movie.poster_file_relative_path:
            data["PrimaryImageTag"] = movie_image_url(origin, "poster", image_ref)
        if movie.fanart_file_relative_path:
            data["BackdropImageTags"] = [movie_image_url(origin, "fanart", image_ref)]
    data["StreamUrl"] = None
    if stream_ref is not None and data["strm_files"]:
        data["StreamUrl"] = f"{origin}{MOVIE_API_PREFIX}/stream/{quote(str(stream_ref), safe='')}"

    people: list[dict[str, Any]] = []
    for entry in actors:
        name = actor_name(entry)
        if not name:
            continue
        person: dict[str, Any] = {"Name": name, "Id": name, "Type": "Actor"}
        if isinstance(entry, dict) and entry.get("role"):
            person["Role"] = entry["role"]
        if name in actor_thumbs:
            person["ImageTag"] = actor_thumb_url(origin, name)
        people.append(person)
    for name in directors:
        people.append({"Name": name, "Id": name, "Type": "Director"})
    data["People"] = people

    data["Studios"] = [{"Name": movie.studio, "Id": movie.studio}] if movie.studio else []
    data["member_of_collections"] = list(collections or [])
    return data


def manga_to_dict(manga: Manga | None, origin: str) -> dict[str, Any] | None:
    """Expand a manga row: boolean favorite flag and absolute cover URL."""
    if manga is None:
        return None

    data = _row_to_dict(manga)
    data["is_favorited"] = bool(manga.is_favorited)
    data["cover_image_url"] = None
    if manga.path and manga.cover_image:
        data["cover_image_url"] = manga_image_url(origin, manga.path, manga.cover_image)
    return data


def manga_page_urls(manga: Manga, origin: str) -> list[str]:
    """Absolute URLs for every page, in stored order."""
    pages = parse_json_field(manga.pages_json)
    return [manga_image_url(origin, manga.path, str(page)) for page in pages if page]
