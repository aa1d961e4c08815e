"""Storage key resolution for movie artwork."""

import enum
from dataclasses import dataclass

from mediavault.models.movie import Movie


class ImageAction(str, enum.Enum):
    """What the image endpoint should do with a request."""

    SERVE = "serve"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class ImageTarget:
    action: ImageAction
    identifier: str


def resolve_image_target(requested: str, canonical: str | None) -> ImageTarget:
    """Decide whether to serve an image or redirect to its canonical URL.

    Images are addressed canonically by the external identifier. A request by
    any other identifier redirects once to the canonical form, unless both
    strings are equal, which would otherwise redirect to itself forever.
    """
    if canonical and canonical != requested:
        return ImageTarget(ImageAction.REDIRECT, canonical)
    return ImageTarget(ImageAction.SERVE, requested)


def join_key(*parts: str | None) -> str:
    """Join storage key segments, dropping empty ones and duplicate slashes."""
    segments = []
    for part in parts:
        if not part:
            continue
        segments.extend(s for s in part.replace("\\", "/").split("/") if s)
    return "/".join(segments)


def movie_artwork_key(movie: Movie, kind: str, base_prefix: str) -> str | None:
    """Storage key of a movie's poster or fanart, or None when it has none."""
    filename = movie.poster_file_relative_path if kind == "poster" else movie.fanart_file_relative_path
    if not movie.folder_path_relative or not filename:
        return None
    return join_key(base_prefix, movie.folder_path_relative, filename)
