"""Catalog shaping: row expansion, aggregates, related blending and image keys."""

from mediavault.services.catalog.aggregates import (
    genre_list,
    library_list,
    person_list,
    series_list,
    studio_list,
)
from mediavault.services.catalog.images import (
    ImageAction,
    ImageTarget,
    join_key,
    movie_artwork_key,
    resolve_image_target,
)
from mediavault.services.catalog.related import blend_related
from mediavault.services.catalog.serializers import (
    actor_name,
    manga_page_urls,
    manga_to_dict,
    movie_to_dict,
    parse_directors,
    parse_json_field,
)

__all__ = [
    "ImageAction",
    "ImageTarget",
    "actor_name",
    "blend_related",
    "genre_list",
    "join_key",
    "library_list",
    "manga_page_urls",
    "manga_to_dict",
    "movie_artwork_key",
    "movie_to_dict",
    "parse_directors",
    "parse_json_field",
    "person_list",
    "resolve_image_target",
    "series_list",
    "studio_list",
]
