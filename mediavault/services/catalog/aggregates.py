"""Shape aggregate listings (genres, libraries, people, studios, series)."""

import re
from collections.abc import Container, Iterable
from typing import Any

from mediavault.constants import SERIES_MAX_BACKDROPS
from mediavault.services.catalog.serializers import (
    actor_name,
    actor_thumb_url,
    movie_image_ref,
    movie_image_url,
    parse_directors,
    parse_json_field,
)

_PATH_SEPARATORS = re.compile(r"[/\\]")


def genre_list(genre_columns: Iterable[str | None]) -> list[dict[str, str]]:
    """Distinct trimmed genre names, alphabetical."""
    names: set[str] = set()
    for value in genre_columns:
        for genre in parse_json_field(value):
            if isinstance(genre, str) and genre.strip():
                names.add(genre.strip())
    return [{"Name": g, "Id": g} for g in sorted(names)]


def library_list(roots: Iterable[str]) -> list[dict[str, str]]:
    """Libraries named by the last path segment of their root folder."""
    libraries = []
    for root in roots:
        segments = [s for s in _PATH_SEPARATORS.split(root) if s]
        name = segments[-1] if segments else root
        libraries.append({"Name": name, "Id": root})
    return sorted(libraries, key=lambda lib: lib["Name"])


def person_list(
    rows: Iterable[Any],
    person_type: str,
    origin: str,
    actor_thumbs: Container[str] = frozenset(),
) -> list[dict[str, Any]]:
    """Actors or directors with the number of movies each appears in.

    Most frequent first; ties keep first-seen order.
    """
    persons: dict[str, dict[str, Any]] = {}
    want_directors = person_type.lower() == "director"

    for row in rows:
        if want_directors:
            names = parse_directors(row.director)
        else:
            names = [actor_name(entry) for entry in parse_json_field(row.actors)]

        for name in names:
            if not name:
                continue
            person = persons.get(name)
            if person is None:
                person = {"Name": name, "Id": name, "MovieCount": 0}
                if want_directors:
                    person["Type"] = "Director"
                else:
                    person["Type"] = "Actor"
                    person["ImageTag"] = (
                        actor_thumb_url(origin, name) if name in actor_thumbs else None
                    )
                persons[name] = person
            person["MovieCount"] += 1

    return sorted(persons.values(), key=lambda p: -p["MovieCount"])


def studio_list(studios: Iterable[str]) -> list[dict[str, Any]]:
    counts: dict[str, dict[str, Any]] = {}
    for name in studios:
        entry = counts.setdefault(name, {"Name": name, "Id": name, "MovieCount": 0})
        entry["MovieCount"] += 1
    return sorted(counts.values(), key=lambda s: -s["MovieCount"])


def series_list(
    rows: Iterable[Any], origin: str, shadowed_ids: Container[int] = frozenset()
) -> list[dict[str, Any]]:
    """Group series members into one entry per ``set_name``.

    Rows are expected newest first; the first member supplies the poster and
    up to ``SERIES_MAX_BACKDROPS`` members supply backdrops.
    """
    series: dict[str, dict[str, Any]] = {}
    genres: dict[str, set[str]] = {}

    for row in rows:
        name = row.set_name
        entry = series.get(name)
        if entry is None:
            entry = {
                "Id": name,
                "Name": name,
                "ChildCount": 0,
                "Genres": [],
                "PrimaryImageTag": None,
                "BackdropImageTags": [],
            }
            series[name] = entry
            genres[name] = set()

        entry["ChildCount"] += 1
        genres[name].update(g for g in parse_json_field(row.genres) if isinstance(g, str))
        image_ref = movie_image_ref(row.id, row.uniqueid_num, shadowed_ids)
        if image_ref is None:
            continue
        if entry["PrimaryImageTag"] is None:
            entry["PrimaryImageTag"] = movie_image_url(origin, "poster", image_ref)
        if len(entry["BackdropImageTags"]) < SERIES_MAX_BACKDROPS:
            entry["BackdropImageTags"].append(movie_image_url(origin, "fanart", image_ref))

    for name, entry in series.items():
        entry["Genres"] = sorted(genres[name])
    return sorted(series.values(), key=lambda s: s["Name"])
