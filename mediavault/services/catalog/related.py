"""Blending of precomputed related movies."""

from collections.abc import Sequence
from typing import Any

from mediavault.constants import NUM_RANDOM_GENRE_PICKS


def blend_related(
    primary: Sequence[dict[str, Any]],
    candidates: Sequence[dict[str, Any]],
    max_picks: int = NUM_RANDOM_GENRE_PICKS,
) -> list[dict[str, Any]]:
    """Append up to ``max_picks`` discovery candidates after the ranked list.

    Candidates whose ``Id`` is already present (in the ranked list or among
    earlier picks) or missing are skipped, so the result never repeats an id
    from the ranked prefix and the suffix is shorter when too few unique
    candidates exist.
    """
    blended = list(primary)
    seen = {item.get("Id") for item in primary}
    picks = 0

    for item in candidates:
        if picks >= max_picks:
            break
        item_id = item.get("Id")
        if item_id is None or item_id in seen:
            continue
        blended.append(item)
        seen.add(item_id)
        picks += 1

    return blended
