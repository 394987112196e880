"""Collapse catalog entries that share a normalized title."""

from collections.abc import Iterable

from cinecatalog.core.titles import normalize_title
from cinecatalog.models.media import Media


def deduplicate(records: Iterable[Media]) -> list[Media]:
    """Keep the first record seen for each normalized title.

    Later duplicates are dropped as-is; no fields are merged. Callers that
    want a particular record to win must order the input accordingly.

    Args:
        records: Media in priority order

    Returns:
        One Media per normalized title, in first-seen order
    """
    seen: dict[str, Media] = {}
    for media in records:
        key = normalize_title(media.title)
        if key not in seen:
            seen[key] = media
    return list(seen.values())
