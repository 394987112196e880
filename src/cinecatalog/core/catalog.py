"""Partitioned in-memory media catalog."""

import threading
from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from cinecatalog.core.dedup import deduplicate
from cinecatalog.core.normalizer import normalize_record
from cinecatalog.core.ranker import Ranker
from cinecatalog.core.titles import extract_title_number
from cinecatalog.models.media import Episode, Media, MediaType
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)

MOVIES = "movies"
SERIES = "series"
ANIME = "anime"
OTHER = "other"
PARTITIONS = (MOVIES, SERIES, ANIME, OTHER)

SERIES_TYPES = {
    MediaType.SERIES.value,
    MediaType.FOREIGN_SERIES.value,
    MediaType.ASIAN_SERIES.value,
}


def partition_for(media_type: str) -> str:
    """Return the partition that owns a media type."""
    if media_type == MediaType.MOVIE.value:
        return MOVIES
    if media_type == MediaType.ANIME.value:
        return ANIME
    if media_type in SERIES_TYPES:
        return SERIES
    return OTHER


def _search_key(media: Media) -> tuple:
    number = extract_title_number(media.title)
    return (number is None, number if number is not None else 0, media.title.casefold())


def _matches_filters(
    media: Media,
    media_type: Optional[str],
    year: Optional[Union[str, int]],
    category: Optional[str],
) -> bool:
    if media_type and media.type != media_type:
        return False
    if year is not None and media.year != str(year):
        return False
    if category and category.lower() not in (media.category or "").lower():
        return False
    return True


class Catalog:
    """Media catalog split into movies, series, anime and other partitions.

    Ids are unique within a partition. The combined view is always rebuilt
    from the partitions. A single re-entrant lock serializes writers; readers
    take a snapshot under the lock and work on the copy, so queries never see
    a half-applied import.
    """

    def __init__(self, ranker: Optional[Ranker] = None):
        """Initialize an empty catalog.

        Args:
            ranker: Recommendation ranker (defaults to standard tunables)
        """
        self.ranker = ranker or Ranker()
        self._partitions: dict[str, dict[str, Media]] = {name: {} for name in PARTITIONS}
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding the partitions, for multi-step writes."""
        return self._lock

    # Writes

    def add(self, media: Media, partition: Optional[str] = None) -> Media:
        """Insert or replace a media item.

        Args:
            media: Media to store
            partition: Owning partition. When omitted it is derived from the
                type and a record with the same id in any other partition
                is dropped, so a re-typed record moves instead of forking.

        Returns:
            The stored media
        """
        name = partition or partition_for(media.type)
        if name not in self._partitions:
            raise ValueError(f"Unknown partition: {name}")

        with self._lock:
            replaced = media.id in self._partitions[name]
            if partition is None:
                for other in PARTITIONS:
                    if other != name and self._partitions[other].pop(media.id, None) is not None:
                        replaced = True
            self._partitions[name][media.id] = media

        logger.debug("Media stored", media_id=media.id, partition=name, replaced=replaced)
        return media

    def add_many(self, media_list: Iterable[Media], partition: Optional[str] = None) -> int:
        """Insert several media items under one lock acquisition."""
        count = 0
        with self._lock:
            for media in media_list:
                self.add(media, partition)
                count += 1
        return count

    def create(self, raw: Mapping[str, Any]) -> Media:
        """Normalize a raw record and store it.

        Raises:
            ValueError: If the record cannot be normalized
        """
        media = normalize_record(raw)
        if media is None:
            raise ValueError("Record is not a usable object")
        return self.add(media)

    def delete(self, media_id: str) -> bool:
        """Hard-delete a media item from its owning partition."""
        with self._lock:
            for name in PARTITIONS:
                if self._partitions[name].pop(media_id, None) is not None:
                    logger.info("Media deleted", media_id=media_id, partition=name)
                    return True
        return False

    def clear(self) -> None:
        """Remove every media item."""
        with self._lock:
            for items in self._partitions.values():
                items.clear()

    # Lookups

    def get(self, media_id: str) -> Optional[Media]:
        """Find a media item, checking movies, series, anime then other."""
        with self._lock:
            for name in PARTITIONS:
                media = self._partitions[name].get(media_id)
                if media is not None:
                    return media
        return None

    def get_in_partition(self, partition: str, media_id: str) -> Optional[Media]:
        """Find a media item within one partition."""
        with self._lock:
            return self._partitions.get(partition, {}).get(media_id)

    def get_episode(self, media_id: str, number: int) -> Optional[tuple[Episode, Media]]:
        """Return (episode, owning media) or None."""
        media = self.get(media_id)
        if media is None:
            return None
        episode = media.get_episode(number)
        if episode is None:
            return None
        return episode, media

    def partition(self, name: str) -> list[Media]:
        """Snapshot of one partition in insertion order."""
        if name not in self._partitions:
            raise ValueError(f"Unknown partition: {name}")
        with self._lock:
            return list(self._partitions[name].values())

    def all_media(self) -> list[Media]:
        """Snapshot of every partition, concatenated in partition order."""
        with self._lock:
            return [media for name in PARTITIONS for media in self._partitions[name].values()]

    def counts(self) -> dict[str, int]:
        """Number of stored items per partition."""
        with self._lock:
            return {name: len(items) for name, items in self._partitions.items()}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(items) for items in self._partitions.values())

    def __contains__(self, media_id: object) -> bool:
        return isinstance(media_id, str) and self.get(media_id) is not None

    # Browse queries (all deduplicated by normalized title)

    def list_media(
        self,
        media_type: Optional[str] = None,
        year: Optional[Union[str, int]] = None,
        category: Optional[str] = None,
    ) -> list[Media]:
        """List the whole catalog with optional filters."""
        items = [m for m in self.all_media() if _matches_filters(m, media_type, year, category)]
        return deduplicate(items)

    def list_partition(
        self,
        name: str,
        media_type: Optional[str] = None,
        year: Optional[Union[str, int]] = None,
        category: Optional[str] = None,
    ) -> list[Media]:
        """List one partition with optional filters."""
        items = [m for m in self.partition(name) if _matches_filters(m, media_type, year, category)]
        return deduplicate(items)

    def _scope(self, partition: Optional[str]) -> list[Media]:
        return self.partition(partition) if partition else self.all_media()

    def trending(self, partition: Optional[str] = None) -> list[Media]:
        """Trending media, optionally limited to one partition."""
        return deduplicate(m for m in self._scope(partition) if m.is_trending)

    def new_releases(self, partition: Optional[str] = None) -> list[Media]:
        """New media, optionally limited to one partition."""
        return deduplicate(m for m in self._scope(partition) if m.is_new)

    def search(
        self, query: str, limit: Optional[int] = None, partition: Optional[str] = None
    ) -> list[Media]:
        """Search titles and descriptions.

        Results are deduplicated and ordered with numbered titles first (by
        number), then alphabetically.

        Args:
            query: Case-insensitive text to look for
            limit: Maximum number of results
            partition: Restrict to one partition

        Returns:
            Matching media
        """
        needle = query.strip().lower()
        if not needle:
            return []

        def _hit(media: Media) -> bool:
            return (
                needle in media.title.lower()
                or needle in (media.description or "").lower()
                or query.strip() in (media.description_ar or "")
            )

        results = sorted(deduplicate(m for m in self._scope(partition) if _hit(m)), key=_search_key)
        return results[:limit] if limit else results

    def years_with_counts(self, media_type: Optional[str] = None) -> list[dict[str, Any]]:
        """Count media per year, newest year first."""
        counts = Counter(
            media.year for media in self.all_media() if not media_type or media.type == media_type
        )
        return [
            {"year": year, "count": count}
            for year, count in sorted(counts.items(), key=lambda item: item[0], reverse=True)
        ]

    # Recommendations

    def recommendations(self, media_id: str) -> list[Media]:
        """Related media for a detail page; empty for unknown ids."""
        return self.ranker.recommend(media_id, self.all_media())
