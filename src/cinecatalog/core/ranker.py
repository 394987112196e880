"""Tiered "similar title" recommendation ranking."""

from collections.abc import Sequence
from typing import Optional

from cinecatalog.config import RecommendationConfig
from cinecatalog.core.titles import DEFAULT_SIMILARITY_THRESHOLD, extract_title_number, titles_similar
from cinecatalog.models.media import Media
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FALLBACK_LIMIT = 100


def categories_overlap(first: Optional[str], second: Optional[str]) -> bool:
    """Check whether two comma-separated category strings share a tag.

    Either whole string may contain the other, or any tag of one may be
    contained in the other string. Matching is case-insensitive.
    """
    first = (first or "").strip().lower()
    second = (second or "").strip().lower()
    if not first or not second:
        return False

    if first in second or second in first:
        return True

    tags_first = [tag.strip() for tag in first.split(",") if tag.strip()]
    tags_second = [tag.strip() for tag in second.split(",") if tag.strip()]
    return any(tag in second for tag in tags_first) or any(tag in first for tag in tags_second)


def _sequence_key(media: Media) -> tuple:
    number = extract_title_number(media.title)
    return (
        number is None,
        number if number is not None else 0,
        media.title.casefold(),
        media.title,
        -media.rating_value(),
    )


def _by_rating(items: list[Media]) -> list[Media]:
    return sorted(items, key=lambda media: -media.rating_value())


class Ranker:
    """Ranks related titles for a media item.

    Three tiers, consulted in order:

    1. Same type with a similar title. If anything matches, that is the
       whole answer and it is not capped. Ordered by the number in the title
       (titles without one last), then title, then rating.
    2. Same type with an overlapping category, best rated first.
    3. Same type only, best rated first.

    Tiers 2 and 3 together are capped at ``fallback_limit`` entries.
    """

    def __init__(
        self,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        fallback_limit: int = DEFAULT_FALLBACK_LIMIT,
    ):
        """Initialize ranker.

        Args:
            similarity_threshold: Word-overlap ratio for similar titles
            fallback_limit: Cap for tiers 2 and 3 combined
        """
        self.similarity_threshold = similarity_threshold
        self.fallback_limit = fallback_limit

    @classmethod
    def from_config(cls, config: RecommendationConfig) -> "Ranker":
        """Create a ranker from recommendation settings."""
        return cls(
            similarity_threshold=config.similarity_threshold,
            fallback_limit=config.fallback_limit,
        )

    def recommend(self, target_id: str, catalog: Sequence[Media]) -> list[Media]:
        """Return media related to ``target_id``.

        Args:
            target_id: Id of the media being viewed
            catalog: Full catalog to draw candidates from

        Returns:
            Ranked list, empty when the id is unknown
        """
        target = next((media for media in catalog if media.id == target_id), None)
        if target is None:
            logger.debug("Recommendation target not found", media_id=target_id)
            return []

        candidates = [
            media for media in catalog if media.id != target_id and media.type == target.type
        ]

        similar = self.similar_titles(target, candidates)
        if similar:
            logger.debug("Similar titles found", media_id=target_id, count=len(similar))
            return similar

        selected = _by_rating(
            [media for media in candidates if categories_overlap(target.category, media.category)]
        )[: self.fallback_limit]

        if len(selected) < self.fallback_limit:
            chosen = {id(media) for media in selected}
            remaining = _by_rating([media for media in candidates if id(media) not in chosen])
            selected.extend(remaining[: self.fallback_limit - len(selected)])

        logger.debug("Fallback recommendations", media_id=target_id, count=len(selected))
        return selected

    def similar_titles(self, target: Media, candidates: Sequence[Media]) -> list[Media]:
        """Return candidates whose title is similar to the target's, in sequence order."""
        matches = [
            media
            for media in candidates
            if titles_similar(target.title, media.title, self.similarity_threshold)
        ]
        return sorted(matches, key=_sequence_key)


def recommend(
    target_id: str,
    catalog: Sequence[Media],
    *,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    fallback_limit: int = DEFAULT_FALLBACK_LIMIT,
) -> list[Media]:
    """Rank related media for ``target_id`` over ``catalog``."""
    ranker = Ranker(similarity_threshold=similarity_threshold, fallback_limit=fallback_limit)
    return ranker.recommend(target_id, catalog)
