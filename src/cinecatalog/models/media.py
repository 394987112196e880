"""Catalog media models."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Closed union of values a raw (pre-normalization) record may carry
RawValue = Union[str, int, float, bool, None, List["RawValue"], Dict[str, "RawValue"]]
RawRecord = Dict[str, RawValue]


class MediaType(str, Enum):
    """Media type tags."""

    MOVIE = "movie"
    SERIES = "series"
    ANIME = "anime"
    ANIME_MOVIE = "anime_movie"
    FOREIGN_SERIES = "foreign_series"
    ASIAN_SERIES = "asian_series"
    DOCUMENTARY = "documentary"

    @classmethod
    def values(cls) -> set[str]:
        """Return the set of known type tags."""
        return {member.value for member in cls}


class Server(BaseModel):
    """Playback server for a media item or episode."""

    name: str
    url: str


class Episode(BaseModel):
    """Single episode of an episodic media item."""

    number: int
    title: str = ""
    servers: List[Server] = Field(default_factory=list)

    def default_server(self) -> Optional[Server]:
        """First server is the default."""
        return self.servers[0] if self.servers else None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Media(BaseModel):
    """Canonical catalog entry.

    JSON payloads use camelCase keys (``isNew``, ``watchUrl``...); Python code
    uses the snake_case attribute names.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    description_ar: Optional[str] = Field(default=None, alias="descriptionAr")
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    type: str = MediaType.MOVIE.value
    genre: Optional[str] = None
    category: Optional[str] = None  # comma-separated tags
    year: str = "2024"
    rating: Optional[str] = None
    duration: Optional[str] = None
    watch_url: Optional[str] = Field(default=None, alias="watchUrl")
    trailer_url: Optional[str] = Field(default=None, alias="trailerUrl")
    servers: Optional[List[Server]] = None
    episodes: Optional[List[Episode]] = None
    episode_count: Optional[int] = Field(default=None, alias="episodeCount")
    seasons: Optional[int] = None
    is_new: bool = Field(default=False, alias="isNew")
    is_trending: bool = Field(default=False, alias="isTrending")
    is_popular: bool = Field(default=False, alias="isPopular")
    is_featured: bool = Field(default=False, alias="isFeatured")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def rating_value(self) -> float:
        """Return the rating as a float, 0.0 when missing or unparseable."""
        if not self.rating:
            return 0.0
        try:
            value = float(self.rating)
        except ValueError:
            return 0.0
        return value if math.isfinite(value) else 0.0

    def default_server(self) -> Optional[Server]:
        """Return the default playback server for non-episodic items."""
        if self.servers:
            return self.servers[0]
        return None

    def get_episode(self, number: int) -> Optional[Episode]:
        """Look up an episode by its number."""
        for episode in self.episodes or []:
            if episode.number == number:
                return episode
        return None

    def to_export_dict(self) -> dict:
        """Serialize with camelCase keys and ISO timestamps."""
        return self.model_dump(mode="json", by_alias=True)

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.title} ({self.year}) [{self.type}, id={self.id}]"
