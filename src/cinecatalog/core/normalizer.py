"""Raw record to canonical Media normalization."""

import re
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

from cinecatalog.models.diagnostics import NormalizeResult
from cinecatalog.models.media import Episode, Media, MediaType, RawRecord, Server
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)

UNTITLED = "untitled"
DEFAULT_TYPE = MediaType.MOVIE.value
DEFAULT_YEAR = "2024"

# camelCase field in raw records -> Media attribute
OPTIONAL_TEXT_FIELDS = {
    "description": "description",
    "descriptionAr": "description_ar",
    "poster": "poster",
    "backdrop": "backdrop",
    "genre": "genre",
    "category": "category",
    "rating": "rating",
    "duration": "duration",
    "watchUrl": "watch_url",
    "trailerUrl": "trailer_url",
}
OPTIONAL_INT_FIELDS = {
    "episodeCount": "episode_count",
    "seasons": "seasons",
}
FLAG_FIELDS = {
    "isNew": "is_new",
    "isTrending": "is_trending",
    "isPopular": "is_popular",
    "isFeatured": "is_featured",
}
TRUE_STRINGS = {"true", "1", "yes", "y", "on"}

_NON_ID_CHARS_RE = re.compile(r"[^\w\s-]")
_WHITESPACE_RE = re.compile(r"\s+")

# Epoch values above this are taken to be milliseconds
_EPOCH_MILLIS_THRESHOLD = 1e12


def derive_id(title: str) -> str:
    """Derive a stable identifier from a title.

    ``"My Show!"`` -> ``"my-show"``. The same title always yields the same
    id, so re-importing a record without an id replaces it instead of
    adding a copy.
    """
    value = _NON_ID_CHARS_RE.sub("", title.lower())
    return _WHITESPACE_RE.sub("-", value.strip())


def _text(value: Any) -> Optional[str]:
    """Coerce to a non-empty string or None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _integer(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return False


def _timestamp(value: Any, now: datetime) -> datetime:
    """Coerce an ISO string or epoch number to an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > _EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return now
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if re.fullmatch(r"\d+(\.\d+)?", text):
            return _timestamp(float(text), now)
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return now
    else:
        return now

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _media_type(value: Any, default: str) -> str:
    text = _text(value)
    if text is None:
        return default
    text = text.lower().replace("-", "_").replace(" ", "_")
    return text if text in MediaType.values() else default


def _servers(value: Any) -> Optional[list[Server]]:
    if not isinstance(value, list):
        return None
    servers = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        url = _text(entry.get("url"))
        if not url:
            continue
        name = _text(entry.get("name")) or f"Server {len(servers) + 1}"
        servers.append(Server(name=name, url=url))
    return servers or None


def _episodes(value: Any) -> Optional[list[Episode]]:
    if not isinstance(value, list):
        return None
    episodes = []
    for position, entry in enumerate(value, 1):
        if not isinstance(entry, Mapping):
            continue
        number = _integer(entry.get("number"))
        if number is None:
            number = position
        episodes.append(
            Episode(
                number=number,
                title=_text(entry.get("title")) or f"Episode {number}",
                servers=_servers(entry.get("servers")) or [],
            )
        )
    return episodes or None


def normalize_record(
    raw: Any,
    *,
    default_type: str = DEFAULT_TYPE,
    default_year: str = DEFAULT_YEAR,
    now: Optional[datetime] = None,
) -> Optional[Media]:
    """Build a canonical Media from one raw record.

    Missing optional fields become None (never ""), flags default to False,
    ``type`` falls back to ``default_type`` when absent or unknown and the
    id is derived from the title when absent.

    Args:
        raw: Raw record as produced by the lenient parser (or any object)
        default_type: Type used when the record has none or an unknown one
        default_year: Year used when the record has none
        now: Timestamp used when ``createdAt`` is missing

    Returns:
        Media, or None if ``raw`` is not a mapping
    """
    if not isinstance(raw, Mapping):
        return None

    now = now or datetime.now(timezone.utc)

    title = _text(raw.get("title")) or UNTITLED
    media_id = _text(raw.get("id")) or derive_id(title) or derive_id(UNTITLED)
    year = _text(raw.get("year")) or default_year

    fields: dict[str, Any] = {
        "id": media_id,
        "title": title,
        "type": _media_type(raw.get("type"), default_type),
        "year": year,
        "servers": _servers(raw.get("servers")),
        "episodes": _episodes(raw.get("episodes")),
        "created_at": _timestamp(raw.get("createdAt"), now),
    }
    for key, attr in OPTIONAL_TEXT_FIELDS.items():
        fields[attr] = _text(raw.get(key))
    for key, attr in OPTIONAL_INT_FIELDS.items():
        fields[attr] = _integer(raw.get(key))
    for key, attr in FLAG_FIELDS.items():
        fields[attr] = _flag(raw.get(key))

    try:
        return Media(**fields)
    except ValidationError as e:
        logger.warning("Could not build media from record", id=media_id, error=str(e))
        return None


def normalize_records(
    raws: Iterable[RawRecord],
    *,
    default_type: str = DEFAULT_TYPE,
    default_year: str = DEFAULT_YEAR,
) -> NormalizeResult:
    """Normalize a batch of raw records, tallying the ones skipped."""
    result = NormalizeResult()
    now = datetime.now(timezone.utc)

    for index, raw in enumerate(raws, 1):
        media = normalize_record(raw, default_type=default_type, default_year=default_year, now=now)
        if media is None:
            result.skipped += 1
            result.reasons.append(f"Record {index}: not a usable object ({type(raw).__name__})")
            continue
        result.media.append(media)

    if result.skipped:
        logger.warning("Skipped unusable records", skipped=result.skipped, kept=len(result.media))
    return result
