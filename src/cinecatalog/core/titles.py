"""Title normalization and fuzzy matching.

The normalized title is the identity used for deduplication and for
"similar title" recommendations: two entries such as ``Show Season 1`` and
``Show (2019)`` both normalize to ``show`` and are treated as the same
underlying title.
"""

import re
from typing import Optional

# Arabic ordinal words used in season/part markers
ARABIC_ORDINALS = {
    "الأول": 1,
    "الاول": 1,
    "الثاني": 2,
    "الثالث": 3,
    "الرابع": 4,
    "الخامس": 5,
    "السادس": 6,
    "السابع": 7,
    "الثامن": 8,
    "التاسع": 9,
    "العاشر": 10,
}
_ORDINAL_ALT = "|".join(sorted(ARABIC_ORDINALS, key=len, reverse=True))

NOISE_PATTERNS = [
    # Season markers
    re.compile(r"\bseason\s*\d+\b", re.IGNORECASE),
    re.compile(rf"الموسم\s*(?:{_ORDINAL_ALT}|\d+)"),
    re.compile(r"\bs\d+\b", re.IGNORECASE),
    # Part markers
    re.compile(r"\bpart\s*\d+\b", re.IGNORECASE),
    re.compile(rf"الجزء\s*(?:{_ORDINAL_ALT}|\d+)"),
    # Movie / special / OVA markers
    re.compile(r"\b(?:movie|ova|special)(?:\s*\d+)?\b", re.IGNORECASE),
    re.compile(r"فيلم(?:\s*\d+)?"),
    # Release years
    re.compile(r"\b(?:19|20)\d{2}\b"),
]
PUNCTUATION_RE = re.compile(r"[:\-–—()\[\]]")
WHITESPACE_RE = re.compile(r"\s+")

TRAILING_NUMBER_RE = re.compile(r"(\d+)\s*$")
NUMBER_MARKERS = [
    re.compile(rf"الموسم\s*(\d+|{_ORDINAL_ALT})"),
    re.compile(r"season\s*(\d+)", re.IGNORECASE),
    re.compile(r"part\s*(\d+)", re.IGNORECASE),
    re.compile(rf"الجزء\s*(\d+|{_ORDINAL_ALT})"),
]

MIN_WORD_LENGTH = 3
DEFAULT_SIMILARITY_THRESHOLD = 0.6


def _normalize_once(title: str) -> str:
    value = title.lower().strip()
    for pattern in NOISE_PATTERNS:
        value = pattern.sub("", value)
    value = PUNCTUATION_RE.sub(" ", value)
    return WHITESPACE_RE.sub(" ", value).strip()


def normalize_title(title: str) -> str:
    """Return the matching key for a display title.

    Lower-cases, strips season/part/movie/OVA/special markers (English and
    Arabic), drops release years, turns separators into spaces and
    collapses whitespace.

    Removing one marker can expose another (``"season season 1 1"``), so
    the rules are re-applied until the value stops changing. Every pass
    that changes the value either shortens it or removes a separator, so
    this always terminates and the result is idempotent.

    Args:
        title: Display title (anything else is converted with ``str``)

    Returns:
        Normalized title, possibly empty
    """
    if title is None:
        return ""
    current = title if isinstance(title, str) else str(title)

    while True:
        normalized = _normalize_once(current)
        if normalized == current:
            return normalized
        current = normalized


def _significant_words(normalized: str) -> list[str]:
    return [word for word in normalized.split(" ") if len(word) >= MIN_WORD_LENGTH]


def titles_similar(
    first: str, second: str, threshold: float = DEFAULT_SIMILARITY_THRESHOLD
) -> bool:
    """Check whether two titles refer to the same underlying title.

    Titles are similar if they normalize to the same key, or if at least
    ``threshold`` of the significant words (longer than two characters) of
    the title with fewer such words have a match in the other title. Words
    match when equal or when one contains the other.

    Args:
        first: First display title
        second: Second display title
        threshold: Required share of matching words

    Returns:
        True if the titles are similar
    """
    normalized_first = normalize_title(first)
    normalized_second = normalize_title(second)

    if normalized_first == normalized_second:
        return True

    if min(len(normalized_first), len(normalized_second)) < MIN_WORD_LENGTH:
        return False

    words_first = _significant_words(normalized_first)
    words_second = _significant_words(normalized_second)
    if not words_first or not words_second:
        return False

    if len(words_first) <= len(words_second):
        shorter, other = words_first, words_second
    else:
        shorter, other = words_second, words_first

    matching = sum(
        1
        for word in shorter
        if any(word == candidate or word in candidate or candidate in word for candidate in other)
    )
    return matching / len(shorter) >= threshold


def _to_number(token: str) -> Optional[int]:
    if token.isdigit():
        return int(token)
    return ARABIC_ORDINALS.get(token)


def extract_title_number(title: str) -> Optional[int]:
    """Extract the sequence number of a title for ordering.

    Looks for trailing digits first, then season markers (Arabic, then
    English), then part markers.

    Args:
        title: Display title

    Returns:
        The number, or None if the title carries none
    """
    if not title:
        return None

    if match := TRAILING_NUMBER_RE.search(title):
        return int(match.group(1))

    for pattern in NUMBER_MARKERS:
        if match := pattern.search(title):
            number = _to_number(match.group(1))
            if number is not None:
                return number

    return None
