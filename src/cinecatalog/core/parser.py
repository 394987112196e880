"""Lenient parser turning near-JSON catalog dumps into raw records."""

import json
from typing import Any, Iterator, Optional

from cinecatalog.core.repair import iter_segments, repair_document, repair_fragment, strip_line_comments
from cinecatalog.models.diagnostics import ParseResult
from cinecatalog.models.media import RawRecord
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 100


def has_identity(record: Any) -> bool:
    """Return True if the record is a mapping with a non-empty id or title."""
    if not isinstance(record, dict):
        return False
    for key in ("id", "title"):
        value = record.get(key)
        if value is not None and str(value).strip():
            return True
    return False


def iter_object_fragments(text: str) -> Iterator[str]:
    """Yield top-level ``{...}`` fragments from text, line by line.

    Brace depth is tracked outside string literals and comments. Anything
    between top-level objects (commas, brackets, junk) is ignored. An object
    still open at the end of the text is yielded as-is so the repair chain
    can try to close it.

    Args:
        text: Original (unrepaired) text

    Yields:
        Candidate object strings in input order
    """
    depth = 0
    buffer: list[str] = []

    for line in text.splitlines(keepends=True):
        line = strip_line_comments(line)
        if depth == 0 and not line.strip():
            continue

        for is_string, chunk in iter_segments(line):
            if is_string:
                if depth:
                    buffer.append(chunk)
                continue

            for ch in chunk:
                if ch == "{":
                    depth += 1
                    buffer.append(ch)
                elif ch == "}":
                    if depth == 0:
                        continue
                    depth -= 1
                    buffer.append(ch)
                    if depth == 0:
                        yield "".join(buffer)
                        buffer = []
                elif depth:
                    buffer.append(ch)

    if buffer:
        yield "".join(buffer)


def _load_document(text: str) -> Optional[list[Any]]:
    """Parse the repaired document, or return None if it is not valid."""
    try:
        parsed = json.loads(repair_document(text))
    except (ValueError, RecursionError):
        return None
    if isinstance(parsed, list):
        return parsed
    return [parsed]


def parse_lenient(raw_text: str) -> ParseResult:
    """Parse possibly-malformed catalog text into raw records.

    The repaired document is parsed in one go first. If that fails the text
    is scanned for individual objects; each is repaired and parsed on its
    own, and fragments that still fail are logged, counted and dropped.
    Records need a non-empty ``id`` or ``title`` to be kept.

    Never raises: a completely unusable input gives an empty result.

    Args:
        raw_text: Text as received from the scraper or upload

    Returns:
        ParseResult with records in input order and diagnostics
    """
    result = ParseResult()
    diagnostics = result.diagnostics

    if not isinstance(raw_text, str) or not raw_text.strip():
        return result

    text = raw_text.lstrip("\ufeff")

    document = _load_document(text)
    if document is not None:
        for index, item in enumerate(document, 1):
            _accept(item, index, result)
        logger.debug("Parsed document", records=len(result.records), rejected=diagnostics.rejected)
        return result

    logger.info("Full document parse failed, scanning object fragments", length=len(text))
    diagnostics.used_fallback = True

    for index, fragment in enumerate(iter_object_fragments(text), 1):
        diagnostics.fragments += 1
        cleaned = repair_fragment(fragment)
        try:
            item = json.loads(cleaned)
        except json.JSONDecodeError as e:
            diagnostics.failed += 1
            diagnostics.reasons.append(f"Fragment {index}: {e.msg} at line {e.lineno} column {e.colno}")
            logger.warning(
                "Dropped malformed fragment",
                index=index,
                error=e.msg,
                preview=cleaned[:PREVIEW_LENGTH],
            )
            continue
        except RecursionError:
            diagnostics.failed += 1
            diagnostics.reasons.append(f"Fragment {index}: nested too deeply")
            logger.warning("Dropped malformed fragment", index=index, error="nested too deeply")
            continue
        _accept(item, index, result)

    logger.info(
        "Fragment scan complete",
        fragments=diagnostics.fragments,
        records=len(result.records),
        failed=diagnostics.failed,
        rejected=diagnostics.rejected,
    )
    return result


def _accept(item: Any, index: int, result: ParseResult) -> None:
    if has_identity(item):
        result.records.append(item)
        return

    diagnostics = result.diagnostics
    diagnostics.rejected += 1
    if isinstance(item, dict):
        diagnostics.reasons.append(f"Record {index}: missing id and title")
    else:
        diagnostics.reasons.append(f"Record {index}: not an object ({type(item).__name__})")
    logger.debug("Rejected record without identity", index=index)


def parse_lenient_records(raw_text: str) -> list[RawRecord]:
    """Parse catalog text and return only the accepted raw records."""
    return parse_lenient(raw_text).records
