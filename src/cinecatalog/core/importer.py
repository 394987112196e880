"""Bulk import, validation and export of catalog data."""

import json
from collections.abc import Mapping
from typing import Any, Union

from cinecatalog.core.catalog import Catalog
from cinecatalog.core.dedup import deduplicate
from cinecatalog.core.normalizer import DEFAULT_TYPE, DEFAULT_YEAR, normalize_record
from cinecatalog.core.parser import has_identity, parse_lenient
from cinecatalog.core.titles import normalize_title
from cinecatalog.models.diagnostics import ImportResult, ValidationResult
from cinecatalog.models.media import RawRecord
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("id", "title", "type")

ImportPayload = Union[str, Mapping[str, Any], list[Any]]


def _label(record: Any) -> str:
    if isinstance(record, Mapping):
        return str(record.get("title") or record.get("id") or "Unknown")
    return "Unknown"


def missing_fields(record: Mapping[str, Any]) -> list[str]:
    """Return required fields that are absent or empty in a record."""
    missing = []
    for name in REQUIRED_FIELDS:
        value = record.get(name)
        if value is None or not str(value).strip():
            missing.append(name)
    return missing


def _collect_records(payload: ImportPayload, result: ImportResult) -> list[RawRecord]:
    """Turn any accepted payload shape into raw records, recording losses."""
    if isinstance(payload, str):
        parsed = parse_lenient(payload)
        diagnostics = parsed.diagnostics
        result.total = len(parsed.records) + diagnostics.skipped
        result.failed += diagnostics.skipped
        result.errors.extend(diagnostics.reasons)
        return parsed.records

    items = [payload] if isinstance(payload, Mapping) else list(payload)
    result.total = len(items)

    records = []
    for index, item in enumerate(items, 1):
        if not isinstance(item, Mapping):
            result.failed += 1
            result.errors.append(f"Record {index}: not an object ({type(item).__name__})")
        elif not has_identity(dict(item)):
            result.failed += 1
            result.errors.append(f"Record {index}: missing id and title")
        else:
            records.append(dict(item))
    return records


def import_media(
    catalog: Catalog,
    payload: ImportPayload,
    *,
    validate: bool = False,
    default_type: str = DEFAULT_TYPE,
    default_year: str = DEFAULT_YEAR,
) -> ImportResult:
    """Run the parse -> normalize -> deduplicate -> insert pipeline.

    Processing never stops at the first bad record: every loss is counted
    in ``failed`` with a message in ``errors``, and everything usable is
    inserted. Records whose normalized title repeats an earlier record of
    the same batch are skipped.

    Args:
        catalog: Catalog receiving the media
        payload: Raw text, a single raw object or a list of raw objects
        validate: Require ``id``, ``title`` and ``type`` on every record
        default_type: Type for records without a usable one
        default_year: Year for records without one

    Returns:
        ImportResult with counts and error messages
    """
    result = ImportResult()
    records = _collect_records(payload, result)

    normalized = []
    for index, record in enumerate(records, 1):
        if validate:
            missing = missing_fields(record)
            if missing:
                result.failed += 1
                result.errors.append(
                    f"Failed to import {_label(record)}: missing required fields: {', '.join(missing)}"
                )
                continue

        media = normalize_record(record, default_type=default_type, default_year=default_year)
        if media is None:
            result.failed += 1
            result.errors.append(f"Failed to import {_label(record)}: record is not usable")
            continue
        normalized.append(media)

    unique = deduplicate(normalized)
    if len(unique) < len(normalized):
        kept = {normalize_title(media.title): media for media in unique}
        kept_ids = {id(media) for media in unique}
        for media in normalized:
            if id(media) not in kept_ids:
                original = kept[normalize_title(media.title)]
                result.failed += 1
                result.errors.append(
                    f"Skipped duplicate {media.title!r} (same title as {original.title!r})"
                )

    result.success = catalog.add_many(unique)

    logger.info(
        "Import complete",
        total=result.total,
        success=result.success,
        failed=result.failed,
    )
    return result


def validate_json(text: str) -> ValidationResult:
    """Strictly validate JSON catalog data.

    The text must be valid JSON (an object or an array of objects) and every
    item must carry ``id``, ``title`` and ``type``.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        return ValidationResult(is_valid=False, error=f"Invalid JSON: {e.msg} at line {e.lineno}")

    items = parsed if isinstance(parsed, list) else [parsed]
    for index, item in enumerate(items, 1):
        if not isinstance(item, dict):
            return ValidationResult(is_valid=False, error=f"Item {index} is not an object")
        missing = missing_fields(item)
        if missing:
            return ValidationResult(
                is_valid=False,
                error=f"Item {index} ({_label(item)}) is missing required fields: {', '.join(missing)}",
            )

    return ValidationResult(is_valid=True, items=items)


def export_records(catalog: Catalog) -> list[dict[str, Any]]:
    """Deduplicated catalog as JSON-ready dictionaries, partitions concatenated."""
    return [media.to_export_dict() for media in deduplicate(catalog.all_media())]


def export_catalog(catalog: Catalog) -> str:
    """Serialize the deduplicated catalog as a pretty-printed JSON array."""
    return json.dumps(export_records(catalog), indent=2, ensure_ascii=False)
