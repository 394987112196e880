"""cinecatalog - catalog normalization and recommendation engine."""

__version__ = "0.3.0"

from cinecatalog.core.catalog import Catalog
from cinecatalog.core.dedup import deduplicate
from cinecatalog.core.importer import export_catalog, import_media, validate_json
from cinecatalog.core.normalizer import normalize_record
from cinecatalog.core.parser import parse_lenient, parse_lenient_records
from cinecatalog.core.ranker import Ranker, recommend
from cinecatalog.core.titles import normalize_title
from cinecatalog.models.media import Episode, Media, MediaType, Server

__all__ = [
    "Catalog",
    "Episode",
    "Media",
    "MediaType",
    "Ranker",
    "Server",
    "deduplicate",
    "export_catalog",
    "import_media",
    "normalize_record",
    "normalize_title",
    "parse_lenient",
    "parse_lenient_records",
    "recommend",
    "validate_json",
]
