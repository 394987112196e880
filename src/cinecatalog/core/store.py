"""JSON file storage for catalog partitions."""

import json
import threading
from pathlib import Path

from cinecatalog.core.catalog import ANIME, MOVIES, OTHER, SERIES, Catalog
from cinecatalog.core.normalizer import DEFAULT_TYPE, DEFAULT_YEAR, normalize_records
from cinecatalog.core.parser import parse_lenient
from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)

# File name -> partition it loads into. Asian series share the series partition.
PARTITION_FILES = {
    "movies.json": MOVIES,
    "series.json": SERIES,
    "anime.json": ANIME,
    "asian.json": SERIES,
    "other-media.json": OTHER,
}
SAVE_FILES = {
    MOVIES: "movies.json",
    SERIES: "series.json",
    ANIME: "anime.json",
    OTHER: "other-media.json",
}


class CatalogStore:
    """Loads and saves catalog partitions as JSON files in one directory."""

    def __init__(
        self,
        data_dir: Path,
        read_only: bool = False,
        default_type: str = DEFAULT_TYPE,
        default_year: str = DEFAULT_YEAR,
    ):
        """Initialize store.

        Args:
            data_dir: Directory holding the partition files
            read_only: Skip writes (e.g. for read-only deployments)
            default_type: Type for records without a usable one
            default_year: Year for records without one
        """
        self.data_dir = Path(data_dir)
        self.read_only = read_only
        self.default_type = default_type
        self.default_year = default_year
        self._write_lock = threading.Lock()

    def load(self, catalog: Catalog) -> dict[str, int]:
        """Load every partition file that exists into ``catalog``.

        Files are parsed leniently: malformed records are skipped and
        logged, the rest are loaded.

        Args:
            catalog: Catalog to fill

        Returns:
            Number of media loaded per file name
        """
        loaded: dict[str, int] = {}

        for file_name, partition in PARTITION_FILES.items():
            path = self.data_dir / file_name
            if not path.exists():
                continue

            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error("Could not read partition file", file=str(path), error=str(e))
                continue

            parsed = parse_lenient(text)
            normalized = normalize_records(
                parsed.records, default_type=self.default_type, default_year=self.default_year
            )
            count = catalog.add_many(normalized.media, partition)
            loaded[file_name] = count

            skipped = parsed.diagnostics.skipped + normalized.skipped
            logger.info(
                "Loaded partition file",
                file=str(path),
                partition=partition,
                loaded=count,
                skipped=skipped,
            )

        return loaded

    def save(self, catalog: Catalog) -> bool:
        """Write each partition to its file.

        Saves are serialized, so concurrent callers never interleave writes
        to the same partition file. Each save writes one consistent
        snapshot of the catalog.

        Returns:
            True if files were written, False in read-only mode
        """
        if self.read_only:
            logger.info("Read-only store, skipping save", data_dir=str(self.data_dir))
            return False

        with self._write_lock:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with catalog.lock:
                snapshots = {name: catalog.partition(name) for name in SAVE_FILES}

            for partition, file_name in SAVE_FILES.items():
                payload = [media.to_export_dict() for media in snapshots[partition]]
                path = self.data_dir / file_name
                path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

        total = sum(len(items) for items in snapshots.values())
        logger.info("Catalog saved", data_dir=str(self.data_dir), total=total)
        return True
