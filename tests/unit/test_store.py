"""Unit tests for the partition file store."""

import json
from concurrent.futures import ThreadPoolExecutor

from cinecatalog.core.catalog import ANIME, MOVIES, OTHER, SERIES, Catalog
from cinecatalog.core.store import CatalogStore


class TestCatalogStoreLoad:
    """Test loading partition files."""

    def test_loads_each_file_into_its_partition(self, tmp_path):
        """Should fill partitions from their files."""
        (tmp_path / "movies.json").write_text('[{"id": "m1", "title": "Heat", "type": "movie"}]')
        (tmp_path / "anime.json").write_text("{id: 'a1', title: 'Bleach', type: anime,},")
        (tmp_path / "other-media.json").write_text('[{"id": "d1", "title": "Cosmos", "type": "documentary"}]')
        catalog = Catalog()

        loaded = CatalogStore(tmp_path).load(catalog)

        assert loaded == {"movies.json": 1, "anime.json": 1, "other-media.json": 1}
        assert catalog.get_in_partition(MOVIES, "m1").title == "Heat"
        assert catalog.get_in_partition(ANIME, "a1").title == "Bleach"
        assert catalog.get_in_partition(OTHER, "d1").title == "Cosmos"

    def test_asian_file_loads_into_series(self, tmp_path):
        """Should merge the Asian series file into the series partition."""
        (tmp_path / "series.json").write_text('[{"id": "s1", "title": "Dark", "type": "series"}]')
        (tmp_path / "asian.json").write_text('[{"id": "k1", "title": "Kingdom", "type": "asian_series"}]')
        catalog = Catalog()

        CatalogStore(tmp_path).load(catalog)

        assert [m.id for m in catalog.partition(SERIES)] == ["s1", "k1"]

    def test_skips_bad_records(self, tmp_path):
        """Should load good records and skip unusable ones."""
        (tmp_path / "movies.json").write_text(
            '{"id": "1", "title": "Good"}\n{"id": "2" "title": "Bad"}\n{"id": "3", "title": "Fine"}\n'
        )
        catalog = Catalog()

        loaded = CatalogStore(tmp_path).load(catalog)

        assert loaded["movies.json"] == 2
        assert [m.id for m in catalog.partition(MOVIES)] == ["1", "3"]

    def test_missing_directory(self, tmp_path):
        """Should load nothing when no files exist."""
        catalog = Catalog()

        assert CatalogStore(tmp_path / "absent").load(catalog) == {}
        assert len(catalog) == 0

    def test_default_type_for_untyped_records(self, tmp_path):
        """Should apply the configured default type."""
        (tmp_path / "series.json").write_text('[{"id": "s1", "title": "Untyped"}]')
        catalog = Catalog()

        CatalogStore(tmp_path, default_type="series").load(catalog)

        assert catalog.get("s1").type == "series"


class TestCatalogStoreSave:
    """Test saving partition files."""

    def test_writes_partition_files(self, tmp_path, sample_catalog):
        """Should write one file per partition."""
        store = CatalogStore(tmp_path / "data")

        assert store.save(sample_catalog) is True

        names = sorted(p.name for p in (tmp_path / "data").iterdir())
        assert names == ["anime.json", "movies.json", "other-media.json", "series.json"]
        movies = json.loads((tmp_path / "data" / "movies.json").read_text(encoding="utf-8"))
        assert [m["id"] for m in movies] == ["m1", "m2", "m3"]
        assert movies[0]["isTrending"] is True

    def test_round_trip(self, tmp_path, sample_catalog):
        """Should load back what it saved."""
        store = CatalogStore(tmp_path)
        store.save(sample_catalog)
        catalog = Catalog()

        store.load(catalog)

        assert [m.id for m in catalog.all_media()] == [m.id for m in sample_catalog.all_media()]
        assert catalog.get("s1").episodes[0].title == "Secrets"

    def test_read_only(self, tmp_path, sample_catalog):
        """Should not write anything in read-only mode."""
        store = CatalogStore(tmp_path / "data", read_only=True)

        assert store.save(sample_catalog) is False
        assert not (tmp_path / "data").exists()

    def test_concurrent_saves_write_whole_files(self, tmp_path, sample_catalog, make_media):
        """Should never interleave two saves into one partition file."""
        store = CatalogStore(tmp_path)

        def add_and_save(worker):
            sample_catalog.add(make_media(f"c{worker}", f"Concurrent {worker}"))
            return store.save(sample_catalog)

        with ThreadPoolExecutor(max_workers=4) as pool:
            assert all(pool.map(add_and_save, range(8)))

        movies = json.loads((tmp_path / "movies.json").read_text(encoding="utf-8"))
        assert len(movies) == 3 + 8
