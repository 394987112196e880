"""Shared pytest fixtures for cinecatalog tests."""

import pytest

from cinecatalog.config import CatalogConfig, Config, LoggingConfig
from cinecatalog.core.catalog import Catalog
from cinecatalog.models.media import Episode, Media, Server


@pytest.fixture
def make_media():
    """Factory for Media with sensible defaults."""

    def _make(media_id, title, media_type="movie", **kwargs):
        return Media(id=media_id, title=title, type=media_type, **kwargs)

    return _make


@pytest.fixture
def sample_media(make_media):
    """A small mixed catalog."""
    return [
        make_media("m1", "Inception", category="Sci-Fi, Thriller", year="2010", rating="8.8", is_trending=True),
        make_media("m2", "Interstellar", category="Sci-Fi, Drama", year="2014", rating="8.6", is_new=True),
        make_media("m3", "The Prestige", category="Drama, Mystery", year="2006", rating="8.5"),
        make_media("a1", "Attack on Titan", "anime", category="Action", year="2013", rating="9.0"),
        make_media("a2", "Attack on Titan Season 2", "anime", category="Action", year="2017", rating="8.9"),
        make_media("a3", "Attack on Titan Season 3", "anime", category="Action", year="2018", is_trending=True),
        make_media(
            "s1",
            "Dark",
            "series",
            category="Mystery",
            year="2017",
            episodes=[
                Episode(number=1, title="Secrets", servers=[Server(name="Main", url="https://cdn.example/dark/1")]),
                Episode(number=2, title="Lies"),
            ],
        ),
        make_media("d1", "Our Planet", "documentary", year="2019"),
    ]


@pytest.fixture
def sample_catalog(sample_media):
    """Catalog filled with the sample media."""
    catalog = Catalog()
    catalog.add_many(sample_media)
    return catalog


@pytest.fixture
def test_config(tmp_path):
    """Configuration pointing at a temporary data directory."""
    return Config(
        catalog=CatalogConfig(data_dir=str(tmp_path / "data")),
        logging=LoggingConfig(level="error"),
    )


@pytest.fixture
def malformed_dump():
    """Scraper-style dump: bracketless objects, bare keys, single quotes, comments."""
    return """// exported from the scraper
{id: 101, title: 'Naruto', type: anime, category: 'Action, Adventure', year: 2002, rating: '8.4',},
{id: 102, title: 'Naruto: Shippuden', type: anime, poster: "https://img.example/shippuden.jpg", year: 2007,},
{id: 103, title: 'Bleach', type: anime, category: 'Action', year: 2004,},
"""
