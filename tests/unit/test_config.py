"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from cinecatalog.config import CatalogConfig, Config, LoggingConfig, RecommendationConfig, load_config


class TestConfigDefaults:
    """Test built-in defaults."""

    def test_defaults(self):
        """Should provide working defaults."""
        config = Config.from_defaults()

        assert config.catalog.data_dir == "./data"
        assert config.catalog.read_only is False
        assert config.recommendations.similarity_threshold == 0.6
        assert config.recommendations.fallback_limit == 100
        assert config.api.port == 8787
        assert config.logging.format == "text"

    def test_load_config_without_path(self):
        """Should fall back to defaults."""
        assert load_config().api.host == "0.0.0.0"


class TestConfigFromYaml:
    """Test YAML loading."""

    def test_loads_sections(self, tmp_path):
        """Should read every section."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "catalog:\n"
            "  data_dir: /srv/catalog\n"
            "  default_year: 2023\n"
            "recommendations:\n"
            "  fallback_limit: 20\n"
            "logging:\n"
            "  format: json\n"
            "  level: DEBUG\n"
        )

        config = Config.from_yaml(path)

        assert config.catalog.data_dir == "/srv/catalog"
        assert config.catalog.default_year == "2023"
        assert config.recommendations.fallback_limit == 20
        assert config.logging.format == "json"
        assert config.logging.level == "debug"

    def test_empty_file(self, tmp_path):
        """Should treat an empty file as defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert Config.from_yaml(path).api.port == 8787

    def test_env_substitution(self, tmp_path, monkeypatch):
        """Should substitute ${VAR} references."""
        monkeypatch.setenv("CATALOG_DIR", "/data/catalog")
        path = tmp_path / "config.yaml"
        path.write_text("catalog:\n  data_dir: ${CATALOG_DIR}\n")

        assert Config.from_yaml(path).catalog.data_dir == "/data/catalog"

    def test_missing_env_var(self, tmp_path, monkeypatch):
        """Should fail on undefined variables."""
        monkeypatch.delenv("CINECATALOG_UNDEFINED", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("catalog:\n  data_dir: ${CINECATALOG_UNDEFINED}\n")

        with pytest.raises(ValueError, match="CINECATALOG_UNDEFINED"):
            Config.from_yaml(path)

    def test_missing_file(self, tmp_path):
        """Should raise for a missing file."""
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "absent.yaml")


class TestConfigValidation:
    """Test field validation."""

    def test_threshold_range(self):
        """Should reject thresholds outside (0, 1]."""
        with pytest.raises(ValidationError):
            RecommendationConfig(similarity_threshold=0)
        with pytest.raises(ValidationError):
            RecommendationConfig(similarity_threshold=1.5)

    def test_negative_limit(self):
        """Should reject negative limits."""
        with pytest.raises(ValidationError):
            RecommendationConfig(fallback_limit=-1)

    def test_log_format(self):
        """Should reject unknown log formats."""
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_log_level(self):
        """Should reject unknown log levels."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")

    def test_default_type(self):
        """Should reject default types outside the media type enumeration."""
        assert CatalogConfig(default_type="anime").default_type == "anime"
        with pytest.raises(ValidationError):
            CatalogConfig(default_type="film")
