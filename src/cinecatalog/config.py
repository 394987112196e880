"""Configuration management for cinecatalog."""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from cinecatalog.models.media import MediaType


class CatalogConfig(BaseModel):
    """Catalog storage configuration."""

    data_dir: str = Field(default="./data", description="Directory holding partition JSON files")
    read_only: bool = Field(default=False, description="Never write partition files back")
    default_type: str = Field(default="movie", description="Type assigned when a record has none")
    default_year: str = Field(default="2024", description="Year assigned when a record has none")

    @field_validator("default_year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> str:
        """Accept numeric years from YAML."""
        return str(v)

    @field_validator("default_type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Default type must be a known media type."""
        if v not in MediaType.values():
            raise ValueError(f"default_type must be one of {sorted(MediaType.values())}")
        return v


class RecommendationConfig(BaseModel):
    """Recommendation ranking tunables."""

    similarity_threshold: float = Field(
        default=0.6, description="Word-overlap ratio for similar titles"
    )
    fallback_limit: int = Field(
        default=100, description="Cap for category and same-type recommendations"
    )

    @field_validator("similarity_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Threshold must be a ratio."""
        if not 0 < v <= 1:
            raise ValueError("similarity_threshold must be in (0, 1]")
        return v

    @field_validator("fallback_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        """Limit must not be negative."""
        if v < 0:
            raise ValueError("fallback_limit must be >= 0")
        return v


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=8787, description="API port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="info", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class Config(BaseModel):
    """Main configuration model."""

    catalog: CatalogConfig = Field(default_factory=CatalogConfig, description="Catalog storage")
    recommendations: RecommendationConfig = Field(
        default_factory=RecommendationConfig, description="Recommendation tunables"
    )
    api: APIConfig = Field(default_factory=APIConfig, description="API configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively substitute ${VAR_NAME} with os.environ['VAR_NAME'].

        Args:
            obj: Configuration object (dict, list, str, etc.)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values."""
        return cls()


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config.from_defaults()

    return Config.from_yaml(path)
