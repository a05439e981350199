"""Configuration loading for the bundling tools."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

import yaml
from dotenv import load_dotenv

T = TypeVar("T")

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"

DEFAULT_SIMILARITY_THRESHOLD = 0.82
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_MAX_CHARS = 8000


@dataclass
class BundlingConfig:
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    embed_max_workers: int = 4


@dataclass
class EmbeddingConfig:
    model: str = DEFAULT_EMBEDDING_MODEL
    max_chars: int = DEFAULT_MAX_CHARS
    timeout: float = 30.0


@dataclass
class DatabaseConfig:
    url: str | None = None


@dataclass
class Config:
    bundling: BundlingConfig = field(default_factory=BundlingConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def validate_threshold(value: Any) -> float:
    """Parse a similarity threshold and check it lies in (0, 1].

    Raises:
        ValueError: If the value is not a number or is out of range.
    """
    try:
        threshold = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Similarity threshold must be a number, got {value!r}") from exc
    if math.isnan(threshold) or not 0.0 < threshold <= 1.0:
        raise ValueError(f"Similarity threshold must be in (0, 1], got {threshold}")
    return threshold


def find_config_path(
    config_name: str | None,
    config_dir: Path,
    default_name: str = "default",
    env_var: str | None = None,
) -> Path:
    """Find config file path, checking env var and defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_name is None:
        config_name = os.environ.get(env_var, default_name) if env_var else default_name

    config_path = config_dir / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return config_path


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(config_name: str | None = None, config_dir: Path = CONFIG_DIR) -> Config:
    """Load configuration from YAML, then apply environment overrides.

    Args:
        config_name: Name of config file (without .yaml extension).
            If None, uses CONFIG_ENV env var or "default"; a missing file
            then falls back to built-in defaults.

    Returns:
        Loaded Config object
    """
    load_dotenv()

    try:
        data = load_yaml(find_config_path(config_name, config_dir, env_var="CONFIG_ENV"))
    except FileNotFoundError:
        if config_name is not None:
            raise
        logger.debug("No config file in %s, using defaults", config_dir)
        data = {}

    config = _parse_config(data)
    _apply_env_overrides(config)
    return config


def _parse_config(data: dict) -> Config:
    """Parse config dictionary into Config object."""
    bundling_data = data.get("bundling", {}) or {}
    embedding_data = data.get("embedding", {}) or {}
    database_data = data.get("database", {}) or {}

    bundling = BundlingConfig(
        similarity_threshold=validate_threshold(
            bundling_data.get("similarity_threshold", DEFAULT_SIMILARITY_THRESHOLD)
        ),
        embed_max_workers=int(bundling_data.get("embed_max_workers", 4)),
    )
    if bundling.embed_max_workers < 1:
        raise ValueError("bundling.embed_max_workers must be at least 1")

    embedding = EmbeddingConfig(
        model=embedding_data.get("model", DEFAULT_EMBEDDING_MODEL),
        max_chars=int(embedding_data.get("max_chars", DEFAULT_MAX_CHARS)),
        timeout=float(embedding_data.get("timeout", 30.0)),
    )

    database = DatabaseConfig(url=database_data.get("url"))

    return Config(bundling=bundling, embedding=embedding, database=database)


def _apply_env_overrides(config: Config) -> None:
    threshold = os.environ.get("SIMILARITY_THRESHOLD")
    if threshold:
        config.bundling.similarity_threshold = validate_threshold(threshold)

    model = os.environ.get("EMBEDDING_MODEL")
    if model:
        config.embedding.model = model

    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        config.database.url = database_url


class ConfigSingleton(Generic[T]):
    """Generic config singleton manager.

    Provides get/set/reset pattern for managing a global config instance.
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._config: T | None = None
        self._loader = loader

    def get(self) -> T:
        """Get the config, loading it lazily if needed."""
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config loaded and no loader set")
            self._config = self._loader()
        return self._config

    def set(self, config: T) -> None:
        """Set the config directly."""
        self._config = config

    def reset(self) -> None:
        """Reset the config, forcing reload on next get()."""
        self._config = None


_manager: ConfigSingleton[Config] = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
