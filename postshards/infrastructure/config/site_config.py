"""
Configuration manager for the catalog site.
Handles the YAML site definition shared by the builder and the listing client.
"""
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ...domain.entities.post import DEFAULT_FALLBACK_CATEGORY, LITE_SIZE, PAGE_SIZE
from ...domain.exceptions import ConfigError
from ..shard_cache import ShardLayout


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "POSTSHARDS_CONFIG"
DEFAULT_CONFIG_PATH = "site.yaml"


@dataclass
class SiteConfig:
    """Site settings; every key is optional in site.yaml."""
    data_dir: str = "data"
    source_file: str = "posts.json"
    lite_file: str = "posts-lite.json"
    categories_index_file: str = "categories-index.json"
    tags_index_file: str = "tags-index.json"
    category_dir: str = "category"
    tag_dir: str = "tag"
    lite_size: int = LITE_SIZE
    page_size: int = PAGE_SIZE
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY
    base_url: Optional[str] = None
    storage_path: str = ".postshards/storage.yaml"
    debounce_seconds: float = 0.12
    request_timeout: float = 30.0
    restore_last_category: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        if self.lite_size < 1:
            raise ConfigError("lite_size must be at least 1")
        if self.page_size < 1:
            raise ConfigError("page_size must be at least 1")
        if not self.fallback_category.strip():
            raise ConfigError("fallback_category must not be blank")

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def source_path(self) -> Path:
        return self.data_path / self.source_file

    @property
    def client_base_url(self) -> str:
        """Where the listing client fetches shards from (defaults to data_dir)"""
        return self.base_url or self.data_dir

    def layout(self) -> ShardLayout:
        return ShardLayout(
            lite_file=self.lite_file,
            full_file=self.source_file,
            categories_index_file=self.categories_index_file,
            tags_index_file=self.tags_index_file,
            category_dir=self.category_dir,
            tag_dir=self.tag_dir,
        )

    def with_overrides(self, **overrides: Any) -> "SiteConfig":
        """Copy with the non-None overrides applied (CLI flags)"""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_type(name: str, value: Any, default: Any) -> Any:
    if default is None:
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'{name}' must be a string")
        return value
    expected = type(default)
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if expected is int and isinstance(value, bool):
        raise ConfigError(f"'{name}' must be an integer")
    if not isinstance(value, expected):
        raise ConfigError(f"'{name}' must be of type {expected.__name__}")
    return value


class SiteConfigManager:
    """Loads SiteConfig from a YAML file."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
        self._config: Optional[SiteConfig] = None

    def _load_yaml(self) -> Dict[str, Any]:
        """Load raw YAML; a missing file means all defaults."""
        if not self.config_path.exists():
            logger.debug("No config at %s; using defaults", self.config_path)
            return {}
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_path} must contain a mapping")
        return data

    def load(self) -> SiteConfig:
        if self._config is None:
            data = self._load_yaml()
            defaults = {f.name: f.default for f in fields(SiteConfig)}

            unknown = sorted(set(data) - set(defaults))
            if unknown:
                raise ConfigError(f"Unknown setting(s) in {self.config_path}: {', '.join(map(str, unknown))}")

            values = {name: _check_type(name, value, defaults[name]) for name, value in data.items()}
            self._config = SiteConfig(**values)
        return self._config


__all__ = ["CONFIG_ENV_VAR", "SiteConfig", "SiteConfigManager"]
