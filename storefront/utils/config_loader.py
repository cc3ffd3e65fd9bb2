"""
Configuration loader for the catalogue data-access layer
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "catalog_config.yml"


class SourceConfig(BaseModel):
    """Where catalogue collections come from"""

    provider: Literal["http", "local"] = "local"
    base_url: str = "http://localhost:5000/api"
    products_path: str = "/products"
    api_key_env: str = "CATALOG_API_KEY"
    timeout_seconds: float = Field(default=10.0, gt=0.0, le=120.0)
    local_path: str = "data/sample_catalog.json"


class CacheConfig(BaseModel):
    """TTL cache policy"""

    ttl_seconds: float = Field(default=300.0, gt=0.0)
    max_entries: Optional[int] = Field(default=None, ge=1)


class RelatedConfig(BaseModel):
    """Related-items collection shape"""

    fetch_limit: int = Field(default=9, ge=1, le=100)
    max_items: int = Field(default=8, ge=1, le=100)


class ThrottleConfig(BaseModel):
    """Outbound request throttling"""

    enabled: bool = False
    requests_per_minute: int = Field(default=60, ge=1, le=10000)


class CatalogConfig(BaseModel):
    """Complete catalogue configuration"""

    source: SourceConfig = Field(default_factory=SourceConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    related: RelatedConfig = Field(default_factory=RelatedConfig)
    throttle: ThrottleConfig = Field(default_factory=ThrottleConfig)

    def api_key(self) -> Optional[str]:
        return os.getenv(self.source.api_key_env) or None


def _apply_env_overrides(data: dict) -> dict:
    source = dict(data.get("source") or {})
    base_url = os.getenv("CATALOG_API_URL")
    if base_url:
        source["base_url"] = base_url
        source.setdefault("provider", "http")
    provider = os.getenv("CATALOG_SOURCE")
    if provider:
        source["provider"] = provider
    if source:
        data = {**data, "source": source}
    return data


def load_catalog_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load and validate catalogue configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/catalog_config.yml

    Returns:
        Validated CatalogConfig object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv(override=False)

    data: dict = {}
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        else:
            logger.info("No catalogue config at %s, using defaults", config_path)
    else:
        if not config_path.exists():
            raise FileNotFoundError(f"Catalogue config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    data = _apply_env_overrides(data)

    try:
        cfg = CatalogConfig(**data)
        logger.info("Successfully loaded catalogue config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Catalogue config validation failed: %s", e)
        raise
