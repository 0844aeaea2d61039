"""
Cache service configuration.
"""

from typing import Any, Dict

from pydantic import Field, field_validator

from shared.config import BaseConfig
from .cache.cache_service import GLOB_CHARACTERS
from .cache.namespaces import CacheNamespace


class CacheSettings(BaseConfig):
    """Settings for the cache service, read from ``CACHE_*`` environment variables."""

    key_prefix: str = Field(default="stellar:")
    # JSON object in the environment, e.g. CACHE_TTL_OVERRIDES='{"users": 600}'
    ttl_overrides: Dict[str, int] = Field(default_factory=dict)

    @field_validator("key_prefix")
    @classmethod
    def _validate_key_prefix(cls, value: str) -> str:
        if GLOB_CHARACTERS.intersection(value):
            raise ValueError("Key prefix must not contain glob characters")
        return value

    @field_validator("ttl_overrides", mode="before")
    @classmethod
    def _reject_bool_ttls(cls, value: Any) -> Any:
        # Lax int parsing would turn True into 1
        if isinstance(value, dict):
            for namespace, ttl in value.items():
                if isinstance(ttl, bool):
                    raise ValueError(f"TTL override for {namespace!r} must be an integer")
        return value

    @field_validator("ttl_overrides")
    @classmethod
    def _validate_ttl_overrides(cls, value: Dict[str, int]) -> Dict[str, int]:
        normalized: Dict[str, int] = {}
        for namespace, ttl in value.items():
            if ttl <= 0:
                raise ValueError(f"TTL override for {namespace!r} must be positive")
            key = CacheNamespace.coerce(namespace).value
            if key in normalized:
                raise ValueError(f"Duplicate TTL override for namespace {key!r}")
            normalized[key] = ttl
        return normalized


def get_settings(**overrides) -> CacheSettings:
    """Load cache settings from the environment, with explicit overrides."""
    return CacheSettings(**overrides)
