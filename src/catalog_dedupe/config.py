"""
Runtime configuration for catalog dedupe.

Values come from ``CATALOG_DEDUPE_*`` environment variables::

    CATALOG_DEDUPE_THRESHOLD=0.8 catalog-dedupe scan --database-url sqlite:///catalog.db

Unset variables fall back to the dataclass defaults.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Mapping

from catalog_dedupe.errors import ConfigurationError

ENV_PREFIX = "CATALOG_DEDUPE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class DedupeConfig:
    threshold: float = 0.7
    name_match_threshold: float = 0.7
    database_url: str = "sqlite:///catalog.db"
    cache_ttl_seconds: float = 300.0
    audit_scans: bool = True
    default_actor: str = "system"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DedupeConfig":
        env = os.environ if environ is None else environ
        defaults = cls()

        config = cls(
            threshold=_float(env, "THRESHOLD", defaults.threshold),
            name_match_threshold=_float(env, "NAME_MATCH_THRESHOLD", defaults.name_match_threshold),
            database_url=env.get(f"{ENV_PREFIX}DATABASE_URL", defaults.database_url),
            cache_ttl_seconds=_float(env, "CACHE_TTL_SECONDS", defaults.cache_ttl_seconds),
            audit_scans=_bool(env, "AUDIT_SCANS", defaults.audit_scans),
            default_actor=env.get(f"{ENV_PREFIX}DEFAULT_ACTOR", defaults.default_actor),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        for name in ("threshold", "name_match_threshold"):
            value = getattr(self, name)
            if math.isnan(value) or not 0.0 < value <= 1.0:
                raise ConfigurationError(f"{name} must be in (0, 1], got {value}")
        if self.cache_ttl_seconds < 0:
            raise ConfigurationError("cache_ttl_seconds must be >= 0")
        if not self.database_url:
            raise ConfigurationError("database_url must not be empty")


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(f"{ENV_PREFIX}{key}")
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{key} must be a number, got {raw!r}") from exc


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(f"{ENV_PREFIX}{key}")
    if raw is None or not raw.strip():
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{ENV_PREFIX}{key} must be a boolean, got {raw!r}")
