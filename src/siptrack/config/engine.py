"""Reconciliation engine tuning values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_float, env_int

DEFAULT_CACHE_TTL_SECONDS = 300.0
DEFAULT_MAX_CONCURRENCY = 4


@dataclass(frozen=True, slots=True)
class EngineConfig:
    cache_ttl: timedelta = timedelta(seconds=DEFAULT_CACHE_TTL_SECONDS)
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY


def get_engine_config() -> EngineConfig:
    return EngineConfig(
        cache_ttl=timedelta(
            seconds=env_float("SIPTRACK_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS)
        ),
        max_concurrency=env_int("SIPTRACK_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY),
    )
