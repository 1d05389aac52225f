"""Application configuration helpers."""

from __future__ import annotations

from siptrack.common.logging import configure_logging

from .engine import EngineConfig, get_engine_config
from .env import env_choice, env_float, env_int, optional_env_var
from .errors import ConfigurationError
from .github import GitHubConfig, HttpCacheMode, default_resilience_config, get_github_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_http_cache_path, get_storage_config
from .summarizer import SummarizerConfig, get_summarizer_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "EngineConfig",
    "GitHubConfig",
    "HttpCacheMode",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SummarizerConfig",
    "configure_logging",
    "default_resilience_config",
    "env_choice",
    "env_float",
    "env_int",
    "get_engine_config",
    "get_github_config",
    "get_http_cache_path",
    "get_storage_config",
    "get_summarizer_config",
    "optional_env_var",
]
