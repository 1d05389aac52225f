"""Hosted repository (GitHub) configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal, cast

from .env import env_choice, env_float, env_int, optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

GITHUB_API_URL = "https://api.github.com"
GITHUB_WEB_URL = "https://github.com"
DEFAULT_REPO_OWNER = "sui-foundation"
DEFAULT_REPO_NAME = "sips"
DEFAULT_BRANCH = "main"
DEFAULT_ACCEPTED_PATH = "sips"
DEFAULT_WITHDRAWN_PATH = "sips/withdrawn"
DEFAULT_MAX_CHANGE_REQUESTS = 100
DEFAULT_TIMEOUT_SECONDS = 20.0

type HttpCacheMode = Literal["memory", "sqlite", "off"]

HTTP_CACHE_MODES: Final[tuple[str, ...]] = ("memory", "sqlite", "off")
DEFAULT_HTTP_CACHE: Final[HttpCacheMode] = "memory"


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    """Where the proposal documents live and how to reach them."""

    owner: str
    repo: str
    resilience: ResilienceConfig
    branch: str = DEFAULT_BRANCH
    accepted_path: str = DEFAULT_ACCEPTED_PATH
    withdrawn_path: str = DEFAULT_WITHDRAWN_PATH
    token: str | None = None
    max_change_requests: int = DEFAULT_MAX_CHANGE_REQUESTS

    @property
    def tracked_paths(self) -> tuple[str, ...]:
        return (self.accepted_path, self.withdrawn_path)

    @property
    def repository_url(self) -> str:
        return f"{GITHUB_WEB_URL}/{self.owner}/{self.repo}"


def default_resilience_config(
    *,
    token: str | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    http_cache: HttpCacheMode = DEFAULT_HTTP_CACHE,
) -> ResilienceConfig:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return ResilienceConfig(
        name="github",
        base_url=GITHUB_API_URL,
        timeout_seconds=timeout_seconds,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=None if http_cache == "off" else CacheConfig(backend=http_cache),
        default_headers=headers,
    )


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig:
    token = optional_env_var("GITHUB_TOKEN")
    timeout_seconds = env_float(
        "SIPTRACK_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, minimum=1.0
    )
    return GitHubConfig(
        owner=optional_env_var("SIPTRACK_REPO_OWNER", DEFAULT_REPO_OWNER) or DEFAULT_REPO_OWNER,
        repo=optional_env_var("SIPTRACK_REPO_NAME", DEFAULT_REPO_NAME) or DEFAULT_REPO_NAME,
        branch=optional_env_var("SIPTRACK_BRANCH", DEFAULT_BRANCH) or DEFAULT_BRANCH,
        accepted_path=_strip_slashes(
            optional_env_var("SIPTRACK_ACCEPTED_PATH", DEFAULT_ACCEPTED_PATH)
        ),
        withdrawn_path=_strip_slashes(
            optional_env_var("SIPTRACK_WITHDRAWN_PATH", DEFAULT_WITHDRAWN_PATH)
        ),
        token=token,
        max_change_requests=env_int(
            "SIPTRACK_MAX_CHANGE_REQUESTS", DEFAULT_MAX_CHANGE_REQUESTS
        ),
        resilience=resilience
        or default_resilience_config(
            token=token,
            timeout_seconds=timeout_seconds,
            http_cache=cast(
                "HttpCacheMode",
                env_choice("SIPTRACK_HTTP_CACHE", DEFAULT_HTTP_CACHE, HTTP_CACHE_MODES),
            ),
        ),
    )


def _strip_slashes(value: str | None) -> str:
    return (value or "").strip("/")
