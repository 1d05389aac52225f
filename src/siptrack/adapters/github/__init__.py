"""GitHub adapter for the repository port."""

from __future__ import annotations

from .client import GitHubAPIError, GitHubClient

__all__ = ["GitHubAPIError", "GitHubClient"]
