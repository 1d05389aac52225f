"""Pydantic models describing the GitHub REST payloads we read."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ContentEntry(GitHubBaseModel):
    name: str
    path: str
    type: Literal["file", "dir", "symlink", "submodule"]
    download_url: str | None = None

    _normalize_download_url = field_validator("download_url", mode="before")(_blank_to_none)


class GitHubUser(GitHubBaseModel):
    login: str


class PullRequestPayload(GitHubBaseModel):
    number: int
    title: str = ""
    body: str | None = None
    state: Literal["open", "closed"]
    html_url: str
    user: GitHubUser | None = None
    created_at: datetime
    updated_at: datetime | None = None
    merged_at: datetime | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    _normalize_body = field_validator("body", mode="before")(_blank_to_none)


class PullRequestFilePayload(GitHubBaseModel):
    path: str = Field(alias="filename")
    status: str
    raw_url: str | None = None

    _normalize_raw_url = field_validator("raw_url", mode="before")(_blank_to_none)
