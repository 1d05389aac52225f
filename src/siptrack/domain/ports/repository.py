"""Port for reading proposal documents and change requests from a hosted repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from siptrack.domain.model import ChangeRequestState, FileChangeType


@dataclass(frozen=True, slots=True)
class RepositoryEntry:
    """One item of a directory listing."""

    name: str
    path: str
    is_file: bool
    download_url: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ChangeRequest:
    """Metadata of a change request (pull request)."""

    number: int
    title: str
    state: ChangeRequestState
    created_at: datetime
    url: str
    body: str | None = None
    author: str | None = None
    updated_at: datetime | None = None
    merged_at: datetime | None = None

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


@dataclass(frozen=True, slots=True)
class ChangedFile:
    """A file touched by a change request."""

    path: str
    change_type: FileChangeType
    raw_url: str | None = None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class RepositoryLinks(Protocol):
    """Builds human-readable links into the repository."""

    def browse_url(self, path: str) -> str:
        """URL of ``path`` on the tracked branch."""
        ...

    def change_request_url(self, number: int) -> str: ...


@runtime_checkable
class RepositoryClient(RepositoryLinks, Protocol):
    """Read-only access to the repository holding the proposal documents."""

    async def list_directory(self, path: str) -> list[RepositoryEntry]: ...

    async def fetch_bytes(self, url: str) -> bytes: ...

    async def list_change_requests(
        self, state: Literal["open", "closed", "all"] = "all"
    ) -> list[ChangeRequest]: ...

    async def list_changed_files(self, number: int) -> list[ChangedFile]: ...


__all__ = [
    "ChangeRequest",
    "ChangedFile",
    "RepositoryClient",
    "RepositoryEntry",
    "RepositoryLinks",
]
