"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Status(StrEnum):
    """Lifecycle status of a proposal."""

    DRAFT = "Draft"
    PROPOSED = "Proposed"
    ACCEPTED = "Accepted"
    LIVE = "Live"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"
    ARCHIVED = "Archived"
    FINAL = "Final"
    DRAFT_NO_FILE = "Draft (no file)"
    CLOSED_UNMERGED = "Closed (unmerged)"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[Status] = frozenset(
    {Status.WITHDRAWN, Status.FINAL, Status.ARCHIVED}
)


class SourceKind(IntEnum):
    """Where a record came from; the integer value is its merge precedence."""

    CHANGE_REQUEST_PLACEHOLDER = 1
    CHANGE_REQUEST_DOCUMENT = 2
    ACCEPTED_FOLDER = 3
    WITHDRAWN_FOLDER = 4

    @property
    def is_folder(self) -> bool:
        return self in {SourceKind.ACCEPTED_FOLDER, SourceKind.WITHDRAWN_FOLDER}

    @property
    def is_change_request(self) -> bool:
        return not self.is_folder


class ChangeRequestState(StrEnum):
    OPEN = "open"
    CLOSED = "closed"


class FileChangeType(StrEnum):
    """Per-file status reported for a change request."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


RELEVANT_CHANGE_TYPES: frozenset[FileChangeType] = frozenset(
    {
        FileChangeType.ADDED,
        FileChangeType.MODIFIED,
        FileChangeType.RENAMED,
        FileChangeType.COPIED,
        FileChangeType.CHANGED,
    }
)
