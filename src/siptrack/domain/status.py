"""Derivation of a proposal's lifecycle status."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from siptrack.domain.model import ChangeRequestState, SourceKind, Status

_WITHDRAWAL_KEYWORD = re.compile(r"\bwithdr(?:aw(?:n|al|als|ing|s)?|ew)\b", re.IGNORECASE)
_SPACES = re.compile(r"[\s_-]+")


def _status_key(value: str) -> str:
    return _SPACES.sub(" ", value.strip().lower().replace("(", "").replace(")", "")).strip()


_STATUS_BY_KEY: Final[dict[str, Status]] = {_status_key(status.value): status for status in Status}

STATUS_RANK: Final[dict[Status, int]] = {
    status: index
    for index, status in enumerate(
        (
            Status.LIVE,
            Status.FINAL,
            Status.ACCEPTED,
            Status.PROPOSED,
            Status.DRAFT,
            Status.DRAFT_NO_FILE,
            Status.CLOSED_UNMERGED,
            Status.WITHDRAWN,
            Status.REJECTED,
            Status.ARCHIVED,
        )
    )
}

FOLDER_DEFAULTS: Final[dict[SourceKind, Status]] = {
    SourceKind.ACCEPTED_FOLDER: Status.FINAL,
    SourceKind.WITHDRAWN_FOLDER: Status.WITHDRAWN,
}

_FRIENDLY_LABELS: Final[dict[Status, str]] = {
    Status.LIVE: "Approved",
    Status.FINAL: "Approved",
    Status.ACCEPTED: "Approved",
    Status.PROPOSED: "In Progress",
    Status.DRAFT: "In Progress",
    Status.DRAFT_NO_FILE: "Draft Started",
    Status.WITHDRAWN: "Withdrawn",
    Status.REJECTED: "Rejected",
    Status.CLOSED_UNMERGED: "Rejected",
    Status.ARCHIVED: "Archived",
}


@dataclass(frozen=True, slots=True, kw_only=True)
class StatusSignals:
    source_kind: SourceKind
    explicit: object = None
    folder_default: Status | None = None
    change_request_state: ChangeRequestState | None = None
    merged: bool = False
    withdrawal_mentioned: bool = False


def parse_status(value: object) -> Status | None:
    """Match an explicit header value against the closed status set."""

    if isinstance(value, Status):
        return value
    if not isinstance(value, str):
        return None
    return _STATUS_BY_KEY.get(_status_key(value))


def mentions_withdrawal(*texts: str | None) -> bool:
    return any(text and _WITHDRAWAL_KEYWORD.search(text) for text in texts)


def resolve_status(signals: StatusSignals) -> Status:
    explicit = parse_status(signals.explicit)
    if explicit is not None:
        return explicit

    if signals.source_kind.is_folder:
        return signals.folder_default or FOLDER_DEFAULTS[signals.source_kind]

    if signals.merged:
        return Status.ACCEPTED
    if signals.change_request_state is ChangeRequestState.CLOSED:
        if signals.withdrawal_mentioned:
            return Status.WITHDRAWN
        return Status.CLOSED_UNMERGED
    if signals.source_kind is SourceKind.CHANGE_REQUEST_PLACEHOLDER:
        return Status.DRAFT_NO_FILE
    return Status.DRAFT


def promote_if_merged(status: Status, *, merged: bool) -> Status:
    """A merged change request lifts a draft to Accepted; terminal statuses stay put."""

    if merged and status in {Status.DRAFT, Status.DRAFT_NO_FILE}:
        return Status.ACCEPTED
    return status


def status_rank(status: Status) -> int:
    return STATUS_RANK[status]


def friendly_label(status: Status) -> str:
    return _FRIENDLY_LABELS.get(status, status.value)


__all__ = [
    "FOLDER_DEFAULTS",
    "STATUS_RANK",
    "StatusSignals",
    "friendly_label",
    "mentions_withdrawal",
    "parse_status",
    "promote_if_merged",
    "resolve_status",
    "status_rank",
]
