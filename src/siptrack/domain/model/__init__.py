"""Public domain model surface."""

from __future__ import annotations

from siptrack.domain.model.enums import (
    RELEVANT_CHANGE_TYPES,
    TERMINAL_STATUSES,
    ChangeRequestState,
    FileChangeType,
    SourceKind,
    Status,
)
from siptrack.domain.model.records import (
    INSUFFICIENT_INFO_MESSAGE,
    INSUFFICIENT_SUMMARY,
    INSUFFICIENT_SUMMARY_MESSAGE,
    ProposalRecord,
    StructuredSummary,
    SummaryResult,
)

__all__ = [
    "INSUFFICIENT_INFO_MESSAGE",
    "INSUFFICIENT_SUMMARY",
    "INSUFFICIENT_SUMMARY_MESSAGE",
    "RELEVANT_CHANGE_TYPES",
    "TERMINAL_STATUSES",
    "ChangeRequestState",
    "FileChangeType",
    "ProposalRecord",
    "SourceKind",
    "Status",
    "StructuredSummary",
    "SummaryResult",
]
