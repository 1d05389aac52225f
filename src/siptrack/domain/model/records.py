"""Canonical proposal records produced by parsing and reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import SourceKind, Status

INSUFFICIENT_INFO_MESSAGE: Final[str] = "Insufficient information to summarize this aspect."
INSUFFICIENT_SUMMARY_MESSAGE: Final[str] = "Insufficient information to summarize this proposal."


@dataclass(frozen=True, slots=True, kw_only=True)
class StructuredSummary:
    """Three one-sentence explanations of a proposal."""

    what_it_is: str = INSUFFICIENT_INFO_MESSAGE
    what_it_changes: str = INSUFFICIENT_INFO_MESSAGE
    why_it_matters: str = INSUFFICIENT_INFO_MESSAGE

    @property
    def is_insufficient(self) -> bool:
        return all(
            value == INSUFFICIENT_INFO_MESSAGE
            for value in (self.what_it_is, self.what_it_changes, self.why_it_matters)
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class SummaryResult:
    headline: str = INSUFFICIENT_SUMMARY_MESSAGE
    structured: StructuredSummary = field(default_factory=StructuredSummary)

    @property
    def is_insufficient(self) -> bool:
        return self.headline == INSUFFICIENT_SUMMARY_MESSAGE and self.structured.is_insufficient


INSUFFICIENT_SUMMARY: Final[SummaryResult] = SummaryResult()


@dataclass(frozen=True, slots=True, kw_only=True)
class ProposalRecord:
    """One proposal as seen by a single source, or the reconciled view of all of them.

    Raw records carry only their own ``source_kind`` in ``sources``; merged records
    keep the winning record's ``source_kind`` and the union of contributing kinds.
    """

    id: str
    title: str
    status: Status
    summary: str
    origin_url: str
    source_kind: SourceKind
    created_at: datetime
    structured_summary: StructuredSummary = field(default_factory=StructuredSummary)
    body: str | None = None
    updated_at: datetime | None = None
    merged_at: datetime | None = None
    author: str | None = None
    change_request_number: int | None = None
    source_path: str | None = None
    sources: frozenset[SourceKind] = frozenset()

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Proposal records require a canonical id")
        if not self.summary:
            object.__setattr__(self, "summary", INSUFFICIENT_SUMMARY_MESSAGE)
        if not self.sources:
            object.__setattr__(self, "sources", frozenset({self.source_kind}))

    @property
    def has_body(self) -> bool:
        return bool(self.body and self.body.strip())

    @property
    def has_summary(self) -> bool:
        return self.summary != INSUFFICIENT_SUMMARY_MESSAGE

    @property
    def latest_activity(self) -> datetime:
        """Most recent of merge, update and creation time."""

        return max(
            value for value in (self.merged_at, self.updated_at, self.created_at) if value
        )

    def with_changes(self, **changes: object) -> ProposalRecord:
        return replace(self, **changes)  # type: ignore[arg-type]
