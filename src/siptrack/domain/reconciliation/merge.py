"""Reduce the records of all sources to one record per canonical id."""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING

from siptrack.domain.dates import EPOCH, earliest, latest
from siptrack.domain.model import ProposalRecord, SourceKind, Status
from siptrack.domain.status import promote_if_merged

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from siptrack.domain.model import StructuredSummary

log = getLogger(__name__)


def precedence_key(record: ProposalRecord) -> tuple[object, ...]:
    """Sort key placing the most authoritative record of a group first.

    Source precedence decides; between records of the same kind the most recently
    updated wins, then the higher change-request number. The remaining fields only
    make the order total so the input order never matters.
    """

    updated = record.updated_at or EPOCH
    return (
        -int(record.source_kind),
        -updated.timestamp(),
        -(record.change_request_number or 0),
        record.source_path or "",
        record.origin_url,
        -record.created_at.timestamp(),
        record.title,
        record.status.value,
        record.summary,
    )


def rank_group(records: Iterable[ProposalRecord]) -> list[ProposalRecord]:
    return sorted(records, key=precedence_key)


def merge_group(records: Sequence[ProposalRecord]) -> ProposalRecord:
    """Merge the records sharing one canonical id."""

    if not records:
        raise ValueError("Cannot merge an empty group")
    ranked = rank_group(records)
    winner = ranked[0]

    summary_source = next((record for record in ranked if record.has_summary), winner)
    merged_at = latest(*(record.merged_at for record in ranked))
    sources = frozenset().union(*(record.sources for record in ranked))

    return winner.with_changes(
        status=_merged_status(ranked, sources=sources, merged=merged_at is not None),
        summary=summary_source.summary,
        structured_summary=_first_structured_summary(ranked, summary_source),
        body=next((record.body for record in ranked if record.has_body), None),
        created_at=earliest(*(record.created_at for record in ranked)) or winner.created_at,
        updated_at=latest(*(record.updated_at for record in ranked)),
        merged_at=merged_at,
        author=_first_present(record.author for record in ranked),
        change_request_number=_first_present(record.change_request_number for record in ranked),
        source_path=_first_present(record.source_path for record in ranked),
        sources=sources,
    )


def merge_records(records: Iterable[ProposalRecord]) -> list[ProposalRecord]:
    """Group ``records`` by canonical id and merge each group.

    The output holds exactly one record per id, in no particular order.
    """

    groups: dict[str, list[ProposalRecord]] = defaultdict(list)
    for record in records:
        groups[record.id.casefold()].append(record)

    merged = [merge_group(group) for group in groups.values()]
    log.debug("Merged records into %s proposals", len(merged))
    return merged


def _merged_status(
    ranked: Sequence[ProposalRecord],
    *,
    sources: frozenset[SourceKind],
    merged: bool,
) -> Status:
    if SourceKind.WITHDRAWN_FOLDER in sources:
        return Status.WITHDRAWN
    return promote_if_merged(ranked[0].status, merged=merged)


def _first_structured_summary(
    ranked: Sequence[ProposalRecord], summary_source: ProposalRecord
) -> StructuredSummary:
    if not summary_source.structured_summary.is_insufficient:
        return summary_source.structured_summary
    for record in ranked:
        if not record.structured_summary.is_insufficient:
            return record.structured_summary
    return summary_source.structured_summary


def _first_present[T](values: Iterable[T | None]) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


__all__ = ["merge_group", "merge_records", "precedence_key", "rank_group"]
