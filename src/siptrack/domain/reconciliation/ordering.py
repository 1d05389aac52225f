"""Final ordering of the reconciled proposal list."""

from __future__ import annotations

from typing import TYPE_CHECKING

from siptrack.domain.identifiers import numeric_part
from siptrack.domain.status import status_rank

if TYPE_CHECKING:
    from collections.abc import Iterable

    from siptrack.domain.model import ProposalRecord


def display_key(record: ProposalRecord) -> tuple[object, ...]:
    """Numbered proposals first (highest number first), then status, recency and id."""

    number = numeric_part(record.id)
    return (
        number is None,
        -(number or 0),
        status_rank(record.status),
        -record.latest_activity.timestamp(),
        record.id,
    )


def sort_records(records: Iterable[ProposalRecord]) -> list[ProposalRecord]:
    return sorted(records, key=display_key)


__all__ = ["display_key", "sort_records"]
