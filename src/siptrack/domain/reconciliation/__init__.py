"""Merge per-source records into the reconciled proposal list."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .merge import merge_group, merge_records, precedence_key, rank_group
from .ordering import display_key, sort_records

if TYPE_CHECKING:
    from collections.abc import Iterable

    from siptrack.domain.model import ProposalRecord
    from siptrack.domain.sources import SourceBatch

log = getLogger(__name__)


class ReconciliationError(RuntimeError):
    """Raised when no source produced a usable batch."""


def reconcile(batches: Iterable[SourceBatch]) -> tuple[ProposalRecord, ...]:
    """Merge and order the records of every batch.

    Raises :class:`ReconciliationError` when every batch failed; a partial failure
    only narrows the result.
    """

    batches = tuple(batches)
    failed = [batch.name for batch in batches if batch.failed]
    if not batches or len(failed) == len(batches):
        raise ReconciliationError(f"All sources failed: {', '.join(failed) or 'none configured'}")
    if failed:
        log.warning("Reconciling without degraded sources: %s", ", ".join(failed))

    records = [record for batch in batches for record in batch.records]
    merged = sort_records(merge_records(records))
    log.info("Reconciled %s records into %s proposals", len(records), len(merged))
    return tuple(merged)


__all__ = [
    "ReconciliationError",
    "display_key",
    "merge_group",
    "merge_records",
    "precedence_key",
    "rank_group",
    "reconcile",
    "sort_records",
]
