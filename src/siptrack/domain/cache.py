"""Time-bounded holder of the last reconciled snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from siptrack.domain.dates import utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from siptrack.domain.dates import Clock
    from siptrack.domain.model import ProposalRecord

log = getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)


class CacheState(StrEnum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True, slots=True)
class CacheSnapshot:
    records: tuple[ProposalRecord, ...]
    as_of: datetime

    def find(self, canonical_id: str) -> ProposalRecord | None:
        key = canonical_id.casefold()
        return next((record for record in self.records if record.id.casefold() == key), None)


class ReconciliationCache:
    """Hold one snapshot and replace it wholesale.

    Readers take the ``snapshot`` reference once and never observe a partially
    written list.
    """

    def __init__(self, ttl: timedelta = DEFAULT_TTL, clock: Clock = utcnow) -> None:
        self._ttl = ttl
        self._clock = clock
        self._snapshot: CacheSnapshot | None = None

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def snapshot(self) -> CacheSnapshot | None:
        return self._snapshot

    def state(self) -> CacheState:
        snapshot = self._snapshot
        if snapshot is None:
            return CacheState.EMPTY
        if self._clock() - snapshot.as_of < self._ttl:
            return CacheState.FRESH
        return CacheState.STALE

    def store(self, records: Iterable[ProposalRecord]) -> CacheSnapshot | None:
        """Swap in ``records``; an empty result invalidates the cache instead."""

        records = tuple(records)
        if not records:
            log.info("Reconciliation produced no records, invalidating cache")
            self.invalidate()
            return None
        snapshot = CacheSnapshot(records=records, as_of=self._clock())
        self._snapshot = snapshot
        log.info("Cached %s proposals as of %s", len(records), snapshot.as_of.isoformat())
        return snapshot

    def invalidate(self) -> None:
        self._snapshot = None


__all__ = ["DEFAULT_TTL", "CacheSnapshot", "CacheState", "ReconciliationCache"]
