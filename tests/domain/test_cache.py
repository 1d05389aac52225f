from __future__ import annotations

from datetime import timedelta

from siptrack.domain.cache import CacheState, ReconciliationCache
from tests.helpers.proposals import at, make_record


class FakeClock:
    def __init__(self) -> None:
        self.now = at(1)

    def __call__(self):  # noqa: ANN204
        return self.now


def test_cache_moves_from_empty_to_fresh_to_stale() -> None:
    clock = FakeClock()
    cache = ReconciliationCache(ttl=timedelta(minutes=5), clock=clock)

    assert cache.state() is CacheState.EMPTY

    snapshot = cache.store([make_record("sip-001")])

    assert snapshot is not None
    assert snapshot.as_of == at(1)
    assert cache.state() is CacheState.FRESH

    clock.now = at(1) + timedelta(minutes=5)
    assert cache.state() is CacheState.STALE


def test_storing_nothing_invalidates() -> None:
    cache = ReconciliationCache()
    cache.store([make_record("sip-001")])

    assert cache.store([]) is None
    assert cache.state() is CacheState.EMPTY
    assert cache.snapshot is None


def test_snapshot_lookup_is_case_insensitive() -> None:
    cache = ReconciliationCache()
    snapshot = cache.store([make_record("sip-001"), make_record("sip-generic-foo")])

    assert snapshot is not None
    assert snapshot.find("SIP-001") is not None
    assert snapshot.find("sip-002") is None
