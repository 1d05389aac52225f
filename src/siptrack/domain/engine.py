"""Public read API over the reconciliation pipeline and its cache."""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from siptrack.domain.cache import CacheState, ReconciliationCache
from siptrack.domain.identifiers import normalize_lookup_id
from siptrack.domain.reconciliation import reconcile
from siptrack.domain.sources import SourceBatch

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence

    from siptrack.domain.cache import CacheSnapshot
    from siptrack.domain.model import ProposalRecord
    from siptrack.domain.sources import SourceFetcher

log = getLogger(__name__)


class Pipeline(Protocol):
    async def run(self) -> tuple[ProposalRecord, ...]: ...


class AsyncClosable(Protocol):
    async def aclose(self) -> None: ...


class ReconciliationPipeline:
    """Run every source concurrently and reconcile their batches."""

    def __init__(
        self,
        sources: Sequence[SourceFetcher],
        *,
        resources: Sequence[AsyncClosable] = (),
    ) -> None:
        self._sources = tuple(sources)
        self._resources = tuple(resources)

    async def run(self) -> tuple[ProposalRecord, ...]:
        try:
            batches = await asyncio.gather(
                *(self._collect(source) for source in self._sources)
            )
        finally:
            for resource in self._resources:
                await resource.aclose()
        return reconcile(batches)

    @staticmethod
    async def _collect(source: SourceFetcher) -> SourceBatch:
        try:
            return await source()
        except Exception:
            log.exception("Source %s failed", source.name)
            return SourceBatch(source.name, failed=True)


type Runner = Callable[
    [Coroutine[object, object, tuple[ProposalRecord, ...]]],
    tuple[ProposalRecord, ...],
]


@dataclass(slots=True)
class _Refresh:
    done: threading.Event = field(default_factory=threading.Event)
    result: CacheSnapshot | None = None


class ProposalEngine:
    """Serve reconciled proposals from the cache, refreshing when needed.

    At most one pipeline run is in flight; callers on other threads that need a
    refresh while one runs wait for it and share its result. Pipeline failures
    never propagate: the cache is invalidated and callers see no proposals.
    Refreshing from inside a running event loop raises ``RuntimeError``.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        cache: ReconciliationCache | None = None,
        *,
        runner: Runner = asyncio.run,
    ) -> None:
        self._pipeline = pipeline
        self._cache = cache or ReconciliationCache()
        self._runner = runner
        self._lock = threading.Lock()
        self._inflight: _Refresh | None = None

    @property
    def cache(self) -> ReconciliationCache:
        return self._cache

    def list_all(self, force_refresh: bool = False) -> list[ProposalRecord]:
        snapshot, _ = self._current(force_refresh=force_refresh)
        return list(snapshot.records) if snapshot is not None else []

    def get_by_id(self, proposal_id: str, force_refresh: bool = False) -> ProposalRecord | None:
        canonical_id = normalize_lookup_id(proposal_id)
        if not canonical_id:
            return None

        snapshot, reloaded = self._current(force_refresh=force_refresh)
        record = snapshot.find(canonical_id) if snapshot is not None else None
        if record is None and not reloaded:
            log.info("%s not cached, reloading once", canonical_id)
            snapshot = self._refresh()
            record = snapshot.find(canonical_id) if snapshot is not None else None
        return record

    def _current(self, *, force_refresh: bool) -> tuple[CacheSnapshot | None, bool]:
        state = self._cache.state()
        if not force_refresh and state is CacheState.FRESH:
            return self._cache.snapshot, False
        log.debug("Refreshing proposals (cache %s, forced=%s)", state, force_refresh)
        return self._refresh(), True

    def _refresh(self) -> CacheSnapshot | None:
        _require_no_running_loop()
        with self._lock:
            refresh = self._inflight
            owner = refresh is None
            if refresh is None:
                refresh = self._inflight = _Refresh()

        if not owner:
            log.debug("Joining in-flight refresh")
            refresh.done.wait()
            return refresh.result

        try:
            refresh.result = self._run_pipeline()
        finally:
            with self._lock:
                self._inflight = None
            refresh.done.set()
        return refresh.result

    def _run_pipeline(self) -> CacheSnapshot | None:
        try:
            records = self._runner(self._pipeline.run())
        except Exception:
            log.exception("Reconciliation failed, invalidating cache")
            self._cache.invalidate()
            return None
        return self._cache.store(records)


def _require_no_running_loop() -> None:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return
    raise RuntimeError(
        "ProposalEngine is synchronous and cannot refresh inside a running event loop; "
        "call it from a worker thread, e.g. with asyncio.to_thread"
    )


__all__ = ["Pipeline", "ProposalEngine", "ReconciliationPipeline"]
