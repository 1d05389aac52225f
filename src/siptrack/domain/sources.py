"""Source fetchers: list candidate documents and feed them to the parser.

Three fetchers exist, one per source: the accepted folder, the withdrawn folder and
the change requests. Each returns a :class:`SourceBatch`; a fetcher whose top-level
listing fails returns an empty batch flagged ``failed`` instead of raising.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from siptrack.domain.model import RELEVANT_CHANGE_TYPES, SourceKind
from siptrack.domain.parsing import DocumentContext
from siptrack.domain.status import FOLDER_DEFAULTS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from siptrack.domain.model import ProposalRecord
    from siptrack.domain.parsing import DocumentParser
    from siptrack.domain.ports import (
        ChangedFile,
        ChangeRequest,
        RepositoryClient,
        RepositoryEntry,
    )

log = getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


@dataclass(frozen=True, slots=True)
class SourceBatch:
    """Records produced by one fetcher in one reconciliation cycle."""

    name: str
    records: tuple[ProposalRecord, ...] = ()
    failed: bool = False


class SourceFetcher(Protocol):
    @property
    def name(self) -> str: ...

    async def __call__(self) -> SourceBatch: ...


def is_candidate_document(file_name: str) -> bool:
    lowered = file_name.lower()
    return lowered.endswith(".md") and "template" not in lowered


def is_under(path: str, root: str) -> bool:
    root = root.strip("/")
    if not root:
        return True
    return path == root or path.startswith(f"{root}/")


@dataclass(slots=True, kw_only=True)
class FolderSource:
    """Fetch every non-template markdown document below ``root``."""

    client: RepositoryClient
    parser: DocumentParser
    root: str
    kind: SourceKind
    excluded_roots: tuple[str, ...] = ()
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    @property
    def name(self) -> str:
        return f"{self.kind.name.lower()}:{self.root}"

    async def __call__(self) -> SourceBatch:
        try:
            entries = await self._list_tree(self.root, top_level=True)
        except Exception as exc:  # noqa: BLE001
            log.warning("Could not list %s, source degraded to empty: %s", self.name, exc)
            return SourceBatch(self.name, failed=True)

        candidates = [entry for entry in entries if self._is_candidate(entry)]
        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(*(self._load(entry, semaphore) for entry in candidates))
        records = tuple(record for record in results if record is not None)
        log.info(
            "Fetched %s records from %s (%s candidate documents)",
            len(records),
            self.name,
            len(candidates),
        )
        return SourceBatch(self.name, records)

    async def _list_tree(self, path: str, *, top_level: bool = False) -> list[RepositoryEntry]:
        try:
            entries = await self.client.list_directory(path)
        except Exception as exc:
            if top_level:
                raise
            log.warning("Could not list %s, skipping it: %s", path, exc)
            return []

        files = [entry for entry in entries if entry.is_file]
        directories = [
            entry
            for entry in entries
            if not entry.is_file
            and not any(is_under(entry.path, excluded) for excluded in self.excluded_roots)
        ]
        nested = await asyncio.gather(*(self._list_tree(entry.path) for entry in directories))
        for children in nested:
            files.extend(children)
        return files

    def _is_candidate(self, entry: RepositoryEntry) -> bool:
        if not entry.download_url or not is_candidate_document(entry.name):
            return False
        return not any(is_under(entry.path, excluded) for excluded in self.excluded_roots)

    async def _load(
        self, entry: RepositoryEntry, semaphore: asyncio.Semaphore
    ) -> ProposalRecord | None:
        if entry.download_url is None:  # pragma: no cover - filtered by _is_candidate
            return None
        async with semaphore:
            try:
                raw = await self.client.fetch_bytes(entry.download_url)
            except Exception as exc:  # noqa: BLE001
                log.warning("Skipping %s, download failed: %s", entry.path, exc)
                return None
            return await self.parser.parse(
                raw,
                DocumentContext(
                    source_kind=self.kind,
                    source_path=entry.path,
                    file_name=entry.name,
                    folder_default=FOLDER_DEFAULTS[self.kind],
                ),
            )


@dataclass(slots=True, kw_only=True)
class ChangeRequestSource:
    """Fetch proposal documents touched by change requests, plus one placeholder each."""

    client: RepositoryClient
    parser: DocumentParser
    tracked_roots: tuple[str, ...]
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    _semaphore: asyncio.Semaphore | None = field(default=None, init=False, repr=False)

    @property
    def name(self) -> str:
        return "change_requests"

    async def __call__(self) -> SourceBatch:
        try:
            change_requests = await self.client.list_change_requests("all")
        except Exception as exc:  # noqa: BLE001
            log.warning("Could not list change requests, source degraded to empty: %s", exc)
            return SourceBatch(self.name, failed=True)

        self._semaphore = asyncio.Semaphore(self.max_concurrency)
        groups = await asyncio.gather(
            *(self._records_for(change_request) for change_request in change_requests)
        )
        records = tuple(record for group in groups for record in group)
        log.info(
            "Fetched %s records from %s change requests",
            len(records),
            len(change_requests),
        )
        return SourceBatch(self.name, records)

    async def _records_for(self, change_request: ChangeRequest) -> list[ProposalRecord]:
        try:
            files = await self._changed_files(change_request)
            documents = await asyncio.gather(
                *(self._load(change_request, changed) for changed in files)
            )
            records = [record for record in documents if record is not None]
            async with self._guard():
                records.append(await self.parser.placeholder(change_request))
        except Exception as exc:  # noqa: BLE001
            log.warning("Skipping change request #%s: %s", change_request.number, exc)
            return []
        return records

    async def _changed_files(self, change_request: ChangeRequest) -> list[ChangedFile]:
        async with self._guard():
            try:
                files = await self.client.list_changed_files(change_request.number)
            except Exception as exc:  # noqa: BLE001
                log.warning(
                    "Could not list files of change request #%s, keeping placeholder only: %s",
                    change_request.number,
                    exc,
                )
                return []
        return [changed for changed in files if self._is_candidate(changed)]

    def _is_candidate(self, changed: ChangedFile) -> bool:
        return (
            changed.change_type in RELEVANT_CHANGE_TYPES
            and bool(changed.raw_url)
            and is_candidate_document(changed.name)
            and any(is_under(changed.path, root) for root in self.tracked_roots)
        )

    async def _load(
        self, change_request: ChangeRequest, changed: ChangedFile
    ) -> ProposalRecord | None:
        if changed.raw_url is None:  # pragma: no cover - filtered by _is_candidate
            return None
        async with self._guard():
            try:
                raw = await self.client.fetch_bytes(changed.raw_url)
            except Exception as exc:  # noqa: BLE001
                log.warning(
                    "Skipping %s of change request #%s, download failed: %s",
                    changed.path,
                    change_request.number,
                    exc,
                )
                return None
            return await self.parser.parse(
                raw,
                DocumentContext(
                    source_kind=SourceKind.CHANGE_REQUEST_DOCUMENT,
                    source_path=changed.path,
                    file_name=changed.name,
                    change_request=change_request,
                ),
            )

    def _guard(self) -> asyncio.Semaphore:
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        return self._semaphore


def build_sources(
    *,
    client: RepositoryClient,
    parser: DocumentParser,
    accepted_root: str,
    withdrawn_root: str,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> Sequence[SourceFetcher]:
    """Return the three fetchers wired against one repository client."""

    accepted_excludes = (withdrawn_root,) if is_under(withdrawn_root, accepted_root) else ()
    withdrawn_excludes = (
        (accepted_root,)
        if is_under(accepted_root, withdrawn_root) and accepted_root != withdrawn_root
        else ()
    )
    return (
        FolderSource(
            client=client,
            parser=parser,
            root=accepted_root,
            kind=SourceKind.ACCEPTED_FOLDER,
            excluded_roots=accepted_excludes,
            max_concurrency=max_concurrency,
        ),
        FolderSource(
            client=client,
            parser=parser,
            root=withdrawn_root,
            kind=SourceKind.WITHDRAWN_FOLDER,
            excluded_roots=withdrawn_excludes,
            max_concurrency=max_concurrency,
        ),
        ChangeRequestSource(
            client=client,
            parser=parser,
            tracked_roots=(accepted_root, withdrawn_root),
            max_concurrency=max_concurrency,
        ),
    )


__all__ = [
    "ChangeRequestSource",
    "FolderSource",
    "SourceBatch",
    "SourceFetcher",
    "build_sources",
    "is_candidate_document",
    "is_under",
]
