"""Turn raw proposal documents into canonical :class:`ProposalRecord` objects."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from siptrack.domain.dates import EPOCH, normalize_datetime
from siptrack.domain.identifiers import (
    IdentifierContext,
    numeric_part,
    resolve_identifier,
)
from siptrack.domain.model import ProposalRecord, SourceKind
from siptrack.domain.status import StatusSignals, mentions_withdrawal, resolve_status
from siptrack.domain.summaries import summarize_safely

from .front_matter import split_front_matter

if TYPE_CHECKING:
    from datetime import datetime

    from siptrack.domain.model import Status, SummaryResult
    from siptrack.domain.ports import ChangeRequest, RepositoryLinks, Summarizer

log = getLogger(__name__)

TITLE_FIELDS: Final[tuple[str, ...]] = ("title", "name")
ABSTRACT_FIELDS: Final[tuple[str, ...]] = ("abstract", "description", "summary")
AUTHOR_FIELDS: Final[tuple[str, ...]] = ("author", "authors")
CREATED_FIELDS: Final[tuple[str, ...]] = ("created", "date")
UPDATED_FIELDS: Final[tuple[str, ...]] = ("updated", "last-updated", "lastupdated", "last_updated")
MERGED_FIELDS: Final[tuple[str, ...]] = ("merged",)
LINK_FIELDS: Final[tuple[str, ...]] = ("url", "link", "pr")

_DISCUSSION_LINK = re.compile(r"^https?://github\.com/.+/(?:pull|issues)/\d+", re.IGNORECASE)
_DIGITS = re.compile(r"^#?(\d+)$")


@dataclass(frozen=True, slots=True, kw_only=True)
class DocumentContext:
    """Where a document came from."""

    source_kind: SourceKind
    source_path: str
    file_name: str
    change_request: ChangeRequest | None = None
    folder_default: Status | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class _Document:
    canonical_id: str
    header: Mapping[str, object]
    body: str
    context: DocumentContext


type TitleRule = Callable[[_Document], str | None]
type UrlRule = Callable[[_Document, RepositoryLinks], str | None]


class DocumentParser:
    """Parse proposal documents and synthesize change-request placeholders."""

    def __init__(
        self,
        *,
        summarizer: Summarizer,
        links: RepositoryLinks,
        summarizer_timeout: float | None = None,
    ) -> None:
        self._summarizer = summarizer
        self._links = links
        self._summarizer_timeout = summarizer_timeout

    async def parse(self, raw: bytes, context: DocumentContext) -> ProposalRecord | None:
        """Return a record for the document, or ``None`` when it should be skipped.

        Any error while reading one document is logged and results in a skip so the
        rest of the batch is unaffected.
        """

        try:
            return await self._parse(raw, context)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Skipping %s (source: %s): %s",
                context.source_path,
                context.source_kind.name,
                exc,
            )
            return None

    async def placeholder(self, change_request: ChangeRequest) -> ProposalRecord:
        """Synthesize the record that stands for ``change_request`` itself."""

        kind = SourceKind.CHANGE_REQUEST_PLACEHOLDER
        canonical_id = resolve_identifier(
            IdentifierContext(
                file_name=None,
                source_kind=kind,
                change_request_title=change_request.title,
                change_request_number=change_request.number,
            )
        )
        if canonical_id is None:  # pragma: no cover - the number rule always applies
            raise ValueError(f"Cannot derive an id for change request #{change_request.number}")

        status = resolve_status(_change_request_signals(kind, change_request))
        summary = await self._summarize(change_request.body, change_request.title)
        return ProposalRecord(
            id=canonical_id,
            title=change_request.title.strip() or _synthesized_title_for(canonical_id),
            status=status,
            summary=summary.headline,
            structured_summary=summary.structured,
            body=None,
            origin_url=change_request.url,
            source_kind=kind,
            created_at=change_request.created_at,
            updated_at=change_request.updated_at,
            merged_at=change_request.merged_at,
            author=change_request.author,
            change_request_number=change_request.number,
        )

    async def _parse(self, raw: bytes, context: DocumentContext) -> ProposalRecord | None:
        header, body = split_front_matter(raw.decode("utf-8", errors="replace"))
        change_request = context.change_request

        canonical_id = resolve_identifier(
            IdentifierContext(
                file_name=context.file_name,
                source_kind=context.source_kind,
                header=header,
                change_request_title=change_request.title if change_request else None,
                change_request_number=change_request.number if change_request else None,
            )
        )
        if canonical_id is None:
            log.info(
                "Skipping %s: not a distinct proposal (change request #%s represents it)",
                context.source_path,
                change_request.number if change_request else "?",
            )
            return None

        document = _Document(canonical_id=canonical_id, header=header, body=body, context=context)
        if change_request is not None:
            signals = _change_request_signals(
                context.source_kind, change_request, explicit=header.get("status")
            )
        else:
            signals = StatusSignals(
                source_kind=context.source_kind,
                explicit=header.get("status"),
                folder_default=context.folder_default,
            )

        created_at, updated_at, merged_at = _timestamps(header, change_request)
        summary = await self._summarize(body, _first_text(header, ABSTRACT_FIELDS))
        record = ProposalRecord(
            id=canonical_id,
            title=_first_result(TITLE_RULES, document) or canonical_id,
            status=resolve_status(signals),
            summary=summary.headline,
            structured_summary=summary.structured,
            body=body,
            origin_url=_first_url(URL_RULES, document, self._links),
            source_kind=context.source_kind,
            created_at=created_at,
            updated_at=updated_at,
            merged_at=merged_at,
            author=_author(header) or (change_request.author if change_request else None),
            change_request_number=(
                change_request.number if change_request else _header_pr_number(header)
            ),
            source_path=context.source_path,
        )
        log.debug(
            "Parsed %s as %s (status=%s, source=%s)",
            context.source_path,
            record.id,
            record.status,
            record.source_kind.name,
        )
        return record

    async def _summarize(self, body: str | None, abstract: str | None) -> SummaryResult:
        return await summarize_safely(
            self._summarizer, body, abstract, timeout=self._summarizer_timeout
        )


def _change_request_signals(
    kind: SourceKind,
    change_request: ChangeRequest,
    *,
    explicit: object = None,
) -> StatusSignals:
    return StatusSignals(
        source_kind=kind,
        explicit=explicit,
        change_request_state=change_request.state,
        merged=change_request.is_merged,
        withdrawal_mentioned=mentions_withdrawal(change_request.title, change_request.body),
    )


def _timestamps(
    header: Mapping[str, object],
    change_request: ChangeRequest | None,
) -> tuple[datetime, datetime | None, datetime | None]:
    if change_request is not None:
        return change_request.created_at, change_request.updated_at, change_request.merged_at
    created = _first_datetime(header, CREATED_FIELDS) or EPOCH
    return (
        created,
        _first_datetime(header, UPDATED_FIELDS),
        _first_datetime(header, MERGED_FIELDS),
    )


def _first_datetime(header: Mapping[str, object], names: Sequence[str]) -> datetime | None:
    for name in names:
        value = normalize_datetime(header.get(name))
        if value is not None:
            return value
    return None


def _first_text(header: Mapping[str, object], names: Sequence[str]) -> str | None:
    for name in names:
        value = header.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _author(header: Mapping[str, object]) -> str | None:
    for name in AUTHOR_FIELDS:
        value = header.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if isinstance(value, list):
            names = [str(item).strip() for item in value if str(item).strip()]
            if names:
                return ", ".join(names)
    return None


def _header_pr_number(header: Mapping[str, object]) -> int | None:
    value = header.get("pr")
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = _DIGITS.match(value.strip())
        if match:
            return int(match.group(1))
    return None


# Title rules


def _title_from_header(document: _Document) -> str | None:
    return _first_text(document.header, TITLE_FIELDS)


def _title_from_change_request(document: _Document) -> str | None:
    change_request = document.context.change_request
    if change_request is None or not change_request.title.strip():
        return None
    return change_request.title.strip()


def _synthesized_title(document: _Document) -> str | None:
    return _synthesized_title_for(document.canonical_id)


def _synthesized_title_for(canonical_id: str) -> str:
    number = numeric_part(canonical_id)
    if number is not None:
        return f"SIP {number}"
    slug = canonical_id.removeprefix("sip-generic-")
    return slug.replace("-", " ").title()


TITLE_RULES: Final[tuple[TitleRule, ...]] = (
    _title_from_header,
    _title_from_change_request,
    _synthesized_title,
)


# Origin URL rules


def _url_from_header_link(document: _Document, _links: RepositoryLinks) -> str | None:
    for name in LINK_FIELDS:
        value = document.header.get(name)
        if isinstance(value, str) and value.strip().lower().startswith(("http://", "https://")):
            return value.strip()
    discussion = document.header.get("discussions-to")
    if isinstance(discussion, str) and _DISCUSSION_LINK.match(discussion.strip()):
        return discussion.strip()
    return None


def _url_from_header_pr_number(document: _Document, links: RepositoryLinks) -> str | None:
    number = _header_pr_number(document.header)
    return links.change_request_url(number) if number is not None else None


def _url_from_change_request(document: _Document, _links: RepositoryLinks) -> str | None:
    change_request = document.context.change_request
    return change_request.url if change_request is not None else None


def _url_from_browse_path(document: _Document, links: RepositoryLinks) -> str | None:
    return links.browse_url(document.context.source_path)


URL_RULES: Final[tuple[UrlRule, ...]] = (
    _url_from_header_link,
    _url_from_header_pr_number,
    _url_from_change_request,
    _url_from_browse_path,
)


def _first_result(rules: Sequence[TitleRule], document: _Document) -> str | None:
    for rule in rules:
        value = rule(document)
        if value:
            return value
    return None


def _first_url(rules: Sequence[UrlRule], document: _Document, links: RepositoryLinks) -> str:
    for rule in rules:
        value = rule(document, links)
        if value:
            return value
    return links.browse_url(document.context.source_path)


__all__ = ["TITLE_RULES", "URL_RULES", "DocumentContext", "DocumentParser"]
