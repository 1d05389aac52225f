from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from siptrack.domain.dates import EPOCH
from siptrack.domain.model import (
    INSUFFICIENT_SUMMARY_MESSAGE,
    ChangeRequestState,
    SourceKind,
    Status,
)
from siptrack.domain.parsing import DocumentContext, DocumentParser
from siptrack.domain.status import FOLDER_DEFAULTS
from tests.helpers.proposals import (
    REPO_URL,
    FakeSummarizer,
    StaticLinks,
    at,
    document,
    make_change_request,
)


def _parser(summarizer: FakeSummarizer | None = None) -> DocumentParser:
    return DocumentParser(summarizer=summarizer or FakeSummarizer(), links=StaticLinks())


def _folder_context(path: str, kind: SourceKind = SourceKind.ACCEPTED_FOLDER) -> DocumentContext:
    return DocumentContext(
        source_kind=kind,
        source_path=path,
        file_name=path.rsplit("/", 1)[-1],
        folder_default=FOLDER_DEFAULTS[kind],
    )


def test_folder_document_is_parsed() -> None:
    raw = document(
        """
sip: 12
title: Faster checkpoints
author: [alice, bob]
status: Final
created: 2024-01-02
abstract: Make checkpoints arrive faster for every validator.
"""
    )

    record = asyncio.run(_parser().parse(raw, _folder_context("sips/sip-12.md")))

    assert record is not None
    assert record.id == "sip-012"
    assert record.title == "Faster checkpoints"
    assert record.status is Status.FINAL
    assert record.author == "alice, bob"
    assert record.created_at == datetime(2024, 1, 2, tzinfo=UTC)
    assert record.origin_url == f"{REPO_URL}/blob/main/sips/sip-12.md"
    assert record.summary == "A short summary."
    assert record.sources == frozenset({SourceKind.ACCEPTED_FOLDER})


def test_missing_metadata_falls_back() -> None:
    raw = b"# Untitled\n\nA document without any header but with plenty of prose."

    record = asyncio.run(_parser().parse(raw, _folder_context("sips/sip-31.md")))

    assert record is not None
    assert record.title == "SIP 31"
    assert record.status is Status.FINAL
    assert record.created_at == EPOCH


def test_withdrawn_folder_defaults_to_withdrawn() -> None:
    raw = document("title: Old idea")

    record = asyncio.run(
        _parser().parse(
            raw, _folder_context("sips/withdrawn/old-idea.md", SourceKind.WITHDRAWN_FOLDER)
        )
    )

    assert record is not None
    assert record.id == "sip-generic-old-idea"
    assert record.status is Status.WITHDRAWN


def test_header_links_are_preferred() -> None:
    raw = document("sip: 5\npr: 77")
    discussion = document(
        "sip: 6\ndiscussions-to: https://github.com/example/sips/issues/9"
    )

    record = asyncio.run(_parser().parse(raw, _folder_context("sips/sip-5.md")))
    other = asyncio.run(_parser().parse(discussion, _folder_context("sips/sip-6.md")))

    assert record is not None
    assert record.origin_url == f"{REPO_URL}/pull/77"
    assert record.change_request_number == 77
    assert other is not None
    assert other.origin_url == "https://github.com/example/sips/issues/9"


def test_change_request_document_takes_change_request_timestamps() -> None:
    change_request = make_change_request(
        40,
        title="SIP-40: Sponsored transactions",
        state=ChangeRequestState.CLOSED,
        created_at=at(3),
        updated_at=at(5),
        merged_at=at(4),
    )
    raw = document("created: 2020-01-01\ntitle: Sponsored transactions")

    record = asyncio.run(
        _parser().parse(
            raw,
            DocumentContext(
                source_kind=SourceKind.CHANGE_REQUEST_DOCUMENT,
                source_path="sips/sponsored.md",
                file_name="sponsored.md",
                change_request=change_request,
            ),
        )
    )

    assert record is not None
    assert record.id == "sip-040"
    assert record.status is Status.ACCEPTED
    assert (record.created_at, record.updated_at, record.merged_at) == (at(3), at(5), at(4))
    assert record.change_request_number == 40
    assert record.author == "octocat"


def test_header_less_change_request_file_is_skipped() -> None:
    change_request = make_change_request(8, title="Fix typos")

    record = asyncio.run(
        _parser().parse(
            b"Just some notes that are not a proposal at all.",
            DocumentContext(
                source_kind=SourceKind.CHANGE_REQUEST_DOCUMENT,
                source_path="sips/notes.md",
                file_name="notes.md",
                change_request=change_request,
            ),
        )
    )

    assert record is None


def test_malformed_header_skips_document() -> None:
    record = asyncio.run(
        _parser().parse(b"---\nsip: [1\n---\nBody", _folder_context("sips/sip-1.md"))
    )

    assert record is None


def test_placeholder_for_open_change_request() -> None:
    change_request = make_change_request(
        14, title="New staking rewards", body="Proposes a different way to share rewards."
    )

    record = asyncio.run(_parser().placeholder(change_request))

    assert record.id == "sip-014"
    assert record.status is Status.DRAFT_NO_FILE
    assert record.body is None
    assert record.title == "New staking rewards"
    assert record.origin_url == f"{REPO_URL}/pull/14"
    assert record.source_kind is SourceKind.CHANGE_REQUEST_PLACEHOLDER


def test_short_inputs_get_sentinel_summary_without_calling_summarizer() -> None:
    summarizer = FakeSummarizer()

    record = asyncio.run(
        _parser(summarizer).placeholder(make_change_request(3, title="Typo", body=None))
    )

    assert record.summary == INSUFFICIENT_SUMMARY_MESSAGE
    assert summarizer.calls == []


def test_summarizer_failure_does_not_affect_siblings() -> None:
    summarizer = FakeSummarizer(fail_when=lambda body, _abstract: bool(body and "explode" in body))
    parser = _parser(summarizer)
    good = document("sip: 1", "A perfectly ordinary proposal body text.")
    bad = document("sip: 2", "This body will explode inside the summarizer.")

    async def parse_all() -> list[object]:
        return await asyncio.gather(
            parser.parse(good, _folder_context("sips/sip-1.md")),
            parser.parse(bad, _folder_context("sips/sip-2.md")),
        )

    first, second = asyncio.run(parse_all())

    assert first is not None
    assert first.summary == "A short summary."
    assert second is not None
    assert second.id == "sip-002"
    assert second.summary == INSUFFICIENT_SUMMARY_MESSAGE
