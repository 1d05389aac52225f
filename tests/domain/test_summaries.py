from __future__ import annotations

import asyncio

from siptrack.domain.model import INSUFFICIENT_SUMMARY, SummaryResult
from siptrack.domain.summaries import has_enough_content, summarize_safely
from tests.helpers.proposals import FakeSummarizer


def test_has_enough_content_needs_twenty_characters() -> None:
    assert not has_enough_content("short", "   also short    ")
    assert has_enough_content("x" * 20, None)
    assert has_enough_content(None, "An abstract of decent length")


def test_summarize_safely_returns_sentinel_on_failure() -> None:
    summarizer = FakeSummarizer(fail_when=lambda _body, _abstract: True)

    result = asyncio.run(summarize_safely(summarizer, "A body that is long enough.", None))

    assert result is INSUFFICIENT_SUMMARY


def test_summarize_safely_times_out() -> None:
    class SlowSummarizer:
        async def summarize(
            self, body: str | None = None, abstract: str | None = None
        ) -> SummaryResult:
            await asyncio.sleep(1)
            return SummaryResult(headline="late")

    result = asyncio.run(
        summarize_safely(SlowSummarizer(), "A body that is long enough.", None, timeout=0.01)
    )

    assert result is INSUFFICIENT_SUMMARY


def test_summarize_safely_passes_result_through() -> None:
    result = asyncio.run(
        summarize_safely(FakeSummarizer("Useful."), "A body that is long enough.", None)
    )

    assert result.headline == "Useful."
