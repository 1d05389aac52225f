from __future__ import annotations

import asyncio

from siptrack.adapters.summarizer import GuardedSummarizer
from siptrack.domain.model import INSUFFICIENT_SUMMARY
from tests.helpers.proposals import FakeSummarizer

BODY = "A body that is comfortably long enough to summarize."


def _always_fail(_body: str | None, _abstract: str | None) -> bool:
    return True


def test_primary_result_is_used() -> None:
    guarded = GuardedSummarizer(FakeSummarizer("primary"), fallback=FakeSummarizer("fallback"))

    assert asyncio.run(guarded.summarize(BODY)).headline == "primary"


def test_fallback_is_used_when_primary_fails() -> None:
    guarded = GuardedSummarizer(
        FakeSummarizer(fail_when=_always_fail), fallback=FakeSummarizer("fallback")
    )

    assert asyncio.run(guarded.summarize(BODY)).headline == "fallback"


def test_never_raises() -> None:
    guarded = GuardedSummarizer(
        FakeSummarizer(fail_when=_always_fail), fallback=FakeSummarizer(fail_when=_always_fail)
    )

    without_fallback = GuardedSummarizer(FakeSummarizer(fail_when=_always_fail))

    assert asyncio.run(guarded.summarize(BODY)) is INSUFFICIENT_SUMMARY
    assert asyncio.run(without_fallback.summarize(BODY)) is INSUFFICIENT_SUMMARY


def test_aclose_reaches_wrapped_summarizers() -> None:
    class Closable(FakeSummarizer):
        closed = False

        async def aclose(self) -> None:
            self.closed = True

    primary = Closable()
    guarded = GuardedSummarizer(primary, fallback=FakeSummarizer())

    asyncio.run(guarded.aclose())

    assert primary.closed
