"""Port for turning proposal text into a short structured summary."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from siptrack.domain.model import SummaryResult


@runtime_checkable
class Summarizer(Protocol):
    """Summarize a proposal body and/or abstract.

    Implementations used by the parser must not raise; wrap fallible ones in
    ``siptrack.adapters.summarizer.GuardedSummarizer``.
    """

    async def summarize(
        self, body: str | None = None, abstract: str | None = None
    ) -> SummaryResult: ...


__all__ = ["Summarizer"]
