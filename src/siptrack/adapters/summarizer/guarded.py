"""Summarizer wrapper that never raises."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from siptrack.domain.model import INSUFFICIENT_SUMMARY
from siptrack.domain.summaries import has_enough_content, summarize_safely

if TYPE_CHECKING:
    from siptrack.domain.model import SummaryResult
    from siptrack.domain.ports import Summarizer

log = getLogger(__name__)


class GuardedSummarizer:
    """Call ``primary`` and fall back to ``fallback`` (or the sentinel) when it fails."""

    def __init__(
        self,
        primary: Summarizer,
        *,
        fallback: Summarizer | None = None,
        timeout: float | None = None,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._timeout = timeout

    async def summarize(
        self, body: str | None = None, abstract: str | None = None
    ) -> SummaryResult:
        if not has_enough_content(body, abstract):
            return INSUFFICIENT_SUMMARY
        try:
            async with asyncio.timeout(self._timeout):
                return await self._primary.summarize(body, abstract)
        except Exception as exc:  # noqa: BLE001
            if self._fallback is None:
                log.warning("Summarizer failed, using fallback summary: %s", exc)
                return INSUFFICIENT_SUMMARY
            log.warning("Summarizer failed, using excerpt instead: %s", exc)
        return await summarize_safely(self._fallback, body, abstract)

    async def aclose(self) -> None:
        for summarizer in (self._primary, self._fallback):
            aclose = getattr(summarizer, "aclose", None)
            if aclose is not None:
                await aclose()
