"""Summarizer call policy shared by the parser and the summarizer adapters."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Final

from siptrack.domain.model import INSUFFICIENT_SUMMARY, SummaryResult

if TYPE_CHECKING:
    from siptrack.domain.ports import Summarizer

log = getLogger(__name__)

MIN_SUMMARY_INPUT_LENGTH: Final[int] = 20


def has_enough_content(body: str | None, abstract: str | None) -> bool:
    body_length = len(body.strip()) if body else 0
    abstract_length = len(abstract.strip()) if abstract else 0
    return body_length >= MIN_SUMMARY_INPUT_LENGTH or abstract_length >= MIN_SUMMARY_INPUT_LENGTH


async def summarize_safely(
    summarizer: Summarizer,
    body: str | None,
    abstract: str | None,
    *,
    timeout: float | None = None,
) -> SummaryResult:
    """Call ``summarizer`` and fall back to the insufficient-information sentinel.

    The sentinel is returned without calling out when both inputs are too short, and
    whenever the call fails, times out or returns something unusable.
    """

    if not has_enough_content(body, abstract):
        return INSUFFICIENT_SUMMARY
    try:
        async with asyncio.timeout(timeout):
            result = await summarizer.summarize(body, abstract)
    except Exception as exc:  # noqa: BLE001
        log.warning("Summarizer failed, using fallback summary: %s", exc)
        return INSUFFICIENT_SUMMARY
    if not isinstance(result, SummaryResult) or not result.headline.strip():
        log.warning("Summarizer returned an unusable result, using fallback summary")
        return INSUFFICIENT_SUMMARY
    return result


__all__ = ["MIN_SUMMARY_INPUT_LENGTH", "has_enough_content", "summarize_safely"]
