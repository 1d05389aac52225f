"""Offline summarizer that quotes the opening of a proposal."""

from __future__ import annotations

import re
from typing import Final

from siptrack.domain.model import INSUFFICIENT_SUMMARY, StructuredSummary, SummaryResult
from siptrack.domain.summaries import MIN_SUMMARY_INPUT_LENGTH, has_enough_content

MAX_HEADLINE_CHARS: Final[int] = 280

_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_MARKUP = re.compile(r"[*_`>]+")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
_SKIPPED_LINE = re.compile(r"^\s*(?:#|\||<!--|```|-{3,}|={3,})")


def first_paragraph(text: str) -> str | None:
    """Return the first prose paragraph of a markdown text, markup removed."""

    for block in re.split(r"\n\s*\n", text):
        lines = [line for line in block.splitlines() if not _SKIPPED_LINE.match(line)]
        paragraph = " ".join(line.strip() for line in lines if line.strip())
        paragraph = _MARKUP.sub("", _LINK.sub(r"\1", paragraph)).strip()
        if len(paragraph) >= MIN_SUMMARY_INPUT_LENGTH:
            return paragraph
    return None


def first_sentence(text: str) -> str:
    sentence = _SENTENCE_END.split(text.strip(), maxsplit=1)[0]
    if len(sentence) <= MAX_HEADLINE_CHARS:
        return sentence
    return sentence[: MAX_HEADLINE_CHARS - 1].rstrip() + "…"


class ExcerptSummarizer:
    """Use the abstract, or the first paragraph of the body, as the summary."""

    async def summarize(
        self, body: str | None = None, abstract: str | None = None
    ) -> SummaryResult:
        if not has_enough_content(body, abstract):
            return INSUFFICIENT_SUMMARY
        source = None
        if abstract and len(abstract.strip()) >= MIN_SUMMARY_INPUT_LENGTH:
            source = first_paragraph(abstract) or abstract.strip()
        elif body:
            source = first_paragraph(body)
        if not source:
            return INSUFFICIENT_SUMMARY
        headline = first_sentence(source)
        return SummaryResult(headline=headline, structured=StructuredSummary(what_it_is=headline))
