"""Summarizer adapters."""

from __future__ import annotations

from .excerpt import ExcerptSummarizer
from .guarded import GuardedSummarizer
from .llm import OpenAISummarizer, SummarizerError

__all__ = ["ExcerptSummarizer", "GuardedSummarizer", "OpenAISummarizer", "SummarizerError"]
