"""Application wiring: build the reconciliation engine from configuration."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING

from siptrack.adapters.github import GitHubClient
from siptrack.adapters.summarizer import ExcerptSummarizer, GuardedSummarizer, OpenAISummarizer
from siptrack.config import get_engine_config, get_github_config, get_summarizer_config
from siptrack.domain.cache import ReconciliationCache
from siptrack.domain.engine import ProposalEngine, ReconciliationPipeline
from siptrack.domain.parsing import DocumentParser
from siptrack.domain.sources import build_sources

if TYPE_CHECKING:
    from siptrack.config import EngineConfig, GitHubConfig, SummarizerConfig
    from siptrack.domain.model import ProposalRecord
    from siptrack.domain.ports import RepositoryClient, Summarizer


log = getLogger(__name__)

_default_engine: ProposalEngine | None = None
_default_engine_lock = threading.Lock()


def build_summarizer(config: SummarizerConfig | None = None) -> GuardedSummarizer:
    """OpenAI when an API key is configured, otherwise the offline excerpt summarizer."""

    config = config or get_summarizer_config()
    excerpt = ExcerptSummarizer()
    if not config.enabled:
        log.info("OPENAI_API_KEY not set, summarizing with document excerpts")
        return GuardedSummarizer(excerpt)
    log.info("Summarizing with OpenAI model %s", config.model)
    return GuardedSummarizer(
        OpenAISummarizer(config=config),
        fallback=excerpt,
        timeout=config.timeout_seconds * 2,
    )


def build_engine(
    *,
    github_config: GitHubConfig | None = None,
    engine_config: EngineConfig | None = None,
    repository: RepositoryClient | None = None,
    summarizer: Summarizer | None = None,
) -> ProposalEngine:
    """Wire repository client, summarizer, sources, pipeline and cache together."""

    github_config = github_config or get_github_config()
    engine_config = engine_config or get_engine_config()
    repository = repository or GitHubClient(config=github_config)
    summarizer = summarizer or build_summarizer()

    parser = DocumentParser(summarizer=summarizer, links=repository)
    sources = build_sources(
        client=repository,
        parser=parser,
        accepted_root=github_config.accepted_path,
        withdrawn_root=github_config.withdrawn_path,
        max_concurrency=engine_config.max_concurrency,
    )
    resources = [item for item in (repository, summarizer) if hasattr(item, "aclose")]
    log.info(
        "Tracking %s (%s, paths: %s)",
        github_config.repository_url,
        github_config.branch,
        ", ".join(github_config.tracked_paths),
    )
    return ProposalEngine(
        ReconciliationPipeline(sources, resources=resources),
        ReconciliationCache(ttl=engine_config.cache_ttl),
    )


def default_engine() -> ProposalEngine:
    """Process-wide engine built from the environment on first use."""

    global _default_engine  # noqa: PLW0603
    with _default_engine_lock:
        if _default_engine is None:
            _default_engine = build_engine()
        return _default_engine


def list_proposals(*, force_refresh: bool = False) -> list[ProposalRecord]:
    return default_engine().list_all(force_refresh=force_refresh)


def get_proposal(proposal_id: str, *, force_refresh: bool = False) -> ProposalRecord | None:
    return default_engine().get_by_id(proposal_id, force_refresh=force_refresh)
