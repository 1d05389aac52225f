"""Summarizer (LLM) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.1
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class SummarizerConfig:
    api_key: str | None
    model: str = DEFAULT_OPENAI_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


def get_summarizer_config() -> SummarizerConfig:
    return SummarizerConfig(
        api_key=optional_env_var("OPENAI_API_KEY"),
        model=optional_env_var("OPENAI_MODEL", DEFAULT_OPENAI_MODEL) or DEFAULT_OPENAI_MODEL,
        temperature=env_float("OPENAI_TEMPERATURE", DEFAULT_TEMPERATURE),
        timeout_seconds=env_float(
            "SIPTRACK_SUMMARIZER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, minimum=1.0
        ),
    )
