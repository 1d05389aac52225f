"""OpenAI chat-completion summarizer."""

from __future__ import annotations

import json
from json import JSONDecodeError
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from siptrack.domain.model import INSUFFICIENT_INFO_MESSAGE, INSUFFICIENT_SUMMARY
from siptrack.domain.summaries import has_enough_content

from .schema import SummaryPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from siptrack.config.summarizer import SummarizerConfig
    from siptrack.domain.model import SummaryResult

log = getLogger(__name__)

MAX_ATTEMPTS: Final[int] = 2
MAX_BODY_CHARS: Final[int] = 12_000

SYSTEM_PROMPT = f"""You explain Sui Improvement Proposals (SIPs) to someone new to crypto.
Respond ONLY with valid JSON following the schema below. No prose, no markdown.

Required JSON schema:
{{
  "whatItIs": "<one sentence: what the proposal is or does>",
  "whatItChanges": "<one sentence: what the proposal changes or introduces>",
  "whyItMatters": "<one sentence: why the proposal is important or beneficial>"
}}

Each value MUST be a single sentence in simple, clear English without jargon.
Explain the substance of the change. Do not mention GitHub, pull requests, issues or the
proposal process itself.
If the content is insufficient for one point, set that value to the exact string
"{INSUFFICIENT_INFO_MESSAGE}". Do not make up information.
Prefer the primary content (abstract or title) and use the additional context when the
primary content is missing or insufficient."""


class SummarizerError(RuntimeError):
    """Raised when the language model gives no usable summary."""


def build_user_prompt(body: str | None, abstract: str | None) -> str:
    body_text = (body or "").strip()[:MAX_BODY_CHARS]
    abstract_text = (abstract or "").strip()
    if abstract_text and body_text:
        return (
            f"Primary content:\n{abstract_text}\n\n"
            f"Additional context:\n{body_text}\n"
        )
    if abstract_text:
        return f"Primary content:\n{abstract_text}\n"
    return f"Content:\n{body_text}\n"


def _default_client_factory(config: SummarizerConfig) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=config.api_key, timeout=config.timeout_seconds)


class OpenAISummarizer:
    """Summarize proposals with an OpenAI chat model in JSON mode.

    The client is created lazily so it binds to the event loop of the current
    reconciliation run; :meth:`aclose` releases it.
    """

    def __init__(
        self,
        *,
        config: SummarizerConfig,
        client_factory: Callable[[SummarizerConfig], AsyncOpenAI] | None = None,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or _default_client_factory
        self._max_attempts = max_attempts
        self._client: AsyncOpenAI | None = None

    async def summarize(
        self, body: str | None = None, abstract: str | None = None
    ) -> SummaryResult:
        if not has_enough_content(body, abstract):
            return INSUFFICIENT_SUMMARY

        user_prompt = build_user_prompt(body, abstract)
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                payload = await self._complete(user_prompt)
                return SummaryPayload.model_validate(payload).to_result()
            except (OpenAIError, SummarizerError, ValidationError) as exc:
                last_error = exc
                log.warning(
                    "OpenAI summary failed on attempt %s/%s: %s",
                    attempt,
                    self._max_attempts,
                    exc,
                )
        raise SummarizerError(f"OpenAI summary failed: {last_error}") from last_error

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.close()

    async def _complete(self, user_prompt: str) -> dict[str, Any]:
        if self._client is None:
            self._client = self._client_factory(self._config)
        response = await self._client.chat.completions.create(
            model=self._config.model,
            temperature=self._config.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
        )
        content = response.choices[0].message.content
        if not content:
            raise SummarizerError("OpenAI returned an empty response")
        return parse_json_object(content)


def parse_json_object(content: str) -> dict[str, Any]:
    """Parse possibly noisy model output into a JSON object."""
    try:
        parsed = json.loads(content)
    except JSONDecodeError:
        parsed = _extract_first_json_object(content)

    if not isinstance(parsed, dict):
        raise SummarizerError("Expected a JSON object from OpenAI")
    return parsed


def _extract_first_json_object(content: str) -> dict[str, Any]:
    decoder = json.JSONDecoder()
    for index, char in enumerate(content):
        if char != "{":
            continue
        try:
            candidate, _ = decoder.raw_decode(content[index:])
        except JSONDecodeError:
            continue
        if isinstance(candidate, dict):
            return candidate
    raise SummarizerError("Could not extract a JSON object from OpenAI output")
