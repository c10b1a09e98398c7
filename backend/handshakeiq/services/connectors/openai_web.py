# backend/handshakeiq/services/connectors/openai_web.py

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

import openai
from openai import OpenAI

from .base import BaseConnector
from ..errors import ModelUnavailable
from ..llm import limit_llm_concurrency
from ...core.config import get_settings
from ...schemas.report import GroundingSource, SECTION_TITLES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportResponseRaw:
    """Verbatim model output plus the grounding sources reported with it."""

    raw_response_text: str
    sources: List[GroundingSource] = field(default_factory=list)


def _attr(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(key)
    return getattr(source, key, None)


def _section_schema_block() -> str:
    lines = []
    keys = list(SECTION_TITLES)
    for i, (key, title) in enumerate(SECTION_TITLES.items()):
        closing = "}," if i < len(keys) - 1 else "}"
        lines.extend(
            [
                f'  "{key}": {{',
                f'    "category": "{title}",',
                '    "points": [',
                '      { "text": "...", "confidence": <integer 0-100>, "source_indices": [<integer>] }',
                "    ]",
                f"  {closing}",
            ]
        )
    return "\n".join(lines)


class ReportRequester(BaseConnector):
    """
    Requests an intelligence report from OpenAI's Responses API with the
    `web_search` tool enabled.

    The requester only builds the prompt, performs the call and collects
    grounding sources; it never parses the JSON it asked for (that is the
    report parser's job) and never retries.
    """

    name = "openai_web"

    def __init__(
        self,
        client_factory: Optional[Callable[[], Any]] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        # Kept separate from the generic LLM client, which may be routed via OpenRouter.
        self._api_key: Optional[str] = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._model: str = model or settings.OPENAI_WEB_MODEL
        self._timeout = settings.LLM_TIMEOUT_SECONDS
        self._client_factory = client_factory

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def is_configured(self) -> bool:
        return bool(self._api_key) or self._client_factory is not None

    def _client(self) -> Any:
        if self._client_factory is not None:
            return self._client_factory()
        return OpenAI(api_key=self._api_key, timeout=self._timeout, max_retries=0)

    def build_prompt(self, name: str, company: str, known_links: Sequence[str]) -> str:
        prompt = (
            f'Generate a detailed professional and personal intelligence report for "{name}", '
            f'associated with "{company}".\n'
            "Use the web_search tool to find information available on the public web.\n"
        )

        if known_links:
            numbered = "\n".join(f"{i + 1}. {link}" for i, link in enumerate(known_links))
            prompt += (
                "\nIMPORTANT: Focus your search on these web sources that have already been "
                "identified for this person:\n"
                f"{numbered}\n\n"
                "Prioritize information from these URLs, especially professional profiles, "
                "social media accounts, blog posts and news articles. They are known to relate "
                "to this specific person, so use them to keep the report accurate.\n"
            )

        prompt += (
            "\nThe output MUST be a single, valid JSON object. Do not include any text, code block "
            "markers, or formatting outside of the JSON object itself.\n"
            'For each point you MUST include a "source_indices" field: an array of zero-based '
            "integer indices of the web sources you cited that support the statement.\n"
            'Each "confidence" is an integer between 0 and 100 reflecting source quality and '
            "corroboration.\n"
            "The JSON object must have exactly this structure:\n"
            "{\n"
            '  "summary": "A brief, one-paragraph summary of the person, synthesizing the most '
            'important findings.",\n'
            f"{_section_schema_block()}\n"
            "}\n\n"
            "Guidance per section:\n"
            "- professionalBackground: career, roles and key achievements.\n"
            "- recentActivities: recent posts, articles, news or social media activity.\n"
            "- personalInterests: hobbies or interests mentioned publicly.\n"
            "- discussionPoints: relevant conversation starters for a meeting.\n"
            "Be careful with common names; only include facts that match the company provided.\n"
        )
        return prompt

    @staticmethod
    def _extract_text(response: Any) -> str:
        raw_text = _attr(response, "output_text")
        if isinstance(raw_text, str) and raw_text:
            return raw_text

        parts: List[str] = []
        for item in _attr(response, "output") or []:
            if _attr(item, "type") != "message":
                continue
            for content in _attr(item, "content") or []:
                text = _attr(content, "text")
                if isinstance(text, str):
                    parts.append(text)
        return "".join(parts)

    @staticmethod
    def _extract_sources(response: Any) -> List[GroundingSource]:
        """
        Collect url_citation annotations in order of first appearance, one per URL.
        """
        sources: List[GroundingSource] = []
        seen: set[str] = set()

        for item in _attr(response, "output") or []:
            if _attr(item, "type") != "message":
                continue
            for content in _attr(item, "content") or []:
                for ann in _attr(content, "annotations") or []:
                    if _attr(ann, "type") != "url_citation":
                        continue
                    url = _attr(ann, "url")
                    if not isinstance(url, str) or not url or url in seen:
                        continue
                    seen.add(url)
                    title = _attr(ann, "title")
                    sources.append(
                        GroundingSource(uri=url, title=title if isinstance(title, str) and title else None)
                    )

        return sources

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def request_report(
        self,
        name: str,
        company: str,
        known_links: Sequence[str] = (),
    ) -> ReportResponseRaw:
        """
        Ask the model for a report on (name, company).

        Raises:
            ModelUnavailable: missing credentials, transport/auth error, timeout
                or any API-side failure.
        """
        if not self.is_configured():
            raise ModelUnavailable("OpenAI API key not configured for intelligence reports")

        prompt = self.build_prompt(name, company, list(known_links))

        def _call_openai_sync() -> Any:
            client = self._client()
            with limit_llm_concurrency():
                return client.responses.create(
                    model=self._model,
                    tools=[{"type": "web_search"}],
                    tool_choice="auto",
                    input=prompt,
                )

        try:
            response = await asyncio.to_thread(_call_openai_sync)
        except openai.APITimeoutError as e:
            raise ModelUnavailable(f"Model call timed out after {self._timeout}s") from e
        except openai.OpenAIError as e:
            logger.exception(
                "OpenAI web_search call failed: %s",
                e,
                extra={"connector": self.name},
            )
            raise ModelUnavailable(f"Model call failed: {e}") from e

        raw_text = self._extract_text(response)
        sources = self._extract_sources(response)
        logger.info(
            "Report model responded with %d characters and %d sources",
            len(raw_text),
            len(sources),
            extra={"connector": self.name},
        )
        return ReportResponseRaw(raw_response_text=raw_text, sources=sources)
