# backend/handshakeiq/services/card_scanner.py
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

import openai

from ..core.config import get_settings
from ..schemas.report import CardScanResult
from .errors import ModelUnavailable
from .llm import get_llm_client, limit_llm_concurrency

logger = logging.getLogger(__name__)

CARD_PROMPT = (
    "Analyze this image of a business card. Extract the person's full name and their "
    "company name. Return ONLY a valid JSON object with 'name' and 'company' keys."
)


def _build_messages(base64_image: str) -> list[dict[str, Any]]:
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": CARD_PROMPT},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:image/jpeg;base64,{base64_image}"},
                },
            ],
        }
    ]


def _parse_card_json(raw: str) -> CardScanResult:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("card response is not a JSON object")
    name = data.get("name")
    company = data.get("company")
    return CardScanResult(
        name=name.strip() if isinstance(name, str) else "",
        company=company.strip() if isinstance(company, str) else "",
    )


async def extract_card(
    base64_image: str,
    client_factory: Callable[[], Any] = get_llm_client,
) -> CardScanResult:
    """
    Read name and company off a business card photo.

    Best-effort: any failure (no key, model error, unreadable answer) is
    logged and returns empty fields so the client can fall back to typing.
    """
    settings = get_settings()

    def _call_sync() -> str:
        client = client_factory()
        with limit_llm_concurrency():
            completion = client.chat.completions.create(
                model=settings.VISION_MODEL,
                messages=_build_messages(base64_image),
                response_format={"type": "json_object"},
            )
        return completion.choices[0].message.content or ""

    try:
        raw = await asyncio.to_thread(_call_sync)
        return _parse_card_json(raw)
    except (ModelUnavailable, openai.OpenAIError, ValueError, IndexError) as e:
        logger.exception("Error extracting text from card image: %s", e, extra={"step": "extract_card"})
        return CardScanResult()
