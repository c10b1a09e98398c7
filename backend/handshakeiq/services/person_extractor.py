# backend/handshakeiq/services/person_extractor.py
"""
Best-effort person details from a single search result.

Everything here is pattern matching over free text written for humans, so it
misfires on plenty of real snippets. It is kept behind `extract_person_info`
so the aggregator never depends on how the guess is made.
"""
from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote

from ..schemas.search import ExtractedInfo, RawSearchResult

DEFAULT_TITLE = "Professional"
DEFAULT_COMPANY = "Unknown Company"
MAX_NAME_LEN = 50

PLACEHOLDER_PHOTO_URL = (
    "https://ui-avatars.com/api/?name={name}&background=0D1117&color=22D3EE&size=200"
)

# Text before the first "|", "–" or "-" of a result title.
_TITLE_NAME_RE = re.compile(r"^([^|–-]+)")

# Company text ends at a separator, a sentence break or the end of the snippet.
_END = r"(?:\s*[|·•]|\.\s|\.?$)"

# Tried in order; first match wins.
SNIPPET_PATTERNS = (
    re.compile(r"(.+?)\s+(?:at|@)\s+(.+?)" + _END),
    re.compile(r"(.+?)\s+[-–]\s+(.+?)" + _END),
    re.compile(r"(.+?),\s+(.+?)" + _END),
)

_SUBJECT_CONNECTOR_RE = re.compile(
    r"^\s*(?:(?:is|was)\b(?:\s+(?:an?|the)\b)?|[,:.|·•–-])\s*",
    re.IGNORECASE,
)
_TRAILING_ELLIPSIS_RE = re.compile(r"\s*(?:\.\.\.|…)\s*$")


def name_from_title(title: str) -> Optional[str]:
    """
    The leading part of a result title, if it plausibly is a person's name.
    """
    match = _TITLE_NAME_RE.match(title or "")
    if not match:
        return None
    candidate = match.group(1).strip()
    if not candidate or len(candidate) >= MAX_NAME_LEN or "LinkedIn" in candidate:
        return None
    return candidate


def _normalise_snippet(snippet: str) -> str:
    text = re.sub(r"\s+", " ", snippet or "").strip()
    return _TRAILING_ELLIPSIS_RE.sub("", text)


def _strip_subject(snippet: str, name: str) -> str:
    """Drop a leading "<name> is" / "<name> -" so the title starts at the role."""
    if not name or not snippet.lower().startswith(name.lower()):
        return snippet
    rest = snippet[len(name):]
    connector = _SUBJECT_CONNECTOR_RE.match(rest)
    if not connector:
        return snippet
    return rest[connector.end():]


def split_title_company(snippet: str, name: str = "") -> tuple[str, str]:
    text = _strip_subject(_normalise_snippet(snippet), name)
    for pattern in SNIPPET_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        title = match.group(1).strip(" .,;")
        company = match.group(2).strip(" .,;")
        if title and company:
            return title, company
    return DEFAULT_TITLE, DEFAULT_COMPANY


def placeholder_photo_url(name: str) -> str:
    return PLACEHOLDER_PHOTO_URL.format(name=quote(name, safe=""))


def extract_person_info(result: RawSearchResult, fallback_name: str) -> ExtractedInfo:
    name = name_from_title(result.title) or fallback_name
    title, company = split_title_company(result.snippet, name)
    photo_url = result.thumbnail_url or placeholder_photo_url(name)
    return ExtractedInfo(name=name, title=title, company=company, photo_url=photo_url)
