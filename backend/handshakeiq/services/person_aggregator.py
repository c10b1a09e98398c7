# backend/handshakeiq/services/person_aggregator.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse
import logging
import re

from ..schemas.search import (
    CandidatePerson,
    ExtractedInfo,
    Platform,
    RawSearchResult,
    SocialLink,
    SourceBuckets,
)
from .person_extractor import extract_person_info, name_from_title

logger = logging.getLogger(__name__)

Extractor = Callable[[RawSearchResult, str], ExtractedInfo]

PROFILE_LINK_RE = re.compile(r"linkedin\.com/in/([A-Za-z0-9_-]+)", re.IGNORECASE)

# (platform, registrable domain, required path prefix)
SOCIAL_RULES: Tuple[Tuple[Platform, str, str], ...] = (
    ("linkedin", "linkedin.com", "/in/"),
    ("twitter", "twitter.com", "/"),
    ("twitter", "x.com", "/"),
    ("facebook", "facebook.com", "/"),
    ("instagram", "instagram.com", "/"),
    ("github", "github.com", "/"),
)

BLOG_MARKERS = ("medium.com", "substack.com", "wordpress", "blog")
NEWS_MARKERS = ("news", "article", "press")


def classify_link(url: str) -> Optional[Platform]:
    """
    Social platform of a profile-like URL, or None.

    Matches on host (any sub-domain, e.g. uk.linkedin.com) plus path prefix,
    so look-alike hosts such as netflix.com never count as x.com.
    """
    if not url:
        return None
    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = (parsed.hostname or "").lower()
    path = (parsed.path or "/").lower()
    for platform, domain, prefix in SOCIAL_RULES:
        if (host == domain or host.endswith("." + domain)) and path.startswith(prefix):
            return platform
    return None


def bucket_for_link(url: str) -> str:
    lower = url.lower()
    if any(marker in lower for marker in BLOG_MARKERS):
        return "blogs"
    if any(marker in lower for marker in NEWS_MARKERS):
        return "news"
    return "other"


def identity_key(name: str, company: str | None) -> str:
    """Lower-cased, whitespace-collapsed `name|company`; empty company allowed."""
    norm_name = " ".join((name or "").lower().split())
    norm_company = " ".join((company or "").lower().split())
    return f"{norm_name}|{norm_company}"


@dataclass
class _CandidateBuilder:
    key: str
    id: str
    name: str
    title: Optional[str]
    company: Optional[str]
    photo_url: Optional[str]
    linked_in_url: Optional[str]
    source_links: List[RawSearchResult] = field(default_factory=list)
    _seen_links: set = field(default_factory=set)

    def append(self, result: RawSearchResult) -> None:
        if result.link in self._seen_links:
            return
        self._seen_links.add(result.link)
        self.source_links.append(result)

    def finalize(self) -> CandidatePerson:
        social: List[SocialLink] = []
        social_urls: set[str] = set()
        buckets: Dict[str, List[str]] = {"blogs": [], "news": [], "other": []}

        for result in self.source_links:
            platform = classify_link(result.link)
            if platform is None:
                buckets[bucket_for_link(result.link)].append(result.link)
                continue
            if result.link not in social_urls:
                social_urls.add(result.link)
                social.append(SocialLink(platform=platform, url=result.link))

        return CandidatePerson(
            id=self.id,
            name=self.name,
            title=self.title,
            company=self.company,
            photo_url=self.photo_url,
            linked_in_url=self.linked_in_url,
            source_links=list(self.source_links),
            social_links=social,
            sources=SourceBuckets(**buckets),
            all_links=[r.link for r in self.source_links],
        )


class PersonAggregator:
    """
    Folds raw search results into unique person candidates.

    - Only results with a profile link (linkedin.com/in/<slug>) may create a
      candidate; other results join an existing candidate with the same
      identity key and are dropped otherwise.
    - The first result for a key fixes name/title/company/photo; later
      results only append to `source_links`.
    - `enrich` folds extra results into a known candidate before
      `finalize` classifies links and freezes everything.
    """

    def __init__(self, search_name: str, extractor: Extractor = extract_person_info) -> None:
        self.search_name = search_name
        self._extractor = extractor
        self._people: Dict[str, _CandidateBuilder] = {}

    def __len__(self) -> int:
        return len(self._people)

    def add(self, result: RawSearchResult) -> Optional[str]:
        """Fold one result; returns the identity key it joined, if any."""
        info = self._extractor(result, self.search_name)
        profile = PROFILE_LINK_RE.search(result.link)

        name = info.name
        if profile:
            name = name_from_title(result.title) or self.search_name

        key = identity_key(name, info.company)
        existing = self._people.get(key)
        if existing is not None:
            existing.append(result)
            return key

        if not profile:
            return None

        builder = _CandidateBuilder(
            key=key,
            id=profile.group(1),
            name=name,
            title=info.title,
            company=info.company,
            photo_url=info.photo_url,
            linked_in_url=result.link,
        )
        builder.append(result)
        self._people[key] = builder
        return key

    def add_all(self, results: Iterable[RawSearchResult]) -> None:
        for result in results:
            self.add(result)

    def identities(self) -> List[Tuple[str, str, str]]:
        """(key, name, company) per candidate, in order of first appearance."""
        return [(b.key, b.name, b.company or "") for b in self._people.values()]

    def enrich(self, key: str, results: Iterable[RawSearchResult]) -> None:
        builder = self._people[key]
        for result in results:
            builder.append(result)

    def finalize(self) -> List[CandidatePerson]:
        return [builder.finalize() for builder in self._people.values()]


def aggregate(
    results: Iterable[RawSearchResult],
    search_name: str,
    extractor: Extractor = extract_person_info,
) -> List[CandidatePerson]:
    """
    Group results into candidates in order of first appearance.

    Returns an empty list when no result carries a profile link; the caller
    is expected to broaden the query and try once more.
    """
    aggregator = PersonAggregator(search_name, extractor=extractor)
    aggregator.add_all(results)
    people = aggregator.finalize()
    logger.debug("Aggregated %d candidates for '%s'", len(people), search_name)
    return people
