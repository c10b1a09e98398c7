# backend/handshakeiq/services/person_search.py
from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError

from ..core.config import get_settings
from ..schemas.search import CandidatePerson, RawSearchResult
from .caching import cached_get
from .connectors.google_search import GoogleSearchClient
from .errors import NoCandidatesFound, SearchUnavailable
from .person_aggregator import PersonAggregator

logger = logging.getLogger(__name__)

ENRICHMENT_TOPICS: Sequence[str] = ("Instagram", "Twitter", "GitHub", "blog", "news")


def build_query(name: str, company: Optional[str] = None, designation: Optional[str] = None) -> str:
    """Profile-focused query; the platform keyword helps disambiguate people."""
    parts = [name.strip(), "LinkedIn"]
    if company:
        parts.append(company.strip())
    if designation:
        parts.append(designation.strip())
    return " ".join(p for p in parts if p)


def _cache_key(name: str, company: Optional[str], designation: Optional[str], enrich: bool) -> str:
    raw = "|".join(
        [
            " ".join(name.lower().split()),
            " ".join((company or "").lower().split()),
            " ".join((designation or "").lower().split()),
            "enriched" if enrich else "plain",
        ]
    )
    return "person_search:" + hashlib.sha256(raw.encode("utf-8")).hexdigest()


async def _enrichment_results(
    client: GoogleSearchClient,
    name: str,
    company: str,
    per_query: int,
) -> List[RawSearchResult]:
    """
    Narrow follow-up queries for one candidate, run concurrently.

    A failed query only loses its own results.
    """
    queries = [f"{name} {company} {topic}".strip() for topic in ENRICHMENT_TOPICS]
    outcomes = await asyncio.gather(
        *(client.search(q, per_query) for q in queries),
        return_exceptions=True,
    )

    results: List[RawSearchResult] = []
    for query, outcome in zip(queries, outcomes):
        if isinstance(outcome, SearchUnavailable):
            logger.warning(
                "Enrichment query failed: %s",
                outcome,
                extra={"step": "enrichment", "query": query},
            )
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        results.extend(outcome)
    return results


async def search_people(
    name: str,
    company: Optional[str] = None,
    designation: Optional[str] = None,
    *,
    client: GoogleSearchClient,
    enrich: Optional[bool] = None,
) -> List[CandidatePerson]:
    """
    Search for people matching `name` (optionally qualified by company and
    designation) and return disambiguated candidates.

    - One profile-focused search; if it yields no candidates and a qualifier
      was given, the query is broadened to the bare name once.
    - Optional enrichment folds per-candidate follow-up queries into the
      candidate's links before they are frozen.
    - Successful results are cached; failures are not.

    Raises:
        ValueError: empty name.
        SearchUnavailable: the primary search failed.
        NoCandidatesFound: no candidate even after broadening.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("name must not be empty")
    company = (company or "").strip() or None
    designation = (designation or "").strip() or None

    settings = get_settings()
    if enrich is None:
        enrich = settings.SEARCH_ENRICHMENT_ENABLED

    cache_key = _cache_key(name, company, designation, enrich)
    cached = await cached_get(cache_key)
    if cached is not None:
        try:
            return [CandidatePerson.model_validate(p) for p in cached]
        except (ValidationError, TypeError):
            logger.warning("Discarding malformed cached search result", extra={"step": "cache"})

    aggregator = PersonAggregator(name)
    aggregator.add_all(await client.search(build_query(name, company, designation), settings.SEARCH_MAX_RESULTS))

    if len(aggregator) == 0 and (company or designation):
        logger.info(
            "No candidates for qualified query; broadening to name only",
            extra={"step": "broaden", "query": name},
        )
        aggregator = PersonAggregator(name)
        aggregator.add_all(await client.search(build_query(name), settings.SEARCH_MAX_RESULTS))

    if len(aggregator) == 0:
        raise NoCandidatesFound(name)

    if enrich:
        for key, person_name, person_company in aggregator.identities():
            extra_results = await _enrichment_results(
                client,
                person_name,
                person_company,
                settings.SEARCH_ENRICHMENT_RESULTS,
            )
            aggregator.enrich(key, extra_results)

    people = aggregator.finalize()
    await cached_get(
        cache_key,
        set_value=[p.model_dump(mode="json") for p in people],
        ttl=settings.SEARCH_CACHE_TTL_SECONDS,
    )
    logger.info(
        "Person search produced %d candidates",
        len(people),
        extra={"step": "person_search", "query": name},
    )
    return people
