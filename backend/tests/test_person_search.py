"""
Tests for the person search pipeline (query, broaden, enrich, cache).
"""
import asyncio

import pytest

from handshakeiq.services import person_search
from handshakeiq.services.errors import NoCandidatesFound, SearchUnavailable
from handshakeiq.services.person_search import build_query, search_people

from tests.fixtures.search_fixtures import (
    JANE_BLOG,
    JANE_PROFILE,
    JANE_TWITTER,
    NON_PROFILE_RESULTS,
    FakeSearchClient,
)


def _search(client, name="Jane Doe", company=None, designation=None, enrich=False):
    return asyncio.run(
        search_people(name, company, designation, client=client, enrich=enrich)
    )


class TestBuildQuery:
    def test_name_only(self):
        assert build_query("Jane Doe") == "Jane Doe LinkedIn"

    def test_with_qualifiers(self):
        assert build_query(" Jane Doe ", "Acme", "CTO") == "Jane Doe LinkedIn Acme CTO"


class TestSearchPeople:
    """Primary search and broadening."""

    def test_returns_candidates(self):
        client = FakeSearchClient({"Jane Doe LinkedIn": [JANE_PROFILE]})

        people = _search(client)

        assert [p.name for p in people] == ["Jane Doe"]
        assert client.queries == ["Jane Doe LinkedIn"]

    def test_broadens_once_when_qualified_search_is_empty(self):
        client = FakeSearchClient(
            {
                "Jane Doe LinkedIn Acme": NON_PROFILE_RESULTS,
                "Jane Doe LinkedIn": [JANE_PROFILE],
            }
        )

        people = _search(client, company="Acme")

        assert len(people) == 1
        assert client.queries == ["Jane Doe LinkedIn Acme", "Jane Doe LinkedIn"]

    def test_no_broadening_without_qualifier(self):
        client = FakeSearchClient({"Jane Doe LinkedIn": NON_PROFILE_RESULTS})

        with pytest.raises(NoCandidatesFound):
            _search(client)

        assert client.queries == ["Jane Doe LinkedIn"]

    def test_no_candidates_after_broadening(self):
        client = FakeSearchClient(default=NON_PROFILE_RESULTS)

        with pytest.raises(NoCandidatesFound) as exc_info:
            _search(client, company="Acme", designation="CTO")

        assert exc_info.value.name == "Jane Doe"
        assert len(client.calls) == 2

    def test_primary_search_failure_propagates(self):
        client = FakeSearchClient(default=SearchUnavailable("down", status_code=503))

        with pytest.raises(SearchUnavailable):
            _search(client)

        assert len(client.calls) == 1

    def test_empty_name(self):
        client = FakeSearchClient()

        with pytest.raises(ValueError):
            _search(client, name="   ")

        assert client.calls == []


class TestEnrichment:
    """Per-candidate follow-up queries."""

    def test_enrichment_links_join_candidate(self):
        client = FakeSearchClient(
            {
                "Jane Doe LinkedIn": [JANE_PROFILE],
                "Jane Doe Acme Corp Twitter": [JANE_TWITTER],
                "Jane Doe Acme Corp blog": [JANE_BLOG],
            }
        )

        people = _search(client, enrich=True)

        jane = people[0]
        assert "https://twitter.com/janedoe" in jane.all_links
        assert jane.sources.blogs == ["https://janedoe.medium.com/scaling-teams-123"]
        assert len(client.calls) == 1 + len(person_search.ENRICHMENT_TOPICS)
        assert all(n == 3 for _, n in client.calls[1:])

    def test_failed_enrichment_query_is_skipped(self):
        client = FakeSearchClient(
            {
                "Jane Doe LinkedIn": [JANE_PROFILE],
                "Jane Doe Acme Corp Instagram": SearchUnavailable("quota", status_code=429),
                "Jane Doe Acme Corp Twitter": [JANE_TWITTER],
            }
        )

        people = _search(client, enrich=True)

        assert "https://twitter.com/janedoe" in people[0].all_links

    def test_unexpected_enrichment_error_propagates(self):
        client = FakeSearchClient(
            {
                "Jane Doe LinkedIn": [JANE_PROFILE],
                "Jane Doe Acme Corp GitHub": RuntimeError("bug"),
            }
        )

        with pytest.raises(RuntimeError):
            _search(client, enrich=True)


class TestCaching:
    """Search results are served from and written to the cache."""

    def test_cache_hit_skips_search(self, monkeypatch):
        cached = [
            {
                "id": "janedoe",
                "name": "Jane Doe",
                "sourceLinks": [{"title": "t", "link": "https://linkedin.com/in/janedoe"}],
            }
        ]

        async def fake_cached_get(key, set_value=None, ttl=None):
            return cached if set_value is None else set_value

        monkeypatch.setattr(person_search, "cached_get", fake_cached_get)
        client = FakeSearchClient()

        people = _search(client)

        assert people[0].id == "janedoe"
        assert client.calls == []

    def test_results_are_written_to_cache(self, monkeypatch):
        writes = []

        async def fake_cached_get(key, set_value=None, ttl=None):
            if set_value is not None:
                writes.append((key, set_value, ttl))
            return set_value

        monkeypatch.setattr(person_search, "cached_get", fake_cached_get)
        client = FakeSearchClient({"Jane Doe LinkedIn": [JANE_PROFILE]})

        _search(client)

        assert len(writes) == 1
        key, value, ttl = writes[0]
        assert key.startswith("person_search:")
        assert value[0]["id"] == "janedoe"
        assert ttl > 0

    def test_failures_are_not_cached(self, monkeypatch):
        writes = []

        async def fake_cached_get(key, set_value=None, ttl=None):
            if set_value is not None:
                writes.append(key)
            return set_value

        monkeypatch.setattr(person_search, "cached_get", fake_cached_get)

        with pytest.raises(NoCandidatesFound):
            _search(FakeSearchClient(default=NON_PROFILE_RESULTS))

        assert writes == []
