"""
Tests for business card scanning.
"""
import asyncio
from types import SimpleNamespace

import openai

from handshakeiq.services.card_scanner import extract_card
from handshakeiq.services.errors import ModelUnavailable


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _factory(completions):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return lambda: client


class TestExtractCard:
    """extract_card is best-effort and never raises."""

    def test_reads_name_and_company(self):
        completions = FakeCompletions(content='{"name": " Jane Doe ", "company": "Acme Corp"}')

        result = asyncio.run(extract_card("aGVsbG8=", client_factory=_factory(completions)))

        assert (result.name, result.company) == ("Jane Doe", "Acme Corp")
        call = completions.calls[0]
        assert call["response_format"] == {"type": "json_object"}
        image = call["messages"][0]["content"][1]
        assert image["image_url"]["url"] == "data:image/jpeg;base64,aGVsbG8="

    def test_missing_fields_are_empty(self):
        completions = FakeCompletions(content='{"name": null}')

        result = asyncio.run(extract_card("x", client_factory=_factory(completions)))

        assert (result.name, result.company) == ("", "")

    def test_unreadable_answer(self):
        result = asyncio.run(extract_card("x", client_factory=_factory(FakeCompletions(content="Jane Doe, Acme"))))
        assert (result.name, result.company) == ("", "")

    def test_model_error(self):
        completions = FakeCompletions(error=openai.OpenAIError("boom"))

        result = asyncio.run(extract_card("x", client_factory=_factory(completions)))

        assert (result.name, result.company) == ("", "")

    def test_no_client_configured(self):
        def factory():
            raise ModelUnavailable("No LLM API key configured.")

        result = asyncio.run(extract_card("x", client_factory=factory))

        assert (result.name, result.company) == ("", "")
