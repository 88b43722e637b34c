"""Tests for the research provider client."""

import json

import httpx
import pytest

from provenance_system.config import Settings
from provenance_system.exceptions import (ConfigurationError, UpstreamFormatError,
                                          UpstreamUnavailableError)
from provenance_system.llm.analyze_client import AnalyzeClient
from provenance_system.llm.prompts import build_prompts
from provenance_system.net.page_fetch import PageContent


def _envelope(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _client_for(handler, api_key="test-key"):
    settings = Settings(PERPLEXITY_API_KEY=api_key, PERPLEXITY_API_URL="https://provider.test/chat/completions")
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AnalyzeClient(settings, client=http), http


class TestAnalyzeClient:

    @pytest.mark.asyncio
    async def test_fenced_json_is_unwrapped(self, raw_payload):
        captured = {}

        def handler(request):
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=_envelope("```json\n" + json.dumps(raw_payload) + "\n```"))

        client, http = _client_for(handler)
        async with http:
            payload = await client.analyze("system", "user")
        assert payload["topic"] == "UK voting intention"
        assert captured["auth"] == "Bearer test-key"
        assert captured["body"]["model"] == "sonar-pro"
        assert [m["role"] for m in captured["body"]["messages"]] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_bare_json_is_accepted(self, raw_payload):
        client, http = _client_for(lambda r: httpx.Response(200, json=_envelope(json.dumps(raw_payload))))
        async with http:
            payload = await client.analyze("system", "user")
        assert len(payload["claims"]) == 2

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_any_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        client, http = _client_for(handler, api_key="")
        async with http:
            with pytest.raises(ConfigurationError, match="API key not configured"):
                await client.analyze("system", "user")
        assert calls == []

    @pytest.mark.asyncio
    async def test_non_2xx_is_unavailable(self):
        client, http = _client_for(lambda r: httpx.Response(401, text="bad key"))
        async with http:
            with pytest.raises(UpstreamUnavailableError) as exc:
                await client.analyze("system", "user")
        assert str(exc.value) == "Failed to analyze query"
        assert exc.value.status_code == 401
        assert exc.value.details == "bad key"

    @pytest.mark.asyncio
    async def test_non_json_content_is_format_error(self):
        client, http = _client_for(lambda r: httpx.Response(200, json=_envelope("Sorry, I cannot help with that.")))
        async with http:
            with pytest.raises(UpstreamFormatError, match="Invalid response format from AI"):
                await client.analyze("system", "user")

    @pytest.mark.asyncio
    async def test_bad_envelope_is_format_error(self):
        client, http = _client_for(lambda r: httpx.Response(200, json={"choices": []}))
        async with http:
            with pytest.raises(UpstreamFormatError):
                await client.analyze("system", "user")

    @pytest.mark.asyncio
    async def test_deeply_nested_content_is_format_error(self):
        nested = "[" * 100000 + "]" * 100000
        client, http = _client_for(lambda r: httpx.Response(200, json=_envelope(nested)))
        async with http:
            with pytest.raises(UpstreamFormatError, match="Invalid response format from AI"):
                await client.analyze("system", "user")

    @pytest.mark.asyncio
    async def test_json_array_is_format_error(self):
        client, http = _client_for(lambda r: httpx.Response(200, json=_envelope("[1, 2, 3]")))
        async with http:
            with pytest.raises(UpstreamFormatError):
                await client.analyze("system", "user")


class TestBuildPrompts:

    def test_topic_prompt(self):
        system, user = build_prompts("UK polling", is_url=False)
        assert "claim_text" in system
        assert "UK polling" in user

    def test_url_prompt_includes_extracted_page(self):
        page = PageContent(headline="Poll shock", body="Labour's lead fell sharply in the latest survey.")
        _, user = build_prompts("https://news.example.com/poll", is_url=True, page=page)
        assert "Poll shock" in user
        assert "https://news.example.com/poll" in user
