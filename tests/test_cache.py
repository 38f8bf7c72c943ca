"""Tests for the optional Anthropic answer cache (mocked client)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import anthropic
import httpx
import pytest

from memsync.cache import (
    AnthropicResponseCache,
    NullResponseCache,
    ResponseCache,
    build_response_cache,
)
from memsync.config import AnthropicConfig

TEMPLATE = "# myAI Memory\n\n# User Information\n-~- Name: Dave\n\n"


def _client(text: str = "Your name is Dave.") -> MagicMock:
    client = MagicMock()
    block = MagicMock()
    block.text = text
    client.messages.create.return_value = MagicMock(content=[block])
    return client


class TestNullCache:
    @pytest.mark.asyncio
    async def test_noop(self):
        cache = NullResponseCache()
        assert not cache.enabled
        assert await cache.ask("name?", TEMPLATE) is None
        await cache.invalidate()

    def test_protocol(self):
        assert isinstance(NullResponseCache(), ResponseCache)


class TestAnthropicCache:
    @pytest.mark.asyncio
    async def test_miss_then_hit(self, tmp_path: Path):
        client = _client()
        cache = AnthropicResponseCache(client, tmp_path)
        assert await cache.ask("What is my name?", TEMPLATE) == "Your name is Dave."
        assert await cache.ask("what is my name?", TEMPLATE) == "Your name is Dave."
        client.messages.create.assert_called_once()

    @pytest.mark.asyncio
    async def test_template_marked_for_prompt_caching(self, tmp_path: Path):
        client = _client()
        await AnthropicResponseCache(client, tmp_path, model="m").ask("q", TEMPLATE)
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["system"][-1] == {
            "type": "text",
            "text": TEMPLATE,
            "cache_control": {"type": "ephemeral"},
        }

    @pytest.mark.asyncio
    async def test_template_change_misses(self, tmp_path: Path):
        client = _client()
        cache = AnthropicResponseCache(client, tmp_path)
        await cache.ask("q", TEMPLATE)
        await cache.ask("q", TEMPLATE + "# More\n-~- A: B\n")
        assert client.messages.create.call_count == 2

    @pytest.mark.asyncio
    async def test_expired_entry(self, tmp_path: Path):
        client = _client()
        cache = AnthropicResponseCache(client, tmp_path, ttl=10)
        await cache.ask("q", TEMPLATE)
        entry = next(tmp_path.glob("*.json"))
        data = json.loads(entry.read_text(encoding="utf-8"))
        data["created"] -= 60
        entry.write_text(json.dumps(data), encoding="utf-8")
        await cache.ask("q", TEMPLATE)
        assert client.messages.create.call_count == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, tmp_path: Path):
        cache = AnthropicResponseCache(_client(), tmp_path)
        await cache.ask("q", TEMPLATE)
        await cache.invalidate()
        assert list(tmp_path.glob("*.json")) == []

    @pytest.mark.asyncio
    async def test_api_error_returns_none(self, tmp_path: Path):
        client = MagicMock()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.messages.create.side_effect = anthropic.APIConnectionError(request=request)
        cache = AnthropicResponseCache(client, tmp_path)
        assert await cache.ask("q", TEMPLATE) is None
        assert list(tmp_path.glob("*.json")) == []


class TestBuild:
    def test_disabled_is_null(self, tmp_path: Path):
        assert isinstance(build_response_cache(AnthropicConfig(enabled=False)), NullResponseCache)

    def test_enabled_without_key_is_null(self):
        config = AnthropicConfig(enabled=True, api_key="")
        assert isinstance(build_response_cache(config), NullResponseCache)

    def test_enabled_with_key(self, tmp_path: Path):
        config = AnthropicConfig(enabled=True, api_key="sk-test", cache_dir=tmp_path, model="m")
        cache = build_response_cache(config)
        assert isinstance(cache, AnthropicResponseCache)
        assert cache.enabled and cache.model == "m"
