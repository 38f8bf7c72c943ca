"""Optional response cache for memory questions answered by the Anthropic API.

The template goes out as a prompt-cached system block; answers are kept on
disk keyed by (model, template, query) until they expire or a sync
invalidates them. Without an API key the no-op cache is used.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import anthropic

if TYPE_CHECKING:
    from memsync.config import AnthropicConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are assisting with memory retrieval from the user's myAI Memory template.
Answer the question using only the template below. If the template does not
contain the answer, say so briefly.
"""


@runtime_checkable
class ResponseCache(Protocol):
    @property
    def enabled(self) -> bool: ...

    async def ask(self, query: str, template: str) -> str | None:
        """Answer ``query`` against ``template``. None when unavailable."""
        ...

    async def invalidate(self) -> None:
        """Drop cached answers."""
        ...


class NullResponseCache:
    """Default when no API is configured."""

    @property
    def enabled(self) -> bool:
        return False

    async def ask(self, query: str, template: str) -> str | None:
        return None

    async def invalidate(self) -> None:
        return None


class AnthropicResponseCache:
    """Answers memory questions via the Anthropic API with on-disk caching."""

    def __init__(
        self,
        client: anthropic.Anthropic,
        cache_dir: Path,
        *,
        model: str = "claude-3-haiku-20240307",
        ttl: float = 31536000,
        max_tokens: int = 1024,
    ) -> None:
        self._client = client
        self.cache_dir = cache_dir
        self.model = model
        self.ttl = ttl
        self.max_tokens = max_tokens

    @property
    def enabled(self) -> bool:
        return True

    def _key(self, query: str, template: str) -> str:
        h = hashlib.sha256()
        for part in (self.model, template, query.strip().lower()):
            h.update(part.encode("utf-8"))
            h.update(b"\0")
        return h.hexdigest()

    def _read(self, key: str) -> str | None:
        path = self.cache_dir / f"{key}.json"
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Discarding corrupt cache entry %s: %s", path.name, e)
            return None
        if time.time() - entry.get("created", 0) > self.ttl:
            return None
        return entry.get("text")

    def _write(self, key: str, text: str) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        (self.cache_dir / f"{key}.json").write_text(
            json.dumps({"created": time.time(), "model": self.model, "text": text}),
            encoding="utf-8",
        )

    async def ask(self, query: str, template: str) -> str | None:
        key = self._key(query, template)
        cached = await asyncio.to_thread(self._read, key)
        if cached is not None:
            logger.debug("Cache hit for memory query")
            return cached

        try:
            response = await asyncio.to_thread(
                self._client.messages.create,
                model=self.model,
                max_tokens=self.max_tokens,
                system=[
                    {"type": "text", "text": SYSTEM_PROMPT},
                    {
                        "type": "text",
                        "text": template,
                        "cache_control": {"type": "ephemeral"},
                    },
                ],
                messages=[{"role": "user", "content": query}],
            )
        except anthropic.APIError as e:
            logger.error("Anthropic API error: %s", e)
            return None

        text = response.content[0].text if response.content else ""
        try:
            await asyncio.to_thread(self._write, key, text)
        except OSError as e:
            logger.warning("Failed to store cached answer: %s", e)
        return text

    async def invalidate(self) -> None:
        await asyncio.to_thread(self._clear)

    def _clear(self) -> None:
        if not self.cache_dir.is_dir():
            return
        removed = 0
        for path in self.cache_dir.glob("*.json"):
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Failed to remove cache entry %s: %s", path.name, e)
        if removed:
            logger.info("Cleared %d cached memory answers", removed)


def build_response_cache(config: AnthropicConfig) -> ResponseCache:
    if not (config.enabled and config.api_key):
        return NullResponseCache()
    client = anthropic.Anthropic(api_key=config.api_key)
    return AnthropicResponseCache(
        client, config.cache_dir, model=config.model, ttl=config.cache_ttl
    )
