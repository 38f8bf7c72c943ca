"""Fan the serialized template out to every platform and collect outcomes.

Each platform write is independent: one failure never aborts or rolls back
the others. Partial completion is a normal result; retrying is up to the
caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from memsync.cache import NullResponseCache, ResponseCache
from memsync.memory.codec import render_document
from memsync.sync.base import PlatformSyncer, SyncResult

if TYPE_CHECKING:
    from memsync.memory.store import TemplateStore

logger = logging.getLogger(__name__)


class PlatformSyncManager:
    """Sync orchestrator over a fixed, ordered set of platforms."""

    def __init__(
        self,
        store: TemplateStore,
        syncers: list[PlatformSyncer],
        *,
        cache: ResponseCache | None = None,
    ) -> None:
        self.store = store
        self.cache = cache or NullResponseCache()
        self._syncers: dict[str, PlatformSyncer] = {}
        for syncer in syncers:
            if syncer.name in self._syncers:
                logger.warning("Duplicate platform %s ignored", syncer.name)
                continue
            self._syncers[syncer.name] = syncer
            logger.info("Registered platform: %s", syncer.name)

    def get_platforms(self) -> list[str]:
        return list(self._syncers)

    def _content(self, content: str | None) -> str:
        if content is None:
            return render_document(self.store.get_template())
        return content

    async def _run(self, syncer: PlatformSyncer, content: str) -> SyncResult:
        try:
            result = await syncer.sync(content)
        except Exception as e:
            logger.error("Sync to %s failed: %s", syncer.name, e)
            return SyncResult(syncer.name, False, f"Failed to sync with {syncer.name}: {e}")
        if not result.success:
            logger.warning("Sync to %s reported failure: %s", syncer.name, result.message)
        return result

    async def sync_all(self, content: str | None = None) -> list[SyncResult]:
        """Sync every platform concurrently. One result per platform, in registration order."""
        if not self._syncers:
            logger.warning("No platforms registered")
            return []
        snapshot = self._content(content)
        results = list(
            await asyncio.gather(*(self._run(s, snapshot) for s in self._syncers.values()))
        )
        ok = sum(r.success for r in results)
        logger.info("Synced %d/%d platforms", ok, len(results))
        if ok:
            await self.cache.invalidate()
        return results

    async def sync_platform(self, name: str, content: str | None = None) -> SyncResult:
        syncer = self._syncers.get(name)
        if syncer is None:
            supported = ", ".join(self._syncers) or "(none)"
            return SyncResult(
                name,
                False,
                f"Platform not supported: {name}. Supported platforms: {supported}",
            )
        result = await self._run(syncer, self._content(content))
        if result.success:
            await self.cache.invalidate()
        return result
