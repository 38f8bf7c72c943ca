"""Typed memory operations for tool callers (MCP server, CLI).

Each operation is a small dataclass; ``MemoryTools.execute`` handles the
closed set and always answers with a ToolResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from memsync.cache import NullResponseCache
from memsync.memory.codec import render_document, render_section

if TYPE_CHECKING:
    from memsync.cache import ResponseCache
    from memsync.memory.presets import PresetRepository
    from memsync.memory.store import TemplateStore
    from memsync.sync.base import SyncResult
    from memsync.sync.manager import PlatformSyncManager

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    text: str
    is_error: bool = False


# ── Operations ────────────────────────────────────────────────


@dataclass(frozen=True)
class GetTemplate:
    pass


@dataclass(frozen=True)
class GetSection:
    name: str


@dataclass(frozen=True)
class UpdateSection:
    name: str
    content: str


@dataclass(frozen=True)
class UpdateTemplate:
    content: str


@dataclass(frozen=True)
class ListPresets:
    pass


@dataclass(frozen=True)
class LoadPreset:
    name: str


@dataclass(frozen=True)
class CreatePreset:
    name: str


@dataclass(frozen=True)
class SyncPlatforms:
    platform: str | None = None


@dataclass(frozen=True)
class ListPlatforms:
    pass


@dataclass(frozen=True)
class AskMemory:
    query: str


Operation = Union[
    GetTemplate,
    GetSection,
    UpdateSection,
    UpdateTemplate,
    ListPresets,
    LoadPreset,
    CreatePreset,
    SyncPlatforms,
    ListPlatforms,
    AskMemory,
]


def format_sync_results(results: list[SyncResult]) -> str:
    if not results:
        return "No platforms configured"
    lines = [f"{'✓' if r.success else '✗'} {r.platform}: {r.message}" for r in results]
    ok = sum(r.success for r in results)
    return f"Synced {ok}/{len(results)} platforms\n" + "\n".join(lines)


class MemoryTools:
    """Executes Operations against the store, presets and sync manager."""

    def __init__(
        self,
        store: TemplateStore,
        presets: PresetRepository,
        sync: PlatformSyncManager,
        cache: ResponseCache | None = None,
    ) -> None:
        self.store = store
        self.presets = presets
        self.sync = sync
        self.cache = cache or NullResponseCache()

    async def execute(self, op: Operation) -> ToolResult:
        try:
            return await self._dispatch(op)
        except OSError as e:
            logger.error("%s failed: %s", type(op).__name__, e)
            return ToolResult(f"Storage error: {e}", is_error=True)

    async def _dispatch(self, op: Operation) -> ToolResult:
        if isinstance(op, GetTemplate):
            return ToolResult(render_document(self.store.get_template()))
        if isinstance(op, GetSection):
            return self._get_section(op)
        if isinstance(op, UpdateSection):
            return await self._update_section(op)
        if isinstance(op, UpdateTemplate):
            return await self._update_template(op)
        if isinstance(op, ListPresets):
            return await self._list_presets()
        if isinstance(op, LoadPreset):
            return await self._load_preset(op)
        if isinstance(op, CreatePreset):
            return await self._create_preset(op)
        if isinstance(op, SyncPlatforms):
            return await self._sync(op)
        if isinstance(op, ListPlatforms):
            return self._list_platforms()
        if isinstance(op, AskMemory):
            return await self._ask(op)
        raise TypeError(f"Unsupported operation: {op!r}")

    # ── Handlers ──────────────────────────────────────────────

    def _get_section(self, op: GetSection) -> ToolResult:
        section = self.store.get_section(op.name)
        if section is None:
            return ToolResult(f"Section '{op.name}' not found", is_error=True)
        return ToolResult(render_section(section))

    async def _update_section(self, op: UpdateSection) -> ToolResult:
        if not await self.store.update_section(op.name, op.content):
            return ToolResult(
                f"Failed to update section '{op.name}': content needs a '## description' "
                "or at least one '-~- Key: Value' line",
                is_error=True,
            )
        results = await self.sync.sync_all()
        return ToolResult(f"Section '{op.name}' updated\n{format_sync_results(results)}")

    async def _update_template(self, op: UpdateTemplate) -> ToolResult:
        if not await self.store.update_template(op.content):
            return ToolResult("Failed to update template: no sections found", is_error=True)
        results = await self.sync.sync_all()
        return ToolResult(f"Template updated\n{format_sync_results(results)}")

    async def _list_presets(self) -> ToolResult:
        names = await self.presets.list_presets()
        if not names:
            return ToolResult("No presets available")
        return ToolResult("Available presets:\n" + "\n".join(f"- {n}" for n in names))

    async def _load_preset(self, op: LoadPreset) -> ToolResult:
        if not await self.presets.load_preset(op.name):
            return ToolResult(f"Preset '{op.name}' not found or invalid", is_error=True)
        results = await self.sync.sync_all()
        return ToolResult(f"Preset '{op.name}' loaded\n{format_sync_results(results)}")

    async def _create_preset(self, op: CreatePreset) -> ToolResult:
        if not await self.presets.create_preset(op.name):
            return ToolResult(f"Invalid preset name: '{op.name}'", is_error=True)
        return ToolResult(f"Preset '{op.name}' created")

    async def _sync(self, op: SyncPlatforms) -> ToolResult:
        if op.platform:
            results = [await self.sync.sync_platform(op.platform)]
        else:
            results = await self.sync.sync_all()
        return ToolResult(
            format_sync_results(results),
            is_error=bool(results) and not any(r.success for r in results),
        )

    def _list_platforms(self) -> ToolResult:
        platforms = self.sync.get_platforms()
        if not platforms:
            return ToolResult("No platforms configured")
        return ToolResult("Platforms:\n" + "\n".join(f"- {p}" for p in platforms))

    async def _ask(self, op: AskMemory) -> ToolResult:
        if not self.cache.enabled:
            return ToolResult(
                "Memory questions need the Anthropic API. "
                "Set ENABLE_ANTHROPIC=true and ANTHROPIC_API_KEY.",
                is_error=True,
            )
        answer = await self.cache.ask(op.query, render_document(self.store.get_template()))
        if answer is None:
            return ToolResult("Could not get an answer from the Anthropic API", is_error=True)
        return ToolResult(answer)
