"""Entry point: python -m memsync <command>

- show                 Print the current template
- section NAME         Print one section
- presets              List presets
- load-preset NAME     Make a preset the live template and sync
- save-preset NAME     Snapshot the live template as a preset
- platforms            List sync platforms
- sync [PLATFORM]      Sync all platforms (or one)
- ask QUERY            Answer a question from memory (Anthropic API)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from memsync.cache import build_response_cache
from memsync.config import MemsyncConfig, load_config
from memsync.memory.presets import PresetRepository
from memsync.memory.store import TemplateStore
from memsync.sync.manager import PlatformSyncManager
from memsync.sync.platforms import build_syncers
from memsync.tools.memory_tools import (
    AskMemory,
    CreatePreset,
    GetSection,
    GetTemplate,
    ListPlatforms,
    ListPresets,
    LoadPreset,
    MemoryTools,
    Operation,
    SyncPlatforms,
)

USAGE = __doc__.split("\n\n", 1)[1]


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_tools(config: MemsyncConfig) -> MemoryTools:
    """Wire store, presets, platforms and cache together."""
    store = TemplateStore(config.data_dir, keep_versions=config.keep_versions)
    cache = build_response_cache(config.anthropic)
    sync = PlatformSyncManager(store, build_syncers(config.platforms), cache=cache)
    return MemoryTools(store, PresetRepository(store), sync, cache)


def parse_command(argv: list[str]) -> Operation | None:
    if not argv:
        return None
    cmd, args = argv[0], argv[1:]
    rest = " ".join(args).strip()

    if cmd == "show":
        return GetTemplate()
    if cmd == "presets":
        return ListPresets()
    if cmd == "platforms":
        return ListPlatforms()
    if cmd == "sync":
        return SyncPlatforms(platform=rest or None)
    if not rest:
        return None
    if cmd == "section":
        return GetSection(rest)
    if cmd == "load-preset":
        return LoadPreset(rest)
    if cmd == "save-preset":
        return CreatePreset(rest)
    if cmd == "ask":
        return AskMemory(rest)
    return None


async def _run(config: MemsyncConfig, op: Operation) -> int:
    tools = build_tools(config)
    await tools.store.initialize()
    result = await tools.execute(op)
    print(result.text)
    return 1 if result.is_error else 0


def main() -> None:
    op = parse_command(sys.argv[1:])
    if op is None:
        print("Usage: python -m memsync <command>\n")
        print(USAGE)
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)
    sys.exit(asyncio.run(_run(config, op)))


if __name__ == "__main__":
    main()
