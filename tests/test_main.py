"""Tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from memsync.__main__ import _run, build_tools, parse_command
from memsync.cache import NullResponseCache
from memsync.config import AnthropicConfig, MemsyncConfig, PlatformConfig
from memsync.tools.memory_tools import (
    AskMemory,
    GetSection,
    GetTemplate,
    LoadPreset,
    SyncPlatforms,
)


@pytest.fixture
def config(tmp_path: Path) -> MemsyncConfig:
    return MemsyncConfig(
        data_dir=tmp_path / "data",
        platforms=PlatformConfig(
            enabled=["windsurf"],
            windsurf_rules_path=str(tmp_path / "rules.md"),
            claude_projects_path=None,
            cooldown=0,
        ),
        anthropic=AnthropicConfig(cache_dir=tmp_path / "cache"),
    )


class TestParseCommand:
    def test_simple_commands(self):
        assert parse_command(["show"]) == GetTemplate()
        assert parse_command(["sync"]) == SyncPlatforms(None)
        assert parse_command(["sync", "windsurf"]) == SyncPlatforms("windsurf")

    def test_multiword_argument(self):
        assert parse_command(["section", "User", "Information"]) == GetSection("User Information")
        assert parse_command(["ask", "what", "is", "my", "name?"]) == AskMemory("what is my name?")
        assert parse_command(["load-preset", "dave"]) == LoadPreset("dave")

    def test_invalid(self):
        assert parse_command([]) is None
        assert parse_command(["section"]) is None
        assert parse_command(["explode"]) is None


class TestRun:
    def test_build_tools_wires_platforms(self, config: MemsyncConfig):
        tools = build_tools(config)
        assert tools.sync.get_platforms() == ["windsurf"]
        assert isinstance(tools.cache, NullResponseCache)
        assert tools.presets.store is tools.store

    @pytest.mark.asyncio
    async def test_sync_command(self, config: MemsyncConfig, tmp_path: Path, capsys):
        code = await _run(config, SyncPlatforms())
        assert code == 0
        assert "windsurf" in capsys.readouterr().out
        assert (tmp_path / "rules.md").read_text(encoding="utf-8").startswith("# myAI Memory")

    @pytest.mark.asyncio
    async def test_error_exit_code(self, config: MemsyncConfig):
        assert await _run(config, GetSection("Nope")) == 1
