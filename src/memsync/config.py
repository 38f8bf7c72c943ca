"""Configuration loading from environment variables and memsync.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_HOME_DIR = Path.home() / ".memsync"
_DEFAULT_DATA_DIR = _HOME_DIR / "data"
_CONFIG_FILENAME = "memsync.toml"
_DEFAULT_PLATFORMS = ["claude-code", "windsurf"]


@dataclass
class PlatformConfig:
    """Sync destinations."""

    enabled: list[str] = field(default_factory=lambda: list(_DEFAULT_PLATFORMS))
    claude_md_path: str = "~/CLAUDE.md"
    claude_projects_path: str | None = "~/CascadeProjects"
    windsurf_rules_path: str = "~/.codeium/windsurf/memories/global_rules.md"
    master_path: str | None = None
    cooldown: float = 5.0


@dataclass
class AnthropicConfig:
    """Optional Anthropic-backed answer cache."""

    enabled: bool = False
    api_key: str = ""
    model: str = "claude-3-haiku-20240307"
    cache_ttl: float = 31536000
    cache_dir: Path = Path.home() / ".cache" / "memsync" / "prompt-cache"


@dataclass
class MemsyncConfig:
    """Top-level memsync configuration."""

    data_dir: Path = _DEFAULT_DATA_DIR
    keep_versions: int = 10
    platforms: PlatformConfig = field(default_factory=PlatformConfig)
    anthropic: AnthropicConfig = field(default_factory=AnthropicConfig)
    log_level: str = "INFO"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if value is None:
        return list(default)
    return [part.strip() for part in value.split(",") if part.strip()]


def load_config(config_path: Path | None = None) -> MemsyncConfig:
    """Load configuration from environment variables and optional memsync.toml.

    Priority: environment variables > memsync.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.memsync/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _HOME_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    platform_data = file_data.get("platforms", {})
    anthropic_data = file_data.get("anthropic", {})
    defaults = PlatformConfig()

    config = MemsyncConfig(
        data_dir=Path(
            os.path.expanduser(
                os.getenv("MEMSYNC_DATA_DIR", file_data.get("data_dir", str(_DEFAULT_DATA_DIR)))
            )
        ),
        keep_versions=int(file_data.get("keep_versions", 10)),
        platforms=PlatformConfig(
            enabled=_env_list(
                "MEMSYNC_PLATFORMS", platform_data.get("enabled", _DEFAULT_PLATFORMS)
            ),
            claude_md_path=os.getenv(
                "MEMSYNC_CLAUDE_MD_PATH",
                platform_data.get("claude_md_path", defaults.claude_md_path),
            ),
            claude_projects_path=os.getenv(
                "MEMSYNC_CLAUDE_PROJECTS_PATH",
                platform_data.get("claude_projects_path", defaults.claude_projects_path),
            ),
            windsurf_rules_path=os.getenv(
                "MEMSYNC_WINDSURF_PATH",
                platform_data.get("windsurf_rules_path", defaults.windsurf_rules_path),
            ),
            master_path=os.getenv("MEMSYNC_MASTER_PATH", platform_data.get("master_path")),
            cooldown=float(
                os.getenv("MEMSYNC_SYNC_COOLDOWN", platform_data.get("cooldown", 5.0))
            ),
        ),
        anthropic=AnthropicConfig(
            enabled=_env_bool("ENABLE_ANTHROPIC", bool(anthropic_data.get("enabled", False))),
            api_key=os.getenv("ANTHROPIC_API_KEY", anthropic_data.get("api_key", "")),
            model=os.getenv(
                "MEMSYNC_ANTHROPIC_MODEL",
                anthropic_data.get("model", "claude-3-haiku-20240307"),
            ),
            cache_ttl=float(anthropic_data.get("cache_ttl", 31536000)),
            cache_dir=Path(
                os.path.expanduser(
                    anthropic_data.get("cache_dir", str(AnthropicConfig().cache_dir))
                )
            ),
        ),
        log_level=os.getenv("MEMSYNC_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
