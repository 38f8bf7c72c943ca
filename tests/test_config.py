"""Tests for configuration loading."""

import pytest
from pathlib import Path

from memsync.config import load_config

_ENV_KEYS = [
    "MEMSYNC_DATA_DIR",
    "MEMSYNC_PLATFORMS",
    "MEMSYNC_SYNC_COOLDOWN",
    "MEMSYNC_MASTER_PATH",
    "MEMSYNC_LOG_LEVEL",
    "ENABLE_ANTHROPIC",
    "ANTHROPIC_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config.data_dir.name == "data"
        assert config.platforms.enabled == ["claude-code", "windsurf"]
        assert config.platforms.cooldown == 5.0
        assert config.platforms.master_path is None
        assert config.anthropic.enabled is False

    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("MEMSYNC_DATA_DIR", str(tmp_path / "mem"))
        monkeypatch.setenv("MEMSYNC_PLATFORMS", "windsurf, master")
        monkeypatch.setenv("MEMSYNC_SYNC_COOLDOWN", "0")
        monkeypatch.setenv("ENABLE_ANTHROPIC", "true")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

        config = load_config()
        assert config.data_dir == tmp_path / "mem"
        assert config.platforms.enabled == ["windsurf", "master"]
        assert config.platforms.cooldown == 0.0
        assert config.anthropic.enabled is True
        assert config.anthropic.api_key == "sk-test"

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "memsync.toml"
        toml_path.write_text("""
log_level = "DEBUG"
keep_versions = 3

[platforms]
enabled = ["windsurf"]
windsurf_rules_path = "/tmp/rules.md"
master_path = "~/master.md"
cooldown = 1.5

[anthropic]
enabled = true
model = "claude-test"
""")
        config = load_config(toml_path)
        assert config.log_level == "DEBUG"
        assert config.keep_versions == 3
        assert config.platforms.enabled == ["windsurf"]
        assert config.platforms.windsurf_rules_path == "/tmp/rules.md"
        assert config.platforms.master_path == "~/master.md"
        assert config.platforms.cooldown == 1.5
        assert config.anthropic.enabled is True
        assert config.anthropic.model == "claude-test"

    def test_cwd_file_discovered(self, tmp_path: Path):
        (tmp_path / "memsync.toml").write_text('log_level = "WARNING"\n')
        assert load_config().log_level == "WARNING"

    def test_env_overrides_toml(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("MEMSYNC_PLATFORMS", "claude-code")

        toml_path = tmp_path / "memsync.toml"
        toml_path.write_text("""
[platforms]
enabled = ["windsurf"]
""")
        config = load_config(toml_path)
        assert config.platforms.enabled == ["claude-code"]  # env wins
