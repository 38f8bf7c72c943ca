"""File-backed platform destinations."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from memsync.sync.base import (
    PlatformSyncer,
    SyncResult,
    Throttle,
    expand_path,
    extract_memory_block,
    write_memory_block,
)

if TYPE_CHECKING:
    from memsync.config import PlatformConfig

logger = logging.getLogger(__name__)

CLAUDE_MD = "CLAUDE.md"
_GITIGNORE_PATTERNS = {"CLAUDE.md", "/CLAUDE.md", "**/CLAUDE.md", "CLAUDE.*"}


def _skipped(platform: str, label: str) -> SyncResult:
    return SyncResult(
        platform=platform,
        success=True,
        message=f"Skipped update to {label} (within throttle period)",
    )


# ── Claude Code: CLAUDE.md in home + every project dir ───────


def is_claude_md_gitignored(project: Path) -> bool:
    gitignore = project / ".gitignore"
    if not gitignore.exists():
        return False
    for line in gitignore.read_text(encoding="utf-8").splitlines():
        if line.strip() in _GITIGNORE_PATTERNS:
            return True
    return False


def add_claude_md_to_gitignore(project: Path) -> None:
    gitignore = project / ".gitignore"
    content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
    if CLAUDE_MD in content:
        return
    if not content.strip():
        content = "# Git ignore file\n\n"
    elif not content.endswith("\n"):
        content += "\n"
    gitignore.write_text(content + f"/{CLAUDE_MD}\n", encoding="utf-8")


class ClaudeCodeSyncer:
    """Merge the memory block into ~/CLAUDE.md and each project's CLAUDE.md."""

    def __init__(
        self,
        home_claude_md: Path,
        projects_path: Path | None = None,
        *,
        cooldown: float = 5.0,
    ) -> None:
        self.home_claude_md = home_claude_md
        self.projects_path = projects_path
        self._throttle = Throttle(cooldown)

    @property
    def name(self) -> str:
        return "claude-code"

    async def sync(self, content: str) -> SyncResult:
        if self._throttle.active():
            logger.info("Skipping Claude Code sync, within cooldown")
            return _skipped(self.name, "Claude Code files")
        block = extract_memory_block(content)
        written, failed = await asyncio.to_thread(self._write_all, block)
        self._throttle.mark()

        if not written:
            errors = ", ".join(f"{p}: {err}" for p, err in failed)
            return SyncResult(
                self.name, False, f"Failed to update any {CLAUDE_MD} files. Errors: {errors}"
            )
        if failed:
            return SyncResult(
                self.name,
                True,
                f"Partially successful: Updated {len(written)} {CLAUDE_MD} files, "
                f"{len(failed)} failures",
            )
        return SyncResult(self.name, True, f"Successfully updated {len(written)} {CLAUDE_MD} files")

    def _write_all(self, block: str) -> tuple[list[Path], list[tuple[Path, str]]]:
        written: list[Path] = []
        failed: list[tuple[Path, str]] = []

        targets = [self.home_claude_md]
        if self.projects_path is not None:
            try:
                projects = sorted(p for p in self.projects_path.iterdir() if p.is_dir())
            except FileNotFoundError:
                logger.info("Projects dir %s does not exist", self.projects_path)
                projects = []
            except OSError as e:
                logger.warning("Cannot read projects dir %s: %s", self.projects_path, e)
                failed.append((self.projects_path, str(e)))
                projects = []
            for project in projects:
                try:
                    if not is_claude_md_gitignored(project):
                        add_claude_md_to_gitignore(project)
                        logger.info("Added %s to .gitignore in %s", CLAUDE_MD, project)
                except OSError as e:
                    logger.warning("Could not update .gitignore in %s: %s", project, e)
                targets.append(project / CLAUDE_MD)

        for path in targets:
            try:
                write_memory_block(path, block)
                written.append(path)
                logger.debug("Updated %s", path)
            except OSError as e:
                logger.warning("Failed to update %s: %s", path, e)
                failed.append((path, str(e)))
        return written, failed


# ── Windsurf: global rules file ───────────────────────────────


class WindsurfSyncer:
    """Merge the memory block into Windsurf's global_rules.md."""

    def __init__(self, rules_path: Path, *, cooldown: float = 5.0) -> None:
        self.rules_path = rules_path
        self._throttle = Throttle(cooldown)

    @property
    def name(self) -> str:
        return "windsurf"

    async def sync(self, content: str) -> SyncResult:
        if self._throttle.active():
            logger.info("Skipping Windsurf sync, within cooldown")
            return _skipped(self.name, "Windsurf")
        block = extract_memory_block(content)
        await asyncio.to_thread(write_memory_block, self.rules_path, block)
        self._throttle.mark()
        return SyncResult(self.name, True, f"Successfully updated Windsurf memory at {self.rules_path}")


# ── Master file: full template copy ───────────────────────────


class MasterFileSyncer:
    """Overwrite a master Markdown file with the full template."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def name(self) -> str:
        return "master"

    async def sync(self, content: str) -> SyncResult:
        await asyncio.to_thread(self._write, content)
        return SyncResult(self.name, True, f"Synced to {self.path}")

    def _write(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(content, encoding="utf-8")


def build_syncers(config: PlatformConfig) -> list[PlatformSyncer]:
    """Instantiate enabled platforms in configured order."""
    syncers: list[PlatformSyncer] = []
    names = list(config.enabled)
    if config.master_path and "master" not in names:
        names.append("master")

    for name in names:
        if name == "claude-code":
            projects = expand_path(config.claude_projects_path) if config.claude_projects_path else None
            syncers.append(
                ClaudeCodeSyncer(
                    expand_path(config.claude_md_path), projects, cooldown=config.cooldown
                )
            )
        elif name == "windsurf":
            syncers.append(
                WindsurfSyncer(expand_path(config.windsurf_rules_path), cooldown=config.cooldown)
            )
        elif name == "master":
            if not config.master_path:
                logger.warning("Platform 'master' enabled but no master_path configured")
                continue
            syncers.append(MasterFileSyncer(expand_path(config.master_path)))
        else:
            logger.warning("Unknown platform in config: %s", name)
    return syncers
