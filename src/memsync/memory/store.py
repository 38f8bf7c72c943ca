"""Template store: owns the live memory Document and its backing file.

``template.md`` is the source of truth on disk. Every mutation rewrites it
in full after backing up the previous version to ``.versions/``.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import datetime
from pathlib import Path

from memsync.memory.codec import (
    ANCHOR,
    Document,
    Section,
    is_usable_section,
    parse_document,
    parse_section_body,
    render_document,
)
from memsync.memory.defaults import default_document
from memsync.memory.presets import install_default_presets

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = "template.md"
PRESETS_DIRNAME = "presets"
VERSIONS_DIRNAME = ".versions"


class TemplateStore:
    """Load/save and section-level CRUD for the memory template.

    Mutating calls are not locked; callers serialize them.
    """

    def __init__(self, root: Path, *, keep_versions: int = 10) -> None:
        self.root = root
        self.keep_versions = keep_versions
        self._document = Document()

    @property
    def template_file(self) -> Path:
        return self.root / TEMPLATE_FILENAME

    @property
    def preset_dir(self) -> Path:
        return self.root / PRESETS_DIRNAME

    @property
    def versions_dir(self) -> Path:
        return self.root / VERSIONS_DIRNAME

    # ── Initialization ────────────────────────────────────────

    async def initialize(self) -> None:
        """Ensure storage exists and a usable template is loaded. Never raises."""
        try:
            await asyncio.to_thread(self._ensure_dirs)
        except OSError as e:
            logger.error("Cannot create memory storage at %s: %s", self.root, e)

        loaded = False
        try:
            loaded = await self.load_template()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Template at %s unreadable, using defaults: %s", self.template_file, e)

        if not loaded or not self._document.sections:
            if loaded:
                logger.warning("Template at %s has no sections, using defaults", self.template_file)
            self._document = default_document()
            try:
                await self.save_template()
            except OSError as e:
                logger.error("Failed to write default template: %s", e)

        try:
            installed = await asyncio.to_thread(install_default_presets, self.preset_dir)
        except OSError as e:
            logger.error("Failed to install default presets: %s", e)
        else:
            if installed:
                logger.info("Installed default presets: %s", ", ".join(installed))

    def _ensure_dirs(self) -> None:
        for d in (self.root, self.preset_dir, self.versions_dir):
            d.mkdir(parents=True, exist_ok=True)

    # ── Load / save ───────────────────────────────────────────

    async def load_template(self) -> bool:
        """Read and decode the backing file. False if the file is absent."""
        try:
            text = await asyncio.to_thread(self.template_file.read_text, encoding="utf-8")
        except FileNotFoundError:
            return False
        self._document = parse_document(text)
        logger.debug("Loaded template with %d sections", len(self._document.sections))
        return True

    async def save_template(self) -> None:
        """Back up the previous file, then write the rendered Document."""
        content = render_document(self._document)
        await asyncio.to_thread(self._write, content)

    def _write(self, content: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._backup()
        self.template_file.write_text(content, encoding="utf-8")

    def _backup(self) -> None:
        """Copy template.md into .versions/, keeping the newest ``keep_versions``."""
        if not self.template_file.exists() or self.keep_versions <= 0:
            return
        self.versions_dir.mkdir(exist_ok=True)
        ts = datetime.now().strftime("%Y%m%dT%H%M%S")
        (self.versions_dir / f"template-{ts}.md").write_bytes(self.template_file.read_bytes())
        old = sorted(self.versions_dir.glob("template-*.md"))
        for f in old[: -self.keep_versions]:
            f.unlink()

    # ── Reads ─────────────────────────────────────────────────

    def get_template(self) -> Document:
        return copy.deepcopy(self._document)

    def get_section(self, name: str) -> Section | None:
        section = self._document.find(name)
        return copy.deepcopy(section) if section else None

    # ── Mutations ─────────────────────────────────────────────

    async def update_section(self, name: str, content: str) -> bool:
        """Replace (or append) one section from a description/items fragment."""
        title = name.strip()
        if not _valid_title(title):
            logger.warning("Rejected section name %r", name)
            return False

        parsed = parse_section_body(title, content)
        if not is_usable_section(parsed):
            logger.warning("Section content for %r has no description or items", title)
            return False

        existing = self._document.find(title)
        if existing is not None:
            existing.description = parsed.description
            existing.items = parsed.items
            logger.info("Updated section: %s", existing.title)
        else:
            self._document.sections.append(parsed)
            logger.info("Added section: %s", title)

        await self.save_template()
        return True

    async def update_template(self, content: str) -> bool:
        """Replace the whole Document. Rejects text that yields no sections."""
        parsed = parse_document(content)
        if not parsed.sections:
            logger.warning("Template content has no sections, not updating")
            return False
        await self.replace_document(parsed)
        return True

    async def replace_document(self, document: Document) -> None:
        self._document = copy.deepcopy(document)
        await self.save_template()
        logger.info("Replaced template (%d sections)", len(self._document.sections))

    # ── Backups ───────────────────────────────────────────────

    def list_backups(self) -> list[str]:
        """Backup file names, newest first."""
        if not self.versions_dir.is_dir():
            return []
        return sorted((p.name for p in self.versions_dir.glob("template-*.md")), reverse=True)

    async def restore_backup(self, name: str) -> bool:
        if Path(name).name != name:
            return False
        path = self.versions_dir / name
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Backup not found: %s", name)
            return False
        except UnicodeDecodeError as e:
            logger.warning("Backup %s is not valid UTF-8: %s", name, e)
            return False
        parsed = parse_document(text)
        if not parsed.sections:
            logger.warning("Backup %s has no sections", name)
            return False
        await self.replace_document(parsed)
        return True


def _valid_title(title: str) -> bool:
    # A title rendering as the anchor line would vanish on the next parse
    return len(title.splitlines()) == 1 and f"# {title}" != ANCHOR
