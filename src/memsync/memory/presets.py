"""Named snapshots of the memory Document.

Each preset is ``presets/<name>.md``: YAML frontmatter (name, created) over
the rendered template body.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter

from memsync.memory.codec import Document, parse_document, render_document
from memsync.memory.defaults import DEFAULT_PRESETS

if TYPE_CHECKING:
    from memsync.memory.store import TemplateStore

logger = logging.getLogger(__name__)

PRESET_SUFFIX = ".md"


@dataclass
class Preset:
    name: str
    document: Document
    created: str | None = None


def normalize_name(name: str) -> str:
    """Preset identifier: strip illegal chars, spaces to hyphens, lowercase."""
    slug = re.sub(r'[<>:"/\\|?*\n\r\t]', "", name)
    return slug.strip().replace(" ", "-").lower()


def _dump_preset(name: str, document: Document) -> str:
    post = frontmatter.Post(
        render_document(document),
        name=name,
        created=datetime.now().isoformat(timespec="seconds"),
    )
    return frontmatter.dumps(post) + "\n"


def _decode_preset(stem: str, text: str) -> Preset | None:
    """Decode preset file text. None if unparseable or without sections."""
    try:
        post = frontmatter.loads(text)
    except Exception as e:
        logger.warning("Preset %s has malformed frontmatter: %s", stem, e)
        return None
    document = parse_document(post.content)
    if not document.sections:
        logger.warning("Preset %s has no sections", stem)
        return None
    created = post.metadata.get("created")
    return Preset(
        name=stem,
        document=document,
        created=str(created) if created is not None else None,
    )


def install_default_presets(preset_dir: Path) -> list[str]:
    """Write bundled presets whose files do not exist yet. Returns names written."""
    preset_dir.mkdir(parents=True, exist_ok=True)
    installed = []
    for name, factory in DEFAULT_PRESETS.items():
        path = preset_dir / f"{name}{PRESET_SUFFIX}"
        if path.exists():
            continue
        path.write_text(_dump_preset(name, factory()), encoding="utf-8")
        installed.append(name)
    return installed


class PresetRepository:
    """List, load and create presets against a TemplateStore."""

    def __init__(self, store: TemplateStore) -> None:
        self.store = store

    @property
    def preset_dir(self) -> Path:
        return self.store.preset_dir

    def _path(self, name: str) -> Path | None:
        slug = normalize_name(name)
        if not slug:
            return None
        return self.preset_dir / f"{slug}{PRESET_SUFFIX}"

    def _read(self, path: Path) -> Preset | None:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning("Preset %s is not valid UTF-8: %s", path.name, e)
            return None
        return _decode_preset(path.stem, text)

    async def list_presets(self) -> list[str]:
        """Names of presets that decode to a usable Document, sorted."""
        return await asyncio.to_thread(self._list)

    def _list(self) -> list[str]:
        if not self.preset_dir.is_dir():
            return []
        names = []
        for path in sorted(self.preset_dir.glob(f"*{PRESET_SUFFIX}")):
            if normalize_name(path.stem) != path.stem:
                logger.warning("Skipping preset with unloadable name: %s", path.name)
                continue
            try:
                preset = self._read(path)
            except OSError as e:
                logger.warning("Skipping unreadable preset %s: %s", path.name, e)
                continue
            if preset is not None:
                names.append(path.stem)
        return names

    async def get_preset(self, name: str) -> Preset | None:
        path = self._path(name)
        if path is None:
            return None
        return await asyncio.to_thread(self._read, path)

    async def load_preset(self, name: str) -> bool:
        """Make the named preset the live template. False if missing or unusable."""
        preset = await self.get_preset(name)
        if preset is None:
            logger.warning("Preset not found or unusable: %s", name)
            return False
        await self.store.replace_document(preset.document)
        logger.info("Loaded preset: %s", preset.name)
        return True

    async def create_preset(self, name: str) -> bool:
        """Snapshot the live template under ``name``, overwriting any existing preset."""
        path = self._path(name)
        if path is None:
            logger.warning("Invalid preset name: %r", name)
            return False
        content = _dump_preset(path.stem, self.store.get_template())
        await asyncio.to_thread(self._write, path, content)
        logger.info("Created preset: %s", path.stem)
        return True

    def _write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
