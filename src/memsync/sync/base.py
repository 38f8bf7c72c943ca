"""Syncer protocol and shared helpers for writing the memory block."""

from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from memsync.memory.codec import ANCHOR

_ANCHOR_LINE = re.compile(rf"^{re.escape(ANCHOR)}[ \t\r]*$", re.M)


@dataclass
class SyncResult:
    """Outcome of one sync attempt against one platform."""

    platform: str
    success: bool
    message: str


@runtime_checkable
class PlatformSyncer(Protocol):
    """Protocol that all platform destinations must implement."""

    @property
    def name(self) -> str: ...

    async def sync(self, content: str) -> SyncResult:
        """Write ``content`` to the destination. May raise on failure."""
        ...


class Throttle:
    """Skip writes that land within ``cooldown`` seconds of the last one."""

    def __init__(self, cooldown: float) -> None:
        self.cooldown = cooldown
        self._last: float | None = None

    def active(self) -> bool:
        if self.cooldown <= 0 or self._last is None:
            return False
        return time.monotonic() - self._last < self.cooldown

    def mark(self) -> None:
        self._last = time.monotonic()


def expand_path(path: str | Path) -> Path:
    """Expand ``~`` and resolve relative paths against the cwd."""
    p = Path(os.path.expanduser(str(path)))
    if not p.is_absolute():
        p = Path.cwd() / p
    return p


def extract_memory_block(content: str) -> str:
    """Text from the anchor line to the end, or a bare anchor block."""
    match = _ANCHOR_LINE.search(content)
    if match is None:
        return f"{ANCHOR}\n\n"
    return content[match.start():]


def merge_memory_block(existing: str, block: str) -> str:
    """Replace everything from the anchor onward in ``existing`` with ``block``."""
    match = _ANCHOR_LINE.search(existing)
    head = existing[:match.start()] if match else existing
    head = head.strip()
    if not head:
        return block
    return f"{head}\n\n{block}"


def write_memory_block(path: Path, block: str) -> None:
    """Merge the memory block into ``path``, creating the file and parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    path.write_text(merge_memory_block(existing, block), encoding="utf-8")
