"""Plain-text codec for the memory template.

Format::

    # myAI Memory

    # User Information
    ## Use this information if you need to reference them directly
    -~- Name: Dave
    -~- Location: Birmingham

Parsing is line-oriented and tolerant: anything it does not recognise is
skipped, it never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field

ANCHOR = "# myAI Memory"
ITEM_MARKER = "-~-"

_SECTION_PREFIX = "# "
_DESCRIPTION_PREFIX = "## "


@dataclass
class Item:
    key: str
    value: str


@dataclass
class Section:
    title: str
    description: str = ""
    items: list[Item] = field(default_factory=list)


@dataclass
class Document:
    """Ordered sections under the fixed anchor header."""

    sections: list[Section] = field(default_factory=list)

    def find(self, name: str) -> Section | None:
        """Case-insensitive lookup by section title."""
        needle = name.strip().lower()
        for section in self.sections:
            if section.title.lower() == needle:
                return section
        return None


# ── Parsing ───────────────────────────────────────────────────


def _parse_item(line: str) -> Item | None:
    content = line[len(ITEM_MARKER):].strip()
    key, sep, value = content.partition(":")
    key = key.strip()
    if not sep or not key:
        return None
    return Item(key=key, value=value.strip())


def parse_document(text: str) -> Document:
    """Decode template text into a Document.

    A repeated title (in any case) continues the earlier section so titles
    stay unique. A repeated ``##`` line replaces the description.
    """
    doc = Document()
    current: Section | None = None

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line == ANCHOR:
            continue

        if line.startswith(_SECTION_PREFIX):
            title = line[len(_SECTION_PREFIX):].strip()
            if not title:
                continue
            current = doc.find(title)
            if current is None:
                current = Section(title=title)
                doc.sections.append(current)
            continue

        if current is None:
            # Preamble before the first section
            continue

        if line.startswith(_DESCRIPTION_PREFIX):
            current.description = line[len(_DESCRIPTION_PREFIX):].strip()
        elif line.startswith(ITEM_MARKER):
            item = _parse_item(line)
            if item is not None:
                current.items.append(item)

    return doc


def parse_section_body(title: str, fragment: str) -> Section:
    """Decode a section body (description + items, no title line).

    Parsing stops at the first top-level ``# `` header.
    """
    section = Section(title=title.strip())
    for raw in fragment.splitlines():
        line = raw.strip()
        if line.startswith(_SECTION_PREFIX):
            break
        if line.startswith(_DESCRIPTION_PREFIX):
            section.description = line[len(_DESCRIPTION_PREFIX):].strip()
        elif line.startswith(ITEM_MARKER):
            item = _parse_item(line)
            if item is not None:
                section.items.append(item)
    return section


def is_usable_section(section: Section) -> bool:
    return bool(section.description or section.items)


# ── Rendering ─────────────────────────────────────────────────


def render_section(section: Section) -> str:
    lines = [f"{_SECTION_PREFIX}{section.title}"]
    if section.description:
        lines.append(f"{_DESCRIPTION_PREFIX}{section.description}")
    for item in section.items:
        lines.append(f"{ITEM_MARKER} {item.key}: {item.value}")
    return "\n".join(lines) + "\n"


def render_document(document: Document) -> str:
    """Encode a Document; the anchor line is always present."""
    out = f"{ANCHOR}\n\n"
    for section in document.sections:
        out += render_section(section) + "\n"
    return out
