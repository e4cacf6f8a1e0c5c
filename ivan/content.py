"""Content discovery for Ivan.

Markdown files under the content folder are turned into ``Item``s (entries
of a declared section), ``Page``s (standalone documents) and
``SectionIndex`` records (optional title/description overrides for a
section). The home page text lives in ``index.md`` at the content root.

Key classes:
- Item: A dated entry belonging to one section.
- Page: A standalone document outside the sections.
- SectionIndex: Title and description for a section or the home page.
- ContentLoader: Walks the content folder and builds the records above.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .markdown import render_markdown
from .site import SectionID, Website
from .utils import (
    extract_date_from_name,
    first_paragraph,
    parse_date,
    parse_tags,
    slugify,
    titleize,
)

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)

TAGS_URL = "/tags/"


class ContentError(Exception):
    """A content file could not be turned into an item or page.

    Attributes:
        source_path: File that caused the error.
        message: Human-readable error message.
    """

    def __init__(self, source_path: Path, message: str):
        self.source_path = source_path
        self.message = message
        super().__init__(f"{source_path}: {message}")


def extract_frontmatter(text: str, path: Path) -> tuple[dict[str, Any], str]:
    """Split YAML front matter from a Markdown body.

    Raises:
        ContentError: If the front matter is not valid YAML or not a mapping.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise ContentError(path, f"Invalid front matter: {exc}") from exc
    if not isinstance(data, dict):
        raise ContentError(path, "Front matter must be a mapping")
    return data, text[match.end() :]


def tag_url(tag: str) -> str:
    return f"{TAGS_URL}{slugify(tag)}/"


def _heading_title(body: str) -> str | None:
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("# "):
            return stripped[2:].strip()
    return None


@dataclass
class Document:
    """Fields shared by items, pages and section indexes."""

    title: str
    description: str
    body: str
    content: str
    date: datetime
    path: Path
    tags: list[str] = field(default_factory=list)
    image: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(kw_only=True)
class Item(Document):
    """An entry in a section.

    Attributes:
        section: Section the item belongs to.
        slug: Path segment below the section.
    """

    section: SectionID
    slug: str

    @property
    def url(self) -> str:
        return f"/{self.section.path}/{self.slug}/"


@dataclass
class Page(Document):
    """A standalone document; ``slug`` may contain ``/`` for nested pages."""

    slug: str = ""

    @property
    def url(self) -> str:
        return f"/{self.slug}/"


@dataclass
class SectionIndex(Document):
    """Title/description override read from a folder's ``index.md``."""


@dataclass
class SiteContent:
    """Everything discovered in the content folder."""

    home: SectionIndex | None
    sections: dict[SectionID, SectionIndex | None]
    items: list[Item]
    pages: list[Page]


class ContentLoader:
    """Loads Markdown content for a website.

    Attributes:
        website: Website whose sections decide what is an item.
        content_dir: Root of the content folder.
        description_length: Maximum length of derived descriptions.
    """

    def __init__(self, website: Website, content_dir: Path, description_length: int = 160):
        self.website = website
        self.content_dir = content_dir
        self.description_length = description_length

    def iter_files(self) -> list[Path]:
        """Markdown files below the content folder, drafts excluded, sorted."""
        files: list[Path] = []
        if not self.content_dir.is_dir():
            return files
        for path in sorted(self.content_dir.rglob("*.md")):
            rel = path.relative_to(self.content_dir)
            if any(part.startswith("_") for part in rel.parts):
                continue
            files.append(path)
        return files

    def load(self) -> SiteContent:
        home: SectionIndex | None = None
        sections: dict[SectionID, SectionIndex | None] = {
            section: None for section in self.website.sections
        }
        items: list[Item] = []
        pages: list[Page] = []
        seen: dict[str, Path] = {
            self.website.section_url(section): self.content_dir / section.path
            for section in self.website.sections
        }

        for path in self.iter_files():
            rel = path.relative_to(self.content_dir)
            section = self.website.section(rel.parts[0]) if len(rel.parts) > 1 else None
            is_index = rel.name == "index.md"

            if len(rel.parts) == 1 and is_index:
                home = self._build(SectionIndex, path)
                continue
            if section is not None and len(rel.parts) == 2 and is_index:
                sections[section] = self._build(SectionIndex, path)
                continue

            if section is not None:
                slug = "/".join(
                    [*(slugify(p) for p in rel.parent.parts[1:]), slugify(path.stem)]
                )
                item = self._build(Item, path, section=section, slug=slug)
            else:
                parents = [slugify(p) for p in rel.parent.parts]
                leaf = [] if is_index else [slugify(path.stem)]
                slug = "/".join(parents + leaf)
                item = self._build(Page, path, slug=slug)

            if item.url in seen:
                raise ContentError(
                    path, f"Duplicate URL {item.url} (also used by {seen[item.url]})"
                )
            seen[item.url] = path
            if isinstance(item, Item):
                items.append(item)
            else:
                pages.append(item)

        self._check_tags(items, seen)
        return SiteContent(home=home, sections=sections, items=items, pages=pages)

    def _check_tags(self, items: list[Item], seen: dict[str, Path]) -> None:
        """Reject tags whose pages would overwrite each other or a page."""
        if not any(item.tags for item in items):
            return
        if TAGS_URL in seen:
            raise ContentError(seen[TAGS_URL], f"URL {TAGS_URL} is reserved for the tag list")
        tags: dict[str, str] = {}
        for item in items:
            for tag in item.tags:
                url = tag_url(tag)
                other = tags.setdefault(url, tag)
                if other != tag:
                    raise ContentError(
                        item.path, f"Tag '{tag}' collides with tag '{other}' (both {url})"
                    )
                if url in seen:
                    raise ContentError(
                        item.path, f"Tag '{tag}' collides with {seen[url]} (both {url})"
                    )

    def _build(self, cls, path: Path, **extra):
        raw = path.read_text(encoding="utf-8")
        metadata, body = extract_frontmatter(raw, path)

        title = metadata.get("title") or _heading_title(body) or titleize(path.name)
        description = metadata.get("description") or first_paragraph(
            body, self.description_length
        )
        try:
            if metadata.get("date") is not None:
                date = parse_date(metadata["date"])
            else:
                date = extract_date_from_name(path.stem) or datetime.fromtimestamp(
                    int(path.stat().st_mtime)
                )
        except ValueError as exc:
            raise ContentError(path, str(exc)) from exc

        return cls(
            title=str(title),
            description=str(description),
            body=body,
            content=render_markdown(body),
            date=date,
            path=path,
            tags=parse_tags(metadata.get("tags")),
            image=metadata.get("image"),
            metadata=metadata,
            **extra,
        )
