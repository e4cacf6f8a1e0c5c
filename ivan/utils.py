"""Utility functions for Ivan.

String, path and date helpers shared by the content loader, the feeds and
the publishing pipeline.

Key functions:
    slugify: Convert filenames to URL slugs.
    titleize: Convert filenames to human-readable titles.
    parse_date: Parse front matter dates.
    extract_date_from_name: Extract date from filename prefix.
    first_paragraph: Plain-text summary of a Markdown body.
    ensure_clean_dir: Ensure a directory exists and is empty.
    join_root_url: Join a base URL with a path.
    escape_html: Escape special HTML characters.
"""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime
from pathlib import Path

_DATE_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d")


def _strip_date_prefix(name: str) -> str:
    parts = name.split("-")
    if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
        return "-".join(parts[3:])
    return name


def slugify(name: str) -> str:
    """Convert filename (without extension) to slug, dropping date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug.
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", _strip_date_prefix(name))
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Examples:
        >>> titleize("2020-05-12-hello-vapor.md")
        'Hello Vapor'
    """
    base = _strip_date_prefix(Path(filename).stem)
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        datetime object if a valid date prefix is found, None otherwise.
    """
    parts = name.split("-")
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        try:
            return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def parse_date(value: object) -> datetime:
    """Parse a front matter date.

    PyYAML already turns unquoted ``2020-05-12`` into a ``date`` and
    ``2020-05-12 10:00:00`` into a ``datetime``; strings such as
    ``2020-05-12 10:00`` arrive untouched and are parsed here.

    Raises:
        ValueError: If the value is not a recognised date.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date '{text}' (expected YYYY-MM-DD HH:MM)")


def parse_tags(value: object) -> list[str]:
    """Normalise front matter tags into a list without duplicates."""
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.split(",")
    else:
        raw = [str(v) for v in value]
    tags: list[str] = []
    for tag in raw:
        cleaned = tag.strip()
        if cleaned and cleaned not in tags:
            tags.append(cleaned)
    return tags


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first paragraph from Markdown text.

    Headings, images, code fences and HTML tags are skipped or stripped.
    Whitespace is collapsed and the result truncated to ``limit``.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "![", "```", "---")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        para = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", para)
        collapsed = " ".join(para.split())
        return collapsed[:limit]
    return ""


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty."""
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def copy_tree(source: Path, target: Path) -> list[Path]:
    """Copy every file below ``source`` into ``target``.

    Returns:
        The written paths, in sorted order.
    """
    written: list[Path] = []
    if not source.is_dir():
        return written
    for item in sorted(source.rglob("*")):
        if item.is_dir():
            continue
        dest = target / item.relative_to(source)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(item, dest)
        written.append(dest)
    return written


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Examples:
        >>> escape_html('Tom & "Jerry"')
        'Tom &amp; &quot;Jerry&quot;'
    """
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Examples:
        >>> join_root_url('https://example.com/', 'about')
        'https://example.com/about'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"


def format_rfc822(value: datetime) -> str:
    """Format a naive datetime as an RFC 822 date in UTC."""
    return value.strftime("%a, %d %b %Y %H:%M:%S +0000")
