"""Markdown rendering for Ivan.

Markdown bodies are turned into HTML with mistune. Headings get stable
anchor ids; fenced code is emitted as ``<pre><code class="language-X">``
so that plugins can post-process it.
"""

from __future__ import annotations

import re

import mistune

from .utils import escape_html

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


def heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text."""
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _BlogRenderer(mistune.HTMLRenderer):
    """HTML renderer with heading anchors and language-tagged code blocks."""

    def __init__(self):
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = heading_id(text)
        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            anchor = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            anchor = base_id
        return f'<h{level} id="{anchor}">{text}</h{level}>\n'

    def block_code(self, code: str, info: str | None = None) -> str:
        lang = info.split(None, 1)[0] if info and info.strip() else ""
        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"


def render_markdown(text: str) -> str:
    """Render a Markdown body to HTML.

    A fresh renderer is used per call so heading ids never leak between
    documents.
    """
    markdown = mistune.create_markdown(renderer=_BlogRenderer(), plugins=MARKDOWN_PLUGINS)
    return markdown(text)
