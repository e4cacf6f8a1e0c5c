"""Feed generation for Ivan.

Produces the RSS 2.0 feed and sitemap.xml. Output depends only on the
website and its content, never on the wall clock, so two runs over the
same content write identical files.

Classes:
    FeedGenerator: Base class for feed generators.
    RSSGenerator: Generates the RSS feed.
    SitemapGenerator: Generates sitemap.xml.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .collections import sort_items
from .utils import escape_html, format_rfc822

if TYPE_CHECKING:
    from .content import Item, Page
    from .site import Website


class FeedGenerator(ABC):
    """Abstract base class for feed generators."""

    @property
    @abstractmethod
    def filename(self) -> str:
        """Output path relative to the output directory."""
        ...

    @abstractmethod
    def generate(self, website: Website, items: Sequence[Item], pages: Sequence[Page]) -> str:
        """Return the feed document."""
        ...

    def write(
        self,
        output_dir: Path,
        website: Website,
        items: Sequence[Item],
        pages: Sequence[Page],
    ) -> Path:
        output_path = output_dir / self.filename
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate(website, items, pages), encoding="utf-8")
        return output_path


class RSSGenerator(FeedGenerator):
    """Generates an RSS 2.0 feed of the newest items.

    Attributes:
        path: Feed location relative to the site root.
        ttl: Minutes readers may cache the feed.
        max_items: Maximum number of items included.
    """

    def __init__(self, path: str = "feed.rss", ttl: int = 250, max_items: int = 100):
        self.path = path
        self.ttl = ttl
        self.max_items = max_items

    @property
    def filename(self) -> str:
        return self.path

    def generate(self, website: Website, items: Sequence[Item], pages: Sequence[Page]) -> str:
        newest = sort_items(items)[: self.max_items]
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
            "<channel>",
            f"<title>{escape_html(website.name)}</title>",
            f"<description>{escape_html(website.description)}</description>",
            f"<link>{escape_html(website.url)}</link>",
            f"<language>{website.language.tag}</language>",
            f"<ttl>{self.ttl}</ttl>",
            f'<atom:link href="{escape_html(website.absolute_url(self.path))}" '
            'rel="self" type="application/rss+xml"/>',
        ]
        if newest:
            lines.append(f"<lastBuildDate>{format_rfc822(newest[0].date)}</lastBuildDate>")
        for item in newest:
            link = escape_html(website.absolute_url(item.url))
            lines.append(
                "<item>"
                f'<guid isPermaLink="true">{link}</guid>'
                f"<title>{escape_html(item.title)}</title>"
                f"<description>{escape_html(item.description)}</description>"
                f"<link>{link}</link>"
                f"<pubDate>{format_rfc822(item.date)}</pubDate>"
                "</item>"
            )
        lines.append("</channel>")
        lines.append("</rss>")
        return "\n".join(lines) + "\n"


class SitemapGenerator(FeedGenerator):
    """Generates sitemap.xml covering home, sections, items and pages."""

    @property
    def filename(self) -> str:
        return "sitemap.xml"

    def generate(self, website: Website, items: Sequence[Item], pages: Sequence[Page]) -> str:
        ordered = sort_items(items)
        entries: list[tuple[str, str | None]] = [
            ("/", ordered[0].date.strftime("%Y-%m-%d") if ordered else None)
        ]
        for section in website.sections:
            in_section = [i for i in ordered if i.section == section]
            lastmod = in_section[0].date.strftime("%Y-%m-%d") if in_section else None
            entries.append((website.section_url(section), lastmod))
        for item in ordered:
            entries.append((item.url, item.date.strftime("%Y-%m-%d")))
        for page in sorted(pages, key=lambda p: p.url):
            entries.append((page.url, page.date.strftime("%Y-%m-%d")))

        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
        ]
        for url, lastmod in entries:
            loc = escape_html(website.absolute_url(url))
            if lastmod:
                lines.append(f"  <url><loc>{loc}</loc><lastmod>{lastmod}</lastmod></url>")
            else:
                lines.append(f"  <url><loc>{loc}</loc></url>")
        lines.append("</urlset>")
        return "\n".join(lines) + "\n"

