"""Publishing pipeline for Ivan.

``publish`` takes a ``Website``, a ``Theme`` and an ordered list of
``Plugin``s and writes the generated site to the output directory. The work
is split into named steps that run one after another against a shared
``PublishingContext``; progress is echoed as ``[i/N] step name``.

Any failure inside a step is reported as a single ``PublishingError`` and
stops the run. The output directory is wiped before the first step, so a
failed run never leaves stale files mixed with fresh ones. An output
directory that holds the project, Content or Resources folder is refused.

Key functions:
- publish: Run every step and return a PublishResult.
- publishing_steps: The ordered steps for a theme and plugin list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
import yaml
from jinja2 import TemplateError

from .collections import ItemCollection, TagCollection, sort_items
from .config import CONFIG_FILENAME, load_config
from .content import ContentError, ContentLoader, Item, Page, SectionIndex
from .feeds import RSSGenerator, SitemapGenerator
from .plugins import Plugin
from .site import SectionID, Website
from .themes import FOUNDATION, Theme
from .utils import copy_tree, ensure_clean_dir


class PublishingError(Exception):
    """Error during publishing, with the failing step and file.

    Attributes:
        step: Name of the step that failed.
        message: Human-readable error message.
        source_path: File being processed when the error happened, if any.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        step: str,
        message: str,
        source_path: Path | None = None,
        original_error: Exception | None = None,
    ):
        self.step = step
        self.message = message
        self.source_path = source_path
        self.original_error = original_error
        location = f" ({source_path})" if source_path else ""
        super().__init__(f"{step}{location}: {message}")


@dataclass
class PublishResult:
    """Result of a publishing run.

    Attributes:
        website: The published website.
        output_dir: Directory the site was written to.
        items: Items in published order.
        pages: Standalone pages.
        files: Every file written, relative to ``output_dir``, sorted.
    """

    website: Website
    output_dir: Path
    items: list[Item]
    pages: list[Page]
    files: list[str]


@dataclass
class PublishingContext:
    """Mutable state shared by the steps of one run."""

    website: Website
    theme: Theme
    project_root: Path
    output_dir: Path
    config: dict[str, Any]
    home: SectionIndex | None = None
    section_indexes: dict[SectionID, SectionIndex | None] = field(default_factory=dict)
    items: list[Item] = field(default_factory=list)
    pages: list[Page] = field(default_factory=list)
    stylesheets: list[str] = field(default_factory=list)
    content_modifiers: list[Callable[[str], str]] = field(default_factory=list)
    files: set[str] = field(default_factory=set)

    @property
    def content_dir(self) -> Path:
        return self.project_root / self.config["content_dir"]

    @property
    def resources_dir(self) -> Path:
        return self.project_root / self.config["resources_dir"]

    def add_content_modifier(self, modifier: Callable[[str], str]) -> None:
        """Register an HTML transform run on every item and page."""
        self.content_modifiers.append(modifier)

    def add_stylesheet(self, path: str, css: str) -> None:
        """Write a stylesheet into the output and link it from every page."""
        self.write_file(path, css)
        url = f"/{path.lstrip('/')}"
        if url not in self.stylesheets:
            self.stylesheets.append(url)

    def write_file(self, path: str, text: str) -> None:
        target = self.output_dir / path.lstrip("/")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        self.record_file(target)

    def record_file(self, target: Path) -> None:
        self.files.add(target.relative_to(self.output_dir).as_posix())


@dataclass(frozen=True)
class PublishingStep:
    """A named unit of publishing work."""

    name: str
    body: Callable[[PublishingContext], None]


def install_plugin(plugin: Plugin) -> PublishingStep:
    return PublishingStep(f"Install plugin '{plugin.name}'", plugin.install)


def copy_resources(context: PublishingContext) -> None:
    for written in copy_tree(context.resources_dir, context.output_dir):
        context.record_file(written)
    if context.theme.resources_dir is not None:
        for written in copy_tree(context.theme.resources_dir, context.output_dir):
            context.record_file(written)


def add_markdown_files(context: PublishingContext) -> None:
    loader = ContentLoader(
        context.website, context.content_dir, int(context.config["description_length"])
    )
    content = loader.load()
    context.home = content.home
    context.section_indexes = content.sections
    context.items = content.items
    context.pages = content.pages


def sort_context_items(context: PublishingContext) -> None:
    context.items = sort_items(context.items)


def apply_content_modifiers(context: PublishingContext) -> None:
    documents: list[Any] = [*context.items, *context.pages]
    documents.extend(d for d in (context.home, *context.section_indexes.values()) if d)
    for document in documents:
        content = document.content
        for modifier in context.content_modifiers:
            content = modifier(content)
        document.content = content


def generate_html(context: PublishingContext) -> None:
    _HTMLGenerator(context).generate()


def generate_rss_feed(context: PublishingContext) -> None:
    config = context.config
    generator = RSSGenerator(
        config["rss_path"], int(config["rss_ttl"]), int(config["rss_max_items"])
    )
    written = generator.write(context.output_dir, context.website, context.items, context.pages)
    context.record_file(written)


def generate_site_map(context: PublishingContext) -> None:
    generator = SitemapGenerator()
    written = generator.write(context.output_dir, context.website, context.items, context.pages)
    context.record_file(written)


@dataclass
class _SectionView:
    id: SectionID
    title: str
    description: str
    content: str
    url: str


class _HTMLGenerator:
    """Renders every HTML file of the site through the theme."""

    def __init__(self, context: PublishingContext):
        self.context = context
        self.website = context.website
        self.items = ItemCollection(context.items)
        self.tags = TagCollection(context.items)
        self.sections = [self._section_view(s) for s in self.website.sections]

    def generate(self) -> None:
        self._render(
            "/",
            "index.html",
            title=self.website.name,
            description=self.website.description,
            home=self.context.home,
            items=self.items.latest(10),
        )
        for section in self.sections:
            self._render(
                section.url,
                "section.html",
                title=f"{section.title} | {self.website.name}",
                description=section.description,
                section=section,
                items=self.items.in_section(section.id),
                selected=section.id,
            )
        for item in self.items:
            self._render(
                item.url,
                "item.html",
                title=f"{item.title} | {self.website.name}",
                description=item.description,
                item=item,
                selected=item.section,
                body_class="item-page",
            )
        for page in self.context.pages:
            self._render(
                page.url,
                "page.html",
                title=f"{page.title} | {self.website.name}",
                description=page.description,
                page=page,
            )
        if self.tags:
            self._render(
                "/tags/",
                "tag_list.html",
                title=f"Tags | {self.website.name}",
                description=f"All tags used on {self.website.name}",
                tags=list(self.tags),
            )
            for tag, tagged in self.tags.items():
                self._render(
                    TagCollection.url(tag),
                    "tag_details.html",
                    title=f"{tag} | {self.website.name}",
                    description=f"Items tagged with {tag}",
                    tag=tag,
                    items=tagged.sorted(),
                )

    def _section_view(self, section: SectionID) -> _SectionView:
        index = self.context.section_indexes.get(section)
        return _SectionView(
            id=section,
            title=index.title if index else section.title,
            description=index.description if index else "",
            content=index.content if index else "",
            url=self.website.section_url(section),
        )

    def _nav(self, selected: SectionID | None) -> list[dict[str, Any]]:
        return [
            {"title": s.title, "url": s.url, "selected": s.id == selected}
            for s in self.sections
        ]

    def _render(
        self,
        url: str,
        template: str,
        *,
        selected: SectionID | None = None,
        body_class: str = "",
        **context: Any,
    ) -> None:
        rendered = self.context.theme.render(
            template,
            site=self.website,
            nav=self._nav(selected),
            stylesheets=self.context.stylesheets,
            feed_url=f"/{self.context.config['rss_path'].lstrip('/')}",
            current_url=url,
            body_class=body_class,
            tag_url=TagCollection.url,
            **context,
        )
        path = url.strip("/")
        self.context.write_file(f"{path}/index.html" if path else "index.html", rendered)


def publishing_steps(theme: Theme, plugins: Sequence[Plugin] = ()) -> list[PublishingStep]:
    """The ordered steps of a run: plugins first, feeds last."""
    steps = [install_plugin(plugin) for plugin in plugins]
    steps.extend(
        [
            PublishingStep("Copy 'Resources' files", copy_resources),
            PublishingStep("Add Markdown files from 'Content' folder", add_markdown_files),
            PublishingStep("Sort items", sort_context_items),
            PublishingStep("Apply content modifiers", apply_content_modifiers),
            PublishingStep(f"Generate HTML using theme '{theme.name}'", generate_html),
            PublishingStep("Generate RSS feed", generate_rss_feed),
            PublishingStep("Generate site map", generate_site_map),
        ]
    )
    return steps


def publish(
    website: Website,
    theme: Theme = FOUNDATION,
    plugins: Iterable[Plugin] = (),
    *,
    project_root: Path | None = None,
    output_dir: Path | None = None,
) -> PublishResult:
    """Generate the website.

    Args:
        website: Site descriptor.
        theme: Theme used to render every HTML file.
        plugins: Plugins installed in order before content is added.
        project_root: Folder holding Content/, Resources/ and ivan.yaml.
            Defaults to the current directory.
        output_dir: Destination, overriding the configured output_dir.

    Returns:
        PublishResult describing what was written.

    Raises:
        PublishingError: If any step fails.
    """
    project_root = project_root or Path.cwd()
    config, output_dir = _load_configuration(project_root, output_dir)
    plugins = list(plugins)

    missing = theme.missing_templates()
    if missing:
        raise PublishingError(
            "Check theme",
            f"Theme '{theme.name}' is missing templates: {', '.join(missing)}",
            theme.templates_dir,
        )

    steps = publishing_steps(theme, plugins)
    context = PublishingContext(
        website=website,
        theme=theme,
        project_root=project_root,
        output_dir=output_dir,
        config=config,
    )
    _clean_output_dir(context)

    click.echo(f"Publishing {website.name} ({len(steps)} steps)")
    for index, step in enumerate(steps, start=1):
        click.echo(f"[{index}/{len(steps)}] {step.name}")
        _run_step(step, context)
    click.echo(f"Successfully published {website.name}")

    return PublishResult(
        website=website,
        output_dir=output_dir,
        items=context.items,
        pages=context.pages,
        files=sorted(context.files),
    )


def _load_configuration(
    project_root: Path, output_dir: Path | None
) -> tuple[dict[str, Any], Path]:
    try:
        config = load_config(project_root)
        return config, output_dir or project_root / config["output_dir"]
    except (yaml.YAMLError, OSError, TypeError) as exc:
        raise PublishingError(
            "Load configuration",
            _format_error_message(exc),
            project_root / CONFIG_FILENAME,
            exc,
        ) from exc


def _clean_output_dir(context: PublishingContext) -> None:
    """Empty the output folder unless it would take source files with it."""
    output_dir = context.output_dir.resolve()
    protected = {
        "project folder": context.project_root,
        "content folder": context.content_dir,
        "resources folder": context.resources_dir,
    }
    for label, path in protected.items():
        path = path.resolve()
        if output_dir == path or output_dir in path.parents:
            raise PublishingError(
                "Clean output folder",
                f"Refusing to wipe {output_dir}: it holds the {label} {path}",
                context.output_dir,
            )
    try:
        ensure_clean_dir(context.output_dir)
    except OSError as exc:
        raise PublishingError(
            "Clean output folder", _format_error_message(exc), context.output_dir, exc
        ) from exc


def _run_step(step: PublishingStep, context: PublishingContext) -> None:
    try:
        step.body(context)
    except PublishingError:
        raise
    except ContentError as exc:
        raise PublishingError(step.name, exc.message, exc.source_path, exc) from exc
    except TemplateError as exc:
        source = Path(exc.filename) if getattr(exc, "filename", None) else None
        lineno = getattr(exc, "lineno", None)
        where = f" on line {lineno}" if lineno else ""
        raise PublishingError(
            step.name, f"Template error{where}: {exc.message}", source, exc
        ) from exc
    except Exception as exc:
        raise PublishingError(step.name, _format_error_message(exc), None, exc) from exc


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    error_msg = str(exc)

    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"
    if isinstance(exc, OSError):
        return f"File system error: {error_msg}"

    return f"{error_type}: {error_msg}"
