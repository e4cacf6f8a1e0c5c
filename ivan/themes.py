"""Themes for Ivan.

A theme is a named bundle of Jinja2 templates plus static resources that
are copied next to the generated HTML. Themes are looked up by name in a
``ThemeRegistry``; the built-in ``foundation`` theme is always available.

Key classes:
- Theme: Template directory, resource directory and a Jinja2 environment.
- ThemeRegistry: Name to Theme mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

_THEMES_DIR = Path(__file__).parent / "_themes"

REQUIRED_TEMPLATES = (
    "index.html",
    "section.html",
    "item.html",
    "page.html",
    "tag_list.html",
    "tag_details.html",
)


class ThemeNotFoundError(KeyError):
    """Raised when a theme name is not registered."""


class Theme:
    """A named presentation bundle.

    Attributes:
        name: Identifier used for lookups and in error messages.
        templates_dir: Directory holding the Jinja2 templates.
        resources_dir: Directory copied verbatim into the output root.
        env: Jinja2 environment bound to ``templates_dir``.
    """

    def __init__(self, name: str, templates_dir: Path, resources_dir: Path | None = None):
        self.name = name
        self.templates_dir = templates_dir
        self.resources_dir = resources_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    @classmethod
    def from_directory(cls, name: str, root: Path) -> Theme:
        """Build a theme from ``root/templates`` and ``root/resources``."""
        resources = root / "resources"
        return cls(name, root / "templates", resources if resources.is_dir() else None)

    def missing_templates(self) -> list[str]:
        return [
            name for name in REQUIRED_TEMPLATES if not (self.templates_dir / name).is_file()
        ]

    def render(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(template_name).render(**context)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"Theme({self.name!r})"


FOUNDATION = Theme.from_directory("foundation", _THEMES_DIR / "foundation")


class ThemeRegistry:
    """Registry of themes keyed by name."""

    def __init__(self) -> None:
        self._themes: dict[str, Theme] = {}
        self.register(FOUNDATION)

    def register(self, theme: Theme) -> None:
        self._themes[theme.name] = theme

    def get(self, name: str) -> Theme:
        try:
            return self._themes[name]
        except KeyError:
            known = ", ".join(sorted(self._themes))
            raise ThemeNotFoundError(f"Unknown theme '{name}' (known: {known})") from None

    def names(self) -> list[str]:
        return sorted(self._themes)


default_theme_registry = ThemeRegistry()
