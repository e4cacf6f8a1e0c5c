"""Plugins for Ivan.

A plugin is a named installer. During publishing each plugin's ``install``
callable runs once, in list order, and may register content modifiers and
stylesheets on the publishing context. Modifiers then run on every item's
and page's HTML in the order they were registered, so plugin order matters.

Key classes:
- Plugin: Name plus install callable.
- PluginRegistry: Name to Plugin mapping.

Built-in plugins:
- highlighting: Pygments syntax highlighting for fenced code blocks.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

if TYPE_CHECKING:
    from .publish import PublishingContext

CODE_BLOCK_RE = re.compile(
    r'<pre><code class="language-(?P<lang>[^"]+)">(?P<code>.*?)</code></pre>',
    re.DOTALL,
)

HIGHLIGHT_CSS_PATH = "highlight.css"


class PluginNotFoundError(KeyError):
    """Raised when a plugin name is not registered."""


@dataclass(frozen=True)
class Plugin:
    """A named processing extension.

    Attributes:
        name: Identifier shown in the publishing log.
        install: Called with the publishing context before content is added.
    """

    name: str
    install: Callable[[PublishingContext], None]


def highlight_code_blocks(content: str, style: str = "default") -> str:
    """Replace language-tagged code blocks with Pygments markup.

    Blocks in languages Pygments does not know are left untouched.
    """
    formatter = HtmlFormatter(cssclass="highlight", style=style)

    def repl(match: re.Match) -> str:
        try:
            lexer = get_lexer_by_name(match.group("lang"), stripall=True)
        except ClassNotFound:
            return match.group(0)
        code = html.unescape(match.group("code"))
        return highlight(code, lexer, formatter)

    return CODE_BLOCK_RE.sub(repl, content)


def highlighting(style: str = "default") -> Plugin:
    """Syntax highlighting for fenced code blocks.

    Args:
        style: Pygments style name used for the generated stylesheet.
    """

    def install(context: PublishingContext) -> None:
        css = HtmlFormatter(style=style).get_style_defs(".highlight")
        context.add_stylesheet(HIGHLIGHT_CSS_PATH, css + "\n")
        context.add_content_modifier(lambda content: highlight_code_blocks(content, style))

    return Plugin(name="highlighting", install=install)


class PluginRegistry:
    """Registry of plugin factories keyed by name."""

    def __init__(self) -> None:
        self._factories: dict[str, Callable[[], Plugin]] = {}
        self.register("highlighting", highlighting)

    def register(self, name: str, factory: Callable[[], Plugin]) -> None:
        self._factories[name] = factory

    def get(self, name: str) -> Plugin:
        try:
            factory = self._factories[name]
        except KeyError:
            known = ", ".join(sorted(self._factories))
            raise PluginNotFoundError(f"Unknown plugin '{name}' (known: {known})") from None
        return factory()

    def resolve(self, names: list[str]) -> list[Plugin]:
        """Resolve plugin names, keeping their order."""
        return [self.get(name) for name in names]


default_plugin_registry = PluginRegistry()
