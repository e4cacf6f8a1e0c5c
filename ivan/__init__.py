"""Ivan's Blog.

A personal blog declared as a ``Website`` value and published with a theme
and an ordered list of plugins. Markdown content is discovered per section,
rendered through Jinja2 theme templates, post-processed by plugins, and
written out together with an RSS feed and a sitemap.

The main entry point is the CLI module, which publishes the blog from the
current directory.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
