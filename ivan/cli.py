"""Command-line interface for Ivan.

The ``ivan`` command takes no arguments: it publishes Ivan's Blog from the
current directory and exits non-zero if publishing fails.
"""

from __future__ import annotations

from pathlib import Path

import click

from . import __version__


@click.command()
@click.version_option(version=__version__, prog_name="ivan")
def cli():
    """Publish Ivan's Blog from the current directory."""
    from .blog import IVAN, PLUGINS, THEME
    from .publish import PublishingError, publish

    project_root = Path.cwd()
    try:
        result = publish(IVAN, THEME, PLUGINS, project_root=project_root)
    except PublishingError as exc:
        click.echo(click.style("Publishing failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Step: {exc.step}", fg="yellow"), err=True)
        if exc.source_path is not None:
            rel_path = _display_path(exc.source_path, project_root)
            click.echo(click.style(f"  File: {rel_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(f"Wrote {len(result.files)} files into {result.output_dir}")


def _display_path(path: Path, project_root: Path) -> Path:
    try:
        return path.relative_to(project_root)
    except ValueError:
        return path


def main():
    """Entry point for the CLI application."""
    cli()
