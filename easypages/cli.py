"""Command-line interface for easypages.

This module defines the CLI commands using Click framework.

Commands:
- build: Build the site once, optionally keep watching for changes.
- new: Scaffold a new easypages project.
- page: Create a new markdown page interactively.
"""

from __future__ import annotations

from pathlib import Path

import click
import questionary

from . import __version__
from .config import DEFAULT_CONFIG_FILE, describe, load_config
from .utils import derive_title, is_markdown

_SCAFFOLD_FILES = {
    "config.toml": """\
[general]
pagesDir = "pages"
outputDir = "dist"
layoutFile = "layout.html"
author = "easyPages Team"

[watch]
enabled = false
delay = 5
""",
    "layout.html": """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <link rel="stylesheet" href="style.css">
</head>
<body>
  <main>
{{ content }}
  </main>
  <footer>{{ author }} &middot; {{ generated_at }}</footer>
</body>
</html>
""",
    "pages/index.md": """\
# Welcome

This site was generated by easypages.
- Write Markdown in the pages directory
- Run easypages build
""",
    "pages/style.css": """\
body { font-family: sans-serif; max-width: 42rem; margin: 2rem auto; }
footer { color: #666; font-size: 0.9rem; }
""",
}


@click.group()
@click.version_option(version=__version__, prog_name="easypages")
def cli():
    """easypages static site generator."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Config file",
)
@click.option("--pages", type=click.Path(path_type=Path), help="Directory with Markdown sources")
@click.option("--output", type=click.Path(path_type=Path), help="Directory for generated HTML")
@click.option("--layout", type=click.Path(path_type=Path), help="Layout template file")
@click.option("--author", help="Page author")
@click.option("--watch/--no-watch", default=None, help="Rebuild when sources change")
@click.option("--delay", type=click.IntRange(min=1), help="Seconds between change checks")
def build(config_path, pages, output, layout, author, watch, delay):
    """Build the site into the output directory."""
    from .build import BuildError, build_site

    config = load_config(
        config_path,
        overrides={
            "pages_dir": pages,
            "output_dir": output,
            "layout_file": layout,
            "author": author,
            "watch": watch,
            "watch_delay": delay,
        },
    )
    for line in describe(config):
        click.echo(line)
    click.echo()

    try:
        result = build_site(config)
    except BuildError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)
        raise SystemExit(1) from None
    click.echo(result.summary())

    if config.watch:
        from .watch import ChangePoller

        try:
            ChangePoller(config).run()
        except KeyboardInterrupt:
            click.echo("Stopped watching.")


@cli.command()
@click.argument("name")
def new(name: str):
    """Scaffold a new easypages project."""
    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    _scaffold(target)
    click.echo(f"New easypages site created at {target}")


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Config file",
)
def page(config_path: Path):
    """Create a new markdown page interactively."""
    config = load_config(config_path)
    pages_dir = config.pages_dir

    if not pages_dir.is_dir():
        raise click.ClickException(
            f"No pages directory found at {pages_dir}. Run this command from a project root."
        )

    folders = _get_content_folders(pages_dir)
    folder = questionary.select(
        "Select folder:",
        choices=folders,
        style=_questionary_style(),
    ).ask()
    if folder is None:
        raise click.Abort()

    name = questionary.text(
        "Filename (without .md extension):",
        validate=lambda x: len(x.strip()) > 0 or "Filename cannot be empty",
        style=_questionary_style(),
    ).ask()
    if name is None:
        raise click.Abort()
    name = name.strip()

    filename = f"{name}.md"
    target_dir = pages_dir if folder == ". (root)" else pages_dir / folder
    target_path = target_dir / filename
    if target_path.exists():
        raise click.ClickException(f"File already exists: {target_path}")

    # Pages are written flat as <Title>.html, so titles must stay unique.
    title = derive_title(filename)
    existing = _get_existing_titles(pages_dir)
    if title in existing:
        raise click.ClickException(
            f"A page with title '{title}' already exists: {existing[title]}"
        )

    target_dir.mkdir(parents=True, exist_ok=True)
    target_path.write_text(f"# {title}\n\n", encoding="utf-8")
    click.echo(f"Created {target_path}")


def _get_content_folders(pages_dir: Path) -> list[str]:
    """Get list of folders below the pages directory, root option first."""
    folders = [
        path.relative_to(pages_dir).as_posix()
        for path in pages_dir.rglob("*")
        if path.is_dir()
    ]
    folders.sort()
    folders.insert(0, ". (root)")
    return folders


def _get_existing_titles(pages_dir: Path) -> dict[str, Path]:
    """Map derived titles of existing Markdown pages to their paths."""
    titles: dict[str, Path] = {}
    for path in pages_dir.rglob("*"):
        if path.is_file() and is_markdown(path):
            titles[derive_title(path)] = path
    return titles


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def main():
    """Entry point for the CLI application."""
    cli()


def _scaffold(root: Path) -> None:
    """Create the directory structure and files for a new project.

    Args:
        root: Root directory for the new project.
    """
    for rel_path, text in _SCAFFOLD_FILES.items():
        dest_path = root / rel_path
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_text(text, encoding="utf-8")
