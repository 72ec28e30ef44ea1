"""Layout templates for easypages.

Every page is rendered through a single Jinja2 layout. The layout is read and
parsed once per build; a layout that cannot be read or parsed aborts the
build.

Layouts address page fields as ``{{ title }}``, ``{{ content }}``,
``{{ generated_at }}`` and ``{{ author }}`` (or through ``{{ page }}``).
Dot-style placeholders such as ``{{.Content}}`` are accepted as well and are
rewritten to plain Jinja expressions before parsing.

Key items:
- Layout: Parsed layout that renders Page objects.
- load_layout: Read and parse a layout file.
"""

from __future__ import annotations

import re
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateSyntaxError,
    select_autoescape,
)

from .content import Page
from .errors import BuildError

DOT_PLACEHOLDER_RE = re.compile(r"\{\{-?\s*\.([A-Za-z_]\w*)\s*-?\}\}")

# Capitalised aliases for layouts written with dot-style placeholders.
LEGACY_FIELDS = {
    "Title": "title",
    "Content": "content",
    "GeneratedAt": "generated_at",
    "Author": "author",
}


def normalize_placeholders(source: str) -> str:
    """Rewrite ``{{.Field}}`` placeholders to ``{{ Field }}``."""
    return DOT_PLACEHOLDER_RE.sub(lambda m: "{{ " + m.group(1) + " }}", source)


class Layout:
    """A parsed layout template.

    Attributes:
        path: Path of the layout file.
        template: Compiled Jinja2 template.
    """

    def __init__(self, path: Path, template: Template):
        self.path = path
        self.template = template

    def render(self, page: Page) -> str:
        """Substitute a page into the layout.

        The content field is trusted HTML; every other field is escaped.

        Args:
            page: Page to render.

        Returns:
            Final HTML document.
        """
        context = {
            "page": page,
            "title": page.title,
            "content": page.content,
            "generated_at": page.generated_at,
            "author": page.author,
        }
        for alias, name in LEGACY_FIELDS.items():
            context[alias] = context[name]
        return self.template.render(context)


def create_environment(search_dir: Path) -> Environment:
    """Create the Jinja2 environment used for layouts.

    Args:
        search_dir: Directory used to resolve include/extends statements.
    """
    return Environment(
        loader=FileSystemLoader(str(search_dir)),
        autoescape=select_autoescape(
            enabled_extensions=("html", "htm", "xml"), default_for_string=True
        ),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def load_layout(path: Path) -> Layout:
    """Read and parse a layout file.

    Args:
        path: Path to the layout template.

    Returns:
        Parsed Layout.

    Raises:
        BuildError: If the file cannot be read or is not a valid template.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BuildError(path, f"Cannot read layout file: {exc}", exc) from exc

    env = create_environment(path.parent)
    try:
        template = env.from_string(normalize_placeholders(source))
    except TemplateSyntaxError as exc:
        raise BuildError(
            path,
            f"Template syntax error on line {exc.lineno}: {exc.message}",
            exc,
        ) from exc
    return Layout(path, template)
