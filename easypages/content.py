"""Page rendering for easypages.

This module turns one Markdown source into a finished HTML document.

Key classes:
- Page: Dataclass holding the fields a layout can reference.
- PageRenderer: Builds Page objects and substitutes them into the layout.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from markupsafe import Markup

from .renderers import render_markdown
from .utils import derive_title, format_timestamp

if TYPE_CHECKING:
    from .templates import Layout


@dataclass
class Page:
    """A rendered page, alive only until it is written.

    Attributes:
        title: Title derived from the source filename.
        content: Rendered HTML body, inserted into the layout unescaped.
        generated_at: Render time as YYYY-MM-DD HH:MM:SS.
        author: Configured author.
        path: Path to the source file.
    """

    title: str
    content: Markup
    generated_at: str
    author: str
    path: Path

    @property
    def output_name(self) -> str:
        """Filename of the generated HTML document."""
        return f"{self.title}.html"


class PageRenderer:
    """Renders Markdown sources through a shared layout.

    Attributes:
        layout: Parsed layout template.
        author: Author recorded on every page.
        clock: Callable returning the current time.
    """

    def __init__(
        self,
        layout: Layout,
        author: str,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.layout = layout
        self.author = author
        self.clock = clock

    def build_page(self, source: str, path: Path) -> Page:
        """Build a Page from Markdown source.

        Args:
            source: Markdown text of the file.
            path: Path to the source file.

        Returns:
            Page object.
        """
        return Page(
            title=derive_title(path),
            content=Markup(render_markdown(source)),
            generated_at=format_timestamp(self.clock()),
            author=self.author,
            path=path,
        )

    def render(self, source: str, path: Path) -> str:
        """Render Markdown source into the final HTML document."""
        return self.layout.render(self.build_page(source, path))
