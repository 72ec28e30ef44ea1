"""Markdown rendering for easypages.

Source pages mix Markdown with literal HTML. The transformer splits the text
into HTML regions, which are copied verbatim, and the Markdown between them,
which is converted with mistune.

Key functions:
- convert_markdown: Plain Markdown to HTML conversion.
- transform_markdown: HTML-aware conversion of a whole page body.
- widen_list_items: Blank-line normalisation for dash bullet lists.
- render_markdown: Normalisation followed by transformation.
"""

from __future__ import annotations

import re

import mistune

# Opening tag up to the nearest closing tag, a self-closing tag, or a lone
# opening/void tag. The body match is lazy, so nested elements split at the
# first closing tag.
HTML_BLOCK_RE = re.compile(
    r"<[a-zA-Z][^>]*>[\s\S]*?</[a-zA-Z][^>]*>|<[a-zA-Z][^>/]*/>|<[a-zA-Z][^>]*>"
)

MARKDOWN_PLUGINS = ["strikethrough", "table", "url", "def_list"]


class _HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer with Pygments syntax highlighting for fenced code."""

    def __init__(self):
        super().__init__(escape=False)

    def block_code(self, code: str, info: str | None = None) -> str:
        """Render a code block with Pygments syntax highlighting.

        Args:
            code: The code content.
            info: Language identifier (e.g., 'python', 'go').

        Returns:
            HTML string with highlighted code.
        """
        if info:
            from pygments import highlight
            from pygments.formatters import HtmlFormatter
            from pygments.lexers import get_lexer_by_name
            from pygments.util import ClassNotFound

            lang = info.split(None, 1)[0]
            try:
                lexer = get_lexer_by_name(lang, stripall=True)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
                return highlight(code, lexer, formatter)
        escaped = code.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
        lang_class = f' class="language-{info.split(None, 1)[0]}"' if info else ""
        return f"<pre><code{lang_class}>{escaped}</code></pre>\n"


def _create_markdown() -> mistune.Markdown:
    return mistune.create_markdown(
        renderer=_HighlightRenderer(),
        hard_wrap=True,
        plugins=MARKDOWN_PLUGINS,
    )


def convert_markdown(text: str) -> str:
    """Convert Markdown text to HTML.

    Raw HTML is not escaped and single newlines become hard line breaks.

    Args:
        text: Markdown source.

    Returns:
        Rendered HTML.
    """
    return _create_markdown()(text)


def transform_markdown(text: str) -> str:
    """Convert mixed Markdown/HTML text, passing HTML regions through.

    Regions matched by HTML_BLOCK_RE are copied unchanged. The text between
    them is converted as Markdown, segment by segment, and everything is
    joined back in source order. This is a heuristic: partially nested HTML
    may be split in surprising places.

    Args:
        text: Page body.

    Returns:
        Rendered HTML.
    """
    markdown = _create_markdown()
    matches = list(HTML_BLOCK_RE.finditer(text))
    if not matches:
        return markdown(text)

    parts: list[str] = []
    last = 0
    for match in matches:
        start, end = match.span()
        if start > last:
            parts.append(markdown(text[last:start]))
        parts.append(match.group(0))
        last = end
    if last < len(text):
        parts.append(markdown(text[last:]))
    return "".join(parts)


def widen_list_items(text: str) -> str:
    """Put a blank line before every line that starts with "- ".

    Applied to the whole text, so a literal "- " at the start of any line is
    affected, list item or not.
    """
    return text.replace("\n- ", "\n\n- ")


def render_markdown(text: str) -> str:
    """Normalise dash lists, then transform the page body to HTML."""
    return transform_markdown(widen_list_items(text))
