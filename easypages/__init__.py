"""easypages static site generator.

This package turns a directory of Markdown files into a static HTML site.
Every page is rendered through a single Jinja2 layout, every other file is
copied unchanged, and an optional watch mode rebuilds the site whenever a
source file or the layout changes.

The main entry point is the CLI module, which provides commands for
scaffolding new projects, creating pages and building sites.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
