"""Utility functions for easypages.

This module contains small helpers used throughout the easypages codebase:
filename predicates, title derivation and timestamp formatting.

Key functions:
    is_markdown: Check if a filename is a Markdown source.
    derive_title: Convert a Markdown filename to a page title.
    format_timestamp: Format a datetime the way pages display it.
    is_within: Check if a path lives under a directory.
    iter_source_files: List the files of a source tree.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from .errors import BuildError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_markdown(path: Path | str) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path or filename to check.

    Returns:
        True if the name ends with .md (case-insensitive).
    """
    return Path(path).name.lower().endswith(".md")


def derive_title(filename: Path | str) -> str:
    """Convert a filename to a page title.

    Strips the directory and the final extension, then upper-cases the
    first character. The rest of the name is left untouched.

    Args:
        filename: Filename or path of the source file.

    Returns:
        Title string, also used as the output filename stem.

    Examples:
        >>> derive_title("pages/hello-world.md")
        'Hello-world'

        >>> derive_title("v1.2.notes.md")
        'V1.2.notes'
    """
    base = Path(filename).name
    dot = base.rfind(".")
    stem = base[:dot] if dot >= 0 else base
    if not stem:
        return stem
    return stem[0].upper() + stem[1:]


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as YYYY-MM-DD HH:MM:SS."""
    return moment.strftime(TIMESTAMP_FORMAT)


def is_within(path: Path, directory: Path) -> bool:
    """Check if path is directory itself or lies below it.

    Both paths are compared in absolute, resolved form.
    """
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True


def iter_source_files(source_dir: Path, exclude: Iterable[Path] = ()) -> list[Path]:
    """List every regular file below a source directory.

    Order follows the directory traversal and is not sorted.

    Args:
        source_dir: Root of the source tree.
        exclude: Directories whose contents are skipped, such as an output
            directory nested inside the source tree.

    Returns:
        List of file paths.

    Raises:
        BuildError: If the root is missing, not a directory or unreadable.
    """
    if not source_dir.is_dir():
        raise BuildError(source_dir, "Source directory does not exist or is not a directory")
    try:
        next(source_dir.iterdir(), None)
        entries = list(source_dir.rglob("*"))
    except OSError as exc:
        raise BuildError(source_dir, f"Cannot walk source directory: {exc}", exc) from exc
    skipped = [d for d in exclude if is_within(d, source_dir)]
    files: list[Path] = []
    for path in entries:
        if not path.is_file():
            continue
        if any(is_within(path, d) for d in skipped):
            continue
        files.append(path)
    return files
