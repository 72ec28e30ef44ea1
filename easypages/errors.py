"""Error types for easypages builds.

Two tiers exist. BuildError is fatal for the current build: the layout cannot
be loaded, the output directory cannot be created or the source tree cannot
be walked. Failure records a single skipped file; the build carries on.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the file or directory that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


@dataclass
class Failure:
    """A file that was skipped during a build.

    Attributes:
        path: Source file (or destination, for write errors).
        stage: Step that failed: "read", "render", "write", "pages",
            "relpath", "mkdir" or "copy". "pages" marks a whole Markdown
            pass lost during a watch rebuild.
        message: Human-readable error message.
    """

    path: Path
    stage: str
    message: str

    def __str__(self) -> str:
        return f"{self.path} ({self.stage}): {self.message}"


def format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    error_type = type(exc).__name__
    error_msg = str(exc)

    # Handle common Jinja2/template errors
    if error_type == "UndefinedError":
        return f"Undefined variable: {error_msg}"
    if error_type == "TypeError":
        return f"Type error: {error_msg}"
    if error_type == "AttributeError":
        return f"Attribute error: {error_msg}"
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    if isinstance(exc, UnicodeDecodeError):
        return f"Not valid UTF-8: {error_msg}"

    return f"{error_type}: {error_msg}"
