"""Asset copying for easypages.

Every file in the source tree that is not Markdown is an asset. Assets are
copied byte for byte into the output directory under the same relative path.

Key class:
- AssetPipeline: Walks the source tree and copies assets.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import click

from .errors import format_error_message
from .utils import is_markdown, iter_source_files

if TYPE_CHECKING:
    from .build import BuildResult


class AssetPipeline:
    """Copies static assets into the output directory.

    Attributes:
        source_dir (Path): Root of the source tree.
        output_dir (Path): Directory where assets are written.
    """

    def __init__(self, source_dir: Path, output_dir: Path):
        """Initialize the asset pipeline.

        Args:
            source_dir: Root of the source tree.
            output_dir: Directory where copied assets will be placed.
        """
        self.source_dir = source_dir
        self.output_dir = output_dir

    def run(self, result: BuildResult | None = None) -> BuildResult:
        """Copy every non-Markdown file of the source tree.

        A file that cannot be copied is recorded as skipped; the walk goes
        on.

        Args:
            result: Result to add to; a new one is created when omitted.

        Returns:
            The BuildResult holding copied files and skipped files.

        Raises:
            BuildError: If the source tree cannot be walked.
        """
        if result is None:
            from .build import BuildResult

            result = BuildResult(output_dir=self.output_dir)

        click.echo("Copying assets...")
        for item in iter_source_files(self.source_dir, exclude=[self.output_dir]):
            if is_markdown(item):
                continue
            try:
                rel = item.relative_to(self.source_dir)
            except ValueError as exc:
                result.skip(item, "relpath", str(exc))
                continue

            dest = self.output_dir / rel
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                result.skip(dest.parent, "mkdir", format_error_message(exc))
                continue

            try:
                shutil.copyfile(item, dest)
            except OSError as exc:
                result.skip(item, "copy", format_error_message(exc))
                continue
            result.assets.append(dest)
            click.echo(f"Copied {item} -> {dest}")
        return result
