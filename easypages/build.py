"""Site building functionality for easypages.

This module contains the batch driver. A build makes sure the output
directory exists, loads the layout, renders every Markdown source to
``<output>/<Title>.html`` and copies every other file unchanged.

Key items:
- build_site: Run a full build (both passes).
- rebuild_site: Full build for watch mode, tolerant of page pass errors.
- render_pages: The Markdown pass.
- BuildResult: What a build wrote and which files it skipped.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import click

from .assets import AssetPipeline
from .config import Config
from .content import PageRenderer
from .errors import BuildError, Failure, format_error_message
from .templates import Layout, load_layout
from .utils import is_markdown, iter_source_files

__all__ = ["BuildError", "BuildResult", "build_site", "rebuild_site", "render_pages"]


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        output_dir: Directory where the site was built.
        pages: HTML files written by the Markdown pass.
        assets: Files written by the asset pass.
        failures: Files skipped because of an error.
    """

    output_dir: Path
    pages: list[Path] = field(default_factory=list)
    assets: list[Path] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no file was skipped."""
        return not self.failures

    def skip(self, path: Path, stage: str, message: str) -> Failure:
        """Record and report a skipped file."""
        failure = Failure(path=path, stage=stage, message=message)
        self.failures.append(failure)
        click.secho(f"Skipped {failure}", fg="yellow", err=True)
        return failure

    def summary(self) -> str:
        """One-line description of the build."""
        text = (
            f"Built {len(self.pages)} pages and copied {len(self.assets)} files "
            f"into {self.output_dir}"
        )
        if self.failures:
            text += f" ({len(self.failures)} skipped)"
        return text


def render_pages(
    config: Config,
    layout: Layout,
    result: BuildResult | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> BuildResult:
    """Render every Markdown file of the source tree.

    Each page is written to ``output_dir/<Title>.html``. Pages whose titles
    collide overwrite each other; the last one visited wins.

    Args:
        config: Resolved configuration.
        layout: Parsed layout template.
        result: Result to add to; a new one is created when omitted.
        clock: Time source for page timestamps.

    Returns:
        The BuildResult holding written pages and skipped files.

    Raises:
        BuildError: If the source tree cannot be walked.
    """
    if result is None:
        result = BuildResult(output_dir=config.output_dir)
    renderer = PageRenderer(layout, config.author, clock=clock)

    for path in iter_source_files(config.pages_dir, exclude=[config.output_dir]):
        if not is_markdown(path):
            continue
        click.echo(f"Processing {path}")
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            result.skip(path, "read", format_error_message(exc))
            continue

        try:
            page = renderer.build_page(source, path)
            rendered = layout.render(page)
        except Exception as exc:
            result.skip(path, "render", format_error_message(exc))
            continue

        target = config.output_dir / page.output_name
        try:
            _write_page(target, rendered)
        except OSError as exc:
            result.skip(target, "write", format_error_message(exc))
            continue
        result.pages.append(target)
        click.echo(f"Wrote {target}")
    return result


def build_site(
    config: Config,
    clock: Callable[[], datetime] = datetime.now,
) -> BuildResult:
    """Build the entire static site.

    Args:
        config: Resolved configuration.
        clock: Time source for page timestamps.

    Returns:
        BuildResult covering both passes.

    Raises:
        BuildError: If the output directory cannot be created, the layout
            cannot be loaded or the source tree cannot be walked.
    """
    output_dir = _ensure_output_dir(config.output_dir)
    layout = load_layout(config.layout_file)
    result = BuildResult(output_dir=output_dir)
    render_pages(config, layout, result, clock=clock)
    AssetPipeline(config.pages_dir, output_dir).run(result)
    return result


def rebuild_site(
    config: Config,
    clock: Callable[[], datetime] = datetime.now,
) -> BuildResult:
    """Rebuild the site after a change in watch mode.

    Unlike build_site, a layout or Markdown pass error does not stop the
    rebuild: it is recorded as a "pages" failure and the asset pass still
    runs.

    Args:
        config: Resolved configuration.
        clock: Time source for page timestamps.

    Returns:
        BuildResult covering both passes.

    Raises:
        BuildError: If the output directory cannot be created or the asset
            pass cannot walk the source tree.
    """
    output_dir = _ensure_output_dir(config.output_dir)
    result = BuildResult(output_dir=output_dir)
    try:
        render_pages(config, load_layout(config.layout_file), result, clock=clock)
    except BuildError as exc:
        result.skip(exc.source_path, "pages", exc.message)
    AssetPipeline(config.pages_dir, output_dir).run(result)
    return result


def _ensure_output_dir(output_dir: Path) -> Path:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(
            output_dir, f"Cannot create output directory: {format_error_message(exc)}", exc
        ) from exc
    return output_dir


def _write_page(target: Path, rendered: str) -> None:
    """Write a rendered page to the output directory.

    Args:
        target: Destination HTML file.
        rendered: Rendered HTML content.
    """
    with open(target, "w", encoding="utf-8") as f:
        f.write(rendered)
