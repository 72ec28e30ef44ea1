"""Watch mode for easypages.

The poller sleeps for the configured delay, re-stats every source file and
the layout, and runs a full rebuild when any file is new or has a newer
modification time than last seen. Detection is purely poll-based: a change
that is made and reverted within one interval, or a content change that
keeps the old modification time, goes unnoticed.

Key class:
- ChangePoller: Owns the modification-time index and the polling loop.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from .build import rebuild_site
from .config import Config
from .errors import BuildError, format_error_message
from .utils import iter_source_files


class ChangePoller:
    """Polls the source tree and rebuilds the site on changes.

    Attributes:
        config: Resolved configuration.
        rebuild: Callable running a full build.
        mtimes: Last seen modification time (ns) per absolute path.
    """

    def __init__(
        self,
        config: Config,
        rebuild: Callable[[], Any] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.rebuild = rebuild or (lambda: rebuild_site(config))
        self.mtimes: dict[Path, int] = {}
        self._sleep = sleep

    def _watched_files(self) -> list[Path]:
        files: list[Path] = []
        try:
            files.extend(
                iter_source_files(self.config.pages_dir, exclude=[self.config.output_dir])
            )
        except BuildError as exc:
            click.secho(f"Cannot scan source files: {exc.message}", fg="yellow", err=True)
        if self.config.layout_file.is_file():
            files.append(self.config.layout_file)
        return files

    def _stat(self, path: Path) -> int | None:
        try:
            return path.stat().st_mtime_ns
        except OSError:
            # Removed between listing and stat.
            return None

    def snapshot(self) -> None:
        """Record the current modification time of every watched file."""
        for path in self._watched_files():
            mtime = self._stat(path)
            if mtime is not None:
                self.mtimes[path.absolute()] = mtime

    def scan(self) -> list[Path]:
        """Compare modification times against the index.

        Returns:
            Files that are new or were modified since the last scan. The
            index is updated for each of them.
        """
        changed: list[Path] = []
        for path in self._watched_files():
            mtime = self._stat(path)
            if mtime is None:
                continue
            key = path.absolute()
            last = self.mtimes.get(key)
            if last is None or mtime > last:
                self.mtimes[key] = mtime
                changed.append(key)
                click.echo(f"Change detected: {path}")
        return changed

    def poll_once(self) -> bool:
        """Scan once and rebuild if anything changed.

        Returns:
            True if a rebuild was run.
        """
        if not self.scan():
            return False
        click.echo("Rebuilding all pages...")
        result = self.rebuild()
        summary = getattr(result, "summary", None)
        if callable(summary):
            click.echo(summary())
        return True

    def run(self) -> None:
        """Poll forever.

        Errors from a scan or rebuild are reported and polling continues.
        """
        click.echo(f"Watching for changes every {self.config.watch_delay} seconds")
        click.echo("Press Ctrl+C to stop...")
        self.snapshot()
        while True:
            self._sleep(self.config.watch_delay)
            try:
                self.poll_once()
            except Exception as exc:
                message = str(exc) if isinstance(exc, BuildError) else format_error_message(exc)
                click.secho(f"Rebuild failed: {message}", fg="red", err=True)
