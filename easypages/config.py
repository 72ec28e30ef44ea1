"""Configuration for easypages.

Settings are resolved once at startup: built-in defaults, then the optional
config file, then explicit overrides (usually command-line options).

The config file has two sections::

    [general]
    pagesDir = "pages"
    outputDir = "dist"
    layoutFile = "layout.html"
    author = "easyPages Team"

    [watch]
    enabled = false
    delay = 5

TOML is read with tomllib; files ending in .yaml or .yml are read with
PyYAML using the same structure.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import click
import yaml

DEFAULT_CONFIG_FILE = "config.toml"

# (section, key in file, Config field)
_FILE_KEYS = [
    ("general", "pagesDir", "pages_dir"),
    ("general", "pages_dir", "pages_dir"),
    ("general", "outputDir", "output_dir"),
    ("general", "output_dir", "output_dir"),
    ("general", "layoutFile", "layout_file"),
    ("general", "layout_file", "layout_file"),
    ("general", "author", "author"),
    ("watch", "enabled", "watch"),
    ("watch", "delay", "watch_delay"),
]

_PATH_FIELDS = {"pages_dir", "output_dir", "layout_file"}


class ConfigError(Exception):
    """Raised when a config file cannot be parsed."""


@dataclass(frozen=True)
class Config:
    """Resolved settings for one run.

    Attributes:
        pages_dir: Directory containing Markdown sources and assets.
        output_dir: Directory receiving the generated site.
        layout_file: Layout template applied to every page.
        author: Author shown on every page.
        watch: Whether to keep polling for changes after the first build.
        watch_delay: Seconds between polls.
    """

    pages_dir: Path = Path("pages")
    output_dir: Path = Path("dist")
    layout_file: Path = Path("layout.html")
    author: str = "easyPages Team"
    watch: bool = False
    watch_delay: int = 5


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a TOML or YAML config file.

    Args:
        path: Path to the config file.

    Returns:
        Parsed mapping (empty for an empty YAML document).

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        else:
            with open(path, "rb") as f:
                loaded = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return loaded


def _settings_from_file(data: Mapping[str, Any]) -> dict[str, Any]:
    """Pick known settings out of a parsed config file."""
    settings: dict[str, Any] = {}
    for section, key, field_name in _FILE_KEYS:
        table = data.get(section)
        if not isinstance(table, Mapping) or key not in table:
            continue
        settings[field_name] = table[key]
    return settings


def _coerce(field_name: str, value: Any) -> Any:
    if field_name in _PATH_FIELDS:
        return Path(value)
    if field_name == "author":
        return str(value)
    if field_name == "watch":
        return bool(value)
    if field_name == "watch_delay":
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"delay must be a positive integer, got {value!r}")
        return value
    raise KeyError(field_name)


def _apply(config: Config, settings: Mapping[str, Any], origin: str) -> Config:
    changes: dict[str, Any] = {}
    for field_name, value in settings.items():
        if value is None:
            continue
        try:
            changes[field_name] = _coerce(field_name, value)
        except ValueError as exc:
            click.secho(f"Ignoring {field_name} from {origin}: {exc}", fg="yellow", err=True)
    return replace(config, **changes)


def load_config(
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Resolve the configuration for a run.

    Args:
        config_path: Config file to read; defaults to config.toml. A missing
            or unparsable file leaves the defaults in place.
        overrides: Explicit settings keyed by Config field name. None values
            mean "not given" and are skipped.

    Returns:
        Frozen Config.
    """
    config = Config()
    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_FILE)
    if path.is_file():
        try:
            data = read_config_file(path)
        except ConfigError as exc:
            click.secho(f"{exc}; using defaults", fg="yellow", err=True)
        else:
            config = _apply(config, _settings_from_file(data), str(path))
            click.echo(f"Loaded settings from {path}")
    else:
        click.echo(f"Config file not found, using defaults: {path}")
    if overrides:
        config = _apply(config, overrides, "command line")
    return config


def describe(config: Config) -> list[str]:
    """Human-readable lines describing a resolved config."""
    lines = [
        f"Pages directory: {config.pages_dir}",
        f"Output directory: {config.output_dir}",
        f"Layout file: {config.layout_file}",
        f"Author: {config.author}",
        f"Watch mode: {config.watch}",
    ]
    if config.watch:
        lines.append(f"Watch interval: {config.watch_delay} seconds")
    return lines
