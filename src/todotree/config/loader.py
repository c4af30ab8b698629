"""Configuration loading for todo-tree.

Settings come from a ``.todorc`` file (JSON or YAML) found in the scan
root or one of its parents, falling back to a global file in the
application directory, and are then overridden by command-line flags.

Lookup order
------------
1. ``.todorc``, ``.todorc.json``, ``.todorc.yaml``, ``.todorc.yml`` in
   the start directory, then in each parent directory.
2. ``config.json``, ``config.yaml``, ``config.yml`` in
   ``click.get_app_dir("todo-tree")``.

Example ``.todorc.yaml``::

    tags:
      - TODO
      - FIXME
      - name: SECURITY
        priority: critical
        aliases: [SEC]
    exclude:
      - "vendor/**"
    require_colon: false
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Final

import click
import yaml

from todotree.errors import ConfigError
from todotree.pattern.options import DEFAULT_MARKERS, MatchOptions
from todotree.scanner.scanner import ScanOptions
from todotree.tags.defaults import DEFAULT_TAGS
from todotree.tags.registry import TagOverride, TagRegistry, resolve

logger = logging.getLogger(__name__)

APP_NAME: Final[str] = "todo-tree"
LOCAL_CONFIG_NAMES: Final[tuple[str, ...]] = (
    ".todorc",
    ".todorc.json",
    ".todorc.yaml",
    ".todorc.yml",
)
GLOBAL_CONFIG_NAMES: Final[tuple[str, ...]] = ("config.json", "config.yaml", "config.yml")
_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
# Keys written by older todo-tree releases that this version does not act on.
_UNSUPPORTED_KEYS: Final[frozenset[str]] = frozenset({"custom_pattern"})


@dataclass
class CliOptions:
    """Command-line values to merge over a loaded ``Config``.

    ``None`` and ``False`` mean "not given on the command line".
    """

    tags: list[str] | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    json: bool = False
    flat: bool = False
    no_color: bool = False
    case_sensitive: bool | None = None
    ignore_case: bool = False
    no_require_colon: bool = False
    hidden: bool = False
    follow_links: bool = False
    no_gitignore: bool = False
    max_depth: int | None = None
    workers: int | None = None


@dataclass
class Config:
    """Resolved user configuration.

    ``tags`` entries are either tag names or mappings with ``name`` and
    optional ``aliases``, ``priority``, ``enabled`` and ``description``.
    When ``tags`` is non-empty only the listed tags are matched.
    """

    tags: list[Any] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    json: bool = False
    flat: bool = False
    no_color: bool = False
    ignore_case: bool = False
    require_colon: bool = True
    markers: list[str] = field(default_factory=lambda: list(DEFAULT_MARKERS))
    workers: int = 0
    max_depth: int = 0
    hidden: bool = False
    follow_links: bool = False
    respect_gitignore: bool = True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, start_path: str | Path) -> "Config | None":
        """Find and load the nearest configuration file.

        Returns
        -------
        Config | None
            The loaded configuration, or ``None`` if no file exists.

        Raises
        ------
        ConfigError
            If the file that was found cannot be read or parsed.
        """
        start = Path(start_path).resolve()
        if start.is_file():
            start = start.parent
        for directory in (start, *start.parents):
            for name in LOCAL_CONFIG_NAMES:
                candidate = directory / name
                if candidate.is_file():
                    return cls.load_from_file(candidate)

        global_dir = Path(click.get_app_dir(APP_NAME))
        for name in GLOBAL_CONFIG_NAMES:
            candidate = global_dir / name
            if candidate.is_file():
                return cls.load_from_file(candidate)
        return None

    @classmethod
    def load_from_file(cls, path: str | Path) -> "Config":
        """Load configuration from ``path``.

        ``.yaml`` / ``.yml`` files are parsed as YAML; anything else is
        tried as JSON first and then as YAML.

        Raises
        ------
        ConfigError
            If the file cannot be read or does not hold a mapping.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read config file: {exc}", str(path)) from exc

        try:
            if path.suffix in _YAML_SUFFIXES:
                data = yaml.safe_load(text)
            else:
                try:
                    data = json.loads(text)
                except json.JSONDecodeError:
                    data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse config: {exc}", str(path)) from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping", str(path))
        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data, source=str(path))

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str | None = None) -> "Config":
        """Build a ``Config`` from a parsed mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = str(key).replace("-", "_")
            if name == "case_sensitive":
                values["ignore_case"] = not bool(value)
                continue
            if name in _UNSUPPORTED_KEYS:
                logger.debug("Config key %r is not supported; ignored", key)
                continue
            if name not in known:
                logger.warning("Ignoring unknown config key %r in %s", key, source or "config")
                continue
            values[name] = value

        config = cls(**values)
        for list_field in ("include", "exclude", "markers", "tags"):
            value = getattr(config, list_field)
            if isinstance(value, str):
                setattr(config, list_field, [value])
            elif not isinstance(value, list):
                raise ConfigError(f"{list_field!r} must be a list", source)
        return config

    # ------------------------------------------------------------------
    # Merging and saving
    # ------------------------------------------------------------------

    def merge_with_cli(self, cli: CliOptions) -> None:
        """Apply command-line values; they take precedence over the file.

        ``tags`` and ``include`` replace the configured lists while
        ``exclude`` extends them.  Boolean flags only ever switch a
        setting on.
        """
        if cli.tags:
            self.tags = list(cli.tags)
        if cli.include:
            self.include = list(cli.include)
        if cli.exclude:
            self.exclude.extend(cli.exclude)

        if cli.json:
            self.json = True
        if cli.flat:
            self.flat = True
        if cli.no_color:
            self.no_color = True
        if cli.hidden:
            self.hidden = True
        if cli.follow_links:
            self.follow_links = True
        if cli.no_gitignore:
            self.respect_gitignore = False

        if cli.case_sensitive is not None:
            self.ignore_case = not cli.case_sensitive
        if cli.ignore_case:
            self.ignore_case = True
        if cli.no_require_colon:
            self.require_colon = False

        if cli.max_depth is not None:
            self.max_depth = cli.max_depth
        if cli.workers is not None:
            self.workers = cli.workers

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def save(self, path: str | Path) -> None:
        """Write the configuration as YAML or pretty JSON by extension."""
        path = Path(path)
        if path.suffix in _YAML_SUFFIXES:
            text = yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        else:
            text = json.dumps(self.to_dict(), indent=2) + "\n"
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to write config file: {exc}", str(path)) from exc

    # ------------------------------------------------------------------
    # Core inputs
    # ------------------------------------------------------------------

    def tag_overrides(self) -> list[TagOverride]:
        """Translate the ``tags`` entries into ``TagOverride`` objects."""
        overrides: list[TagOverride] = []
        for entry in self.tags:
            if isinstance(entry, str):
                overrides.append(TagOverride(name=entry))
            elif isinstance(entry, dict):
                if "name" not in entry:
                    raise ConfigError(f"Tag entry without a name: {entry!r}")
                overrides.append(
                    TagOverride(
                        name=str(entry["name"]),
                        aliases=entry.get("aliases"),
                        priority=entry.get("priority"),
                        enabled=entry.get("enabled"),
                        description=entry.get("description"),
                    )
                )
            else:
                raise ConfigError(f"Invalid tag entry: {entry!r}")
        return overrides

    def build_registry(self) -> TagRegistry:
        """Resolve the tag registry for this configuration.

        Raises
        ------
        ConfigError
            If the tags are ambiguous or carry an unknown priority.
        """
        overrides = self.tag_overrides()
        registry = resolve(DEFAULT_TAGS, overrides, ignore_case=self.ignore_case)
        selected = [o.name for o in overrides if o.enabled is not False]
        return registry.selecting(selected) if selected else registry

    def match_options(self) -> MatchOptions:
        return MatchOptions(
            ignore_case=self.ignore_case,
            require_colon=self.require_colon,
            comment_markers=tuple(_strings(self.markers, "markers")),
        )

    def scan_options(self) -> ScanOptions:
        return ScanOptions(
            workers=_count(self.workers, "workers"),
            max_depth=_count(self.max_depth, "max_depth"),
            follow_links=bool(self.follow_links),
            hidden=bool(self.hidden),
            respect_gitignore=bool(self.respect_gitignore),
            include=tuple(_strings(self.include, "include")),
            exclude=tuple(_strings(self.exclude, "exclude")),
        )


def _count(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{name!r} must be a non-negative integer, got {value!r}")
    return value


def _strings(values: Iterable[Any], name: str) -> list[str]:
    result: list[str] = []
    for value in values:
        if not isinstance(value, str):
            raise ConfigError(f"{name!r} entries must be strings, got {value!r}")
        result.append(value)
    return result


def load_config(start_path: str | Path, config_file: str | Path | None = None) -> Config:
    """Return the configuration for ``start_path``, defaults if none exists."""
    if config_file is not None:
        return Config.load_from_file(config_file)
    return Config.load(start_path) or Config()
