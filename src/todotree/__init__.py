"""todo-tree — find TODO, FIXME, BUG and other annotations in a source tree.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import todotree

    # One call: resolve tags, compile, scan, aggregate
    result = todotree.scan_tree("src")
    result.summary.total_count

    # Or step by step
    registry = todotree.resolve_tags()
    pattern = todotree.compile_pattern(registry, todotree.MatchOptions())
    items = todotree.parse("app.py", "# TODO: tidy up", pattern, registry)
    files = todotree.scan("src", None, pattern, registry)
    result = todotree.aggregate(files, root="src")

    todotree.__version__
    '0.1.0'
"""
from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from todotree.errors import ConfigError, FileReadError, PatternCompileError, TodoTreeError
from todotree.pattern.options import MatchOptions
from todotree.tags.defaults import DEFAULT_TAGS, Priority

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from todotree.pattern.compiler import CompiledPattern
    from todotree.results.models import AnnotationItem, FileResult, ScanResult
    from todotree.scanner.scanner import IgnorePredicate, ScanOptions
    from todotree.tags.defaults import TagDefinition
    from todotree.tags.registry import Tag, TagOverride, TagRegistry


def resolve_tags(
    overrides: "Iterable[TagOverride]" = (),
    ignore_case: bool = False,
    defaults: "Iterable[TagDefinition | Tag]" = DEFAULT_TAGS,
) -> "TagRegistry":
    """Merge the built-in tags with ``overrides`` into a ``TagRegistry``.

    Raises
    ------
    todotree.ConfigError
        If the resulting tag set is ambiguous or a priority is unknown.
    """
    from todotree.tags.registry import resolve

    return resolve(defaults, overrides, ignore_case=ignore_case)


def compile_pattern(registry: "TagRegistry", options: MatchOptions) -> "CompiledPattern":
    """Compile the annotation matcher for ``registry`` under ``options``.

    Raises
    ------
    todotree.PatternCompileError
        If a tag or alias cannot be embedded in the pattern.
    """
    from todotree.pattern.compiler import compile_pattern as _compile

    return _compile(registry, options)


def parse(
    file_path: str,
    content: str,
    compiled_pattern: "CompiledPattern",
    registry: "TagRegistry",
) -> "tuple[AnnotationItem, ...]":
    """Extract the annotations from one file's text."""
    from todotree.parser.parser import parse as _parse

    return _parse(file_path, content, compiled_pattern, registry)


def scan(
    root_path: "str | Path",
    ignore_rules: "IgnorePredicate | None",
    compiled_pattern: "CompiledPattern",
    registry: "TagRegistry",
    options: "ScanOptions | None" = None,
) -> "list[FileResult]":
    """Scan ``root_path`` concurrently; results come in completion order."""
    from todotree.scanner.scanner import scan as _scan

    return _scan(root_path, ignore_rules, compiled_pattern, registry, options)


def aggregate(file_results: "Iterable[FileResult]", root: "str | Path" = "") -> "ScanResult":
    """Sort per-file results and compute the summary."""
    from todotree.results.aggregator import aggregate as _aggregate

    return _aggregate(file_results, root=root)


def scan_tree(
    root_path: "str | Path" = ".",
    options: MatchOptions | None = None,
    overrides: "Iterable[TagOverride]" = (),
    scan_options: "ScanOptions | None" = None,
) -> "ScanResult":
    """Run the whole pipeline on ``root_path`` with one call.

    Parameters
    ----------
    root_path:
        Directory (or single file) to scan.
    options:
        Matching options; defaults to ``MatchOptions()``.
    overrides:
        Tag overrides merged over the built-in tags.
    scan_options:
        Traversal and scheduling settings.

    Returns
    -------
    ScanResult
        The aggregated, deterministically ordered result.
    """
    options = options or MatchOptions()
    registry = resolve_tags(overrides, ignore_case=options.ignore_case)
    pattern = compile_pattern(registry, options)
    return aggregate(scan(root_path, None, pattern, registry, scan_options), root=root_path)


__all__ = [
    "__version__",
    "ConfigError",
    "DEFAULT_TAGS",
    "FileReadError",
    "MatchOptions",
    "PatternCompileError",
    "Priority",
    "TodoTreeError",
    "aggregate",
    "compile_pattern",
    "parse",
    "resolve_tags",
    "scan",
    "scan_tree",
]
