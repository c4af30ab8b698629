"""Aggregator: turns per-file results into the final ``ScanResult``.

Scanning completes files in whatever order the worker pool finishes
them.  ``aggregate`` restores a canonical order (by normalized path)
and computes the ``Summary``, so the same set of file results always
produces an identical ``ScanResult``.
"""
from __future__ import annotations

import posixpath
from collections.abc import Iterable
from pathlib import Path

from todotree.results.models import FileResult, ScanResult, Summary


def normalize_path(path: str) -> str:
    """Return the canonical POSIX form of a root-relative path."""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    return "" if normalized == "." else normalized


def aggregate(file_results: Iterable[FileResult], root: str | Path = "") -> ScanResult:
    """Assemble a ``ScanResult`` from per-file results.

    Parameters
    ----------
    file_results:
        Results in any order, typically completion order.
    root:
        The scanned root, recorded on the result.

    Returns
    -------
    ScanResult
        Files sorted by normalized path, with their summary.

    Raises
    ------
    ValueError
        If two results name the same normalized path.
    """
    keyed: dict[str, FileResult] = {}
    for result in file_results:
        key = normalize_path(result.file_path)
        if key in keyed:
            raise ValueError(f"Duplicate result for file {key!r}")
        keyed[key] = result
    files = tuple(keyed[key] for key in sorted(keyed))
    return ScanResult(files=files, summary=Summary.from_files(files), root=str(root))
