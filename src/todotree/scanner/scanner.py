"""Directory scanner: walks a tree and parses every eligible file.

Files are the unit of concurrency.  The walk itself runs in the calling
thread and is deterministic; each discovered file is then read and
parsed by a task on a ``ThreadPoolExecutor``.  Results are collected in
completion order, so callers must pass them through
``todotree.results.aggregate`` to obtain a stable ordering.

A file that cannot be read or decoded yields a ``FileResult`` carrying
an ``error`` message instead of aborting the scan.  Binary files, those
with a null byte in their leading sample, are skipped entirely.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from todotree.errors import ConfigError, FileReadError
from todotree.parser.parser import LineParser
from todotree.pattern.compiler import CompiledPattern
from todotree.results.models import FileResult
from todotree.scanner.ignore import IgnoreRules
from todotree.tags.registry import TagRegistry

logger = logging.getLogger(__name__)

IgnorePredicate = Callable[[str, bool], bool]


@dataclass(frozen=True)
class ScanOptions:
    """Traversal and scheduling settings.

    Parameters
    ----------
    workers:
        Size of the worker pool; ``0`` picks a default from the CPU count.
    max_depth:
        Deepest path level scanned, ``0`` for unlimited.  Files directly
        in the root are at depth 1.
    follow_links:
        Follow symbolic links to files and directories.
    hidden:
        Include dot-files and dot-directories.
    respect_gitignore:
        Honour ``.gitignore`` / ``.ignore`` files.
    include:
        Only scan files matching one of these globs.
    exclude:
        Skip paths matching one of these globs.
    sample_size:
        Number of leading bytes inspected for a null byte.
    """

    workers: int = 0
    max_depth: int = 0
    follow_links: bool = False
    hidden: bool = False
    respect_gitignore: bool = True
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    sample_size: int = 8000

    def ignore_rules(self, root: str | Path) -> IgnoreRules:
        """Build the ``IgnoreRules`` these options describe for ``root``."""
        return IgnoreRules(
            root,
            respect_gitignore=self.respect_gitignore,
            hidden=self.hidden,
            include=self.include,
            exclude=self.exclude,
        )

    @property
    def worker_count(self) -> int:
        if self.workers > 0:
            return self.workers
        return min(32, (os.cpu_count() or 1) + 4)


def is_binary(sample: bytes) -> bool:
    """Return ``True`` if ``sample`` looks like binary content."""
    return b"\x00" in sample


def _is_loop(dirpath: str, link: str) -> bool:
    # A link loops when it points at the directory holding it or one of its ancestors.
    here = os.path.realpath(dirpath)
    target = os.path.realpath(link)
    return here == target or here.startswith(target.rstrip(os.sep) + os.sep)


def read_source(path: Path, display_path: str, sample_size: int = 8000) -> str | None:
    """Read and decode a file as UTF-8.

    Returns
    -------
    str | None
        The decoded text, or ``None`` for a binary file.

    Raises
    ------
    FileReadError
        If the file cannot be opened, read or decoded.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise FileReadError(display_path, exc.strerror or str(exc)) from exc
    if is_binary(data[:sample_size]):
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError(
            display_path, f"invalid UTF-8 at byte {exc.start}: {exc.reason}"
        ) from exc


class DirectoryScanner:
    """Walks a tree and parses files on a worker pool.

    Parameters
    ----------
    pattern:
        The run's compiled pattern, shared by all workers.
    registry:
        The resolved tag registry, shared by all workers.
    options:
        Traversal and scheduling settings.
    ignore_rules:
        Predicate ``(rel_path, is_dir) -> bool``.  Defaults to
        ``options.ignore_rules(root)`` for each scanned root.
    """

    def __init__(
        self,
        pattern: CompiledPattern,
        registry: TagRegistry,
        options: ScanOptions | None = None,
        ignore_rules: IgnorePredicate | None = None,
    ) -> None:
        self._parser = LineParser(pattern, registry)
        self._options = options or ScanOptions()
        self._ignore_rules = ignore_rules

    @property
    def options(self) -> ScanOptions:
        return self._options

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, root: str | Path) -> list[tuple[Path, str]]:
        """Return ``(path, rel_path)`` for every eligible file under ``root``.

        The list is in walk order, which is sorted at every level.

        Raises
        ------
        ConfigError
            If ``root`` does not exist.
        """
        root = Path(root)
        if not root.exists():
            raise ConfigError(f"Scan root does not exist: {root}")
        if root.is_file():
            return [(root, root.name)]

        ignored = self._ignore_rules or self._options.ignore_rules(root)
        max_depth = self._options.max_depth
        follow = self._options.follow_links
        found: list[tuple[Path, str]] = []

        def on_error(exc: OSError) -> None:
            logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc.strerror)

        for dirpath, dirnames, filenames in os.walk(root, followlinks=follow, onerror=on_error):
            rel_dir = Path(dirpath).relative_to(root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir
            depth = len(rel_dir.split("/")) if rel_dir else 0

            kept: list[str] = []
            if not max_depth or depth + 1 < max_depth:
                for name in sorted(dirnames):
                    rel = f"{rel_dir}/{name}" if rel_dir else name
                    full = os.path.join(dirpath, name)
                    if os.path.islink(full):
                        if not follow:
                            continue
                        if _is_loop(dirpath, full):
                            logger.warning("Skipping symlink loop %s", rel)
                            continue
                    if not ignored(rel, True):
                        kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                path = Path(dirpath) / name
                rel = f"{rel_dir}/{name}" if rel_dir else name
                if not follow and path.is_symlink():
                    continue
                if not path.is_file() or ignored(rel, False):
                    continue
                found.append((path, rel))

        logger.debug("Discovered %d file(s) under %s", len(found), root)
        return found

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan_file(self, path: Path, rel_path: str) -> FileResult | None:
        """Read and parse one file; ``None`` for binary content."""
        try:
            content = read_source(path, rel_path, self._options.sample_size)
        except FileReadError as exc:
            logger.warning("%s", exc)
            return FileResult(file_path=rel_path, error=str(exc))
        if content is None:
            logger.debug("Skipping binary file %s", rel_path)
            return None
        return FileResult(file_path=rel_path, items=self._parser.parse(rel_path, content))

    def scan(self, root: str | Path) -> list[FileResult]:
        """Scan every eligible file under ``root`` concurrently.

        Returns
        -------
        list[FileResult]
            One result per non-binary file, in completion order.
        """
        files = self.discover(root)
        return self.scan_files(files)

    def scan_files(self, files: Iterable[tuple[Path, str]]) -> list[FileResult]:
        """Parse already-discovered files on the worker pool."""
        files = list(files)
        if not files:
            return []
        results: list[FileResult] = []
        workers = min(self._options.worker_count, len(files))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="todotree-scan") as pool:
            futures = [pool.submit(self.scan_file, path, rel) for path, rel in files]
            for future in as_completed(futures):
                result = future.result()
                if result is not None:
                    results.append(result)
        return results


def scan(
    root_path: str | Path,
    ignore_rules: IgnorePredicate | None,
    compiled_pattern: CompiledPattern,
    registry: TagRegistry,
    options: ScanOptions | None = None,
) -> list[FileResult]:
    """Convenience function: scan ``root_path`` with a one-off scanner.

    Parameters
    ----------
    root_path:
        Directory (or single file) to scan.
    ignore_rules:
        Predicate ``(rel_path, is_dir) -> bool``; ``None`` builds
        ``IgnoreRules`` from ``options``.
    compiled_pattern:
        Pattern from ``compile_pattern``.
    registry:
        The registry the pattern was compiled from.
    options:
        Traversal and scheduling settings.

    Returns
    -------
    list[FileResult]
        Per-file results in completion order.
    """
    scanner = DirectoryScanner(compiled_pattern, registry, options, ignore_rules)
    return scanner.scan(root_path)
