"""Version-control style ignore rules for the directory scanner.

``IgnoreRules`` is the predicate the scanner consults for every
directory and file it walks past.  It combines:

- ``.gitignore`` / ``.ignore`` files found in the scanned tree, each
  applied to paths below the directory that holds it,
- when the root lies inside a git repository, ``.git/info/exclude`` and
  the ignore files between the repository root and the scan root,
- extra ``exclude`` globs and optional ``include`` globs (gitignore
  syntax, applied from the scan root),
- hidden-file filtering and the ``.git`` directory itself.

As in git, the deepest ignore file with a matching pattern decides, so
``!keep.log`` in ``sub/.gitignore`` re-includes a file that the root
``*.log`` excludes.  Ignore files in the tree are read lazily the first
time a path below their directory is checked.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Final

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILE_NAMES: Final[tuple[str, ...]] = (".gitignore", ".ignore")
ALWAYS_SKIPPED: Final[frozenset[str]] = frozenset({".git", ".hg", ".svn"})


def _read_patterns(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Cannot read ignore file %s: %s", path, exc)
        return []
    return text.splitlines()


def _spec(patterns: Iterable[str]) -> pathspec.GitIgnoreSpec | None:
    lines = [p for p in patterns if p and p.strip()]
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _dir_spec(directory: Path) -> pathspec.GitIgnoreSpec | None:
    patterns: list[str] = []
    for file_name in IGNORE_FILE_NAMES:
        candidate = directory / file_name
        if candidate.is_file():
            patterns.extend(_read_patterns(candidate))
    spec = _spec(patterns)
    if spec is not None:
        logger.debug("Loaded %d ignore pattern(s) from %s", len(patterns), directory)
    return spec


def find_repository(start: Path) -> Path | None:
    """Return the nearest directory at or above ``start`` holding ``.git``."""
    start = start.resolve()
    for directory in (start, *start.parents):
        if (directory / ".git").exists():
            return directory
    return None


class IgnoreRules:
    """Predicate deciding which paths the scanner skips.

    Parameters
    ----------
    root:
        Directory the relative paths passed to ``__call__`` start from.
    respect_gitignore:
        Honour ``.gitignore`` and ``.ignore`` files and the repository's
        ``.git/info/exclude``.
    hidden:
        Include dot-files and dot-directories.
    include:
        If given, only files matching one of these globs are scanned.
    exclude:
        Globs of paths to skip in addition to the ignore files.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        respect_gitignore: bool = True,
        hidden: bool = False,
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> None:
        self._root = Path(root)
        self._respect_gitignore = respect_gitignore
        self._hidden = hidden
        self._include = _spec(include)
        self._exclude = _spec(exclude)
        self._dir_specs: dict[str, pathspec.GitIgnoreSpec | None] = {}
        self._lock = threading.Lock()
        # (prefix of the scan root below the spec's directory, spec), deepest first
        self._outer_specs: list[tuple[str, pathspec.GitIgnoreSpec]] = []
        if respect_gitignore:
            self._outer_specs = self._load_outer_specs()

    @property
    def root(self) -> Path:
        return self._root

    def __call__(self, rel_path: str, is_dir: bool = False) -> bool:
        """Return ``True`` if ``rel_path`` should be skipped.

        Parameters
        ----------
        rel_path:
            POSIX path relative to ``root``.
        is_dir:
            Whether the path names a directory.
        """
        parts = [p for p in rel_path.split("/") if p]
        if not parts:
            return False
        name = parts[-1]
        if is_dir and name in ALWAYS_SKIPPED:
            return True
        if not self._hidden and name.startswith("."):
            return True

        candidate = "/".join(parts) + ("/" if is_dir else "")
        if self._exclude is not None and self._exclude.match_file(candidate):
            return True
        if self._respect_gitignore and self._ignored_by_files(parts, is_dir):
            return True
        if not is_dir and self._include is not None:
            return not self._include.match_file(candidate)
        return False

    # ------------------------------------------------------------------
    # Ignore files
    # ------------------------------------------------------------------

    def _ignored_by_files(self, parts: list[str], is_dir: bool) -> bool:
        suffix = "/" if is_dir else ""
        for depth in range(len(parts) - 1, -1, -1):
            spec = self._spec_for("/".join(parts[:depth]))
            if spec is None:
                continue
            verdict = spec.check_file("/".join(parts[depth:]) + suffix).include
            if verdict is not None:
                return verdict
        relative = "/".join(parts) + suffix
        for prefix, spec in self._outer_specs:
            verdict = spec.check_file(prefix + relative).include
            if verdict is not None:
                return verdict
        return False

    def _spec_for(self, base: str) -> pathspec.GitIgnoreSpec | None:
        with self._lock:
            if base not in self._dir_specs:
                directory = self._root / base if base else self._root
                self._dir_specs[base] = _dir_spec(directory)
            return self._dir_specs[base]

    def _load_outer_specs(self) -> list[tuple[str, pathspec.GitIgnoreSpec]]:
        root = self._root.resolve()
        if not root.is_dir():
            return []
        repo = find_repository(root)
        if repo is None:
            return []
        specs: list[tuple[str, pathspec.GitIgnoreSpec]] = []
        for directory in root.parents:
            if directory != repo and repo not in directory.parents:
                break
            spec = _dir_spec(directory)
            if spec is not None:
                specs.append((root.relative_to(directory).as_posix() + "/", spec))
        exclude_file = repo / ".git" / "info" / "exclude"
        exclude = _spec(_read_patterns(exclude_file)) if exclude_file.is_file() else None
        if exclude is not None:
            prefix = "" if root == repo else root.relative_to(repo).as_posix() + "/"
            specs.append((prefix, exclude))
        return specs
