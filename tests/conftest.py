"""Shared test fixtures for todo-tree.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from todotree.pattern.compiler import CompiledPattern, compile_pattern
from todotree.pattern.options import MatchOptions
from todotree.tags.registry import TagRegistry, resolve


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "todotree"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture(autouse=True)
def isolated_app_dir(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config lookup at an empty directory."""
    app_dir = tmp_path_factory.mktemp("app-dir")
    monkeypatch.setattr("click.get_app_dir", lambda *args, **kwargs: str(app_dir))
    return app_dir


@pytest.fixture()
def registry() -> TagRegistry:
    """The built-in tag set under the default (case-sensitive) rule."""
    return resolve()


@pytest.fixture()
def compiled(registry: TagRegistry) -> CompiledPattern:
    """Pattern for the built-in tags with default options."""
    return compile_pattern(registry, MatchOptions())


@pytest.fixture()
def make_tree(tmp_path: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """Return a helper that writes ``{relative_path: content}`` under tmp_path."""

    def _make(files: dict[str, str | bytes]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make
