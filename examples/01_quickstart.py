#!/usr/bin/env python3
"""Example: Quickstart — todo-tree

Minimal working example: write a small project to a temporary
directory, scan it, and print what was found.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install todo-tree
"""
from __future__ import annotations

import tempfile
from pathlib import Path

import todotree
from todotree.results.serializer import ResultSerializer
from todotree.tags import TagOverride

FILES = {
    "src/main.rs": (
        "fn main() {\n"
        "    // TODO: parse command line arguments\n"
        "    // FIXME(ana): panics on empty input\n"
        "}\n"
    ),
    "src/util.py": "# NOTE: keep in sync with main.rs\n# SEC: validate the token\n",
    "docs/index.html": "<!-- HACK: inline styles until the theme lands -->\n",
}


def main() -> None:
    print(f"todo-tree version: {todotree.__version__}")

    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        for rel, content in FILES.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        # Step 1: Parse a single line with the built-in tags
        registry = todotree.resolve_tags()
        pattern = todotree.compile_pattern(registry, todotree.MatchOptions())
        items = todotree.parse("inline.py", "x = 1  # BUG: off by one", pattern, registry)
        print(f"Inline: {items[0]}")

        # Step 2: Scan the whole tree with an extra tag
        overrides = [TagOverride("SECURITY", aliases=["SEC"], priority="critical")]
        result = todotree.scan_tree(root, overrides=overrides)
        print(f"\nFound {result.summary.total_count} annotation(s) "
              f"in {result.summary.files_scanned} file(s)")
        for item in result.all_items():
            print(f"  [{item.priority.label}] {item}")

        # Step 3: Count by tag and priority
        print(f"\nBy tag: {dict(result.summary.by_tag)}")
        by_priority = {p.label: n for p, n in result.summary.by_priority.items()}
        print(f"By priority: {by_priority}")

        # Step 4: Export as JSON
        text = ResultSerializer().to_json(result.filter_by_priority(todotree.Priority.HIGH))
        print(f"\nHigh-priority JSON ({len(text)} chars):")
        print(text[:300])


if __name__ == "__main__":
    main()
