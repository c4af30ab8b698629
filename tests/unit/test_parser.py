"""Unit tests for todotree.parser — LineParser, parse and split_lines."""
from __future__ import annotations

import pytest

from todotree.parser import LineParser, parse, split_lines
from todotree.pattern import CompiledPattern, MatchOptions, compile_pattern
from todotree.tags import Priority, TagOverride, TagRegistry, resolve


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup(
    *, ignore_case: bool = False, require_colon: bool = True, overrides: list[TagOverride] | None = None
) -> tuple[CompiledPattern, TagRegistry]:
    registry = resolve(overrides=overrides or [], ignore_case=ignore_case)
    pattern = compile_pattern(
        registry, MatchOptions(ignore_case=ignore_case, require_colon=require_colon)
    )
    return pattern, registry


# ===========================================================================
# split_lines
# ===========================================================================


class TestSplitLines:
    def test_empty(self) -> None:
        assert split_lines("") == []

    def test_trailing_newline_does_not_add_line(self) -> None:
        assert split_lines("a\nb\n") == ["a", "b"]

    def test_crlf(self) -> None:
        assert split_lines("a\r\nb\r\n") == ["a", "b"]

    def test_blank_lines_kept(self) -> None:
        assert split_lines("a\n\nb") == ["a", "", "b"]

    def test_only_newline_breaks(self) -> None:
        assert split_lines("a\x0cb c") == ["a\x0cb c"]

    def test_bom_removed(self) -> None:
        assert split_lines("\ufeff# TODO: x") == ["# TODO: x"]


# ===========================================================================
# parse
# ===========================================================================


class TestParse:
    def test_simple_item(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("src/main.rs", "// TODO: Fix this later", compiled, registry)
        assert len(items) == 1
        item = items[0]
        assert item.file_path == "src/main.rs"
        assert item.tag_name == "TODO"
        assert item.priority is Priority.MEDIUM
        assert item.raw_text == "Fix this later"
        assert item.line_number == 1
        assert item.column == 4
        assert item.marker_used == "//"
        assert item.author is None
        assert item.line_content == "// TODO: Fix this later"

    def test_column_is_one_based_at_tag(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.py", "x = 1  # FIXME: wrong", compiled, registry)
        assert items[0].column == "x = 1  # FIXME: wrong".index("FIXME") + 1

    def test_line_numbers(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        content = "\n// Regular comment\n// TODO: First\nfn main() {}\n// FIXME: Second\n// NOTE: Third\n"
        items = parse("a.rs", content, compiled, registry)
        assert [(i.tag_name, i.line_number) for i in items] == [
            ("TODO", 3),
            ("FIXME", 5),
            ("NOTE", 6),
        ]

    def test_no_matches_returns_empty(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        assert parse("a.py", "print('hello')\n", compiled, registry) == ()

    def test_empty_content(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        assert parse("a.py", "", compiled, registry) == ()

    def test_author(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.rs", "// TODO(john): Implement this", compiled, registry)
        assert items[0].author == "john"
        assert items[0].raw_text == "Implement this"

    def test_empty_author_is_none(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.rs", "// TODO(): x", compiled, registry)
        assert items[0].author is None

    def test_multiple_matches_per_line(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.c", "x(); // TODO: first // FIXME: second", compiled, registry)
        assert [(i.tag_name, i.raw_text) for i in items] == [
            ("TODO", "first"),
            ("FIXME", "second"),
        ]
        assert items[0].column < items[1].column

    def test_block_comment_closer_stripped(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.c", "/* BUG: off by one */", compiled, registry)
        assert items[0].raw_text == "off by one"

    def test_html_comment_closer_stripped(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.html", "<!-- HACK: inline style -->", compiled, registry)
        assert items[0].raw_text == "inline style"
        assert items[0].marker_used == "<!--"

    def test_closer_kept_for_line_markers(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.py", "# NOTE: ends with */", compiled, registry)
        assert items[0].raw_text == "ends with */"

    def test_special_characters_in_text(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.rs", "// TODO: Handle special chars: @#$%^&*()", compiled, registry)
        assert "@#$%^&*()" in items[0].raw_text

    def test_multiline_comment_not_joined(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        content = "/*\n   TODO: not preceded by a marker\n*/"
        assert parse("a.c", content, compiled, registry) == ()

    def test_crlf_content(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        items = parse("a.c", "// TODO: one\r\n// BUG: two\r\n", compiled, registry)
        assert [i.raw_text for i in items] == ["one", "two"]
        assert items[1].line_content == "// BUG: two"

    def test_items_are_immutable(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        item = parse("a.c", "// TODO: x", compiled, registry)[0]
        with pytest.raises(AttributeError):
            item.raw_text = "y"  # type: ignore[misc]


class TestCanonicalResolution:
    def test_ignore_case_resolves_canonical_name(self) -> None:
        pattern, registry = _setup(ignore_case=True)
        items = parse("a.py", "# todo: lowercase\n# Todo: mixed", pattern, registry)
        assert [i.tag_name for i in items] == ["TODO", "TODO"]

    def test_case_sensitive_skips_lowercase(self) -> None:
        pattern, registry = _setup()
        assert parse("a.py", "# todo: lowercase", pattern, registry) == ()

    def test_alias_resolves_to_canonical(self) -> None:
        pattern, registry = _setup(
            overrides=[TagOverride("FIXME", aliases=["FIXIT"], priority="high")]
        )
        items = parse("a.py", "# FIXIT: broken", pattern, registry)
        assert items[0].tag_name == "FIXME"
        assert items[0].priority is Priority.HIGH

    def test_no_colon_mode_text(self) -> None:
        pattern, registry = _setup(require_colon=False)
        items = parse("a.rs", "// TODO fix this", pattern, registry)
        assert items[0].raw_text == "fix this"


class TestLineParser:
    def test_parse_line(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        parser = LineParser(compiled, registry)
        items = parser.parse_line("# HACK: quick fix", 7, "x.py")
        assert items[0].line_number == 7
        assert items[0].file_path == "x.py"
        assert items[0].priority is Priority.HIGH

    def test_parser_reusable_across_files(self, compiled: CompiledPattern, registry: TagRegistry) -> None:
        parser = LineParser(compiled, registry)
        first = parser.parse("a.py", "# TODO: a")
        second = parser.parse("b.py", "# TODO: b")
        assert first[0].file_path == "a.py"
        assert second[0].file_path == "b.py"
