"""Line parser: extracts annotations from the text of one file.

The unit of matching is a single line; block comments spanning several
lines are never joined.  Every match on a line is reported, left to
right, and its text runs up to the next match on the same line.

Usage
-----
::

    from todotree.parser import parse

    items = parse("src/app.py", source, compiled, registry)
"""
from __future__ import annotations

import re

from todotree.pattern.compiler import BLOCK_CLOSERS, CompiledPattern
from todotree.results.models import AnnotationItem
from todotree.tags.registry import TagRegistry

_BOM = "\ufeff"


def split_lines(content: str) -> list[str]:
    """Split ``content`` on ``\\n`` and drop carriage returns.

    Only ``\\n`` counts as a line break so that line numbers agree with
    editors; a final newline does not start an extra line.
    """
    if not content:
        return []
    if content.startswith(_BOM):
        content = content[1:]
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _clean_text(text: str, marker: str) -> str:
    text = text.strip()
    closer = BLOCK_CLOSERS.get(marker)
    if closer and text.endswith(closer):
        text = text[: -len(closer)].rstrip()
    return text


class LineParser:
    """Applies a compiled pattern to file contents.

    Parameters
    ----------
    pattern:
        The run's shared ``CompiledPattern``.
    registry:
        Registry used to resolve matched tokens to canonical tags.
    """

    __slots__ = ("_pattern", "_registry")

    def __init__(self, pattern: CompiledPattern, registry: TagRegistry) -> None:
        self._pattern = pattern
        self._registry = registry

    def parse_line(
        self, line: str, line_number: int, file_path: str = ""
    ) -> list[AnnotationItem]:
        """Return every annotation in ``line``.

        Parameters
        ----------
        line:
            A single line without its terminator.
        line_number:
            1-based number of ``line`` in its file.
        file_path:
            Path recorded on each item.
        """
        matches: list[re.Match[str]] = list(self._pattern.finditer(line))
        items: list[AnnotationItem] = []
        for index, match in enumerate(matches):
            tag = self._registry.lookup(match.group("tag"))
            if tag is None:
                continue
            end = matches[index + 1].start() if index + 1 < len(matches) else len(line)
            marker = match.group("marker")
            author = match.group("author")
            items.append(
                AnnotationItem(
                    file_path=file_path,
                    line_number=line_number,
                    column=match.start("tag") + 1,
                    tag_name=tag.name,
                    priority=tag.priority,
                    raw_text=_clean_text(line[match.end():end], marker),
                    marker_used=marker,
                    author=(author.strip() or None) if author is not None else None,
                    line_content=line,
                )
            )
        return items

    def parse(self, file_path: str, content: str) -> tuple[AnnotationItem, ...]:
        """Return every annotation in ``content``, ordered by line and column."""
        items: list[AnnotationItem] = []
        for number, line in enumerate(split_lines(content), start=1):
            items.extend(self.parse_line(line, number, file_path))
        return tuple(items)


def parse(
    file_path: str,
    content: str,
    compiled_pattern: CompiledPattern,
    registry: TagRegistry,
) -> tuple[AnnotationItem, ...]:
    """Convenience function: parse one file's text.

    Parameters
    ----------
    file_path:
        Path recorded on each item.
    content:
        Decoded file text.
    compiled_pattern:
        Pattern from ``compile_pattern``.
    registry:
        The registry the pattern was compiled from.

    Returns
    -------
    tuple[AnnotationItem, ...]
        Annotations in line then column order; empty when none match.
    """
    return LineParser(compiled_pattern, registry).parse(file_path, content)
