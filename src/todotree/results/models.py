"""Result records produced by a scan.

Every record is a frozen dataclass: the line parser creates
``AnnotationItem`` objects, the directory scanner wraps them in one
``FileResult`` per file, and the aggregator assembles the final
``ScanResult`` with its ``Summary``.  Nothing is mutated after it has
been handed to the next stage.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from todotree.tags.defaults import Priority


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AnnotationItem:
    """One recognized tag occurrence.

    Parameters
    ----------
    file_path:
        Root-relative POSIX path of the file.
    line_number:
        1-based line of the tag.
    column:
        1-based column (in characters) where the tag token starts.
    tag_name:
        Canonical tag name, even when an alias or other case matched.
    priority:
        Priority of the canonical tag.
    raw_text:
        Annotation text following the tag and colon, trimmed.
    marker_used:
        The comment marker that introduced the annotation.
    author:
        Name given as ``TODO(name):``, if any.
    line_content:
        The complete source line.
    """

    file_path: str
    line_number: int
    column: int
    tag_name: str
    priority: Priority
    raw_text: str
    marker_used: str
    author: str | None = None
    line_content: str = ""

    def __str__(self) -> str:
        who = f"({self.author})" if self.author else ""
        return (
            f"{self.file_path}:{self.line_number}:{self.column}: "
            f"{self.tag_name}{who}: {self.raw_text}"
        )


@dataclass(frozen=True, slots=True)
class FileResult:
    """Annotations found in a single file.

    ``error`` holds a message when the file could not be read or decoded;
    ``items`` is then empty.
    """

    file_path: str
    items: tuple[AnnotationItem, ...] = ()
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


# ---------------------------------------------------------------------------
# Run-level results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Summary:
    """Counts derived from the files of a ``ScanResult``.

    ``by_tag`` is ordered by tag name and ``by_priority`` lists every
    level from CRITICAL down to LOW, zero counts included.
    """

    total_count: int = 0
    by_tag: Mapping[str, int] = field(default_factory=dict)
    by_priority: Mapping[Priority, int] = field(default_factory=dict)
    error_file_count: int = 0
    files_scanned: int = 0
    files_with_items: int = 0

    @classmethod
    def from_files(cls, files: Iterable[FileResult]) -> "Summary":
        """Compute a summary with a single pass over ``files``."""
        by_tag: dict[str, int] = {}
        by_priority: dict[Priority, int] = {p: 0 for p in sorted(Priority, reverse=True)}
        total = errors = scanned = with_items = 0
        for file_result in files:
            scanned += 1
            if file_result.error is not None:
                errors += 1
            if file_result.items:
                with_items += 1
            for item in file_result.items:
                total += 1
                by_tag[item.tag_name] = by_tag.get(item.tag_name, 0) + 1
                by_priority[item.priority] += 1
        return cls(
            total_count=total,
            by_tag=dict(sorted(by_tag.items())),
            by_priority=by_priority,
            error_file_count=errors,
            files_scanned=scanned,
            files_with_items=with_items,
        )


@dataclass(frozen=True)
class ScanResult:
    """The terminal artifact of a run, handed to renderers.

    Parameters
    ----------
    files:
        One ``FileResult`` per scanned file, sorted by path.
    summary:
        Counts computed from ``files``.
    root:
        The directory (or file) that was scanned.
    """

    files: tuple[FileResult, ...]
    summary: Summary
    root: str = ""

    def all_items(self) -> list[AnnotationItem]:
        """Every annotation in path, line, column order."""
        return [item for f in self.files for item in f.items]

    @property
    def files_with_items(self) -> tuple[FileResult, ...]:
        return tuple(f for f in self.files if f.items)

    @property
    def failed_files(self) -> tuple[FileResult, ...]:
        return tuple(f for f in self.files if f.error is not None)

    def filter_by_tag(self, *tags: str) -> "ScanResult":
        """Return a result keeping only items whose tag is in ``tags``.

        Tag names are compared case-insensitively.  Files keep their
        place and error state so that the summary still reflects every
        scanned file.
        """
        wanted = {t.upper() for t in tags}
        return self._filtered(lambda item: item.tag_name.upper() in wanted)

    def filter_by_priority(self, minimum: Priority) -> "ScanResult":
        """Return a result keeping only items at or above ``minimum``."""
        return self._filtered(lambda item: item.priority >= minimum)

    def _filtered(self, keep) -> "ScanResult":
        files = tuple(
            FileResult(
                file_path=f.file_path,
                items=tuple(i for i in f.items if keep(i)),
                error=f.error,
            )
            for f in self.files
        )
        return ScanResult(files=files, summary=Summary.from_files(files), root=self.root)
