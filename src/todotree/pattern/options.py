"""Matching options shared by the pattern compiler and the scanner."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

from todotree.errors import ConfigError

DEFAULT_MARKERS: Final[tuple[str, ...]] = (
    "//",
    "/*",
    "*",
    "#",
    "--",
    ";",
    "%",
    "<!--",
    "{-",
    "(*",
    '"""',
    "'''",
)


def _normalize_markers(markers: Iterable[str]) -> tuple[str, ...]:
    if isinstance(markers, str):
        markers = [markers]
    result: list[str] = []
    for marker in markers:
        if not isinstance(marker, str):
            raise ConfigError(f"Comment marker must be a string, got {marker!r}")
        marker = marker.strip()
        if not marker:
            raise ConfigError("Comment marker must not be empty")
        if set(marker) == {":"}:
            # a run of colons is a scope operator (std::io), never a comment
            raise ConfigError(f"{marker!r} cannot be used as a comment marker")
        if marker not in result:
            result.append(marker)
    return tuple(result)


@dataclass(frozen=True)
class MatchOptions:
    """How annotations are recognized within a line.

    Parameters
    ----------
    ignore_case:
        Match tags regardless of case.
    require_colon:
        Require a colon directly after the tag (or its ``(author)``).
    comment_markers:
        Tokens that introduce a comment.  Order is kept, duplicates are
        dropped.  ``::`` is rejected.

    Raises
    ------
    ConfigError
        If a marker is empty, not a string, or made only of colons.
    """

    ignore_case: bool = False
    require_colon: bool = True
    comment_markers: tuple[str, ...] = DEFAULT_MARKERS

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "comment_markers", _normalize_markers(self.comment_markers)
        )
        if not self.comment_markers:
            raise ConfigError("At least one comment marker is required")
