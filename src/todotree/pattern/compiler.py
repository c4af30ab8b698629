"""Pattern compiler: turns a tag registry and match options into one regex.

The compiled expression recognizes an annotation as::

    <marker> [spaces] <TAG> [(author)] [:]

where ``<marker>`` is one of the configured comment markers and must
immediately precede the tag with only spaces or tabs between them.  The
tag is anchored on identifier boundaries, so ``ERROR_CODE`` never
matches ``ERROR`` and ``std::error`` never matches because ``::`` is not
a marker.

One ``CompiledPattern`` is built per run and shared, read-only, by every
worker that parses a file.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Final

from todotree.errors import ConfigError, PatternCompileError
from todotree.pattern.options import MatchOptions
from todotree.tags.registry import TagRegistry

logger = logging.getLogger(__name__)

_SAFE_TOKEN: Final[re.Pattern[str]] = re.compile(r"\w+(?:[-.]\w+)*")
_WORD_CHAR: Final[re.Pattern[str]] = re.compile(r"\w")

# Closing halves of block-comment markers, stripped from annotation text.
BLOCK_CLOSERS: Final[dict[str, str]] = {
    "/*": "*/",
    "<!--": "-->",
    "{-": "-}",
    "(*": "*)",
    '"""': '"""',
    "'''": "'''",
}


@dataclass(frozen=True)
class CompiledPattern:
    """A compiled annotation matcher.

    ``regex`` is ``None`` when no tag is enabled; such a pattern never
    matches.  Match objects expose the groups ``marker``, ``tag``,
    ``author`` and ``colon``.
    """

    regex: re.Pattern[str] | None
    options: MatchOptions
    tokens: tuple[str, ...]

    def finditer(self, line: str) -> Iterator[re.Match[str]]:
        """Yield every annotation match in ``line``, left to right."""
        if self.regex is None:
            return iter(())
        return self.regex.finditer(line)

    def search(self, line: str) -> re.Match[str] | None:
        if self.regex is None:
            return None
        return self.regex.search(line)

    @property
    def source(self) -> str:
        """The regex source text, empty when nothing can match."""
        return self.regex.pattern if self.regex is not None else ""


def _check_token(token: str) -> None:
    if not _SAFE_TOKEN.fullmatch(token):
        raise PatternCompileError(
            token,
            "tags and aliases may only contain letters, digits and underscores, "
            "optionally joined by '-' or '.'",
        )


def _marker_fragment(marker: str) -> str:
    fragment = re.escape(marker)
    if _WORD_CHAR.match(marker[0]):
        fragment = r"(?<!\w)" + fragment
    if _WORD_CHAR.match(marker[-1]):
        # word-like markers such as REM need whitespace before the tag
        fragment += r"(?=[ \t])"
    return fragment


def build_regex_source(tokens: list[str], options: MatchOptions) -> str:
    """Return the regex source for ``tokens`` under ``options``."""
    markers = sorted(options.comment_markers, key=lambda m: (-len(m), m))
    ordered = sorted(set(tokens), key=lambda t: (-len(t), t))
    marker_alt = "|".join(_marker_fragment(m) for m in markers)
    tag_alt = "|".join(re.escape(t) for t in ordered)
    if options.ignore_case:
        tag_alt = f"(?i:{tag_alt})"
    colon = "(?P<colon>:)" if options.require_colon else "(?P<colon>:)?"
    return (
        rf"(?P<marker>{marker_alt})[ \t]*"
        rf"(?P<tag>{tag_alt})(?!\w)"
        r"(?:\((?P<author>[^()\n]*)\))?"
        rf"{colon}"
    )


def compile_pattern(registry: TagRegistry, options: MatchOptions) -> CompiledPattern:
    """Build the annotation matcher for one run.

    Parameters
    ----------
    registry:
        The resolved tag registry.  Only enabled tags are compiled.
    options:
        Case rule, colon requirement and comment markers.

    Returns
    -------
    CompiledPattern
        The shared, immutable matcher.

    Raises
    ------
    PatternCompileError
        If a tag name or alias contains characters that cannot be safely
        embedded in the pattern.
    ConfigError
        If the registry was resolved under a different case rule than
        ``options`` requests.
    """
    if registry.ignore_case != options.ignore_case:
        raise ConfigError(
            "Tag registry and match options disagree on case sensitivity "
            f"(registry ignore_case={registry.ignore_case}, "
            f"options ignore_case={options.ignore_case})"
        )
    for tag in registry:
        for token in tag.tokens:
            _check_token(token)

    tokens = registry.tokens()
    if not tokens:
        logger.debug("No enabled tags; compiled pattern matches nothing")
        return CompiledPattern(regex=None, options=options, tokens=())

    source = build_regex_source(tokens, options)
    try:
        regex = re.compile(source)
    except re.error as exc:
        raise PatternCompileError("|".join(tokens), str(exc)) from exc
    logger.debug("Compiled annotation pattern for %d token(s): %s", len(tokens), source)
    return CompiledPattern(regex=regex, options=options, tokens=tuple(tokens))
