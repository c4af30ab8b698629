"""Pattern compiler module.

Exports ``MatchOptions``, ``compile_pattern`` and the ``CompiledPattern``
it produces.
"""
from __future__ import annotations

from todotree.pattern.compiler import (
    BLOCK_CLOSERS,
    CompiledPattern,
    build_regex_source,
    compile_pattern,
)
from todotree.pattern.options import DEFAULT_MARKERS, MatchOptions

__all__ = [
    "BLOCK_CLOSERS",
    "CompiledPattern",
    "DEFAULT_MARKERS",
    "MatchOptions",
    "build_regex_source",
    "compile_pattern",
]
