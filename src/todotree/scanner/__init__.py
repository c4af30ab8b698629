"""Directory scanner module.

Exports the ``DirectoryScanner`` class, the ``scan`` convenience
function, ``ScanOptions`` and the ``IgnoreRules`` predicate.
"""
from __future__ import annotations

from todotree.scanner.ignore import IgnoreRules
from todotree.scanner.scanner import (
    DirectoryScanner,
    ScanOptions,
    is_binary,
    read_source,
    scan,
)

__all__ = [
    "DirectoryScanner",
    "IgnoreRules",
    "ScanOptions",
    "is_binary",
    "read_source",
    "scan",
]
