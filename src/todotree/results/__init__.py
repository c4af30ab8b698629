"""Scan result module.

Exports the result records, the ``aggregate`` function and the
``ResultSerializer``.
"""
from __future__ import annotations

from todotree.results.aggregator import aggregate, normalize_path
from todotree.results.models import AnnotationItem, FileResult, ScanResult, Summary
from todotree.results.serializer import ResultSerializer

__all__ = [
    "AnnotationItem",
    "FileResult",
    "ResultSerializer",
    "ScanResult",
    "Summary",
    "aggregate",
    "normalize_path",
]
