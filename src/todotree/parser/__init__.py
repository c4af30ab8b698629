"""Line parser module.

Exports the ``LineParser`` class and the ``parse`` convenience function.
"""
from __future__ import annotations

from todotree.parser.parser import LineParser, parse, split_lines

__all__ = ["LineParser", "parse", "split_lines"]
