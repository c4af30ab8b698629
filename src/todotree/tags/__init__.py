"""Tag registry module.

Exports the ``Priority`` enum, the built-in ``DEFAULT_TAGS``, and the
``resolve`` function that builds an immutable ``TagRegistry``.
"""
from __future__ import annotations

from todotree.tags.defaults import (
    DEFAULT_TAGS,
    Priority,
    TagDefinition,
    default_tag_names,
    find_default,
)
from todotree.tags.registry import Tag, TagOverride, TagRegistry, resolve

__all__ = [
    "DEFAULT_TAGS",
    "Priority",
    "Tag",
    "TagDefinition",
    "TagOverride",
    "TagRegistry",
    "default_tag_names",
    "find_default",
    "resolve",
]
