"""Priority levels and the built-in tag vocabulary.

Every tag carries a ``Priority``.  The built-in set below is what a run
uses when no configuration overrides it.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from todotree.errors import ConfigError


class Priority(Enum):
    """Ordered priority levels: ``CRITICAL > HIGH > MEDIUM > LOW``."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.value >= other.value

    @property
    def label(self) -> str:
        """Lowercase name used in config files and serialized output."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: object) -> "Priority":
        """Coerce ``value`` into a ``Priority``.

        Accepts a ``Priority`` member or its name in any case
        (``"critical"``, ``"High"``...).

        Raises
        ------
        ConfigError
            If ``value`` is not one of the recognized levels.
        """
        if isinstance(value, Priority):
            return value
        if isinstance(value, str):
            member = cls.__members__.get(value.strip().upper())
            if member is not None:
                return member
        levels = ", ".join(p.label for p in sorted(cls, reverse=True))
        raise ConfigError(f"Unknown priority {value!r}; expected one of: {levels}")


@dataclass(frozen=True)
class TagDefinition:
    """A built-in tag with its description and default priority."""

    name: str
    description: str
    priority: Priority


DEFAULT_TAGS: Final[tuple[TagDefinition, ...]] = (
    TagDefinition("TODO", "General TODO items", Priority.MEDIUM),
    TagDefinition("FIXME", "Items that need fixing", Priority.CRITICAL),
    TagDefinition("BUG", "Known bugs", Priority.CRITICAL),
    TagDefinition("NOTE", "Notes and documentation", Priority.LOW),
    TagDefinition("HACK", "Hacky solutions", Priority.HIGH),
    TagDefinition("XXX", "Critical items requiring attention", Priority.CRITICAL),
    TagDefinition("WARN", "Warnings", Priority.HIGH),
    TagDefinition("PERF", "Performance issues", Priority.MEDIUM),
)


def default_tag_names() -> list[str]:
    """Return the names of the built-in tags in declaration order."""
    return [t.name for t in DEFAULT_TAGS]


def find_default(name: str) -> TagDefinition | None:
    """Find a built-in tag by name, ignoring case."""
    wanted = name.upper()
    for tag in DEFAULT_TAGS:
        if tag.name.upper() == wanted:
            return tag
    return None
