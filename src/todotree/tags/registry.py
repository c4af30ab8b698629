"""Tag registry: the resolved, immutable set of recognized tags.

``resolve`` merges the built-in tags with user overrides and returns a
``TagRegistry``.  The registry precomputes a mapping from every
normalized name and alias to its canonical ``Tag`` so that the line
parser can resolve a matched token without scanning the tag list.

Usage
-----
::

    from todotree.tags import TagOverride, resolve

    registry = resolve(overrides=[TagOverride("SECURITY", priority="critical")])
    registry.lookup("SECURITY").priority
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from todotree.errors import ConfigError
from todotree.tags.defaults import DEFAULT_TAGS, Priority, TagDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tag:
    """A recognized annotation keyword.

    Parameters
    ----------
    name:
        Canonical identifier, e.g. ``"TODO"``.
    priority:
        Priority attached to every annotation carrying this tag.
    aliases:
        Alternate spellings that resolve to this tag.
    enabled:
        Disabled tags stay in the registry but are never matched.
    description:
        Free text shown by the ``tags`` command.
    """

    name: str
    priority: Priority
    aliases: frozenset[str] = field(default_factory=frozenset)
    enabled: bool = True
    description: str = ""

    @property
    def tokens(self) -> tuple[str, ...]:
        """Name followed by the aliases in sorted order."""
        return (self.name, *sorted(self.aliases))


@dataclass(frozen=True)
class TagOverride:
    """A user-supplied change to the tag set.

    Only the fields that are not ``None`` are applied when the override
    targets an existing tag.  ``priority`` may be a ``Priority`` or its
    name as a string.
    """

    name: str
    aliases: Iterable[str] | None = None
    priority: Priority | str | None = None
    enabled: bool | None = None
    description: str | None = None


@dataclass(frozen=True)
class TagRegistry:
    """Immutable set of tags plus a precomputed token lookup.

    Construction validates that no two tags claim the same name or alias
    under the registry's case rule.

    Raises
    ------
    ConfigError
        If two tokens of different tags normalize to the same string,
        or a name or alias is empty.
    """

    tags: tuple[Tag, ...]
    ignore_case: bool = False
    _lookup: Mapping[str, Tag] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        lookup: dict[str, Tag] = {}
        for tag in self.tags:
            for token in tag.tokens:
                if not token or not token.strip():
                    raise ConfigError(f"Tag {tag.name!r} has an empty name or alias")
                key = self.normalize(token)
                owner = lookup.get(key)
                if owner is not None and owner.name != tag.name:
                    raise ConfigError(
                        f"Ambiguous tag set: {token!r} of tag {tag.name!r} collides "
                        f"with tag {owner.name!r}"
                        + (" when ignoring case" if self.ignore_case else "")
                    )
                if owner is not None and token == tag.name and owner is not tag:
                    raise ConfigError(f"Duplicate tag name {tag.name!r}")
                lookup[key] = tag
        # dataclass(frozen=True) blocks normal assignment
        object.__setattr__(self, "_lookup", MappingProxyType(lookup))

    def normalize(self, token: str) -> str:
        """Return the lookup key for ``token`` under the case rule."""
        return token.lower() if self.ignore_case else token

    def lookup(self, token: str) -> Tag | None:
        """Resolve a name or alias to its canonical ``Tag``."""
        return self._lookup.get(self.normalize(token))

    def get(self, name: str) -> Tag:
        """Return the tag named ``name`` (or aliased by it).

        Raises
        ------
        KeyError
            If no tag claims ``name``.
        """
        tag = self.lookup(name)
        if tag is None:
            raise KeyError(name)
        return tag

    @property
    def enabled_tags(self) -> tuple[Tag, ...]:
        """Tags that take part in matching, in registry order."""
        return tuple(t for t in self.tags if t.enabled)

    @property
    def names(self) -> list[str]:
        return [t.name for t in self.tags]

    def tokens(self) -> list[str]:
        """Every name and alias of the enabled tags."""
        return [token for tag in self.enabled_tags for token in tag.tokens]

    def selecting(self, names: Iterable[str]) -> "TagRegistry":
        """Return a registry in which only ``names`` are enabled.

        Names that are not yet known are added at ``Priority.MEDIUM``.
        An empty ``names`` returns ``self`` unchanged.
        """
        wanted = [n for n in names if n and n.strip()]
        if not wanted:
            return self
        enabled: set[str] = set()
        added: list[Tag] = []
        for name in wanted:
            tag = self.lookup(name)
            if tag is not None:
                enabled.add(tag.name)
            elif name not in {t.name for t in added}:
                added.append(Tag(name=name.strip(), priority=Priority.MEDIUM))
        tags = [replace(t, enabled=t.name in enabled) for t in self.tags]
        return TagRegistry(tags=(*tags, *added), ignore_case=self.ignore_case)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.lookup(token) is not None


def _aliases(values: Iterable[str] | None, owner: str) -> frozenset[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    result: set[str] = set()
    for alias in values:
        if not isinstance(alias, str) or not alias.strip():
            raise ConfigError(f"Tag {owner!r} has an empty or non-string alias")
        result.add(alias.strip())
    return frozenset(result)


def resolve(
    defaults: Iterable[TagDefinition | Tag] = DEFAULT_TAGS,
    overrides: Iterable[TagOverride] = (),
    ignore_case: bool = False,
) -> TagRegistry:
    """Merge built-in tags with user overrides into a ``TagRegistry``.

    Parameters
    ----------
    defaults:
        The base tag set, normally ``DEFAULT_TAGS``.
    overrides:
        Changes applied in order.  An override whose name matches an
        existing tag under the case rule updates that tag; any other
        override adds a new tag.
    ignore_case:
        Active case rule for tag names and aliases.

    Returns
    -------
    TagRegistry
        The resolved, immutable registry.

    Raises
    ------
    ConfigError
        If a priority is not a recognized level, a name is empty, or two
        distinct names or aliases collide under the case rule.
    """

    def key(token: str) -> str:
        return token.lower() if ignore_case else token

    merged: dict[str, Tag] = {}
    for definition in defaults:
        if isinstance(definition, Tag):
            tag = definition
        else:
            tag = Tag(
                name=definition.name,
                priority=definition.priority,
                description=definition.description,
            )
        k = key(tag.name)
        if k in merged:
            raise ConfigError(
                f"Ambiguous tag set: {tag.name!r} collides with {merged[k].name!r}"
            )
        merged[k] = tag

    override_names: dict[str, str] = {}
    for override in overrides:
        name = (override.name or "").strip()
        if not name:
            raise ConfigError("Tag override without a name")
        k = key(name)
        previous = override_names.setdefault(k, name)
        if previous != name:
            raise ConfigError(
                f"Ambiguous tag set: overrides {previous!r} and {name!r} "
                "name the same tag when ignoring case"
            )
        priority = None if override.priority is None else Priority.parse(override.priority)
        existing = merged.get(k)
        if existing is None:
            merged[k] = Tag(
                name=name,
                priority=priority or Priority.MEDIUM,
                aliases=_aliases(override.aliases, name),
                enabled=True if override.enabled is None else bool(override.enabled),
                description=override.description or "",
            )
            logger.debug("Added tag %r (%s)", name, merged[k].priority.label)
            continue
        changes: dict[str, object] = {}
        if priority is not None:
            changes["priority"] = priority
        if override.aliases is not None:
            changes["aliases"] = _aliases(override.aliases, existing.name)
        if override.enabled is not None:
            changes["enabled"] = bool(override.enabled)
        if override.description is not None:
            changes["description"] = override.description
        merged[k] = replace(existing, **changes)
        logger.debug("Overrode tag %r: %s", existing.name, sorted(changes))

    return TagRegistry(tags=tuple(merged.values()), ignore_case=ignore_case)
