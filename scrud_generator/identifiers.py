"""
Composite identifier codec.

Composite identifiers are ordered tuples of 2 to 4 component identifiers,
each one the identifier of a related entity. They travel as a flat string
(REST paths, form fields) joined with ``SPLIT_CHAR`` and are rebuilt by
``decode`` through one builder per slot.

Example:
    >>> encode(["alice", "admins"])
    'alice_admins'
    >>> decode("alice_admins", 2).ids
    ('alice', 'admins')
"""

import logging
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple

from scrud_generator.constants import IdentifierDefaults
from scrud_generator.exceptions import MalformedIdentifier


logger = logging.getLogger(__name__)

SPLIT_CHAR = IdentifierDefaults.SPLIT_CHAR

Builder = Callable[[str], Any]


def check_arity(arity: int) -> int:
    """Ensure a composite identifier arity is within the supported range."""
    if not isinstance(arity, int) or not IdentifierDefaults.MIN_ARITY <= arity <= IdentifierDefaults.MAX_ARITY:
        raise ValueError(
            f"Composite identifiers have {IdentifierDefaults.MIN_ARITY} to "
            f"{IdentifierDefaults.MAX_ARITY} components, got {arity!r}"
        )
    return arity


def id_or_empty(component: Any) -> str:
    """
    Return the string form of a component's identifier.

    A component is either an entity exposing an ``id`` attribute, a raw
    identifier value, or None. Missing identifiers become an empty string.
    """
    if component is None:
        return ""
    value = getattr(component, "id", component)
    if value is None:
        return ""
    return str(value)


def encode(components: Sequence[Any]) -> Optional[str]:
    """
    Join the identifiers of the given components with ``SPLIT_CHAR``.

    Empty identifiers keep their (empty) segment so positions are preserved.
    Returns None when every segment is empty.
    """
    check_arity(len(components))
    segments = [id_or_empty(component) for component in components]
    if not any(segment.strip() for segment in segments):
        return None
    return SPLIT_CHAR.join(segments)


def decode(value: str, arity: int, builders: Optional[Sequence[Builder]] = None) -> "CompositeIdentifier":
    """
    Split ``value`` into exactly ``arity`` non-blank parts and build each component.

    Args:
        value: The canonical string form
        arity: Expected number of components (2, 3 or 4)
        builders: One callable per slot turning the raw part into a component,
            identity when omitted

    Raises:
        MalformedIdentifier: If the split does not yield ``arity`` non-blank parts
    """
    check_arity(arity)
    if builders is None:
        builders = [str] * arity
    elif len(builders) != arity:
        raise ValueError(f"Expected {arity} builders, got {len(builders)}")

    if not isinstance(value, str):
        raise MalformedIdentifier(
            f"Composite identifier must be a string, got {type(value).__name__}",
            value=value, arity=arity
        )

    parts = value.split(SPLIT_CHAR)
    if len(parts) != arity or any(not part.strip() for part in parts):
        raise MalformedIdentifier(
            f"Given value must have {arity} non-blank parts separated by '{SPLIT_CHAR}'",
            value=value, arity=arity
        )

    return CompositeIdentifier([build(part) for build, part in zip(builders, parts)])


class CompositeIdentifier:
    """
    An ordered tuple of component entities (or raw identifiers).

    Equality and hashing only consider the components' identifiers, never the
    component objects themselves nor a cached string form.
    """

    __slots__ = ("_components",)

    def __init__(self, components: Iterable[Any]):
        components = tuple(components)
        check_arity(len(components))
        self._components = components

    @classmethod
    def from_string(cls, value: str, arity: int, builders: Optional[Sequence[Builder]] = None) -> "CompositeIdentifier":
        return decode(value, arity, builders)

    @property
    def components(self) -> Tuple[Any, ...]:
        return self._components

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(id_or_empty(component) for component in self._components)

    @property
    def arity(self) -> int:
        return len(self._components)

    def to_string(self) -> Optional[str]:
        return encode(self._components)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompositeIdentifier):
            return NotImplemented
        return self.ids == other.ids

    def __hash__(self) -> int:
        return hash(self.ids)

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self):
        return iter(self._components)

    def __str__(self) -> str:
        return self.to_string() or ""

    def __repr__(self) -> str:
        return f"CompositeIdentifier({self.ids!r})"


class IdentifierAdapter:
    """
    Runtime base class of generated identifier adapters.

    Generated subclasses set ``arity`` (0 for scalar identifiers) and
    implement ``read_id``/``build_id`` by delegating to ``encode``/``decode``.
    Override ``builders`` to resolve component entities from their raw ids.
    """

    arity: int = 0
    component_types: Tuple[str, ...] = ()

    def builders(self) -> Sequence[Builder]:
        return [str] * self.arity

    def read_id(self, model: Any) -> Any:
        return getattr(model, "id", None)

    def build_id(self, value: Any) -> Any:
        return value
