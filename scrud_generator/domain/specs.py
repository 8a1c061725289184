"""
Artifact specifications.

An artifact specification is a structured, not yet rendered description of
one generated class: its qualified name, imports, base classes, members and
operations. Operation bodies are small expression trees rather than source
text, so that any renderer can turn them into real code and tests can
inspect what a builder decided without parsing output.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union

from scrud_generator.domain.models import ArtifactKind, ModelDescriptor
from scrud_generator.domain.naming import module_for


# =============================================================================
# EXPRESSIONS
# =============================================================================

@dataclass(frozen=True)
class Ref:
    """A (possibly dotted) name reference, e.g. ``self.repository``."""

    name: str


@dataclass(frozen=True)
class Literal:
    """A constant value: str, int, bool, None or nested tuples of those."""

    value: Any


@dataclass(frozen=True)
class Call:
    """A call of a dotted callable with positional and keyword arguments."""

    func: str
    args: Tuple["Expression", ...] = ()
    kwargs: Tuple[Tuple[str, "Expression"], ...] = ()


Expression = Union[Ref, Literal, Call]


# =============================================================================
# QUERY SHAPES
# =============================================================================

class LookupStrategy(Enum):
    """How a related entity is located from its owner's identifier."""

    DIRECT = "direct"
    JOIN = "join"


@dataclass(frozen=True)
class QueryShape:
    """
    Structural description of a repository lookup.

    DIRECT queries ``root_type`` (the related type) with equality on
    ``predicate_path`` (``<reverse field>.id``). JOIN queries ``root_type``
    (the owning type) with equality on ``id`` and selects the joined
    ``select`` field. ``one_to_one`` records whether the owning relation
    is one-to-one.
    """

    strategy: LookupStrategy
    root_type: str
    predicate_path: str
    select: Optional[str] = None
    one_to_one: bool = False


# =============================================================================
# MEMBERS
# =============================================================================

@dataclass(frozen=True)
class ImportSpec:
    """``from module import name`` (or ``import module`` when name is None)."""

    module: str
    name: Optional[str] = None


@dataclass(frozen=True)
class AttributeSpec:
    """A class-level attribute assignment."""

    name: str
    value: Expression


@dataclass(frozen=True)
class MemberSpec:
    """An annotated instance member, e.g. a DTO field."""

    name: str
    type_name: str
    default: Optional[Expression] = None


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    type_name: Optional[str] = None
    default: Optional[Expression] = None


@dataclass(frozen=True)
class OperationSpec:
    """
    A method of a generated class.

    An operation without a body is abstract. Repository lookups of related
    entities carry the ``query`` they perform.
    """

    name: str
    parameters: Tuple[ParameterSpec, ...] = ()
    returns: Optional[str] = None
    body: Optional[Expression] = None
    query: Optional[QueryShape] = None
    docstring: Optional[str] = None

    @property
    def is_abstract(self) -> bool:
        return self.body is None


@dataclass(frozen=True)
class ArtifactSpec:
    """
    Structured description of one generated class.

    ``source_descriptor`` is a back reference for traceability only and is
    excluded from equality.
    """

    qualified_name: str
    kind: ArtifactKind
    imports: Tuple[ImportSpec, ...] = ()
    bases: Tuple[str, ...] = ()
    decorators: Tuple[str, ...] = ()
    attributes: Tuple[AttributeSpec, ...] = ()
    fields: Tuple[MemberSpec, ...] = ()
    operations: Tuple[OperationSpec, ...] = ()
    docstring: Optional[str] = None
    source_descriptor: Optional[ModelDescriptor] = field(default=None, compare=False, repr=False)

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def module(self) -> str:
        return module_for(self.qualified_name)

    def get_operation(self, name: str) -> Optional[OperationSpec]:
        for operation in self.operations:
            if operation.name == name:
                return operation
        return None

    def get_attribute(self, name: str) -> Optional[AttributeSpec]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    @property
    def operation_names(self) -> Tuple[str, ...]:
        return tuple(operation.name for operation in self.operations)
