"""
Shared infrastructure of the artifact spec builders.

Builders are strategies: each one turns a ModelDescriptor and the run's
BuildContext into zero, one or several ArtifactSpecs of a single kind.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from scrud_generator.constants import DefaultConfig, RuntimeClasses
from scrud_generator.domain.models import (
    ArtifactKind,
    FieldDescriptor,
    ModelDescriptor,
    RelationKind,
)
from scrud_generator.domain.naming import NamingConventions, module_for, split_qualified_name
from scrud_generator.domain.relationships import ModelGraph
from scrud_generator.domain.specs import ArtifactSpec, ImportSpec


logger = logging.getLogger(__name__)

BuildResult = Union[ArtifactSpec, List[ArtifactSpec], None]

# Relation member representations in DTOs and mappers
AS_DTO = "dto"
AS_IDENTIFIER = "identifier"
COPY = "copy"


@dataclass
class BuildContext:
    """
    Run-wide, read-only inputs shared by every builder.

    ``descriptors`` holds every successfully resolved model of the run,
    keyed by qualified name. ``type_exists`` answers whether a
    qualified type already exists outside the run (known types or the store).
    """

    naming: NamingConventions
    runtime_package: str = DefaultConfig.RUNTIME_PACKAGE
    descriptors: Dict[str, ModelDescriptor] = field(default_factory=dict)
    graph: Optional[ModelGraph] = None
    type_exists: Optional[Callable[[str], bool]] = None

    def __post_init__(self):
        if self.graph is None:
            self.graph = ModelGraph(self.descriptors.values())

    @classmethod
    def for_descriptors(
        cls,
        descriptors: Iterable[ModelDescriptor],
        naming: Optional[NamingConventions] = None,
        runtime_package: str = DefaultConfig.RUNTIME_PACKAGE,
        type_exists: Optional[Callable[[str], bool]] = None,
    ) -> "BuildContext":
        descriptors = list(descriptors)
        return cls(
            naming=naming or NamingConventions(),
            runtime_package=runtime_package,
            descriptors={d.qualified_name: d for d in descriptors},
            type_exists=type_exists,
        )

    def descriptor_for(self, qualified_name: str) -> Optional[ModelDescriptor]:
        return self.descriptors.get(qualified_name)

    def exists(self, qualified_name: str) -> bool:
        return self.type_exists is not None and self.type_exists(qualified_name)

    def runtime_class(self, relative: str) -> str:
        return f"{self.runtime_package}.{relative}"


class ImportCollector:
    """Collects the imports of one artifact, deduplicated, in insertion order."""

    def __init__(self):
        self._imports: List[ImportSpec] = []

    def add(self, module: str, name: Optional[str] = None) -> str:
        spec = ImportSpec(module=module, name=name)
        if spec not in self._imports:
            self._imports.append(spec)
        return name or module

    def add_type(self, declared_type: str) -> str:
        """
        Import a declared type by qualified name and return its simple name.

        Unqualified names are builtins, except ``Any`` which comes from typing.
        """
        if "." in declared_type:
            module, name = split_qualified_name(declared_type)
            return self.add(module, name)
        if declared_type == "Any":
            return self.add("typing", "Any")
        return declared_type

    def add_artifact(self, qualified_name: str) -> str:
        """Import a generated (or generated-layout) artifact class."""
        _, name = split_qualified_name(qualified_name)
        return self.add(module_for(qualified_name), name)

    def add_class(self, dotted: str) -> str:
        """Import a class by its ``module.Class`` path."""
        module, name = split_qualified_name(dotted)
        if not module:
            return name
        return self.add(module, name)

    def add_model(self, descriptor: ModelDescriptor) -> str:
        return self.add(descriptor.package_name, descriptor.simple_name)

    def as_tuple(self) -> Tuple[ImportSpec, ...]:
        return tuple(self._imports)


def base_class(imports: ImportCollector, context: BuildContext, default: str, override: Optional[str]) -> str:
    """Import and return the base class, honoring a superclass override."""
    if override:
        return imports.add_class(override)
    return imports.add_class(context.runtime_class(default))


def identifier_type(descriptor: ModelDescriptor, imports: ImportCollector) -> str:
    """Type of a model's identifier as seen by repositories and services."""
    shape = descriptor.identifier
    if shape.is_composite:
        if shape.id_type:
            return imports.add_type(shape.id_type)
        return imports.add(RuntimeClasses.CODEC_MODULE, "CompositeIdentifier")
    return imports.add_type(shape.id_type or "str")


def related_representation(
    owner: ModelDescriptor,
    model_field: FieldDescriptor,
    context: BuildContext,
) -> Tuple[str, Optional[ModelDescriptor]]:
    """
    How a relation field is represented in DTOs.

    Returns ``(AS_DTO, target)`` when the member can reference the related
    model's DTO, ``(AS_IDENTIFIER, target_or_None)`` when the target is
    unknown to the run or the relation closes a cycle in the model graph.
    """
    target = context.descriptor_for(model_field.declared_type)
    if target is None:
        return AS_IDENTIFIER, None
    if context.graph.closes_cycle(owner.qualified_name, target.qualified_name):
        return AS_IDENTIFIER, target
    return AS_DTO, target


def dto_member_type(
    owner: ModelDescriptor,
    model_field: FieldDescriptor,
    context: BuildContext,
    imports: ImportCollector,
) -> Tuple[str, str]:
    """
    Member type of a model field in a DTO, and the mapper conversion for it.

    Returns ``(type_name, conversion)`` where the type is not yet wrapped
    in Optional.
    """
    if model_field.relation_kind in (RelationKind.SCALAR, RelationKind.EMBEDDED):
        return imports.add_type(model_field.declared_type), COPY

    mode, target = related_representation(owner, model_field, context)
    if mode == AS_DTO:
        element = imports.add_artifact(context.naming.default_dto_name(target))
    elif target is not None:
        element = imports.add_type(target.identifier.reference_type)
    else:
        element = imports.add_type("Any")

    if model_field.relation_kind == RelationKind.TO_MANY:
        imports.add("typing", "List")
        return f"List[{element}]", mode
    return element, mode


class ArtifactSpecBuilder(ABC):
    """Abstract strategy building the specs of one artifact kind."""

    kind: ArtifactKind

    @abstractmethod
    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> BuildResult:
        """Build the spec(s) of this kind for one model, or None when suppressed."""
        pass
