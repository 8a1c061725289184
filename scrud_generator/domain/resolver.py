"""
Model descriptor resolution.

Turns one metadata bag into an immutable ModelDescriptor. Resolution fails
with UnresolvableModel when the bag is malformed, when no identifier shape
is declared, when a composite identifier has an unsupported arity, when a
to-one relation has no resolvable target type, or when a declared DTO does
not exist.
"""

import dataclasses
import logging
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from ..exceptions import UnresolvableModel
from ..identifiers import check_arity
from .metadata import FieldMetadata, ModelMetadata
from .models import (
    CompositeSlot,
    DtoVariant,
    FieldDescriptor,
    GenerationFlags,
    IdentifierShape,
    ModelDescriptor,
    RelationKind,
)
from .naming import NamingConventions
from .relationships import classify_relation


logger = logging.getLogger(__name__)

TypeExists = Callable[[str], bool]


def _never_exists(qualified_name: str) -> bool:
    return False


def parent_package_of(package: str) -> str:
    return package.rsplit(".", 1)[0] if "." in package else ""


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError to ``loc: msg`` pairs."""
    parts = []
    for item in error.errors():
        loc = " -> ".join(str(loc_item) for loc_item in item.get("loc", ())) or "Model Level"
        parts.append(f"{loc}: {item.get('msg', 'Unknown validation error')}")
    return "; ".join(parts)


class ModelDescriptorResolver:
    """
    Resolves metadata bags into model descriptors.

    Args:
        properties: Free-form run properties (``naming.*`` overrides)
        type_exists: Existence oracle for qualified type names; it must know
            about every model of the run as well as hand-written types
    """

    def __init__(
        self,
        properties: Optional[Mapping[str, str]] = None,
        type_exists: Optional[TypeExists] = None,
        naming: Optional[NamingConventions] = None,
    ):
        self.naming = naming or NamingConventions(properties)
        self.type_exists = type_exists or _never_exists

    def validate(self, bag: Union[Mapping[str, Any], ModelMetadata]) -> ModelMetadata:
        """Validate a raw bag against the metadata schema."""
        if isinstance(bag, ModelMetadata):
            return bag
        model_name = bag.get("name") if isinstance(bag, Mapping) else None
        try:
            return ModelMetadata.model_validate(bag)
        except ValidationError as e:
            raise UnresolvableModel(
                f"Invalid model metadata: {format_validation_error(e)}",
                model=model_name,
            ) from e

    def resolve(self, bag: Union[Mapping[str, Any], ModelMetadata]) -> ModelDescriptor:
        metadata = self.validate(bag)
        logger.debug(f"Resolving model {metadata.qualified_name}")

        identifier = self._resolve_identifier(metadata)
        fields = tuple(self._resolve_field(metadata, f) for f in metadata.fields)

        flags = GenerationFlags(
            entity=metadata.entity,
            scrud=metadata.scrud,
            service=metadata.flags.service,
            controller=metadata.flags.controller,
            disableable=metadata.flags.disableable,
            repository_superclass=metadata.flags.repository_superclass,
            service_superclass=metadata.flags.service_superclass,
            controller_superclass=metadata.flags.controller_superclass,
        )

        parent_package = metadata.parent_package
        if parent_package is None:
            parent_package = parent_package_of(metadata.package)

        descriptor = ModelDescriptor(
            simple_name=metadata.name,
            package_name=metadata.package,
            parent_package_name=parent_package,
            identifier=identifier,
            fields=fields,
            flags=flags,
            attribute_paths=tuple(metadata.attribute_paths),
        )
        return dataclasses.replace(descriptor, dto_variants=self._resolve_dtos(metadata, descriptor))

    def _resolve_identifier(self, metadata: ModelMetadata) -> IdentifierShape:
        declared = metadata.identifier
        if declared is None:
            raise UnresolvableModel(
                f"Model {metadata.qualified_name} declares no identifier shape",
                model=metadata.qualified_name,
            )

        if not declared.components:
            return IdentifierShape(id_type=declared.type)

        try:
            check_arity(len(declared.components))
        except ValueError as e:
            raise UnresolvableModel(
                f"Model {metadata.qualified_name} has an unsupported composite identifier: {e}",
                model=metadata.qualified_name,
            ) from e

        return IdentifierShape(
            id_type=declared.type,
            components=tuple(
                CompositeSlot(entity=component.entity, id_type=component.id_type)
                for component in declared.components
            ),
        )

    def _resolve_field(self, metadata: ModelMetadata, declared: FieldMetadata) -> FieldDescriptor:
        kind, one_to_one = classify_relation(declared.relation)

        if kind == RelationKind.TO_ONE:
            if not declared.type or not self.type_exists(declared.type):
                raise UnresolvableModel(
                    f"To-one relation {metadata.name}.{declared.name} has no resolvable "
                    f"target type ({declared.type or 'missing'})",
                    model=metadata.qualified_name,
                    field=declared.name,
                )
        elif kind == RelationKind.TO_MANY:
            if not declared.type:
                raise UnresolvableModel(
                    f"To-many relation {metadata.name}.{declared.name} declares no element type",
                    model=metadata.qualified_name,
                    field=declared.name,
                )
            if not self.type_exists(declared.type):
                logger.warning(
                    f"Target {declared.type} of {metadata.name}.{declared.name} is unknown; "
                    f"DTO members will reference it by identifier"
                )

        reverse_field = None
        if declared.bidirectional:
            reverse_field = declared.reverse_field
            if reverse_field is None:
                logger.warning(
                    f"Relation {metadata.name}.{declared.name} is bidirectional "
                    f"but names no reverse field"
                )
        elif declared.reverse_field:
            logger.debug(
                f"Ignoring reverse field of {metadata.name}.{declared.name}: "
                f"relation is not bidirectional"
            )

        return FieldDescriptor(
            name=declared.name,
            declared_type=declared.type or "Any",
            relation_kind=kind,
            reverse_field=reverse_field if kind != RelationKind.SCALAR else None,
            one_to_one=one_to_one,
        )

    def _resolve_dtos(self, metadata: ModelMetadata, descriptor: ModelDescriptor):
        variants = [DtoVariant(qualified_name=self.naming.default_dto_name(descriptor))]
        for declared in metadata.dtos:
            if not self.type_exists(declared.name):
                raise UnresolvableModel(
                    f"Declared DTO {declared.name} of model {metadata.qualified_name} does not exist",
                    model=metadata.qualified_name,
                    suggestions=[
                        "Add the DTO's qualified name to 'known_types' in the configuration",
                        "Check the DTO name for typos",
                    ],
                )
            if declared.name == variants[0].qualified_name:
                continue
            variants.append(DtoVariant(
                qualified_name=declared.name,
                declared=True,
                field_names=tuple(declared.fields or ()),
            ))
        return tuple(variants)
