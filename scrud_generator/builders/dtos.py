"""DTO spec builder."""

import logging
from typing import List

from scrud_generator.builders.base import (
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    dto_member_type,
)
from scrud_generator.constants import FieldNames
from scrud_generator.domain.models import ArtifactKind, DtoVariant, ModelDescriptor
from scrud_generator.domain.specs import ArtifactSpec, Literal, MemberSpec


logger = logging.getLogger(__name__)


class DtoSpecBuilder(ArtifactSpecBuilder):
    """
    One dataclass spec per DTO variant of a model.

    Members mirror the model fields the variant carries, preceded by the
    identifier. Relation members reference the related model's default DTO,
    or collapse to the related identifier type when the target is unknown
    or the relation is part of a cycle.
    """

    kind = ArtifactKind.DTO

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> List[ArtifactSpec]:
        return [self.build_variant(descriptor, variant, context) for variant in descriptor.dto_variants]

    def build_variant(self, descriptor: ModelDescriptor, variant: DtoVariant, context: BuildContext) -> ArtifactSpec:
        imports = ImportCollector()
        imports.add("dataclasses", "dataclass")
        optional = imports.add("typing", "Optional")

        id_type = imports.add_type(descriptor.identifier.reference_type)
        members = [MemberSpec(name=FieldNames.ID, type_name=f"{optional}[{id_type}]", default=Literal(None))]

        for model_field in descriptor.fields:
            if model_field.name == FieldNames.ID or not variant.has_field(model_field.name):
                continue
            type_name, _ = dto_member_type(descriptor, model_field, context, imports)
            members.append(MemberSpec(
                name=model_field.name,
                type_name=f"{optional}[{type_name}]",
                default=Literal(None),
            ))

        logger.debug(f"Built DTO spec {variant.qualified_name} with {len(members)} members")
        return ArtifactSpec(
            qualified_name=variant.qualified_name,
            kind=self.kind,
            imports=imports.as_tuple(),
            decorators=("dataclass",),
            fields=tuple(members),
            docstring=f"Data transfer object of {descriptor.simple_name}.",
            source_descriptor=descriptor,
        )
