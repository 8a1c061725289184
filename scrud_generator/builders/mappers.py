"""Mapper spec builder."""

import logging
from typing import List

from scrud_generator.builders.base import (
    AS_DTO,
    AS_IDENTIFIER,
    COPY,
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    base_class,
    dto_member_type,
)
from scrud_generator.constants import FieldNames, RuntimeClasses
from scrud_generator.domain.models import ArtifactKind, DtoVariant, ModelDescriptor
from scrud_generator.domain.specs import (
    ArtifactSpec,
    AttributeSpec,
    Call,
    Literal,
    OperationSpec,
    ParameterSpec,
    Ref,
)


logger = logging.getLogger(__name__)


class MapperSpecBuilder(ArtifactSpecBuilder):
    """
    One mapper spec per (model, DTO variant) pair.

    ``field_mappings`` lists ``(field, conversion)`` pairs in model field
    order, where conversion is ``copy``, ``dto`` (through the related
    model's mapper) or ``identifier`` (related entity to its id and back).
    Fields the variant does not carry are skipped.
    """

    kind = ArtifactKind.MAPPER

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> List[ArtifactSpec]:
        return [self.build_variant(descriptor, variant, context) for variant in descriptor.dto_variants]

    def build_variant(self, descriptor: ModelDescriptor, variant: DtoVariant, context: BuildContext) -> ArtifactSpec:
        imports = ImportCollector()
        base = base_class(imports, context, RuntimeClasses.DTO_MAPPER, None)
        model_type = imports.add_model(descriptor)
        dto_type = imports.add_artifact(variant.qualified_name)

        id_conversion = AS_IDENTIFIER if descriptor.identifier.is_composite else COPY
        mappings = [(FieldNames.ID, id_conversion)]
        related_mappers = []

        # Member types are resolved on a throwaway collector, mappers only need conversions
        scratch = ImportCollector()
        for model_field in descriptor.fields:
            if model_field.name == FieldNames.ID or not variant.has_field(model_field.name):
                continue
            _, conversion = dto_member_type(descriptor, model_field, context, scratch)
            mappings.append((model_field.name, conversion))
            if conversion == AS_DTO:
                target = context.descriptor_for(model_field.declared_type)
                related_mappers.append((
                    model_field.name,
                    context.naming.mapper_name(target, context.naming.default_dto_name(target)),
                ))

        skipped = [f.name for f in descriptor.fields if not variant.has_field(f.name)]
        if skipped:
            logger.debug(f"Mapper for {variant.simple_name} skips fields absent on the DTO: {skipped}")

        operations = (
            OperationSpec(
                name="to_dto",
                parameters=(ParameterSpec("model", model_type),),
                returns=dto_type,
                body=Call("self.convert", (Ref("model"), Ref(dto_type), Ref("self.field_mappings"))),
            ),
            OperationSpec(
                name="to_model",
                parameters=(ParameterSpec("dto", dto_type),),
                returns=model_type,
                body=Call(
                    "self.convert",
                    (Ref("dto"), Ref(model_type), Ref("self.field_mappings")),
                    (("reverse", Literal(True)),),
                ),
            ),
        )

        return ArtifactSpec(
            qualified_name=context.naming.mapper_name(descriptor, variant.qualified_name),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(base,),
            attributes=(
                AttributeSpec("model_type", Ref(model_type)),
                AttributeSpec("dto_type", Ref(dto_type)),
                AttributeSpec("field_mappings", Literal(tuple(mappings))),
                AttributeSpec("related_mappers", Literal(tuple(related_mappers))),
            ),
            operations=operations,
            docstring=f"Maps {descriptor.simple_name} to and from {variant.simple_name}.",
            source_descriptor=descriptor,
        )
