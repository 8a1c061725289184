"""Identifier adapter spec builder."""

import logging
from typing import List

from scrud_generator.builders.base import (
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    identifier_type,
)
from scrud_generator.constants import RuntimeClasses
from scrud_generator.domain.models import ArtifactKind, ModelDescriptor
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


class IdAdapterSpecBuilder(ArtifactSpecBuilder):
    """
    Identifier adapters for a model and for its default DTO.

    Composite identifiers are read with ``encode`` and rebuilt with
    ``decode``; scalar identifiers pass through unchanged. The DTO adapter
    reads the canonical string the DTO already carries.
    """

    kind = ArtifactKind.ID_ADAPTER

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> List[ArtifactSpec]:
        return [
            self._build_adapter(descriptor, context, for_dto=False),
            self._build_adapter(descriptor, context, for_dto=True),
        ]

    def _build_adapter(self, descriptor: ModelDescriptor, context: BuildContext, for_dto: bool) -> ArtifactSpec:
        imports = ImportCollector()
        base = imports.add(RuntimeClasses.CODEC_MODULE, "IdentifierAdapter")
        shape = descriptor.identifier

        if for_dto:
            target_type = imports.add_artifact(context.naming.default_dto_name(descriptor))
        else:
            target_type = imports.add_model(descriptor)

        if shape.is_composite:
            optional = imports.add("typing", "Optional")
            # decode always yields the codec value, whatever type the model declares
            id_type = imports.add(RuntimeClasses.CODEC_MODULE, "CompositeIdentifier")
            decode = imports.add(RuntimeClasses.CODEC_MODULE, "decode")
            if for_dto:
                read_body = Ref("model.id")
            else:
                read_body = Call(imports.add(RuntimeClasses.CODEC_MODULE, "encode"), (Ref("model.id.components"),))
            read_returns = f"{optional}[str]"
            build_param = ParameterSpec("value", "str")
            build_body = Call(decode, (Ref("value"), Literal(shape.arity), Call("self.builders")))
        else:
            id_type = identifier_type(descriptor, imports)
            read_body = Ref("model.id")
            read_returns = id_type
            build_param = ParameterSpec("value", id_type)
            build_body = Ref("value")

        operations = (
            OperationSpec(
                name="read_id",
                parameters=(ParameterSpec("model", target_type),),
                returns=read_returns,
                body=read_body,
            ),
            OperationSpec(
                name="build_id",
                parameters=(build_param,),
                returns=id_type,
                body=build_body,
            ),
        )

        return ArtifactSpec(
            qualified_name=context.naming.id_adapter_name(descriptor, for_dto=for_dto),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(base,),
            attributes=(
                AttributeSpec("target_type", Ref(target_type)),
                AttributeSpec("arity", Literal(shape.arity)),
                AttributeSpec("component_types", Literal(tuple(slot.entity for slot in shape.components))),
            ),
            operations=operations,
            docstring=f"Reads and builds identifiers of {target_type}.",
            source_descriptor=descriptor,
        )
