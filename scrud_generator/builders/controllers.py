"""Controller spec builder."""

import logging
from typing import Optional

from scrud_generator.builders.base import (
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    base_class,
)
from scrud_generator.builders.repositories import lookup_operation_name
from scrud_generator.constants import FieldNames, RuntimeClasses
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


def _build_id(value: str = FieldNames.ID) -> Call:
    return Call("self.id_adapter.build_id", (Ref(value),))


def is_controller_suppressed(descriptor: ModelDescriptor) -> bool:
    flags = descriptor.flags
    return not flags.controller or flags.controller_superclass == RuntimeClasses.NONE


def has_service(descriptor: ModelDescriptor, context: BuildContext) -> bool:
    """Whether the service interface is generated or already exists."""
    if descriptor.flags.service:
        return True
    return context.exists(context.naming.qualified_name(descriptor, ArtifactKind.SERVICE_INTERFACE))


class ControllerSpecBuilder(ArtifactSpecBuilder):
    """
    REST controller exposing a model's service through its default DTO.

    Path identifiers arrive in their canonical string form and are rebuilt
    by the DTO identifier adapter.
    """

    kind = ArtifactKind.CONTROLLER

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> Optional[ArtifactSpec]:
        if is_controller_suppressed(descriptor):
            logger.debug(f"Controller generation suppressed for {descriptor.simple_name}")
            return None
        if not has_service(descriptor, context):
            logger.debug(f"No service for {descriptor.simple_name}, skipping its controller")
            return None

        naming = context.naming
        imports = ImportCollector()
        base = base_class(imports, context, RuntimeClasses.CONTROLLER, descriptor.flags.controller_superclass)
        optional = imports.add("typing", "Optional")
        list_type = imports.add("typing", "List")

        default_dto = naming.default_dto_name(descriptor)
        dto_type = imports.add_artifact(default_dto)
        service = imports.add_artifact(naming.qualified_name(descriptor, ArtifactKind.SERVICE_INTERFACE))
        mapper = imports.add_artifact(naming.mapper_name(descriptor, default_dto))
        id_adapter = imports.add_artifact(naming.id_adapter_name(descriptor, for_dto=True))

        id_param = ParameterSpec(FieldNames.ID, "str")
        dto_param = ParameterSpec("dto", dto_type)

        def with_dto(service_call: str, *args) -> Call:
            return Call("self.to_dto", (Call(service_call, args),))

        def dto_to_model() -> Call:
            return Call("self.to_model", (Ref("dto"),), ((FieldNames.ID, _build_id()),))

        operations = [
            OperationSpec(
                name="find_by_id",
                parameters=(id_param,),
                returns=f"{optional}[{dto_type}]",
                body=with_dto("self.service.find_by_id", _build_id()),
            ),
            OperationSpec(
                name="find_all",
                returns=f"{list_type}[{dto_type}]",
                body=Call("self.to_dtos", (Call("self.service.find_all"),)),
            ),
            OperationSpec(
                name="create",
                parameters=(dto_param,),
                returns=dto_type,
                body=with_dto("self.service.create", Call("self.to_model", (Ref("dto"),))),
            ),
            OperationSpec(
                name="update",
                parameters=(id_param, dto_param),
                returns=dto_type,
                body=with_dto("self.service.update", dto_to_model()),
            ),
            OperationSpec(
                name="patch",
                parameters=(id_param, dto_param),
                returns=dto_type,
                body=with_dto("self.service.patch", dto_to_model()),
            ),
            OperationSpec(
                name="delete_by_id",
                parameters=(id_param,),
                returns="None",
                body=Call("self.service.delete_by_id", (_build_id(),)),
            ),
        ]

        for model_field in descriptor.to_one_fields:
            related_type = imports.add_type(model_field.declared_type)
            name = lookup_operation_name(model_field)
            operations.append(OperationSpec(
                name=name,
                parameters=(id_param,),
                returns=f"{optional}[{related_type}]",
                body=Call(f"self.service.{name}", (_build_id(),)),
            ))

        return ArtifactSpec(
            qualified_name=naming.qualified_name(descriptor, self.kind),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(base,),
            attributes=(
                AttributeSpec("base_path", Literal(naming.controller_path(descriptor))),
                AttributeSpec("service_type", Ref(service)),
                AttributeSpec("dto_type", Ref(dto_type)),
                AttributeSpec("mapper_type", Ref(mapper)),
                AttributeSpec("id_adapter_type", Ref(id_adapter)),
            ),
            operations=tuple(operations),
            docstring=f"REST endpoints of {descriptor.simple_name} under {naming.controller_path(descriptor)}.",
            source_descriptor=descriptor,
        )
