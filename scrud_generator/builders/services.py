"""Service interface and implementation spec builders."""

import dataclasses
import logging
from typing import Optional

from scrud_generator.builders.base import (
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    base_class,
)
from scrud_generator.builders.repositories import repository_operations
from scrud_generator.constants import RuntimeClasses
from scrud_generator.domain.models import ArtifactKind, ModelDescriptor
from scrud_generator.domain.specs import ArtifactSpec, AttributeSpec, Call, Ref


logger = logging.getLogger(__name__)


class ServiceInterfaceSpecBuilder(ArtifactSpecBuilder):
    """Abstract service declaring the repository's operations."""

    kind = ArtifactKind.SERVICE_INTERFACE

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> Optional[ArtifactSpec]:
        if not descriptor.flags.service:
            logger.debug(f"Service generation suppressed for {descriptor.simple_name}")
            return None

        imports = ImportCollector()
        abc = imports.add("abc", "ABC")
        imports.add("abc", "abstractmethod")
        operations = tuple(
            dataclasses.replace(operation, body=None, query=None)
            for operation in repository_operations(descriptor, imports)
        )

        return ArtifactSpec(
            qualified_name=context.naming.qualified_name(descriptor, self.kind),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(abc,),
            operations=operations,
            docstring=f"Service operations of {descriptor.simple_name}.",
            source_descriptor=descriptor,
        )


class ServiceImplSpecBuilder(ArtifactSpecBuilder):
    """Service implementation delegating every operation to the model's repository."""

    kind = ArtifactKind.SERVICE_IMPL

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> Optional[ArtifactSpec]:
        if not descriptor.flags.service:
            return None

        naming = context.naming
        imports = ImportCollector()
        base = base_class(imports, context, RuntimeClasses.SERVICE, descriptor.flags.service_superclass)
        interface = imports.add_artifact(naming.qualified_name(descriptor, ArtifactKind.SERVICE_INTERFACE))
        repository = imports.add_artifact(naming.qualified_name(descriptor, ArtifactKind.REPOSITORY))

        operations = tuple(
            dataclasses.replace(
                operation,
                body=Call(
                    f"self.repository.{operation.name}",
                    tuple(Ref(parameter.name) for parameter in operation.parameters),
                ),
                query=None,
                docstring=None,
            )
            for operation in repository_operations(descriptor, imports)
        )

        return ArtifactSpec(
            qualified_name=naming.qualified_name(descriptor, self.kind),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(base, interface),
            attributes=(AttributeSpec("repository_type", Ref(repository)),),
            operations=operations,
            docstring=f"Default implementation of {interface}.",
            source_descriptor=descriptor,
        )
