"""
Spec building pipeline.

Builders are registered per artifact kind in a factory; the pipeline runs
them in the fixed per-model order and flattens their results.
"""

import logging
from typing import Dict, List, Tuple, Type

from scrud_generator.builders.base import ArtifactSpecBuilder, BuildContext, BuildResult
from scrud_generator.builders.controllers import ControllerSpecBuilder
from scrud_generator.builders.dtos import DtoSpecBuilder
from scrud_generator.builders.id_adapters import IdAdapterSpecBuilder
from scrud_generator.builders.mappers import MapperSpecBuilder
from scrud_generator.builders.predicates import PredicateFactorySpecBuilder
from scrud_generator.builders.repositories import RepositorySpecBuilder
from scrud_generator.builders.services import ServiceImplSpecBuilder, ServiceInterfaceSpecBuilder
from scrud_generator.domain.models import ArtifactKind, ModelDescriptor
from scrud_generator.domain.specs import ArtifactSpec


logger = logging.getLogger(__name__)

# Per-model generation order of SCRUD models
MODEL_PIPELINE: Tuple[ArtifactKind, ...] = (
    ArtifactKind.MAPPER,
    ArtifactKind.DTO,
    ArtifactKind.ID_ADAPTER,
    ArtifactKind.REPOSITORY,
    ArtifactKind.SERVICE_INTERFACE,
    ArtifactKind.SERVICE_IMPL,
    ArtifactKind.CONTROLLER,
)


# Factory Pattern for creating builders
class SpecBuilderFactory:
    """Factory for creating spec builder strategies"""

    _registry: Dict[ArtifactKind, Type[ArtifactSpecBuilder]] = {
        ArtifactKind.MAPPER: MapperSpecBuilder,
        ArtifactKind.DTO: DtoSpecBuilder,
        ArtifactKind.ID_ADAPTER: IdAdapterSpecBuilder,
        ArtifactKind.REPOSITORY: RepositorySpecBuilder,
        ArtifactKind.SERVICE_INTERFACE: ServiceInterfaceSpecBuilder,
        ArtifactKind.SERVICE_IMPL: ServiceImplSpecBuilder,
        ArtifactKind.CONTROLLER: ControllerSpecBuilder,
        ArtifactKind.PREDICATE_FACTORY: PredicateFactorySpecBuilder,
    }

    @classmethod
    def register(cls, kind: ArtifactKind, builder_class: Type[ArtifactSpecBuilder]) -> None:
        """Register a builder strategy, replacing the default for its kind"""
        cls._registry[kind] = builder_class

    @classmethod
    def create(cls, kind: ArtifactKind) -> ArtifactSpecBuilder:
        builder_class = cls._registry.get(kind)
        if not builder_class:
            raise ValueError(f"Unknown artifact kind: {kind}")
        return builder_class()


def _as_list(result: BuildResult) -> List[ArtifactSpec]:
    if result is None:
        return []
    if isinstance(result, ArtifactSpec):
        return [result]
    return list(result)


# Facade Pattern for simplified interface
class SpecPipeline:
    """Builds every spec of a model, in generation order"""

    def __init__(self, context: BuildContext):
        self.context = context
        self._builders = {kind: SpecBuilderFactory.create(kind) for kind in ArtifactKind}

    def build(self, kind: ArtifactKind, descriptor: ModelDescriptor) -> List[ArtifactSpec]:
        return _as_list(self._builders[kind].build(descriptor, self.context))

    def build_predicate_specs(self, descriptor: ModelDescriptor) -> List[ArtifactSpec]:
        return self.build(ArtifactKind.PREDICATE_FACTORY, descriptor)

    def build_model_specs(self, descriptor: ModelDescriptor) -> List[ArtifactSpec]:
        """
        Build the SCRUD artifacts of one model.

        Raises whatever a builder raises; the caller isolates failures per model.
        """
        specs: List[ArtifactSpec] = []
        for kind in MODEL_PIPELINE:
            built = self.build(kind, descriptor)
            logger.debug(f"{descriptor.simple_name}: built {len(built)} {kind.value} spec(s)")
            specs.extend(built)
        return specs
