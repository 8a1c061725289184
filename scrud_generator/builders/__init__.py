"""
Artifact spec builders.

One builder per artifact kind, each a pure function of a ModelDescriptor
and the run's BuildContext.
"""

from .base import ArtifactSpecBuilder, BuildContext, ImportCollector
from .controllers import ControllerSpecBuilder
from .dtos import DtoSpecBuilder
from .id_adapters import IdAdapterSpecBuilder
from .mappers import MapperSpecBuilder
from .pipeline import MODEL_PIPELINE, SpecBuilderFactory, SpecPipeline
from .predicates import PredicateFactorySpecBuilder
from .repositories import RepositorySpecBuilder
from .services import ServiceImplSpecBuilder, ServiceInterfaceSpecBuilder

__all__ = [
    'ArtifactSpecBuilder',
    'BuildContext',
    'ImportCollector',
    'ControllerSpecBuilder',
    'DtoSpecBuilder',
    'IdAdapterSpecBuilder',
    'MapperSpecBuilder',
    'PredicateFactorySpecBuilder',
    'RepositorySpecBuilder',
    'ServiceImplSpecBuilder',
    'ServiceInterfaceSpecBuilder',
    'MODEL_PIPELINE',
    'SpecBuilderFactory',
    'SpecPipeline',
]
