"""
Domain module for the SCRUD generator.

Model descriptors, artifact specifications and the logic that derives
names and relations from them, independent of rendering and storage.
"""

from .models import (
    ArtifactKind,
    CompositeSlot,
    DtoVariant,
    EmissionOutcome,
    EmissionResult,
    FieldDescriptor,
    GenerationFlags,
    IdentifierShape,
    ModelDescriptor,
    ModelReport,
    ModelStatus,
    RelationKind,
    RunReport,
)

from .specs import (
    ArtifactSpec,
    AttributeSpec,
    Call,
    ImportSpec,
    Literal,
    LookupStrategy,
    MemberSpec,
    OperationSpec,
    ParameterSpec,
    QueryShape,
    Ref,
)

from .metadata import ModelMetadata

from .naming import (
    NamingConventions,
    module_for,
    pluralize,
    to_snake_case,
)

from .relationships import ModelGraph, classify_relation

from .resolver import ModelDescriptorResolver

__all__ = [
    # Descriptors
    'ArtifactKind',
    'CompositeSlot',
    'DtoVariant',
    'FieldDescriptor',
    'GenerationFlags',
    'IdentifierShape',
    'ModelDescriptor',
    'RelationKind',

    # Reports
    'EmissionOutcome',
    'EmissionResult',
    'ModelReport',
    'ModelStatus',
    'RunReport',

    # Specs
    'ArtifactSpec',
    'AttributeSpec',
    'Call',
    'ImportSpec',
    'Literal',
    'LookupStrategy',
    'MemberSpec',
    'OperationSpec',
    'ParameterSpec',
    'QueryShape',
    'Ref',

    # Metadata and resolution
    'ModelMetadata',
    'ModelDescriptorResolver',

    # Naming
    'NamingConventions',
    'module_for',
    'pluralize',
    'to_snake_case',

    # Relationships
    'ModelGraph',
    'classify_relation',
]
