"""
Centralized constants for the SCRUD generator.

Naming defaults, runtime base classes and the generated file header live
here so that every builder derives names from the same source of truth.
"""

from typing import Dict, List, Set


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "./generated_scrud"
    RUNTIME_PACKAGE = "scrud_runtime"
    MAX_WORKERS = 1

    # Properties prefix for naming overrides, e.g. "naming.repository.suffix"
    NAMING_PREFIX = "naming"


# =============================================================================
# ARTIFACT NAMING
# =============================================================================

class ArtifactNaming:
    """Default class name suffixes and sub-packages per artifact kind."""

    # kind value -> suffix appended to the model (or DTO) simple name
    SUFFIXES: Dict[str, str] = {
        "dto": "Dto",
        "mapper": "Mapper",
        "id_adapter": "IdAdapter",
        "repository": "Repository",
        "service_interface": "Service",
        "service_impl": "ServiceImpl",
        "controller": "Controller",
        "predicate_factory": "PredicateFactory",
    }

    # kind value -> sub-package under the model's parent package
    PACKAGES: Dict[str, str] = {
        "dto": "dto",
        "mapper": "mapper",
        "id_adapter": "dto",
        "repository": "repository",
        "service_interface": "service",
        "service_impl": "service",
        "controller": "controller",
        "predicate_factory": "specification",
    }


class RuntimeClasses:
    """
    Base classes of the persistence runtime the generated code extends.

    Paths are relative to the configured runtime package, except for the
    identifier codec which ships with the generator.
    """

    CODEC_MODULE = "scrud_generator.identifiers"

    DTO_MAPPER = "mapping.DtoMapper"
    REPOSITORY = "repository.ModelRepository"
    SERVICE = "service.ModelService"
    CONTROLLER = "controller.ModelController"
    PREDICATE_FACTORY = "specification.PredicateFactory"

    # Superclass override value that disables controller generation
    NONE = "NONE"


# =============================================================================
# IDENTIFIERS
# =============================================================================

class IdentifierDefaults:
    """Composite identifier constants."""

    SPLIT_CHAR = "_"
    MIN_ARITY = 2
    MAX_ARITY = 4


# =============================================================================
# RELATIONS
# =============================================================================

class RelationAnnotations:
    """Cardinality annotations accepted in model metadata."""

    SCALAR = "scalar"
    MANY_TO_ONE = "many_to_one"
    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_MANY = "many_to_many"
    EMBEDDED = "embedded"

    TO_ONE: Set[str] = {MANY_TO_ONE, ONE_TO_ONE}
    TO_MANY: Set[str] = {ONE_TO_MANY, MANY_TO_MANY}

    ALL: Set[str] = {SCALAR, MANY_TO_ONE, ONE_TO_ONE, ONE_TO_MANY, MANY_TO_MANY, EMBEDDED}


# =============================================================================
# GENERATED FILES
# =============================================================================

GENERATED_FILE_HEADER: List[str] = [
    "-------------------- DO NOT EDIT -------------------",
    " This file is automatically generated by scrud-generator.",
    " To edit this file, copy it to the appropriate package",
    " in your own source tree and edit it there.",
    "----------------------------------------------------",
]


class FieldNames:
    """Common field names."""

    ID = "id"


class GenerationOptions:
    """Code generation options."""

    DEFAULT_LINE_LENGTH = 100
    PYTHON_SUFFIX = ".py"
