"""
Core domain models for the SCRUD generator.

Model descriptors are the resolved, read-only view of one domain model.
They are produced once per model per run by the resolver and shared by every
spec builder. Run reports collect the per-model and per-artifact outcomes of
a generation run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class RelationKind(Enum):
    """Structural relation kinds of a model field."""

    SCALAR = "scalar"
    TO_ONE = "to_one"
    TO_MANY = "to_many"
    EMBEDDED = "embedded"


class ArtifactKind(Enum):
    """Kinds of generated artifacts, in per-model generation order."""

    MAPPER = "mapper"
    DTO = "dto"
    ID_ADAPTER = "id_adapter"
    REPOSITORY = "repository"
    SERVICE_INTERFACE = "service_interface"
    SERVICE_IMPL = "service_impl"
    CONTROLLER = "controller"
    PREDICATE_FACTORY = "predicate_factory"


@dataclass(frozen=True)
class CompositeSlot:
    """One component of a composite identifier: a related entity and its id type."""

    entity: str
    id_type: str = "str"


@dataclass(frozen=True)
class IdentifierShape:
    """
    Identifier shape of a model.

    Either a single scalar identifier type, or a composite identifier made
    of an ordered sequence of 2 to 4 component slots.
    """

    id_type: Optional[str] = None
    components: Tuple[CompositeSlot, ...] = ()

    @property
    def is_composite(self) -> bool:
        return bool(self.components)

    @property
    def arity(self) -> int:
        return len(self.components)

    @property
    def reference_type(self) -> str:
        """Type used when another artifact refers to this model by identifier."""
        if self.is_composite:
            # Composite identifiers travel in their canonical string form
            return "str"
        return self.id_type or "str"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    A declared model field.

    For relations ``declared_type`` is the qualified name of the related
    model (the element type for to-many relations).
    """

    name: str
    declared_type: str
    relation_kind: RelationKind = RelationKind.SCALAR
    reverse_field: Optional[str] = None
    one_to_one: bool = False

    @property
    def is_relation(self) -> bool:
        return self.relation_kind in (RelationKind.TO_ONE, RelationKind.TO_MANY)


@dataclass(frozen=True)
class DtoVariant:
    """
    A DTO type associated with a model.

    ``declared`` variants are hand-written types referenced by the model
    metadata; the generated default variant is not declared. An empty
    ``field_names`` means the variant carries every model field.
    """

    qualified_name: str
    declared: bool = False
    field_names: Tuple[str, ...] = ()

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    def has_field(self, name: str) -> bool:
        return not self.field_names or name in self.field_names


@dataclass(frozen=True)
class GenerationFlags:
    """Per-model generation switches and superclass overrides."""

    entity: bool = True
    scrud: bool = True
    service: bool = True
    controller: bool = True
    disableable: bool = False
    repository_superclass: Optional[str] = None
    service_superclass: Optional[str] = None
    controller_superclass: Optional[str] = None


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Resolved, immutable view of one domain model.

    ``(package_name, simple_name)`` identifies the descriptor within a run.
    Generated siblings are placed under ``parent_package_name``.
    """

    simple_name: str
    package_name: str
    parent_package_name: str
    identifier: IdentifierShape
    fields: Tuple[FieldDescriptor, ...] = ()
    dto_variants: Tuple[DtoVariant, ...] = ()
    flags: GenerationFlags = field(default_factory=GenerationFlags)
    attribute_paths: Tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.package_name}.{self.simple_name}"

    @property
    def default_dto(self) -> DtoVariant:
        return self.dto_variants[0]

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        for model_field in self.fields:
            if model_field.name == name:
                return model_field
        return None

    def fields_of_kind(self, kind: RelationKind) -> List[FieldDescriptor]:
        return [f for f in self.fields if f.relation_kind == kind]

    @property
    def to_one_fields(self) -> List[FieldDescriptor]:
        return self.fields_of_kind(RelationKind.TO_ONE)


# =============================================================================
# RUN REPORT
# =============================================================================

class EmissionOutcome(Enum):
    """Outcome of emitting one artifact."""

    WRITTEN = "written"
    SKIPPED_EXISTING = "skipped_existing"
    FAILED = "failed"


class ModelStatus(Enum):
    """Outcome of a whole model."""

    SUCCESS = "success"
    SKIPPED_ALL_EXISTING = "skipped_all_existing"
    FAILED = "failed"


@dataclass
class EmissionResult:
    """Result of emitting one artifact specification."""

    qualified_name: str
    kind: ArtifactKind
    outcome: EmissionOutcome
    reason: Optional[str] = None
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'qualified_name': self.qualified_name,
            'kind': self.kind.value,
            'outcome': self.outcome.value,
            'reason': self.reason,
            'path': self.path,
        }


@dataclass
class ModelReport:
    """Per-model entry of a run report."""

    model: str
    status: ModelStatus = ModelStatus.SUCCESS
    reason: Optional[str] = None
    error_code: Optional[str] = None
    artifacts: List[EmissionResult] = field(default_factory=list)

    def add_result(self, result: EmissionResult):
        self.artifacts.append(result)

    def fail(self, reason: str, error_code: Optional[str] = None):
        self.status = ModelStatus.FAILED
        self.reason = reason
        self.error_code = error_code

    def finalize(self):
        """Derive the model status from its artifact outcomes unless it already failed."""
        if self.status == ModelStatus.FAILED:
            return
        if self.artifacts and all(
            r.outcome == EmissionOutcome.SKIPPED_EXISTING for r in self.artifacts
        ):
            self.status = ModelStatus.SKIPPED_ALL_EXISTING
        else:
            self.status = ModelStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'model': self.model,
            'status': self.status.value,
            'reason': self.reason,
            'error_code': self.error_code,
            'artifacts': [r.to_dict() for r in self.artifacts],
        }


@dataclass
class RunReport:
    """
    Result of a generation run.

    Every discovered model gets exactly one entry, in discovery order.
    Predicate factories are emitted in their own stage and are recorded
    against their model's entry as well.
    """

    models: List[ModelReport] = field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    def get(self, model: str) -> Optional[ModelReport]:
        for entry in self.models:
            if entry.model == model:
                return entry
        return None

    @property
    def artifacts(self) -> List[EmissionResult]:
        return [result for entry in self.models for result in entry.artifacts]

    def count(self, outcome: EmissionOutcome) -> int:
        return sum(1 for result in self.artifacts if result.outcome == outcome)

    @property
    def failed_models(self) -> List[ModelReport]:
        return [entry for entry in self.models if entry.status == ModelStatus.FAILED]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_models)

    def summary(self) -> Dict[str, int]:
        return {
            'models': len(self.models),
            'failed_models': len(self.failed_models),
            'written': self.count(EmissionOutcome.WRITTEN),
            'skipped_existing': self.count(EmissionOutcome.SKIPPED_EXISTING),
            'failed_artifacts': self.count(EmissionOutcome.FAILED),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'started_at': self.started_at,
            'finished_at': self.finished_at,
            'summary': self.summary(),
            'models': [entry.to_dict() for entry in self.models],
        }
