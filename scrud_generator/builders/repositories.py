"""
Repository spec builder.

Repositories expose a fixed baseline of persistence operations plus one
"resolve related entity by owner id" lookup per to-one field. The lookup
records the query it performs as a QueryShape:

* DIRECT when the relation's reverse field is known: the related type is
  queried with equality on ``<reverse>.id``.
* JOIN otherwise: the owning type is queried by ``id`` and the joined
  relation field is selected.
"""

import logging
from typing import List, Tuple

from scrud_generator.builders.base import (
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    base_class,
    identifier_type,
)
from scrud_generator.constants import FieldNames, RuntimeClasses
from scrud_generator.domain.models import ArtifactKind, FieldDescriptor, ModelDescriptor
from scrud_generator.domain.specs import (
    ArtifactSpec,
    AttributeSpec,
    Call,
    Literal,
    LookupStrategy,
    OperationSpec,
    ParameterSpec,
    QueryShape,
    Ref,
)
from scrud_generator.exceptions import SpecBuildError


logger = logging.getLogger(__name__)

BASELINE_OPERATIONS = ("find_by_id", "find_all", "create", "update", "patch", "delete_by_id")


def lookup_operation_name(model_field: FieldDescriptor) -> str:
    return f"find_{model_field.name}_by_owner_id"


def lookup_query(descriptor: ModelDescriptor, model_field: FieldDescriptor) -> QueryShape:
    if model_field.reverse_field:
        return QueryShape(
            strategy=LookupStrategy.DIRECT,
            root_type=model_field.declared_type,
            predicate_path=f"{model_field.reverse_field}.{FieldNames.ID}",
            one_to_one=model_field.one_to_one,
        )
    return QueryShape(
        strategy=LookupStrategy.JOIN,
        root_type=descriptor.qualified_name,
        predicate_path=FieldNames.ID,
        select=model_field.name,
        one_to_one=model_field.one_to_one,
    )


def repository_operations(
    descriptor: ModelDescriptor,
    imports: ImportCollector,
) -> Tuple[OperationSpec, ...]:
    """
    Baseline and related-entity lookup operations of a model's repository.

    Services derive their own operations from these, keeping signatures in sync.
    """
    optional = imports.add("typing", "Optional")
    list_type = imports.add("typing", "List")
    model_type = imports.add_model(descriptor)
    id_type = identifier_type(descriptor, imports)
    id_param = ParameterSpec(FieldNames.ID, id_type)
    disableable = descriptor.flags.disableable

    find_all_kwargs = (("exclude_disabled", Literal(True)),) if disableable else ()
    delete_call = "self.soft_delete" if disableable else "self.remove"

    operations: List[OperationSpec] = [
        OperationSpec(
            name="find_by_id",
            parameters=(id_param,),
            returns=f"{optional}[{model_type}]",
            body=Call("self.get", (Ref(FieldNames.ID),)),
        ),
        OperationSpec(
            name="find_all",
            returns=f"{list_type}[{model_type}]",
            body=Call("self.query_all", (), find_all_kwargs),
        ),
        OperationSpec(
            name="create",
            parameters=(ParameterSpec("model", model_type),),
            returns=model_type,
            body=Call("self.save", (Ref("model"),)),
        ),
        OperationSpec(
            name="update",
            parameters=(ParameterSpec("model", model_type),),
            returns=model_type,
            body=Call("self.save", (Ref("model"),)),
        ),
        OperationSpec(
            name="patch",
            parameters=(ParameterSpec("delta", model_type),),
            returns=model_type,
            body=Call("self.copy_non_null", (Ref("delta"),)),
            docstring="Copy the non-null properties of delta onto the persisted instance.",
        ),
        OperationSpec(
            name="delete_by_id",
            parameters=(id_param,),
            returns="None",
            body=Call(delete_call, (Ref(FieldNames.ID),)),
        ),
    ]

    for model_field in descriptor.to_one_fields:
        related_type = imports.add_type(model_field.declared_type)
        query = lookup_query(descriptor, model_field)
        if query.strategy == LookupStrategy.DIRECT:
            body = Call("self.find_one_by", (Ref(related_type), Literal(query.predicate_path), Ref(FieldNames.ID)))
        else:
            body = Call("self.find_joined", (Literal(query.select), Ref(FieldNames.ID)))
        operations.append(OperationSpec(
            name=lookup_operation_name(model_field),
            parameters=(id_param,),
            returns=f"{optional}[{related_type}]",
            body=body,
            query=query,
            docstring=f"Resolve the {model_field.name} of the {descriptor.simple_name} with the given id.",
        ))

    return tuple(operations)


def entity_graph_paths(descriptor: ModelDescriptor, context: BuildContext) -> Tuple[str, ...]:
    """
    Validate eager-fetch attribute paths and order them deepest-first.

    The first segment must be a relation field of the model. Deeper segments
    are checked while the traversed model is part of the run.
    """
    for path in descriptor.attribute_paths:
        current = descriptor
        for depth, segment in enumerate(path.split(".")):
            model_field = current.get_field(segment)
            if model_field is None or not model_field.is_relation:
                raise SpecBuildError(
                    f"Attribute path '{path}' of {descriptor.simple_name}: "
                    f"'{segment}' is not a relation field of {current.simple_name}",
                    component=ArtifactKind.REPOSITORY.value,
                    model=descriptor.qualified_name,
                )
            current = context.descriptor_for(model_field.declared_type)
            if current is None:
                if depth < path.count("."):
                    logger.debug(f"Attribute path '{path}' leaves the run at '{segment}', not checked further")
                break
    return tuple(sorted(descriptor.attribute_paths, reverse=True))


class RepositorySpecBuilder(ArtifactSpecBuilder):
    kind = ArtifactKind.REPOSITORY

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> ArtifactSpec:
        paths = entity_graph_paths(descriptor, context)

        imports = ImportCollector()
        base = base_class(imports, context, RuntimeClasses.REPOSITORY, descriptor.flags.repository_superclass)
        operations = repository_operations(descriptor, imports)
        model_type = imports.add_model(descriptor)

        return ArtifactSpec(
            qualified_name=context.naming.qualified_name(descriptor, self.kind),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(base,),
            attributes=(
                AttributeSpec("model_type", Ref(model_type)),
                AttributeSpec("disableable", Literal(descriptor.flags.disableable)),
                AttributeSpec("entity_graph_paths", Literal(paths)),
            ),
            operations=operations,
            docstring=f"Persistence operations of {descriptor.simple_name}.",
            source_descriptor=descriptor,
        )
