"""Predicate factory spec builder."""

import logging
from typing import Optional

from scrud_generator.builders.base import (
    ArtifactSpecBuilder,
    BuildContext,
    ImportCollector,
    base_class,
)
from scrud_generator.constants import FieldNames, RuntimeClasses
from scrud_generator.domain.models import ArtifactKind, ModelDescriptor, RelationKind
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

DEFAULT_OPERATOR = "eq"


class PredicateFactorySpecBuilder(ArtifactSpecBuilder):
    """
    Query predicate factory of an entity model.

    One ``by_<field>`` operation per scalar and relation field; relations
    are matched on the related entity's id. Embedded fields are skipped.
    Runs for every entity model, whether or not it is a SCRUD model.
    """

    kind = ArtifactKind.PREDICATE_FACTORY

    def build(self, descriptor: ModelDescriptor, context: BuildContext) -> Optional[ArtifactSpec]:
        if not descriptor.flags.entity:
            return None

        imports = ImportCollector()
        base = base_class(imports, context, RuntimeClasses.PREDICATE_FACTORY, None)
        model_type = imports.add_model(descriptor)
        any_type = imports.add("typing", "Any")

        operations = []
        for model_field in descriptor.fields:
            if model_field.relation_kind == RelationKind.EMBEDDED:
                continue
            path = model_field.name
            if model_field.is_relation:
                path = f"{model_field.name}.{FieldNames.ID}"
            operations.append(OperationSpec(
                name=f"by_{model_field.name}",
                parameters=(
                    ParameterSpec("value", any_type),
                    ParameterSpec("operator", "str", default=Literal(DEFAULT_OPERATOR)),
                ),
                returns=any_type,
                body=Call("self.build_predicate", (Literal(path), Ref("operator"), Ref("value"))),
            ))

        return ArtifactSpec(
            qualified_name=context.naming.qualified_name(descriptor, self.kind),
            kind=self.kind,
            imports=imports.as_tuple(),
            bases=(base,),
            attributes=(AttributeSpec("model_type", Ref(model_type)),),
            operations=tuple(operations),
            docstring=f"Composable query predicates over {descriptor.simple_name}.",
            source_descriptor=descriptor,
        )
