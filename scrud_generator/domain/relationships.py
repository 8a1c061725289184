"""
Relationship analysis for the SCRUD generator.

Classifies declared cardinality annotations into structural relation kinds
and answers reachability questions over the model graph of a run, so that
DTO members can collapse cyclic relations to identifier references.
"""

import logging
from typing import Dict, Iterable, List, Set, Tuple

from ..constants import RelationAnnotations
from .models import ModelDescriptor, RelationKind


logger = logging.getLogger(__name__)


def classify_relation(annotation: str) -> Tuple[RelationKind, bool]:
    """
    Map a cardinality annotation to its relation kind.

    Returns the kind and whether the relation is one-to-one. Only the
    annotation is considered, never the declared container type.
    """
    if annotation in RelationAnnotations.TO_ONE:
        return RelationKind.TO_ONE, annotation == RelationAnnotations.ONE_TO_ONE
    if annotation in RelationAnnotations.TO_MANY:
        return RelationKind.TO_MANY, False
    if annotation == RelationAnnotations.EMBEDDED:
        return RelationKind.EMBEDDED, False
    if annotation == RelationAnnotations.SCALAR:
        return RelationKind.SCALAR, False
    raise ValueError(
        f"Unknown relation annotation '{annotation}'. "
        f"Expected one of: {', '.join(sorted(RelationAnnotations.ALL))}"
    )


class ModelGraph:
    """
    Directed graph of the models of one run.

    Nodes are model qualified names, edges follow to-one and to-many
    relation fields. Embedded fields are not edges.
    """

    def __init__(self, descriptors: Iterable[ModelDescriptor]):
        self.edges: Dict[str, Set[str]] = {}
        for descriptor in descriptors:
            targets = self.edges.setdefault(descriptor.qualified_name, set())
            for model_field in descriptor.fields:
                if model_field.is_relation:
                    targets.add(model_field.declared_type)
        self._reach_cache: Dict[str, Set[str]] = {}

    def __contains__(self, qualified_name: str) -> bool:
        return qualified_name in self.edges

    def reachable_from(self, source: str) -> Set[str]:
        """All models reachable from ``source`` through one or more edges."""
        if source in self._reach_cache:
            return self._reach_cache[source]

        visited: Set[str] = set()
        stack = list(self.edges.get(source, ()))
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            stack.extend(self.edges.get(node, ()))

        self._reach_cache[source] = visited
        return visited

    def closes_cycle(self, owner: str, target: str) -> bool:
        """True when following ``owner -> target`` can lead back to ``owner``."""
        return target == owner or owner in self.reachable_from(target)

    def cyclic_edges(self) -> List[Tuple[str, str]]:
        """Edges lying on at least one cycle, sorted for stable logging."""
        result = []
        for owner in sorted(self.edges):
            for target in sorted(self.edges[owner]):
                if target in self and self.closes_cycle(owner, target):
                    result.append((owner, target))
        return result
