"""
Naming convention utilities for the SCRUD generator.

Every generated name is derived here, from the model's namespace, its simple
name and the artifact kind, plus the run-constant ``naming.*`` properties.
Builders never compose names on their own.
"""

import logging
import re
from typing import Dict, Mapping, Optional

import inflect

from ..constants import ArtifactNaming, DefaultConfig
from .models import ArtifactKind, ModelDescriptor


logger = logging.getLogger(__name__)

# Initialize inflect engine for pluralization
p = inflect.engine()

DEFAULT_CONTROLLER_PATH_PREFIX = "/api/rest"


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Example:
        >>> to_snake_case("OrderLineDto")
        'order_line_dto'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def pluralize(word: str) -> str:
    if not isinstance(word, str) or not word:
        return ""

    try:
        plural = p.plural(word)
        if plural:
            return plural
        return word + "s"
    except Exception as e:
        logger.error(f"Inflect pluralization failed for '{word}': {e}. Falling back to adding 's'.")
        return word + "s"


def split_qualified_name(qualified_name: str):
    """Split ``a.b.Name`` into ``("a.b", "Name")``."""
    if "." not in qualified_name:
        return "", qualified_name
    namespace, simple_name = qualified_name.rsplit(".", 1)
    return namespace, simple_name


def module_for(qualified_name: str) -> str:
    """
    Module that holds a generated class.

    Generated artifacts are laid out one class per module, named after the
    snake_case class name: ``shop.repository.CustomerRepository`` lives in
    ``shop.repository.customer_repository``.
    """
    namespace, simple_name = split_qualified_name(qualified_name)
    module = to_snake_case(simple_name)
    return f"{namespace}.{module}" if namespace else module


class NamingConventions:
    """
    Derives generated names from a model descriptor and the run properties.

    Suffixes and sub-packages default to the values in
    ``constants.ArtifactNaming`` and can be overridden with the
    ``naming.<kind>.suffix`` and ``naming.<kind>.package`` properties, e.g.
    ``naming.repository.suffix: Dao``.
    """

    def __init__(self, properties: Optional[Mapping[str, str]] = None):
        self.properties: Dict[str, str] = dict(properties or {})

    def _property(self, kind: ArtifactKind, key: str, default: str) -> str:
        return self.properties.get(f"{DefaultConfig.NAMING_PREFIX}.{kind.value}.{key}", default)

    def suffix(self, kind: ArtifactKind) -> str:
        return self._property(kind, "suffix", ArtifactNaming.SUFFIXES[kind.value])

    def sub_package(self, kind: ArtifactKind) -> str:
        return self._property(kind, "package", ArtifactNaming.PACKAGES[kind.value])

    def namespace(self, descriptor: ModelDescriptor, kind: ArtifactKind) -> str:
        """Namespace of a model's generated siblings of the given kind."""
        sub_package = self.sub_package(kind)
        parent = descriptor.parent_package_name
        if not sub_package:
            return parent
        return f"{parent}.{sub_package}" if parent else sub_package

    def qualified_name(self, descriptor: ModelDescriptor, kind: ArtifactKind, base_name: Optional[str] = None) -> str:
        """
        Qualified name of a generated artifact.

        ``base_name`` replaces the model simple name for artifacts derived
        from a DTO variant (mappers and DTO identifier adapters).
        """
        simple_name = f"{base_name or descriptor.simple_name}{self.suffix(kind)}"
        return f"{self.namespace(descriptor, kind)}.{simple_name}"

    def default_dto_name(self, descriptor: ModelDescriptor) -> str:
        return self.qualified_name(descriptor, ArtifactKind.DTO)

    def mapper_name(self, descriptor: ModelDescriptor, dto_qualified_name: str) -> str:
        """The default DTO's mapper is named after the model, others after their DTO."""
        _, dto_simple_name = split_qualified_name(dto_qualified_name)
        if dto_qualified_name == self.default_dto_name(descriptor):
            return self.qualified_name(descriptor, ArtifactKind.MAPPER)
        return self.qualified_name(descriptor, ArtifactKind.MAPPER, base_name=dto_simple_name)

    def id_adapter_name(self, descriptor: ModelDescriptor, for_dto: bool = False) -> str:
        base_name = descriptor.simple_name
        if for_dto:
            base_name += self.suffix(ArtifactKind.DTO)
        return self.qualified_name(descriptor, ArtifactKind.ID_ADAPTER, base_name=base_name)

    def controller_path(self, descriptor: ModelDescriptor) -> str:
        """REST path of a model's controller, e.g. ``/api/rest/order_lines``."""
        prefix = self.properties.get(
            f"{DefaultConfig.NAMING_PREFIX}.controller.path_prefix", DEFAULT_CONTROLLER_PATH_PREFIX
        )
        return f"{prefix.rstrip('/')}/{pluralize(to_snake_case(descriptor.simple_name))}"
