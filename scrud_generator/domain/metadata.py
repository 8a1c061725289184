"""
Pydantic schema of a model metadata bag.

A metadata bag is the pre-parsed, declarative description of one domain
model. Bags usually come from YAML files (see ``model_loader``) but can be
passed to the orchestrator as plain dicts. The schema only checks the shape
of a bag; cross-model checks (related types, declared DTOs) are left to the
resolver.

Example bag::

    name: Order
    package: shop.model
    identifier: int
    fields:
      - {name: reference, type: str}
      - {name: customer, type: shop.model.Customer, relation: many_to_one,
         bidirectional: true, reverse_field: orders}
      - {name: lines, type: shop.model.OrderLine, relation: one_to_many}
    dtos:
      - {name: shop.dto.OrderSummaryDto, fields: [reference, customer]}
    flags: {disableable: true}
    attribute_paths: [customer, lines.product]
"""

import keyword
import logging
from typing import Any, List, Literal, Optional, Self

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..constants import RelationAnnotations


logger = logging.getLogger(__name__)

RelationAnnotation = Literal[
    "scalar", "many_to_one", "one_to_one", "one_to_many", "many_to_many", "embedded"
]


def _check_identifier(value: str) -> str:
    if not value.isidentifier() or keyword.iskeyword(value):
        raise ValueError(f"'{value}' is not a valid Python identifier or is a reserved keyword.")
    return value


class FieldMetadata(BaseModel):
    """A declared model field and its cardinality annotation."""

    name: str = Field(..., min_length=1)
    type: Optional[str] = Field(
        default=None,
        description="Declared type; the related model's qualified name for relations.",
    )
    relation: RelationAnnotation = Field(default=RelationAnnotations.SCALAR)
    bidirectional: bool = False
    reverse_field: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("reverse_field", "mapped_by"),
        description="Field on the related model that points back to this one.",
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_identifier(v)


class IdentifierComponentMetadata(BaseModel):
    entity: str = Field(..., min_length=1)
    id_type: str = "str"

    model_config = ConfigDict(extra="ignore")


class IdentifierMetadata(BaseModel):
    """
    Identifier shape: a scalar ``type``, or 2 to 4 ``components``.

    A bare string is accepted as shorthand for a scalar identifier type.
    The arity of composite identifiers is checked by the resolver.
    """

    type: Optional[str] = None
    components: List[IdentifierComponentMetadata] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"type": data}
        return data

    @model_validator(mode="after")
    def check_declared(self) -> Self:
        if not self.type and not self.components:
            raise ValueError("An identifier needs either a 'type' or 'components'.")
        return self


class DtoMetadata(BaseModel):
    """A declared (hand-written) DTO type, optionally limited to some fields."""

    name: str = Field(..., min_length=1)
    fields: Optional[List[str]] = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def expand_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        return data


class FlagsMetadata(BaseModel):
    service: bool = True
    controller: bool = True
    disableable: bool = False
    repository_superclass: Optional[str] = None
    service_superclass: Optional[str] = None
    controller_superclass: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ModelMetadata(BaseModel):
    """Schema of one metadata bag."""

    name: str = Field(..., min_length=1, description="Simple name of the model class.")
    package: str = Field(..., min_length=1, description="Module that defines the model.")
    parent_package: Optional[str] = Field(
        default=None,
        description="Namespace for generated siblings, defaults to the parent of 'package'.",
    )
    entity: bool = True
    scrud: bool = True
    identifier: Optional[IdentifierMetadata] = None
    fields: List[FieldMetadata] = Field(default_factory=list)
    dtos: List[DtoMetadata] = Field(default_factory=list)
    flags: FlagsMetadata = Field(default_factory=FlagsMetadata)
    attribute_paths: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_identifier(v)

    @field_validator("attribute_paths", mode="before")
    @classmethod
    def check_attribute_paths(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("attribute_paths must be a list.")
        for index, item in enumerate(v):
            if not isinstance(item, str) or not item.strip():
                raise ValueError(f"Attribute path at index {index} must be a non-empty string.")
        return v

    @model_validator(mode="after")
    def check_unique_fields(self) -> Self:
        seen = set()
        for model_field in self.fields:
            if model_field.name in seen:
                raise ValueError(f"Field '{model_field.name}' is declared more than once.")
            seen.add(model_field.name)
        if self.scrud and not self.entity:
            logger.debug(f"Model '{self.name}' is not an entity; predicate factory will be skipped.")
        return self

    @property
    def qualified_name(self) -> str:
        return f"{self.package}.{self.name}"
