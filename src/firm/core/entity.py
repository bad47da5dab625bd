"""
Entity model.

An entity is an identified, typed bag of named field values. Field order is
the order fields were added and is kept through parsing and generation.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from .ids import compose_entity_id, decompose_entity_id, is_identifier
from .values import FieldValue, coerce_value


class Entity(BaseModel):
    """
    A business entity.

    Attributes:
        id: Fully qualified id (``type.id``)
        type: Entity type name; open-ended
        fields: Field values keyed by field id, in insertion order

    Entities are immutable: ``fields`` is a read-only view and builder methods
    return new instances.

    Example:
        >>> person = Entity.new("person", "john_doe").with_field("name", "John Doe")
        >>> person.id
        'person.john_doe'
    """

    id: str
    type: str
    fields: Mapping[str, FieldValue] = Field(default_factory=dict, validate_default=True)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def new(cls, entity_type: str, local_id: str) -> Entity:
        return cls(id=compose_entity_id(entity_type, local_id), type=entity_type)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if not is_identifier(v):
            raise ValueError(f"Entity type '{v}' is not an identifier")
        return v

    @field_validator("fields")
    @classmethod
    def validate_field_names(cls, v: Mapping[str, FieldValue]) -> Mapping[str, FieldValue]:
        for name in v:
            if not is_identifier(name):
                raise ValueError(f"Field name '{name}' is not an identifier")
        return MappingProxyType(dict(v))

    @field_serializer("fields")
    def serialize_fields(self, v: Mapping[str, FieldValue]) -> dict[str, FieldValue]:
        return dict(v)

    @model_validator(mode="after")
    def validate_id_matches_type(self) -> Entity:
        entity_type, local_id = decompose_entity_id(self.id)
        if entity_type != self.type or not is_identifier(local_id):
            raise ValueError(f"Entity id '{self.id}' must have the form '{self.type}.<id>'")
        return self

    @property
    def local_id(self) -> str:
        """The id without its type prefix."""
        return decompose_entity_id(self.id)[1]

    def with_field(self, name: str, value: Any) -> Entity:
        """
        Return a copy with ``name`` set to ``value``.

        Plain Python values are converted with ``coerce_value``. Setting an
        existing field keeps its position.
        """
        fields = dict(self.fields)
        fields[name] = coerce_value(value)
        return self.model_validate({"id": self.id, "type": self.type, "fields": fields})

    def without_field(self, name: str) -> Entity:
        fields = {k: v for k, v in self.fields.items() if k != name}
        return self.model_validate({"id": self.id, "type": self.type, "fields": fields})

    def get_field(self, name: str) -> FieldValue | None:
        return self.fields.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def __hash__(self) -> int:
        return hash(self.id)
