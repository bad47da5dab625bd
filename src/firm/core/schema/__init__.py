"""
Entity schemas and the schema registry.

Schemas are optional overlays on the open entity model: a schema lists the
fields an entity type must or may carry and their types. Fields not listed
are allowed, and entity types without a schema are always valid.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..entity import Entity
from ..errors import ValidationError
from ..ids import is_identifier
from ..values import FieldType

logger = logging.getLogger(__name__)


class FieldSchema(BaseModel):
    """A single field declaration: name, type and whether it is required."""

    name: str
    field_type: FieldType
    required: bool = False

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not is_identifier(v):
            raise ValueError(f"Field name '{v}' is not an identifier")
        return v


class EntitySchema(BaseModel):
    """
    Field declarations for one entity type.

    Builder methods return new schemas, so built-in schemas can be shared:

        >>> schema = (
        ...     EntitySchema.new("project")
        ...     .with_required_field("title", FieldType.STRING)
        ...     .with_optional_field("due_date", FieldType.DATETIME)
        ... )
    """

    entity_type: str
    fields: tuple[FieldSchema, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def new(cls, entity_type: str) -> EntitySchema:
        return cls(entity_type=entity_type)

    @field_validator("fields", mode="before")
    @classmethod
    def coerce_fields(cls, v: object) -> object:
        if isinstance(v, list):
            return tuple(v)
        return v

    def with_field(self, name: str, field_type: FieldType, required: bool = False) -> EntitySchema:
        """Add or replace a field declaration, keeping declaration order."""
        declared = FieldSchema(name=name, field_type=field_type, required=required)
        fields = [f for f in self.fields if f.name != name]
        if len(fields) == len(self.fields):
            fields.append(declared)
        else:
            fields = [declared if f.name == name else f for f in self.fields]
        return self.model_copy(update={"fields": tuple(fields)})

    def with_required_field(self, name: str, field_type: FieldType) -> EntitySchema:
        return self.with_field(name, field_type, required=True)

    def with_optional_field(self, name: str, field_type: FieldType) -> EntitySchema:
        return self.with_field(name, field_type, required=False)

    def with_metadata(self) -> EntitySchema:
        """Add the optional bookkeeping fields every built-in schema carries."""
        return (
            self.with_optional_field("created_at", FieldType.DATETIME)
            .with_optional_field("updated_at", FieldType.DATETIME)
            .with_optional_field("notes", FieldType.STRING)
        )

    def get_field(self, name: str) -> FieldSchema | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def required_fields(self) -> list[FieldSchema]:
        return [f for f in self.fields if f.required]

    def validate_entity(self, entity: Entity) -> list[ValidationError]:
        from .validation import validate_entity

        return validate_entity(entity, self)


class SchemaRegistry:
    """
    Schemas keyed by entity type.

    ``register`` adds or overrides; later registrations win, so user
    schemas replace built-ins of the same type.
    """

    def __init__(self, schemas: Iterable[EntitySchema] = ()):
        self._schemas: dict[str, EntitySchema] = {}
        for schema in schemas:
            self.register(schema)

    @classmethod
    def with_builtins(cls) -> SchemaRegistry:
        from .builtin import builtin_schemas

        return cls(builtin_schemas())

    def register(self, schema: EntitySchema) -> None:
        if schema.entity_type in self._schemas:
            logger.debug("Overriding schema for '%s'", schema.entity_type)
        self._schemas[schema.entity_type] = schema

    def get(self, entity_type: str) -> EntitySchema | None:
        return self._schemas.get(entity_type)

    def validate(self, entity: Entity) -> list[ValidationError]:
        """Validate an entity against its type's schema; unknown types are valid."""
        schema = self._schemas.get(entity.type)
        if schema is None:
            return []
        return schema.validate_entity(entity)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._schemas

    def __iter__(self) -> Iterator[EntitySchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)


__all__ = ["FieldSchema", "EntitySchema", "SchemaRegistry"]
