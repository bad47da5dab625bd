"""Check entities against schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..entity import Entity
from ..errors import (
    EntityTypeMismatchError,
    FieldTypeError,
    MissingRequiredFieldError,
    ValidationError,
)

if TYPE_CHECKING:
    from . import EntitySchema


def validate_entity(entity: Entity, schema: EntitySchema) -> list[ValidationError]:
    """
    Validate one entity against one schema.

    Returns every violation found, in schema declaration order. A schema for
    a different type yields a single EntityTypeMismatchError and no field
    checks.
    """
    if entity.type != schema.entity_type:
        return [EntityTypeMismatchError(entity.id, schema.entity_type, entity.type)]

    errors: list[ValidationError] = []
    for declared in schema.fields:
        value = entity.fields.get(declared.name)
        if value is None:
            if declared.required:
                errors.append(MissingRequiredFieldError(entity.id, declared.name))
            continue
        if value.field_type != declared.field_type:
            errors.append(
                FieldTypeError(
                    entity.id,
                    declared.name,
                    declared.field_type.value,
                    value.field_type.value,
                )
            )
    return errors
