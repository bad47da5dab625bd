"""Core Firm functionality: values, entities, schemas, and the entity graph."""

from .entity import Entity
from .errors import (
    ConfigError,
    CyclicReferenceError,
    DanglingFieldError,
    DanglingReferenceError,
    DuplicateIdError,
    EntityTypeMismatchError,
    ErrorContext,
    FieldTypeError,
    FirmError,
    InvalidStateError,
    LiteralTypeError,
    MaxDepthExceededError,
    MissingRequiredFieldError,
    NotAReferenceError,
    NotFoundError,
    ParseError,
    SchemaDefinitionError,
    ValidationError,
    WorkspaceBuildError,
    WorkspaceError,
)
from .graph import (
    BuildReport,
    Direction,
    Edge,
    EntityGraph,
    FieldReferencePolicy,
    GraphState,
    Relation,
)
from .ids import compose_entity_id, decompose_entity_id, to_snake_case
from .schema import EntitySchema, FieldSchema, SchemaRegistry
from .values import (
    BooleanValue,
    CurrencyValue,
    DateTimeValue,
    FieldType,
    FieldValue,
    FloatValue,
    IntegerValue,
    ListValue,
    PathValue,
    ReferenceValue,
    StringValue,
    coerce_value,
)

__all__ = [
    "Entity",
    "EntitySchema",
    "FieldSchema",
    "SchemaRegistry",
    "EntityGraph",
    "GraphState",
    "FieldReferencePolicy",
    "BuildReport",
    "Direction",
    "Edge",
    "Relation",
    "FieldType",
    "FieldValue",
    "StringValue",
    "IntegerValue",
    "FloatValue",
    "BooleanValue",
    "CurrencyValue",
    "DateTimeValue",
    "ListValue",
    "ReferenceValue",
    "PathValue",
    "coerce_value",
    "compose_entity_id",
    "decompose_entity_id",
    "to_snake_case",
    "FirmError",
    "ErrorContext",
    "ParseError",
    "LiteralTypeError",
    "SchemaDefinitionError",
    "DuplicateIdError",
    "DanglingReferenceError",
    "DanglingFieldError",
    "ValidationError",
    "MissingRequiredFieldError",
    "FieldTypeError",
    "EntityTypeMismatchError",
    "NotFoundError",
    "InvalidStateError",
    "NotAReferenceError",
    "CyclicReferenceError",
    "MaxDepthExceededError",
    "WorkspaceError",
    "WorkspaceBuildError",
    "ConfigError",
]
