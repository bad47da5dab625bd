"""
Conversion from syntax blocks to entities and schemas.

Entity blocks become ``Entity`` values directly. Schema blocks become
``SchemaDeclaration`` values, which are compiled into ``EntitySchema`` later
by ``compile_schema``, once every source file has been parsed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from firm.core.entity import Entity
from firm.core.errors import ErrorContext, SchemaDefinitionError, make_parse_error
from firm.core.ids import compose_entity_id
from firm.core.schema import EntitySchema
from firm.core.values import BooleanValue, FieldType, FieldValue, StringValue

from .literals import classify
from .syntax import EntityBlock, FieldDeclarationBlock, SchemaBlock


@dataclass
class FieldDeclaration:
    """One ``field { ... }`` entry of a schema block, after literal classification."""

    line: int
    column: int
    values: dict[str, FieldValue] = field(default_factory=dict)


@dataclass
class SchemaDeclaration:
    """A parsed but not yet compiled schema block."""

    entity_type: str
    fields: list[FieldDeclaration]
    file: Path | None = None
    line: int = 1
    column: int = 1


def _convert_assignments(block: EntityBlock | FieldDeclarationBlock, file: Path | None):
    values: dict[str, FieldValue] = {}
    for assignment in (block.fields if isinstance(block, EntityBlock) else block.assignments):
        if assignment.name in values:
            raise make_parse_error(
                f"Duplicate field '{assignment.name}'",
                file,
                assignment.line,
                assignment.column,
            )
        values[assignment.name] = classify(assignment.value, file)
    return values


def to_entity(block: EntityBlock, file: Path | None = None) -> Entity:
    """
    Convert an entity block into an Entity with id ``type.id``.

    Raises:
        LiteralTypeError: If a field literal is invalid
        ParseError: If a field is assigned twice
    """
    fields = _convert_assignments(block, file)
    return Entity(
        id=compose_entity_id(block.entity_type, block.entity_id),
        type=block.entity_type,
        fields=fields,
    )


def to_schema_declaration(block: SchemaBlock, file: Path | None = None) -> SchemaDeclaration:
    declarations = [
        FieldDeclaration(line=decl.line, column=decl.column, values=_convert_assignments(decl, file))
        for decl in block.fields
    ]
    return SchemaDeclaration(
        entity_type=block.name,
        fields=declarations,
        file=file,
        line=block.line,
        column=block.column,
    )


def _schema_error(message: str, declaration: SchemaDeclaration, line: int, column: int):
    return SchemaDefinitionError(
        f"Schema '{declaration.entity_type}': {message}",
        ErrorContext(file=declaration.file, line=line, column=column),
    )


def compile_schema(declaration: SchemaDeclaration) -> EntitySchema:
    """
    Lift a schema declaration into an EntitySchema.

    Each field declaration needs a string ``name`` and a string ``type``
    naming one of the field types; ``required`` is an optional boolean and
    defaults to false.

    Raises:
        SchemaDefinitionError: If a declaration is incomplete or names an
            unknown type
    """
    schema = EntitySchema.new(declaration.entity_type)
    for decl in declaration.fields:
        name = decl.values.get("name")
        if not isinstance(name, StringValue):
            raise _schema_error(
                "Schema field is missing required name", declaration, decl.line, decl.column
            )

        type_name = decl.values.get("type")
        if not isinstance(type_name, StringValue):
            raise _schema_error(
                f"Schema field '{name.value}' is missing required type",
                declaration,
                decl.line,
                decl.column,
            )
        try:
            field_type = FieldType(type_name.value.lower())
        except ValueError:
            raise _schema_error(
                f"Unknown field type: '{type_name.value}'", declaration, decl.line, decl.column
            ) from None

        required = decl.values.get("required", BooleanValue(value=False))
        if not isinstance(required, BooleanValue):
            raise _schema_error(
                f"Schema field '{name.value}' has a non-boolean 'required'",
                declaration,
                decl.line,
                decl.column,
            )

        try:
            schema = schema.with_field(name.value, field_type, required=required.value)
        except ValueError as e:
            raise _schema_error(str(e), declaration, decl.line, decl.column) from e
    return schema
