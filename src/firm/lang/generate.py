"""
DSL generation: entities and schemas back to Firm source text.

Rendering is the inverse of literal classification, so for every entity
that the grammar can represent:

    parse(generate(entity)).entities == [entity]

Usage:
    text = generate(entity)
    text = generate(entity, GeneratorOptions(indent=IndentStyle.tabs()))
    text = generate_source(entities, schemas)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from firm.core.entity import Entity
from firm.core.schema import EntitySchema
from firm.core.values import (
    BooleanValue,
    CurrencyValue,
    DateTimeValue,
    FieldValue,
    FloatValue,
    IntegerValue,
    ListValue,
    PathValue,
    ReferenceValue,
    StringValue,
    format_datetime,
)

from .lexer import FIELD_KEYWORD, SCHEMA_KEYWORD, TRIPLE_QUOTE

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}


class FieldOrder(str, Enum):
    """Order in which an entity's fields are written."""

    INSERTION = "insertion"
    ALPHABETICAL = "alphabetical"


@dataclass(frozen=True)
class IndentStyle:
    unit: str = "    "

    @classmethod
    def spaces(cls, count: int = 4) -> IndentStyle:
        if count < 1:
            raise ValueError("Indent must be at least one space")
        return cls(" " * count)

    @classmethod
    def tabs(cls) -> IndentStyle:
        return cls("\t")


@dataclass(frozen=True)
class GeneratorOptions:
    indent: IndentStyle = field(default_factory=IndentStyle.spaces)
    field_order: FieldOrder = FieldOrder.INSERTION


def quote_string(value: str) -> str:
    """Render a string as a single-line quoted literal."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


def _multiline_safe(value: str) -> bool:
    """
    Whether ``value`` survives the triple-quoted form unchanged.

    Triple-quoted strings are dedented and stripped on parse, and they do
    not process escapes.
    """
    if "\n" not in value or value != value.strip():
        return False
    if TRIPLE_QUOTE in value or "\r" in value:
        return False
    for line in value.split("\n"):
        if line and not line.strip():
            return False
        leading = line[: len(line) - len(line.lstrip())]
        if set(leading) - {" ", "\t"}:
            return False
    return True


def render_string(value: str, options: GeneratorOptions, depth: int) -> str:
    if not _multiline_safe(value):
        return quote_string(value)
    inner = options.indent.unit * (depth + 1)
    closing = options.indent.unit * depth
    body = "\n".join(inner + line if line else "" for line in value.split("\n"))
    return f"{TRIPLE_QUOTE}\n{body}\n{closing}{TRIPLE_QUOTE}"


def render_float(value: float) -> str:
    """Render a float so it re-lexes as a float: always with a decimal point, never exponent."""
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if "." not in text:
        text += ".0"
    return text


def render_value(value: FieldValue, options: GeneratorOptions | None = None, depth: int = 1) -> str:
    """
    Render one field value as a DSL literal.

    ``depth`` is the indentation level of the line the value sits on; it
    only matters for multi-line strings, which are never used inside lists.
    """
    options = options or GeneratorOptions()
    if isinstance(value, StringValue):
        return render_string(value.value, options, depth)
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, IntegerValue):
        return str(value.value)
    if isinstance(value, FloatValue):
        return render_float(value.value)
    if isinstance(value, CurrencyValue):
        return f"{format(value.amount, 'f')} {value.code}"
    if isinstance(value, DateTimeValue):
        return format_datetime(value)
    if isinstance(value, ReferenceValue):
        return str(value)
    if isinstance(value, PathValue):
        return "path" + quote_string(value.path)
    if isinstance(value, ListValue):
        items = (
            quote_string(item.value) if isinstance(item, StringValue) else render_value(item, options, depth)
            for item in value.items
        )
        return "[" + ", ".join(items) + "]"
    raise TypeError(f"Cannot render {type(value).__name__}")


def _ordered(items: Mapping, order: FieldOrder) -> list:
    if order == FieldOrder.ALPHABETICAL:
        return sorted(items.items())
    return list(items.items())


def generate(entity: Entity, options: GeneratorOptions | None = None) -> str:
    """
    Render an entity as a DSL block.

    Raises:
        ValueError: If the entity type is ``schema``, which names schema
            blocks and cannot head an entity block
    """
    options = options or GeneratorOptions()
    if entity.type == SCHEMA_KEYWORD:
        raise ValueError(f"Entity type '{SCHEMA_KEYWORD}' is reserved for schema blocks")

    indent = options.indent.unit
    lines = [f"{entity.type} {entity.local_id} {{"]
    for name, value in _ordered(entity.fields, options.field_order):
        lines.append(f"{indent}{name} = {render_value(value, options, depth=1)}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def generate_schema(schema: EntitySchema, options: GeneratorOptions | None = None) -> str:
    """Render a schema as a ``schema`` block with one ``field`` block per declaration."""
    options = options or GeneratorOptions()
    one = options.indent.unit
    two = one * 2
    lines = [f"{SCHEMA_KEYWORD} {schema.entity_type} {{"]
    for declared in schema.fields:
        lines.append(f"{one}{FIELD_KEYWORD} {{")
        lines.append(f"{two}name = {quote_string(declared.name)}")
        lines.append(f"{two}type = {quote_string(declared.field_type.value)}")
        if declared.required:
            lines.append(f"{two}required = true")
        lines.append(f"{one}}}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def generate_source(
    entities: Iterable[Entity],
    schemas: Iterable[EntitySchema] = (),
    options: GeneratorOptions | None = None,
) -> str:
    """Render schemas then entities as one source file, blocks separated by blank lines."""
    blocks = [generate_schema(schema, options) for schema in schemas]
    blocks.extend(generate(entity, options) for entity in entities)
    return "\n".join(blocks)
