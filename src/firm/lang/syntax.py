"""
Syntax tree for Firm source files.

The parser produces these nodes; ``literals`` and ``convert`` turn them into
entities and schema declarations. Nodes keep the source position of their
first token for error reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LiteralKind(Enum):
    STRING = "string"
    MULTILINE_STRING = "multiline_string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CURRENCY = "currency"
    DATETIME = "datetime"
    PATH = "path"


@dataclass
class Node:
    line: int
    column: int


@dataclass
class ScalarLiteral(Node):
    """A single-token literal; ``text`` is the token value."""

    kind: LiteralKind
    text: str


@dataclass
class ReferenceLiteral(Node):
    """A dotted identifier path such as ``person.john_doe``."""

    parts: list[str]

    @property
    def text(self) -> str:
        return ".".join(self.parts)


@dataclass
class ListLiteral(Node):
    items: list[LiteralNode] = field(default_factory=list)


LiteralNode = ScalarLiteral | ReferenceLiteral | ListLiteral


@dataclass
class FieldAssignment(Node):
    name: str
    value: LiteralNode


@dataclass
class EntityBlock(Node):
    """``type id { field = value ... }``"""

    entity_type: str
    entity_id: str
    fields: list[FieldAssignment] = field(default_factory=list)


@dataclass
class FieldDeclarationBlock(Node):
    """``field { name = "..." type = "..." required = true }`` inside a schema."""

    assignments: list[FieldAssignment] = field(default_factory=list)

    def get(self, name: str) -> FieldAssignment | None:
        for assignment in self.assignments:
            if assignment.name == name:
                return assignment
        return None


@dataclass
class SchemaBlock(Node):
    """``schema name { field { ... } ... }``"""

    name: str
    fields: list[FieldDeclarationBlock] = field(default_factory=list)


Block = EntityBlock | SchemaBlock


@dataclass
class SourceTree:
    """Top-level blocks of one source file plus any syntax errors recovered from."""

    blocks: list[Block] = field(default_factory=list)
    errors: list = field(default_factory=list)

    @property
    def entity_blocks(self) -> list[EntityBlock]:
        return [b for b in self.blocks if isinstance(b, EntityBlock)]

    @property
    def schema_blocks(self) -> list[SchemaBlock]:
        return [b for b in self.blocks if isinstance(b, SchemaBlock)]
