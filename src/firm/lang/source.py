"""
Parsing entry points: source text to entities and schema declarations.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from firm.core.entity import Entity
from firm.core.errors import FirmError, LiteralTypeError, ParseError

from .convert import SchemaDeclaration, to_entity, to_schema_declaration
from .parser import parse_tree

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """
    Everything recovered from one source text.

    Unpacks as ``(entities, errors)``:

        entities, errors = parse(text)
    """

    entities: list[Entity] = field(default_factory=list)
    schemas: list[SchemaDeclaration] = field(default_factory=list)
    errors: list[FirmError] = field(default_factory=list)
    path: Path | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def __iter__(self) -> Iterator:
        yield self.entities
        yield self.errors


def parse(text: str, path: Path | None = None) -> ParseResult:
    """
    Parse DSL source text.

    Syntax errors drop the block they occur in; literal errors drop the
    entity or schema they occur in. Every dropped block leaves one error in
    the result and parsing carries on with the rest.

    Args:
        text: DSL source
        path: Source file path, used in error locations

    Returns:
        ParseResult with entities, schema declarations and errors in
        source order
    """
    tree = parse_tree(text, path)
    result = ParseResult(path=path, errors=list(tree.errors))

    for block in tree.entity_blocks:
        try:
            result.entities.append(to_entity(block, path))
        except (LiteralTypeError, ParseError) as e:
            result.errors.append(e)

    for block in tree.schema_blocks:
        try:
            result.schemas.append(to_schema_declaration(block, path))
        except (LiteralTypeError, ParseError) as e:
            result.errors.append(e)

    result.errors.sort(key=_error_position)
    logger.debug(
        "Parsed %s: %d entities, %d schemas, %d errors",
        path or "<string>",
        len(result.entities),
        len(result.schemas),
        len(result.errors),
    )
    return result


def parse_strict(text: str, path: Path | None = None) -> ParseResult:
    """
    Parse DSL source text, raising the first error instead of collecting.

    Raises:
        ParseError: On malformed syntax
        LiteralTypeError: On a literal that denotes no value
    """
    result = parse(text, path)
    if result.errors:
        raise result.errors[0]
    return result


def _error_position(error: FirmError) -> tuple[int, int]:
    if error.context is None:
        return (0, 0)
    return (error.context.line, error.context.column)
