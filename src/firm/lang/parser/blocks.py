"""
Block parsing for the Firm DSL.

Handles the two top-level constructs:

    person john_doe {
        name = "John Doe"
    }

    schema project {
        field {
            name = "title"
            type = "string"
            required = true
        }
    }
"""

from ..lexer import FIELD_KEYWORD, SCHEMA_KEYWORD, TokenType
from ..syntax import EntityBlock, FieldAssignment, FieldDeclarationBlock, SchemaBlock
from .base import ParserProtocol


class BlockParserMixin:
    """Parser mixin for entity and schema blocks."""

    def is_schema_block(self: ParserProtocol) -> bool:
        return (
            self.match_keyword(SCHEMA_KEYWORD)
            and self.peek_token().type == TokenType.IDENTIFIER
            and self.peek_token(2).type == TokenType.LBRACE
        )

    def parse_block(self: ParserProtocol) -> EntityBlock | SchemaBlock:
        if self.is_schema_block():  # type: ignore[attr-defined]
            return self.parse_schema_block()  # type: ignore[attr-defined]
        return self.parse_entity_block()  # type: ignore[attr-defined]

    def parse_assignments_until_close(self: ParserProtocol) -> list[FieldAssignment]:
        """Parse field assignments up to and including the closing brace."""
        assignments: list[FieldAssignment] = []
        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error("'}' to close block")
            assignments.append(self.parse_field_assignment())
            if self.match(TokenType.COMMA):
                self.advance()
        self.advance()
        return assignments

    def parse_entity_block(self: ParserProtocol) -> EntityBlock:
        """Parse ``type id { assignments }``."""
        entity_type = self.expect(TokenType.IDENTIFIER, "an entity type")
        entity_id = self.expect(TokenType.IDENTIFIER, f"an id for '{entity_type.value}'")
        self.expect(TokenType.LBRACE, "'{'")
        fields = self.parse_assignments_until_close()  # type: ignore[attr-defined]
        return EntityBlock(
            line=entity_type.line,
            column=entity_type.column,
            entity_type=entity_type.value,
            entity_id=entity_id.value,
            fields=fields,
        )

    def parse_schema_block(self: ParserProtocol) -> SchemaBlock:
        """Parse ``schema name { field { ... } ... }``."""
        keyword = self.advance()
        name = self.expect(TokenType.IDENTIFIER, "a schema name")
        self.expect(TokenType.LBRACE, "'{'")

        declarations: list[FieldDeclarationBlock] = []
        while not self.match(TokenType.RBRACE):
            if not self.match_keyword(FIELD_KEYWORD):
                raise self.error(f"'{FIELD_KEYWORD}' block or '}}'")
            start = self.advance()
            self.expect(TokenType.LBRACE, "'{'")
            assignments = self.parse_assignments_until_close()  # type: ignore[attr-defined]
            declarations.append(
                FieldDeclarationBlock(line=start.line, column=start.column, assignments=assignments)
            )
        self.advance()

        return SchemaBlock(
            line=keyword.line, column=keyword.column, name=name.value, fields=declarations
        )
