"""
Literal parsing for the Firm DSL.

Produces syntax nodes only; deciding which field value a literal denotes is
left to ``firm.lang.literals``.
"""

from ..lexer import BOOLEAN_KEYWORDS, TokenType
from ..syntax import (
    FieldAssignment,
    ListLiteral,
    LiteralKind,
    LiteralNode,
    ReferenceLiteral,
    ScalarLiteral,
)
from .base import ParserProtocol

_SCALAR_TOKENS = {
    TokenType.STRING: LiteralKind.STRING,
    TokenType.MULTILINE_STRING: LiteralKind.MULTILINE_STRING,
    TokenType.NUMBER: LiteralKind.NUMBER,
    TokenType.CURRENCY: LiteralKind.CURRENCY,
    TokenType.DATETIME: LiteralKind.DATETIME,
    TokenType.PATH: LiteralKind.PATH,
}

VALUE_DESCRIPTION = "a value"


class LiteralParserMixin:
    """Parser mixin for field assignments and literal values."""

    def parse_field_assignment(self: ParserProtocol) -> FieldAssignment:
        """Parse ``name = literal``."""
        name = self.expect(TokenType.IDENTIFIER, "a field name")
        self.expect(TokenType.EQUALS, f"'=' after field '{name.value}'")
        value = self.parse_literal()
        return FieldAssignment(line=name.line, column=name.column, name=name.value, value=value)

    def parse_literal(self: ParserProtocol) -> LiteralNode:
        token = self.current_token()

        if token.type in _SCALAR_TOKENS:
            self.advance()
            return ScalarLiteral(
                line=token.line,
                column=token.column,
                kind=_SCALAR_TOKENS[token.type],
                text=token.value,
            )

        if token.type == TokenType.LBRACKET:
            return self.parse_list_literal()  # type: ignore[attr-defined]

        if token.type == TokenType.IDENTIFIER:
            if self.peek_token().type == TokenType.DOT:
                return self.parse_reference_literal()  # type: ignore[attr-defined]
            if token.value in BOOLEAN_KEYWORDS:
                self.advance()
                return ScalarLiteral(
                    line=token.line,
                    column=token.column,
                    kind=LiteralKind.BOOLEAN,
                    text=token.value,
                )

        raise self.error(VALUE_DESCRIPTION)

    def parse_reference_literal(self: ParserProtocol) -> ReferenceLiteral:
        """Parse ``a.b`` or ``a.b.c``; the part count is checked on classification."""
        first = self.advance()
        parts = [first.value]
        while self.match(TokenType.DOT):
            self.advance()
            parts.append(self.expect(TokenType.IDENTIFIER, "an identifier after '.'").value)
        return ReferenceLiteral(line=first.line, column=first.column, parts=parts)

    def parse_list_literal(self: ParserProtocol) -> ListLiteral:
        """Parse ``[literal, literal, ...]``; a trailing comma is allowed."""
        opening = self.expect(TokenType.LBRACKET)
        items: list[LiteralNode] = []
        while not self.match(TokenType.RBRACKET):
            items.append(self.parse_literal())
            if self.match(TokenType.COMMA):
                self.advance()
            elif not self.match(TokenType.RBRACKET):
                raise self.error("',' or ']'")
        self.advance()
        return ListLiteral(line=opening.line, column=opening.column, items=items)
